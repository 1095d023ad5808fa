"""
Data Models - Pydantic schemas for lessons, module metadata and saved modules
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

class Difficulty(str, Enum):
    """Difficulty levels a lesson or module can be tagged with."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

class Lesson(BaseModel):
    """A structured lesson assembled from a model completion."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    title: str = Field(description="The lesson title")
    description: str = Field(description="Introductory text; rich-text markup allowed")
    outcomes: List[str] = Field(description="Learning outcomes, in order")
    key_concepts: List[str] = Field(alias="keyConcepts", description="Key concepts, in order")
    activities: List[str] = Field(description="Learning activities, in order")
    difficulty: Optional[Difficulty] = Field(None, description="Difficulty level, when generated for a module")
    prerequisites: Optional[str] = Field(None, description="Comma-joined prerequisite knowledge")
    estimated_time: Optional[str] = Field(None, alias="estimatedTime", description="How long the lesson takes")

class ModuleMetadata(BaseModel):
    """Suggested metadata for the module a lesson belongs to."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    module_name: str = Field(alias="moduleName", description="Name of the enclosing module")
    difficulty: Difficulty = Field(description="Difficulty level")
    prerequisites: str = Field(description="Comma-joined prerequisite knowledge")
    estimated_time: str = Field(alias="estimatedTime", description="How long the lesson takes")

class Module(BaseModel):
    """A saved module: a lesson plus the metadata the author settled on."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    module_name: str = Field(alias="moduleName", description="Name of the module")
    lesson: Lesson = Field(description="The lesson saved into this module")
    difficulty: str = Field("", description="Beginner, Intermediate, Advanced, or empty when unset")
    prerequisites: str = Field("", description="Comma-joined prerequisite knowledge")
    time: str = Field("", description="Estimated completion time")

class GenerationRequest(BaseModel):
    """A prompt plus the sampling parameters sent to the completion provider."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    prompt_text: str = Field(alias="promptText")
    max_output_tokens: int = Field(alias="maxOutputTokens", gt=0)
    temperature: float = Field(ge=0.0, le=1.0)
    system_persona: str = Field(alias="systemPersona")

# --- API request bodies ---

class TopicRequest(BaseModel):
    topic: str

class ModuleNameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    module_name: str = Field(alias="moduleName")
