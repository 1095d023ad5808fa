"""
Record Assembler - Builds fully-populated records from raw completion text
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from core.field_extractor import FieldSpec, extract_field
from models.schemas import Difficulty, Lesson, ModuleMetadata

DefaultGenerator = Callable[[str], Any]

@dataclass(frozen=True)
class SchemaField:
    """One record attribute and the rule used to find it in raw text."""
    name: str
    spec: FieldSpec
    coerce: Optional[Callable[[str], Any]] = None

@dataclass(frozen=True)
class RecordSchema:
    """The fields a generation intent is expected to produce."""
    name: str
    model: Type[BaseModel]
    fields: Tuple[SchemaField, ...]

@dataclass(frozen=True)
class AssemblyContext:
    """The subject of a generation request plus per-field default generators."""
    subject: str
    defaults: Mapping[str, DefaultGenerator]

    def default_for(self, field_name: str) -> Any:
        return self.defaults[field_name](self.subject)

def coerce_difficulty(value: str) -> Optional[str]:
    """Map free text such as "Intermediate (some algebra)" onto a Difficulty level."""
    lowered = value.lower()
    for level in Difficulty:
        if level.value.lower() in lowered:
            return level.value
    return None

# Field rules shared by both lesson schemas
_LESSON_CORE_FIELDS = (
    SchemaField("title", FieldSpec.scalar("Title")),
    SchemaField("description", FieldSpec.block("Description")),
    SchemaField("outcomes", FieldSpec.listed("Learning Outcomes")),
    SchemaField("key_concepts", FieldSpec.listed("Key Concepts")),
)

_DIFFICULTY = SchemaField("difficulty", FieldSpec.scalar("Difficulty"), coerce_difficulty)
_PREREQUISITES = SchemaField("prerequisites", FieldSpec.scalar("Prerequisites"))
_ESTIMATED_TIME = SchemaField("estimated_time", FieldSpec.keywords("estimated time", "time"))

LESSON_FROM_TOPIC_SCHEMA = RecordSchema(
    name="lesson-from-topic",
    model=Lesson,
    fields=_LESSON_CORE_FIELDS + (
        SchemaField("activities", FieldSpec.listed("Activities", terminal=True)),
    ),
)

LESSON_FROM_MODULE_SCHEMA = RecordSchema(
    name="lesson-from-module",
    model=Lesson,
    fields=_LESSON_CORE_FIELDS + (
        SchemaField("activities", FieldSpec.listed("Activities", terminal=True)),
        _DIFFICULTY,
        _PREREQUISITES,
        _ESTIMATED_TIME,
    ),
)

MODULE_METADATA_SCHEMA = RecordSchema(
    name="module-metadata",
    model=ModuleMetadata,
    fields=(
        SchemaField("module_name", FieldSpec.keywords("module name", "name")),
        _DIFFICULTY,
        _PREREQUISITES,
        _ESTIMATED_TIME,
    ),
)

TOPIC_LESSON_DEFAULTS: Dict[str, DefaultGenerator] = {
    "title": lambda s: f"Understanding {s}",
    "description": lambda s: f"Learn about {s} and its applications.",
    "outcomes": lambda s: [
        f"Understand the basics of {s}",
        f"Explain the importance of {s} in context",
        f"Apply knowledge of {s} in practical situations",
    ],
    "key_concepts": lambda s: [
        f"Definition of {s}",
        f"History and development of {s}",
        "Applications and significance",
    ],
    "activities": lambda s: [
        f"Research project on {s}",
        f"Group discussion about {s}",
        f"Practical demonstration of {s}",
    ],
}

MODULE_LESSON_DEFAULTS: Dict[str, DefaultGenerator] = {
    "title": lambda s: f"Lesson for {s}",
    "description": lambda s: f"This lesson covers key topics within {s}.",
    "outcomes": lambda s: [
        f"Understand the core concepts of {s}",
        f"Apply knowledge of {s} in practical situations",
        f"Analyze the importance of {s} in broader contexts",
    ],
    "key_concepts": lambda s: [
        f"Definition of key terms in {s}",
        f"Historical development of {s}",
        f"Practical applications of {s}",
    ],
    "activities": lambda s: [
        f"Research project on {s}",
        f"Group discussion about {s}",
        f"Practical demonstration of {s} concepts",
    ],
    "difficulty": lambda s: Difficulty.BEGINNER.value,
    "prerequisites": lambda s: "",
    "estimated_time": lambda s: "30 minutes",
}

MODULE_METADATA_DEFAULTS: Dict[str, DefaultGenerator] = {
    "module_name": lambda s: f"{s} Fundamentals",
    "difficulty": lambda s: Difficulty.BEGINNER.value,
    "prerequisites": lambda s: "None",
    "estimated_time": lambda s: "30 minutes",
}

def assemble(raw_text: str, schema: RecordSchema, context: AssemblyContext) -> BaseModel:
    """Extract every schema field from ``raw_text``, defaulting whatever is missing."""
    values: Dict[str, Any] = {}
    defaulted = []

    for field in schema.fields:
        value = extract_field(raw_text or "", field.spec)
        if value is not None and field.coerce:
            value = field.coerce(value)
        if value is None:
            value = context.default_for(field.name)
            defaulted.append(field.name)
        values[field.name] = value

    if defaulted:
        logging.debug(f"{schema.name} for '{context.subject}': defaulted {', '.join(defaulted)}")

    return schema.model(**values)
