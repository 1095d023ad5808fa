"""
Prompt Builder - Instruction templates and sampling parameters per generation intent
"""

from enum import Enum
from typing import Dict, NamedTuple

from langchain_core.prompts import PromptTemplate

import config
from models.schemas import GenerationRequest

class Intent(str, Enum):
    LESSON_FROM_TOPIC = "lesson-from-topic"
    LESSON_FROM_MODULE = "lesson-from-module"
    MODULE_METADATA = "module-metadata"

class GenerationParams(NamedTuple):
    max_output_tokens: int
    temperature: float
    system_persona: str

LESSON_FROM_TOPIC_TEMPLATE = """Create a comprehensive educational lesson about "{subject}". Format your response with the following sections:

Title: A clear, compelling title for the lesson
Description: A thorough introduction to the topic (2-3 paragraphs)
Learning Outcomes: List 4-5 specific learning outcomes, each starting with a verb
Key Concepts: List 5-7 key concepts that students should master
Activities: List 3-5 engaging learning activities

Make sure to format each section with clear headings."""

LESSON_FROM_MODULE_TEMPLATE = """Based on the module title "{subject}", create an appropriate educational lesson that would fit in this module. Format your response with the following sections:

Title: A specific lesson title that fits within this module
Description: A thorough introduction to the topic (2-3 paragraphs)
Learning Outcomes: List 4-5 specific learning outcomes, each starting with a verb
Key Concepts: List 5-7 key concepts that students should master
Activities: List 3-5 engaging learning activities
Difficulty: Specify one level - Beginner, Intermediate, or Advanced
Prerequisites: List any prerequisite knowledge or skills separated by commas
Estimated Time: How long this lesson would take to complete (e.g., 30 minutes, 1 hour)

Make sure to format each section with clear headings and ensure the content is directly relevant to the module title."""

MODULE_METADATA_TEMPLATE = """For an educational lesson about "{subject}", suggest appropriate module metadata with the following format:

Module Name: A descriptive name for the larger module this lesson would fit into
Difficulty: Specify one of these levels - Beginner, Intermediate, or Advanced
Prerequisites: List any prerequisite knowledge or skills separated by commas
Estimated Time: How long this lesson would take to complete (e.g., 30 minutes, 1 hour)

Keep your response brief and structured exactly as requested."""

_TEMPLATES: Dict[Intent, PromptTemplate] = {
    Intent.LESSON_FROM_TOPIC: PromptTemplate.from_template(LESSON_FROM_TOPIC_TEMPLATE),
    Intent.LESSON_FROM_MODULE: PromptTemplate.from_template(LESSON_FROM_MODULE_TEMPLATE),
    Intent.MODULE_METADATA: PromptTemplate.from_template(MODULE_METADATA_TEMPLATE),
}

GENERATION_PARAMS: Dict[Intent, GenerationParams] = {
    Intent.LESSON_FROM_TOPIC: GenerationParams(
        max_output_tokens=config.LESSON_MAX_TOKENS,
        temperature=config.GENERATION_TEMPERATURE,
        system_persona="You are an expert educational content creator specializing in creating structured, engaging lessons.",
    ),
    Intent.LESSON_FROM_MODULE: GenerationParams(
        max_output_tokens=config.LESSON_MAX_TOKENS,
        temperature=config.GENERATION_TEMPERATURE,
        system_persona=(
            "You are an expert educational content creator specializing in creating structured, "
            "engaging lessons that fit within larger educational modules."
        ),
    ),
    Intent.MODULE_METADATA: GenerationParams(
        max_output_tokens=config.MODULE_METADATA_MAX_TOKENS,
        temperature=config.GENERATION_TEMPERATURE,
        system_persona="You are an expert curriculum designer who creates metadata for educational modules.",
    ),
}

def build_prompt(intent: Intent, subject: str) -> GenerationRequest:
    """Render the instruction for ``intent`` with ``subject`` filled in."""
    intent = Intent(intent)
    params = GENERATION_PARAMS[intent]
    return GenerationRequest(
        prompt_text=_TEMPLATES[intent].format(subject=subject),
        max_output_tokens=params.max_output_tokens,
        temperature=params.temperature,
        system_persona=params.system_persona,
    )
