"""
Lesson Service - Runs the three generation flows: prompt, completion, assembly
"""

import logging

from core.exceptions import ProviderFailure
from core.prompt_builder import Intent, build_prompt
from core.record_assembler import (
    AssemblyContext,
    LESSON_FROM_MODULE_SCHEMA,
    LESSON_FROM_TOPIC_SCHEMA,
    MODULE_LESSON_DEFAULTS,
    MODULE_METADATA_DEFAULTS,
    MODULE_METADATA_SCHEMA,
    RecordSchema,
    TOPIC_LESSON_DEFAULTS,
    assemble,
)
from models.schemas import Lesson, ModuleMetadata
from services.llm_service import LLMService, join_completion_output

class LessonService:
    """Generates lessons and module metadata from a topic or module name.

    ``provider`` is anything with an async ``complete(request)`` method that
    returns a string or a list of text chunks and raises ProviderFailure.
    """

    def __init__(self, provider=None):
        self.provider = provider or LLMService()

    async def generate_lesson(self, topic: str) -> Lesson:
        """Generate a lesson for a free-form topic."""
        return await self._generate(Intent.LESSON_FROM_TOPIC, topic, LESSON_FROM_TOPIC_SCHEMA, TOPIC_LESSON_DEFAULTS)

    async def generate_module_lesson(self, module_name: str) -> Lesson:
        """Generate a lesson that fits a module, including its difficulty, prerequisites and time."""
        return await self._generate(Intent.LESSON_FROM_MODULE, module_name, LESSON_FROM_MODULE_SCHEMA, MODULE_LESSON_DEFAULTS)

    async def suggest_module(self, topic: str) -> ModuleMetadata:
        """Suggest module metadata for a lesson topic."""
        return await self._generate(Intent.MODULE_METADATA, topic, MODULE_METADATA_SCHEMA, MODULE_METADATA_DEFAULTS)

    async def _generate(self, intent: Intent, subject: str, schema: RecordSchema, defaults):
        logging.info(f"Generating {intent.value} for '{subject}'")
        request = build_prompt(intent, subject)

        output = await self.provider.complete(request)
        raw_text = join_completion_output(output)
        if not raw_text.strip():
            logging.error(f"Empty completion for {intent.value} '{subject}'")
            raise ProviderFailure("Empty response from completion provider", intent=intent.value)

        record = assemble(raw_text, schema, AssemblyContext(subject, defaults))
        logging.info(f"Assembled {intent.value} for '{subject}'")
        return record
