import asyncio

import pytest

from core.exceptions import ProviderFailure, SinkFailure
from services.lesson_service import LessonService
from services.module_store import InMemoryModuleStore

CELL_DIVISION_TEXT = (
    "Title: Cell Division\n"
    "Description: Cells divide...\n"
    "\n"
    "Learning Outcomes:\n"
    "1. Identify phases\n"
    "2. Explain mitosis\n"
    "\n"
    "Key Concepts:\n"
    "- Mitosis\n"
    "- Meiosis\n"
    "\n"
    "Activities:\n"
    "- Draw diagrams"
)

METADATA_TEXT = (
    "Module Name: Cell Biology Basics\n"
    "Difficulty: Intermediate\n"
    "Prerequisites: Basic biology, Microscopy\n"
    "Estimated Time: 45 minutes"
)

MODULE_LESSON_TEXT = (
    "Title: Photosynthesis in Plants\n"
    "Description: How plants turn light into sugar.\n"
    "\n"
    "Learning Outcomes:\n"
    "1. Describe the light reactions\n"
    "\n"
    "Key Concepts:\n"
    "- Chlorophyll\n"
    "\n"
    "Activities:\n"
    "- Leaf disk experiment\n"
    "\n"
    "Difficulty: Beginner\n"
    "Prerequisites: Cell structure\n"
    "Estimated Time: 1 hour"
)

class FakeProvider:
    """Completion provider that answers by intent and records every request."""

    def __init__(self, lesson=CELL_DIVISION_TEXT, metadata=METADATA_TEXT, module_lesson=MODULE_LESSON_TEXT):
        self.responses = {
            "lesson-from-topic": lesson,
            "lesson-from-module": module_lesson,
            "module-metadata": metadata,
        }
        self.requests = []
        self.gate = None

    @staticmethod
    def intent_of(request):
        if request.prompt_text.startswith("For an educational lesson"):
            return "module-metadata"
        if request.prompt_text.startswith("Based on the module title"):
            return "lesson-from-module"
        return "lesson-from-topic"

    def subjects(self, intent):
        return [subject for kind, subject in self.requests if kind == intent]

    async def complete(self, request):
        intent = self.intent_of(request)
        subject = request.prompt_text.split('"')[1]
        self.requests.append((intent, subject))
        if self.gate is not None and intent == "lesson-from-module":
            await self.gate.wait()
        response = self.responses[intent]
        if isinstance(response, Exception):
            raise response
        return response

class FailingStore(InMemoryModuleStore):
    def __init__(self):
        super().__init__()
        self.failures_left = 1

    async def append(self, module):
        if self.failures_left:
            self.failures_left -= 1
            raise SinkFailure("store unavailable")
        await super().append(module)

@pytest.fixture
def provider():
    return FakeProvider()

@pytest.fixture
def lesson_service(provider):
    return LessonService(provider)

@pytest.fixture
def store():
    return InMemoryModuleStore()

@pytest.fixture
def provider_failure():
    return ProviderFailure("model unavailable")
