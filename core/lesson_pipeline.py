"""
Lesson Pipeline - The authoring session that chains lesson, metadata and module-content generation
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Set

import config
from core.debounce import DebounceTimer
from core.exceptions import ProviderFailure, SinkFailure
from models.schemas import Lesson, Module
from services.lesson_service import LessonService
from services.module_store import ModuleStore

# Metadata fields the author may override before saving
MODULE_FIELDS = ("difficulty", "prerequisites", "estimated_time")

class SessionState(str, Enum):
    IDLE = "idle"
    LESSON_PENDING = "lesson_pending"
    LESSON_READY = "lesson_ready"
    MODULE_META_PENDING = "module_meta_pending"
    MODULE_META_READY = "module_meta_ready"
    MODULE_CONTENT_PENDING = "module_content_pending"
    MODULE_CONTENT_READY = "module_content_ready"
    SAVE_PENDING = "save_pending"
    SAVED = "saved"

def merge_module_fields(existing: Dict[str, str], incoming: Dict[str, str],
                        user_edited: Iterable[str] = ()) -> Dict[str, str]:
    """Fill-if-empty reconciliation.

    A field keeps its existing value when the author edited it or when it is
    already non-empty; only empty fields take the incoming value.
    """
    edited = set(user_edited)
    merged = dict(existing)
    for name, value in incoming.items():
        if name in edited or existing.get(name):
            continue
        merged[name] = value
    return merged

class GenerationSession:
    """One author's in-progress lesson, from topic submission to save.

    Completion calls are awaited before each transition. The only work that
    overlaps a visible lesson is debounced module-content regeneration, at most
    one request at a time.
    """

    def __init__(self, lesson_service: LessonService, store: ModuleStore,
                 debounce_seconds: float = None, min_module_name_length: int = None,
                 on_change: Callable[["GenerationSession"], None] = None):
        self.lesson_service = lesson_service
        self.store = store
        self.min_module_name_length = (
            config.MIN_MODULE_NAME_LENGTH if min_module_name_length is None else min_module_name_length
        )
        self.on_change = on_change
        self._debounce = DebounceTimer(
            config.MODULE_NAME_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        # bumped by reset and topic submission; completions from an older
        # generation are discarded
        self._generation = 0
        self.module_content_in_flight = False
        self._reset_working_record()
        self.state = SessionState.IDLE

    def _reset_working_record(self):
        self.topic = ""
        self.lesson: Optional[Lesson] = None
        self.description = ""
        self.module_name = ""
        self.difficulty = ""
        self.prerequisites = ""
        self.estimated_time = ""
        self.user_edited: Set[str] = set()
        self.module_generation_topic = ""
        self.pending_module_subject: Optional[str] = None
        self.last_error: Optional[str] = None

    def _transition(self, state: SessionState):
        logging.debug(f"Session {self.state.value} -> {state.value}")
        self.state = state
        self._notify()

    def _notify(self):
        if self.on_change:
            self.on_change(self)

    # ===== TOPIC -> LESSON -> MODULE METADATA =====

    async def submit_topic(self, topic: str) -> Optional[Lesson]:
        """Generate a lesson for ``topic``, then chain module metadata for it."""
        topic = (topic or "").strip()
        if not topic:
            logging.debug("Ignoring topic submission: topic is empty")
            return None
        if self.state in (SessionState.LESSON_PENDING, SessionState.MODULE_META_PENDING):
            logging.debug("Ignoring topic submission: a lesson is already being generated")
            return None

        previous_state = self.state
        self._generation += 1
        self.last_error = None
        self._transition(SessionState.LESSON_PENDING)

        try:
            lesson = await self.lesson_service.generate_lesson(topic)
        except ProviderFailure as e:
            logging.error(f"Lesson generation failed for '{topic}': {e}")
            self.last_error = "Failed to generate lesson"
            self._transition(previous_state)
            return None

        self.topic = topic
        self._show_lesson(lesson)
        self._transition(SessionState.LESSON_READY)

        await self._suggest_module(topic)
        return lesson

    async def _suggest_module(self, topic: str):
        self._transition(SessionState.MODULE_META_PENDING)
        try:
            metadata = await self.lesson_service.suggest_module(topic)
        except ProviderFailure as e:
            # the lesson stays usable; metadata fields keep what they had
            logging.warning(f"Module suggestion failed for '{topic}': {e}")
            self.last_error = "Failed to generate module suggestions"
        else:
            self.module_name = metadata.module_name
            self.difficulty = metadata.difficulty
            self.prerequisites = metadata.prerequisites
            self.estimated_time = metadata.estimated_time
        self._transition(SessionState.MODULE_META_READY)

    def _show_lesson(self, lesson: Lesson):
        self.lesson = lesson
        self.description = lesson.description or ""

    # ===== MODULE NAME EDITS (debounced) =====

    def edit_module_name(self, value: str) -> bool:
        """Record a module-name edit; returns True when a regeneration was scheduled.

        Must be called from within the running event loop.
        """
        self.module_name = value or ""
        self._debounce.cancel()
        self._notify()
        if not self._module_name_qualifies():
            return False
        self._debounce.schedule(self._on_module_name_settled)
        return True

    def _module_name_qualifies(self) -> bool:
        return (
            self.lesson is not None
            and len(self.module_name) >= self.min_module_name_length
            and self.module_name != self.module_generation_topic
        )

    async def _on_module_name_settled(self):
        subject = self.module_name
        if not self._module_name_qualifies():
            return
        if self.module_content_in_flight:
            logging.info(f"Module content already generating; queued '{subject}'")
            self.pending_module_subject = subject
            return
        if self.state in (SessionState.LESSON_PENDING, SessionState.MODULE_META_PENDING):
            return
        await self.generate_module_content(subject)

    async def generate_module_content(self, subject: str) -> Optional[Lesson]:
        """Regenerate the lesson for a module name, merging metadata fill-if-empty."""
        if self.module_content_in_flight:
            self.pending_module_subject = subject
            return None

        previous_state = self.state
        generation = self._generation
        self.module_content_in_flight = True
        self.pending_module_subject = None
        self.module_generation_topic = subject
        self._transition(SessionState.MODULE_CONTENT_PENDING)

        try:
            lesson = await self.lesson_service.generate_module_lesson(subject)
        except ProviderFailure as e:
            if generation != self._generation:
                self._discard_stale_module_content(subject)
                return None
            logging.error(f"Module content generation failed for '{subject}': {e}")
            self.last_error = "Failed to generate lesson from module name"
            self.module_content_in_flight = False
            self._transition(previous_state)
            self._reschedule_if_stale()
            return None

        if generation != self._generation:
            self._discard_stale_module_content(subject)
            return None

        self._show_lesson(lesson)
        merged = merge_module_fields(
            self._module_fields(),
            {
                "difficulty": lesson.difficulty or "",
                "prerequisites": lesson.prerequisites or "",
                "estimated_time": lesson.estimated_time or "",
            },
            self.user_edited,
        )
        self.difficulty = merged["difficulty"]
        self.prerequisites = merged["prerequisites"]
        self.estimated_time = merged["estimated_time"]
        self.module_content_in_flight = False
        self._transition(SessionState.MODULE_CONTENT_READY)
        self._reschedule_if_stale()
        return lesson

    def _discard_stale_module_content(self, subject: str):
        # the session was reset or given a new topic while this request ran
        logging.info(f"Discarding module content for '{subject}': session has moved on")
        self.module_content_in_flight = False
        self._notify()
        if self.pending_module_subject is not None:
            self._reschedule_if_stale()

    def _reschedule_if_stale(self):
        # edits that arrived while the request was in flight get their own firing
        if self._module_name_qualifies() and not self._debounce.pending:
            self._debounce.schedule(self._on_module_name_settled)

    # ===== AUTHOR OVERRIDES =====

    def set_difficulty(self, value: str):
        self._set_module_field("difficulty", value)

    def set_prerequisites(self, value: str):
        self._set_module_field("prerequisites", value)

    def set_estimated_time(self, value: str):
        self._set_module_field("estimated_time", value)

    def set_description(self, value: str):
        """Editor content; replaces the lesson description on save."""
        self.description = value or ""
        self._notify()

    def _set_module_field(self, name: str, value: str):
        value = value or ""
        setattr(self, name, value)
        if value:
            self.user_edited.add(name)
        else:
            self.user_edited.discard(name)
        self._notify()

    def _module_fields(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in MODULE_FIELDS}

    # ===== SAVE =====

    async def save(self) -> Optional[Module]:
        """Hand the working record to the store; resets the session on success."""
        if self.lesson is None or not self.module_name.strip():
            logging.debug("Ignoring save: a lesson and a module name are required")
            return None

        self._transition(SessionState.SAVE_PENDING)
        module = Module(
            module_name=self.module_name,
            lesson=self.lesson.model_copy(update={"description": self.description}),
            difficulty=self.difficulty,
            prerequisites=self.prerequisites,
            time=self.estimated_time,
        )

        try:
            await self.store.append(module)
        except SinkFailure as e:
            logging.error(f"Saving module '{self.module_name}' failed: {e}")
            self.last_error = "Failed to save module"
            self._notify()
            return None

        logging.info(f"Saved module '{module.module_name}'")
        self._transition(SessionState.SAVED)
        self.reset()
        return module

    def reset(self):
        """Drop the working record and any pending regeneration."""
        self._debounce.cancel()
        self._generation += 1
        self._reset_working_record()
        self._transition(SessionState.IDLE)

    async def wait_for_pending(self):
        """Wait for scheduled and running module-content regenerations."""
        await self._debounce.join()

    def close(self):
        self._debounce.cancel()

    def snapshot(self) -> dict:
        """JSON-ready view of the working record."""
        return {
            "state": self.state.value,
            "topic": self.topic,
            "lesson": self.lesson.model_dump(by_alias=True) if self.lesson else None,
            "description": self.description,
            "moduleName": self.module_name,
            "difficulty": self.difficulty,
            "prerequisites": self.prerequisites,
            "estimatedTime": self.estimated_time,
            "generatingModuleContent": self.module_content_in_flight,
            "error": self.last_error,
        }
