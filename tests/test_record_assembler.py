import pytest

from core.record_assembler import (
    AssemblyContext,
    LESSON_FROM_MODULE_SCHEMA,
    LESSON_FROM_TOPIC_SCHEMA,
    MODULE_LESSON_DEFAULTS,
    MODULE_METADATA_DEFAULTS,
    MODULE_METADATA_SCHEMA,
    TOPIC_LESSON_DEFAULTS,
    assemble,
    coerce_difficulty,
)
from models.schemas import Lesson, ModuleMetadata

from conftest import CELL_DIVISION_TEXT, METADATA_TEXT, MODULE_LESSON_TEXT

def topic_context(subject="Cell Division"):
    return AssemblyContext(subject, TOPIC_LESSON_DEFAULTS)

def test_cell_division_scenario():
    lesson = assemble(CELL_DIVISION_TEXT, LESSON_FROM_TOPIC_SCHEMA, topic_context())

    assert isinstance(lesson, Lesson)
    assert lesson.title == "Cell Division"
    assert lesson.description == "Cells divide..."
    assert lesson.outcomes == ["Identify phases", "Explain mitosis"]
    assert lesson.key_concepts == ["Mitosis", "Meiosis"]
    assert lesson.activities == ["Draw diagrams"]

@pytest.mark.parametrize("text", ["", "   ", "garbage with no labels", "Title:\nLearning Outcomes:\n\n"])
@pytest.mark.parametrize(
    "schema,defaults",
    [
        (LESSON_FROM_TOPIC_SCHEMA, TOPIC_LESSON_DEFAULTS),
        (LESSON_FROM_MODULE_SCHEMA, MODULE_LESSON_DEFAULTS),
        (MODULE_METADATA_SCHEMA, MODULE_METADATA_DEFAULTS),
    ],
)
def test_every_schema_field_is_populated(text, schema, defaults):
    record = assemble(text, schema, AssemblyContext("Optics", defaults))

    for field in schema.fields:
        value = getattr(record, field.name)
        assert value is not None
        if isinstance(value, list):
            assert len(value) > 0

def test_defaults_are_deterministic():
    first = assemble("", LESSON_FROM_TOPIC_SCHEMA, topic_context("Optics"))
    second = assemble("", LESSON_FROM_TOPIC_SCHEMA, topic_context("Optics"))

    assert first.model_dump_json() == second.model_dump_json()
    assert first.title == "Understanding Optics"
    assert first.outcomes == [
        "Understand the basics of Optics",
        "Explain the importance of Optics in context",
        "Apply knowledge of Optics in practical situations",
    ]
    # each record gets its own list
    assert first.outcomes is not second.outcomes

def test_topic_lesson_leaves_module_fields_unset():
    lesson = assemble(CELL_DIVISION_TEXT, LESSON_FROM_TOPIC_SCHEMA, topic_context())
    assert lesson.difficulty is None
    assert lesson.prerequisites is None
    assert lesson.estimated_time is None

def test_module_lesson_extracts_metadata_fields():
    lesson = assemble(MODULE_LESSON_TEXT, LESSON_FROM_MODULE_SCHEMA, AssemblyContext("Photosynthesis", MODULE_LESSON_DEFAULTS))

    assert lesson.title == "Photosynthesis in Plants"
    assert lesson.difficulty == "Beginner"
    assert lesson.prerequisites == "Cell structure"
    assert lesson.estimated_time == "1 hour"

def test_module_lesson_defaults():
    lesson = assemble("", LESSON_FROM_MODULE_SCHEMA, AssemblyContext("Optics", MODULE_LESSON_DEFAULTS))

    assert lesson.title == "Lesson for Optics"
    assert lesson.description == "This lesson covers key topics within Optics."
    assert lesson.difficulty == "Beginner"
    assert lesson.prerequisites == ""
    assert lesson.estimated_time == "30 minutes"

def test_module_metadata():
    metadata = assemble(METADATA_TEXT, MODULE_METADATA_SCHEMA, AssemblyContext("Cells", MODULE_METADATA_DEFAULTS))

    assert isinstance(metadata, ModuleMetadata)
    assert metadata.module_name == "Cell Biology Basics"
    assert metadata.difficulty == "Intermediate"
    assert metadata.prerequisites == "Basic biology, Microscopy"
    assert metadata.estimated_time == "45 minutes"

def test_module_metadata_defaults():
    metadata = assemble("", MODULE_METADATA_SCHEMA, AssemblyContext("Cells", MODULE_METADATA_DEFAULTS))

    assert metadata.model_dump(by_alias=True) == {
        "moduleName": "Cells Fundamentals",
        "difficulty": "Beginner",
        "prerequisites": "None",
        "estimatedTime": "30 minutes",
    }

def test_unrecognised_difficulty_falls_back_to_default():
    text = "Module Name: Waves\nDifficulty: Hard to say\n"
    metadata = assemble(text, MODULE_METADATA_SCHEMA, AssemblyContext("Waves", MODULE_METADATA_DEFAULTS))
    assert metadata.difficulty == "Beginner"

def test_coerce_difficulty():
    assert coerce_difficulty("advanced level") == "Advanced"
    assert coerce_difficulty("INTERMEDIATE") == "Intermediate"
    assert coerce_difficulty("tricky") is None
