"""
Test schema validation
"""

import pytest
from pydantic import ValidationError

from casebook.schemas import (
    Action,
    CaseData,
    Consequences,
    Location,
    Prompt,
    RenderResult,
    validate_case_data,
    validate_json_schema,
    validate_location,
)
from casebook.schemas.render import ActionView, ContentBlock, EngineError, ErrorKind
from casebook.schemas.validation import LOCATIONS_DOCUMENT_SCHEMA


def test_location_aliases():
    """Test that authored camelCase keys populate snake_case fields"""

    location = validate_location(
        {
            "circlesLetter": "b",
            "baseText": "Legacy",
            "conditions": [
                {
                    "check": "requiresLetter",
                    "letter": "C",
                    "onSuccess": {"text": "Yes", "suppressesPrompts": ["p1"]},
                    "promptIfFalse": {"id": "p2", "text": "No", "hideIfFlag": "seen"},
                }
            ],
            "unknownKey": 1,
        }
    )

    assert location.circles_letter == "B"
    assert location.body == "Legacy"
    condition = location.conditions[0]
    assert condition.on_success.suppresses_prompts == ["p1"]
    assert condition.failure_prompt == Prompt(id="p2", text="No", hideIfFlag="seen")


def test_string_prompt_becomes_prompt():
    """Test that a plain promptIfFalse string becomes a Prompt without an id"""

    location = Location.model_validate({"conditions": [{"promptIfFalse": "Try again."}]})
    prompt = location.conditions[0].failure_prompt
    assert prompt.text == "Try again."
    assert prompt.id is None


def test_locations_are_frozen():
    """Test that location data cannot be mutated"""

    location = Location.model_validate({"text": "Fixed"})
    with pytest.raises(ValidationError):
        location.text = "Changed"


def test_action_consequence_inheritance():
    """Test choice consequence inheritance"""

    parent = Action.model_validate(
        {"id": "g", "text": "Group", "consequences": {"recordsChoice": "pick", "endsInteraction": True}}
    )
    child = Action(id="a", text="A")
    assert child.effective_consequences(parent).records_choice == "pick"
    assert child.effective_consequences() == Consequences()


def test_case_data_validation():
    """Test case document validation"""

    case = validate_case_data(
        {
            "case title": "A Case",
            "intro": "Begin.",
            "case_summary": {"leads": [{"name": "22 NW"}], "holmesLeads": 1},
        }
    )
    assert isinstance(case, CaseData)
    assert case.title == "A Case"
    assert case.case_summary.leads[0].name == "22 NW"

    with pytest.raises(ValueError):
        validate_case_data({"intro": "Begin.", "case_summary": {"holmesLeads": -1}})


def test_locations_document_schema():
    """Test the locations document structure check"""

    assert validate_json_schema({"1 NW": {}}, LOCATIONS_DOCUMENT_SCHEMA)
    with pytest.raises(ValueError):
        validate_json_schema({"1 NW": "text"}, LOCATIONS_DOCUMENT_SCHEMA)
    with pytest.raises(ValueError):
        validate_json_schema([], LOCATIONS_DOCUMENT_SCHEMA)


def test_render_result_serialization():
    """Test that hidden consequences never reach the renderer"""

    result = RenderResult(
        location="1 NW",
        content_blocks=[ContentBlock.separator()],
        actions=[ActionView.leave()],
        error=EngineError(kind=ErrorKind.LOCATION_LOCKED, message="Locked."),
    )
    data = result.model_dump(mode="json")
    assert not result.ok
    assert data["error"]["kind"] == "location_locked"
    assert "consequences" not in data["actions"][0]
    assert data["content_blocks"][0] == {"kind": "separator", "html": "<hr>", "block_id": None}
