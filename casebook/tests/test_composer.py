"""
Tests for the narrative composer.
"""

import pytest

from casebook.engine.actions import ActionPresenter
from casebook.engine.composer import NarrativeComposer
from casebook.engine.conditions import ConditionEvaluator
from casebook.engine.state import StateStore
from casebook.engine.text import TextProcessor
from casebook.schemas.location import Location


@pytest.fixture
def composer():
    text = TextProcessor()
    return NarrativeComposer(ConditionEvaluator(), ActionPresenter(text), text)


@pytest.fixture
def state():
    return StateStore(alphabet=["B", "C", "E", "F", "G", "H", "R", "T"])


def html_of(composition):
    return "".join(block.html for block in composition.blocks)


def compose(composer, state, address, location):
    state.current_location = address
    return composer.compose(address, location, state)


class TestComposition:
    """Test the basic layout of a composed location"""

    def test_heading_then_body(self, composer, state):
        """Test that the heading comes first and the body follows"""
        location = Location.model_validate({"text": "Fog.\nMore fog."})
        composition = compose(composer, state, "1 NW", location)
        assert composition.blocks[0].kind == "heading"
        assert composition.blocks[0].html == "<h1>1 NW</h1>"
        assert composition.blocks[1].html == "<p>Fog.</p><p>More fog.</p>"

    def test_base_text_used_without_text(self, composer, state):
        """Test the baseText fallback"""
        location = Location.model_validate({"baseText": "Legacy body"})
        assert "Legacy body" in html_of(compose(composer, state, "1 NW", location))

    def test_sections_are_separated(self, composer, state):
        """Test that sections after the heading get separators"""
        location = Location.model_validate(
            {"text": "Body", "conditions": [{"onSuccess": {"text": "Always shown"}}]}
        )
        kinds = [block.kind for block in compose(composer, state, "1 NW", location).blocks]
        assert kinds == ["heading", "text", "separator", "text"]

    def test_entry_letter_satisfies_condition_same_pass(self, composer, state):
        """Test that a letter granted on entry is visible to the pass's conditions"""
        location = Location.model_validate(
            {
                "circlesLetter": "c",
                "text": "Cab stand",
                "conditions": [
                    {
                        "check": "requiresLetter",
                        "letter": "C",
                        "onSuccess": {"text": "The driver talks"},
                        "promptIfFalse": "The driver shrugs",
                    }
                ],
            }
        )
        composition = compose(composer, state, "22 NW", location)
        assert "The driver talks" in html_of(composition)
        assert "The driver shrugs" not in html_of(composition)
        assert [n.message for n in composition.notifications] == ["Found Letter C!"]

    def test_flat_updates(self, composer, state):
        """Test that flat updates grant letters and merge flags"""
        location = Location.model_validate(
            {"text": "Square", "updates": {"circlesLetter": "E", "visited": True}}
        )
        composition = compose(composer, state, "3 SW", location)
        assert state.has_letter("E")
        assert state.flag_is_true("visited")
        assert composition.notifications[0].severity == "success"

    def test_dead_end_location(self, composer, state):
        """Test a location with no actions and no conditions"""
        location = Location.model_validate({"text": "Nothing here."})
        composition = compose(composer, state, "45 NW", location)
        assert composition.actions == []
        assert len(composition.blocks) == 2


class TestConditionDispatch:
    """Test conditions, legacy conditionalText and follow-ups"""

    def test_failure_prompt_is_emphasized(self, composer, state):
        """Test that an unmet condition shows its prompt"""
        location = Location.model_validate(
            {
                "text": "Shop",
                "conditions": [
                    {"check": "requiresLetter", "letter": "R", "promptIfFalse": "Come back later."}
                ],
            }
        )
        composition = compose(composer, state, "5 N", location)
        assert composition.blocks[-1].kind == "prompt"
        assert composition.blocks[-1].html == "<p><em>Come back later.</em></p>"

    def test_conditions_take_precedence(self, composer, state):
        """Test that conditionalText and follow-ups are ignored when conditions exist"""
        location = Location.model_validate(
            {
                "text": "Shop",
                "conditions": [{"onSuccess": {"text": "From conditions"}}],
                "conditionalText": [{"text": "From legacy"}],
                "followUpConditions": [{"onSuccess": {"text": "From follow-ups"}}],
            }
        )
        html = html_of(compose(composer, state, "5 N", location))
        assert "From conditions" in html
        assert "From legacy" not in html
        assert "From follow-ups" not in html

    def test_legacy_before_follow_ups(self, composer, state):
        """Test that conditionalText wins over top-level follow-ups"""
        location = Location.model_validate(
            {
                "text": "Shop",
                "conditionalText": [{"text": "From legacy"}],
                "followUpConditions": [{"onSuccess": {"text": "From follow-ups"}}],
            }
        )
        html = html_of(compose(composer, state, "5 N", location))
        assert "From legacy" in html
        assert "From follow-ups" not in html

    def test_top_level_follow_ups_need_no_actions(self, composer, state):
        """Test that top-level follow-ups only run when the location has no actions"""
        data = {
            "text": "Court",
            "followUpConditions": [{"onSuccess": {"text": "Clerk speaks"}}],
        }
        assert "Clerk speaks" in html_of(compose(composer, state, "12 EC", Location.model_validate(data)))

        data["actions"] = [{"id": "wait", "text": "Wait"}]
        assert "Clerk speaks" not in html_of(compose(composer, state, "12 EC", Location.model_validate(data)))

    def test_nested_follow_ups_apply_updates(self, composer, state):
        """Test that nested follow-ups are fully evaluated and apply their updates"""
        state.grant_letter("C")
        state.set_flag("keptSlip", True)
        location = Location.model_validate(
            {
                "text": "Bookshop",
                "conditions": [
                    {
                        "check": "requiresLetter",
                        "letter": "C",
                        "onSuccess": {
                            "text": "Outer",
                            "followUpConditions": [
                                {
                                    "check": "flag:keptSlip",
                                    "onSuccess": {"text": "Inner", "updates": {"circlesLetter": "R"}},
                                }
                            ],
                        },
                    }
                ],
            }
        )
        composition = compose(composer, state, "73 NW", location)
        html = html_of(composition)
        assert html.index("Outer") < html.index("Inner")
        assert state.has_letter("R")

    def test_legacy_updates_and_lock(self, composer, state):
        """Test legacy updatesGameState and locationLock"""
        location = Location.model_validate(
            {
                "baseText": "Parlour",
                "conditionalText": [
                    {
                        "text": "The matron talks",
                        "updatesGameState": {"circlesLetter": "H", "metMatron": True},
                        "locationLock": True,
                    }
                ],
            }
        )
        composition = compose(composer, state, "44 NW", location)
        assert state.has_letter("H")
        assert state.flag_is_true("metMatron")
        assert state.is_locked("44 NW")
        assert "44 NW is now locked." in [n.message for n in composition.notifications]

    def test_legacy_failure_prompt(self, composer, state):
        """Test that an unmet legacy entry shows promptIfFalse"""
        location = Location.model_validate(
            {"baseText": "Parlour", "conditionalText": [{"requiresLetter": "E", "promptIfFalse": "She waits."}]}
        )
        composition = compose(composer, state, "44 NW", location)
        assert composition.blocks[-1].html == "<p><em>She waits.</em></p>"


class TestPromptSuppression:
    """Test suppressesPrompts and prompt hideIfFlag"""

    def test_sample_bookshop_without_letters(self, composer, state, bundle):
        """Test that both failure prompts show, without a separator between them"""
        composition = compose(composer, state, "73 NW", bundle.locations["73 NW"])
        kinds = [block.kind for block in composition.blocks]
        assert kinds == ["heading", "text", "separator", "prompt", "prompt"]
        assert composition.blocks[-1].block_id == "73-nw-no-h"

    def test_success_suppresses_later_prompt(self, composer, state, bundle):
        """Test that a success effect suppresses a prompt emitted later in the pass"""
        state.grant_letter("C")
        state.set_flag("keptSlip", True)
        composition = compose(composer, state, "73 NW", bundle.locations["73 NW"])
        assert all(block.block_id != "73-nw-no-h" for block in composition.blocks)
        assert composition.blocks[-1].kind == "text"
        assert "Goodwin family" in composition.blocks[-1].html
        assert state.has_letter("R")

    def test_prompt_hidden_by_flag(self, composer, state, bundle):
        """Test that a prompt with hideIfFlag disappears once the flag is set"""
        state.grant_letter("C")
        composition = compose(composer, state, "73 NW", bundle.locations["73 NW"])
        assert any(block.block_id == "73-nw-slip" for block in composition.blocks)

        state.set_flag("slipIdentified", True)
        composition = compose(composer, state, "73 NW", bundle.locations["73 NW"])
        assert all(block.block_id != "73-nw-slip" for block in composition.blocks)

    def test_generated_prompt_ids(self, composer, state):
        """Test that prompts with hideIfFlag and no id get a generated id"""
        location = Location.model_validate(
            {
                "text": "Shop",
                "conditions": [
                    {
                        "check": "flag:never",
                        "promptIfFalse": {"text": "Hidden later", "hideIfFlag": "done"},
                    }
                ],
            }
        )
        composition = compose(composer, state, "5 N", location)
        assert composition.blocks[-1].block_id == "5 N-prompt-1"


class TestActionCollection:
    """Test ordering of top-level and collected actions"""

    def test_collected_actions_follow_top_actions(self, composer, state):
        """Test that condition actions come after top-level actions with a separator"""
        location = Location.model_validate(
            {
                "text": "Court",
                "actions": [{"id": "wait", "text": "Wait"}],
                "conditions": [{"onSuccess": {"actions": [{"id": "ask", "text": "Ask"}]}}],
            }
        )
        composition = compose(composer, state, "12 EC", location)
        assert [action.id for action in composition.actions] == ["wait", "ask"]
        assert composition.actions[0].separator_before is False
        assert composition.actions[1].separator_before is True

    def test_collected_actions_alone(self, composer, state):
        """Test that no separator is requested without top-level actions"""
        location = Location.model_validate(
            {"text": "Court", "conditions": [{"onSuccess": {"actions": [{"id": "ask", "text": "Ask"}]}}]}
        )
        composition = compose(composer, state, "12 EC", location)
        assert composition.actions[0].separator_before is False
