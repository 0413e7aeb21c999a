"""
Action presentation: applies visibility and disable gates to authored
actions and produces the ActionViews handed to the renderer.
"""

import re
from typing import List, Optional

from casebook.engine.state import StateStore
from casebook.engine.text import TextProcessor
from casebook.schemas.location import Action, Consequences
from casebook.schemas.render import ActionView
from casebook.utils.logger import get_logger

logger = get_logger(__name__)

HINT_ACTION_PATTERN = re.compile(r"^hint_([A-Za-z])(?:_|$)")
DEFAULT_DISABLED_TEXT = "Unavailable."
HINT_TAKEN_TEXT = "Hint already taken."
CHOICE_MADE_TEXT = "You already made a choice here."
LOCKED_TEXT = "This location is locked."


def hint_letter(action_id: str) -> Optional[str]:
    """Letter a hint_<LETTER> action refers to, or None"""
    match = HINT_ACTION_PATTERN.match(action_id or "")
    return match.group(1).upper() if match else None


def hint_flag(letter: str) -> str:
    return f"hint_{letter.upper()}_taken"


def location_slug(address: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9]", "", (address or "").lower())


def choice_guard_flag(address: Optional[str]) -> str:
    """Flag marking that a choice was already recorded at an address"""
    return f"choiceRecorded_{location_slug(address)}"


class ActionPresenter:
    """Builds ActionViews for the current state"""

    def __init__(self, text: TextProcessor):
        self.text = text

    def present_all(self, actions: List[Action], state: StateStore) -> List[ActionView]:
        views = []
        for action in actions:
            view = self.present(action, state)
            if view is not None:
                views.append(view)
        return views

    def present(self, action: Action, state: StateStore) -> Optional[ActionView]:
        """Return a view for the action, or None when it is hidden or malformed"""
        if not action.id or not action.text:
            return None

        if state.flag_is_truthy(action.hide_if_flag):
            logger.debug(f"[Actions] Hiding action '{action.id}'")
            return None

        label = self.text.label(action.text)

        if action.choices:
            prompt = None
            if not state.flag_is_truthy(action.hide_prompt_if_flag):
                prompt = label.replace("\n", "<br>")
            choices = [
                view
                for view in (
                    self._present_single(
                        choice, choice.effective_consequences(action), state
                    )
                    for choice in action.choices
                    if choice.id and choice.text
                )
                if view is not None
            ]
            return ActionView(id=action.id, label=label, prompt=prompt, choices=choices)

        return self._present_single(action, action.effective_consequences(), state)

    def _present_single(
        self, action: Action, consequences: Consequences, state: StateStore
    ) -> Optional[ActionView]:
        if state.flag_is_truthy(action.hide_if_flag):
            logger.debug(f"[Actions] Hiding choice '{action.id}'")
            return None

        view = ActionView(
            id=action.id,
            label=self.text.label(action.text),
            consequences=consequences,
        )
        reason = self._disabled_reason(action, consequences, state)
        if reason is not None:
            view.disabled = True
            view.disabled_reason = reason
        return view

    @staticmethod
    def _disabled_reason(
        action: Action, consequences: Consequences, state: StateStore
    ) -> Optional[str]:
        if state.flag_is_truthy(action.disable_if_flag):
            return action.disabled_text or DEFAULT_DISABLED_TEXT

        letter = hint_letter(action.id)
        if letter and state.flag_is_truthy(hint_flag(letter)):
            return HINT_TAKEN_TEXT

        current = state.current_location
        if consequences.records_choice and state.flag_is_truthy(
            choice_guard_flag(current)
        ):
            return CHOICE_MADE_TEXT

        if consequences.locks_location and state.is_locked(current):
            return LOCKED_TEXT

        return None
