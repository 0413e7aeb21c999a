"""
Sequence runner for location-local multi-step content.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from casebook.engine.actions import ActionPresenter
from casebook.engine.state import StateStore
from casebook.engine.text import TextProcessor
from casebook.engine.updates import apply_updates
from casebook.schemas.location import Location
from casebook.schemas.render import (
    ActionView,
    ContentBlock,
    EngineError,
    ErrorKind,
    Notification,
)
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class SequenceOutcome(BaseModel):
    """Content and actions produced by a sequence"""

    blocks: List[ContentBlock] = Field(default_factory=list)
    actions: List[ActionView] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    error: Optional[EngineError] = None


def unknown_sequence(sequence_id: str) -> EngineError:
    return EngineError(
        kind=ErrorKind.DATA_MISSING, message=f"Sequence {sequence_id} not found."
    )


class SequenceRunner:
    """Runs a location's named sequence"""

    def __init__(self, presenter: ActionPresenter, text: TextProcessor):
        self.presenter = presenter
        self.text = text

    def run(self, location: Optional[Location], sequence_id: str, state: StateStore) -> SequenceOutcome:
        if location is None or sequence_id not in location.sequences:
            logger.error(f"[Sequences] Sequence {sequence_id} not found")
            return SequenceOutcome(error=unknown_sequence(sequence_id))

        sequence = location.sequences[sequence_id]
        logger.info(f"[Sequences] Displaying sequence: {sequence_id}")

        outcome = SequenceOutcome()
        processed = self.text.process(sequence.text)
        if processed:
            outcome.blocks.extend([ContentBlock.separator(), ContentBlock(html=processed)])

        outcome.notifications.extend(apply_updates(state, sequence.updates))

        if sequence.actions:
            outcome.actions = self.presenter.present_all(sequence.actions, state)
        elif sequence.ends_interaction is not False:
            outcome.actions = [ActionView.leave()]
        return outcome
