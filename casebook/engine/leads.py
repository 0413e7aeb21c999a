"""
Lead and lock policy.

A lead is one counted unit of investigative effort: the first visit to
an address that is not a free lead, or a hint taken with hint_<LETTER>.
"""

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from casebook.engine.actions import hint_flag, hint_letter
from casebook.engine.state import StateStore
from casebook.engine.text import TextProcessor
from casebook.engine.updates import lock_location
from casebook.schemas.render import ContentBlock, EngineError, ErrorKind, Notification
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class HintOutcome(BaseModel):
    """Result of taking a hint"""

    blocks: List[ContentBlock] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    error: Optional[EngineError] = None


class LeadPolicy:
    """Counts leads, grants hints and locks locations"""

    def __init__(
        self,
        free_leads: Iterable[str],
        hints: Dict[str, str],
        text: TextProcessor,
    ):
        self.free_leads = set(free_leads)
        self.hints = {letter.upper(): hint for letter, hint in hints.items()}
        self.text = text

    def is_free_lead(self, address: str) -> bool:
        return address in self.free_leads

    def record_visit(self, address: str, state: StateStore) -> List[Notification]:
        """Count the first visit to an address; repeat visits change nothing"""
        if not state.mark_visited(address):
            return []
        if self.is_free_lead(address):
            logger.info(f"[Leads] {address} is a free lead")
            return [Notification(message=f"{address} is a free lead.", severity="info")]
        state.increment_leads()
        logger.info(f"[Leads] First visit to {address}, leads now {state.leads}")
        return []

    @staticmethod
    def is_hint(action_id: str) -> bool:
        return hint_letter(action_id) is not None

    def take_hint(self, action_id: str, state: StateStore) -> HintOutcome:
        """Grant a hint once per letter, counting it as a lead"""
        letter = hint_letter(action_id)
        if letter is None:
            return HintOutcome(
                error=EngineError(
                    kind=ErrorKind.DATA_MISSING, message=f"{action_id} is not a hint action."
                )
            )

        taken = hint_flag(letter)
        if state.flag_is_truthy(taken):
            logger.warning(f"[Leads] Hint {letter} already taken")
            return HintOutcome(
                error=EngineError(
                    kind=ErrorKind.HINT_UNAVAILABLE,
                    message=f"You have already taken Hint {letter}.",
                )
            )
        if not state.has_letter(letter):
            logger.warning(f"[Leads] Hint {letter} requested without the letter")
            return HintOutcome(
                error=EngineError(
                    kind=ErrorKind.HINT_UNAVAILABLE,
                    message=f"You need letter {letter} circled to get this hint.",
                )
            )
        hint_text = self.hints.get(letter)
        if not hint_text:
            return HintOutcome(
                error=EngineError(
                    kind=ErrorKind.DATA_MISSING, message=f"No hint is available for letter {letter}."
                )
            )

        state.increment_leads()
        state.set_flag(taken, True)
        logger.info(f"[Leads] Hint {letter} taken, leads now {state.leads}")
        return HintOutcome(
            blocks=[ContentBlock(kind="prompt", html=self.text.process_prompt(hint_text))],
            notifications=[
                Notification(
                    message=f"Hint {letter} taken. Lead count increased.", severity="info"
                )
            ],
        )

    @staticmethod
    def lock(address: Optional[str], state: StateStore) -> Optional[Notification]:
        """Permanently lock an address; idempotent"""
        return lock_location(state, address)
