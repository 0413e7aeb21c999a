"""
Action resolver - applies an action's consequences to the State Store.

Consequences run through an ordered pipeline of handlers:

    setsFlag -> locksLocation -> recordsChoice -> addsText
    -> triggersSequence (stops the pipeline) -> endsInteraction

Every applicable handler's ``check`` runs before any ``apply``, so an
action that is going to be rejected never leaves a partial mutation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from casebook.engine.actions import choice_guard_flag
from casebook.engine.leads import LeadPolicy
from casebook.engine.sequences import unknown_sequence
from casebook.engine.state import StateStore
from casebook.engine.text import TextProcessor
from casebook.schemas.location import Consequences, Location
from casebook.schemas.render import ContentBlock, EngineError, ErrorKind, Notification
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class Resolution(BaseModel):
    """What resolving an action did, and what the caller must do next"""

    state_changed: bool = False
    ends_interaction: bool = False
    offer_leave: bool = False
    sequence_id: Optional[str] = None
    blocks: List[ContentBlock] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    error: Optional[EngineError] = None


class ResolutionContext:
    """Inputs shared by the handlers of one resolution"""

    def __init__(
        self,
        action_id: str,
        consequences: Consequences,
        state: StateStore,
        location: Optional[Location],
    ):
        self.action_id = action_id
        self.consequences = consequences
        self.state = state
        self.location = location
        self.resolution = Resolution()

    @property
    def address(self) -> Optional[str]:
        return self.state.current_location


class ConsequenceHandler:
    """One step of the consequence pipeline"""

    key = ""

    def applies(self, consequences: Consequences) -> bool:
        raise NotImplementedError

    def check(self, ctx: ResolutionContext) -> Optional[EngineError]:
        return None

    def apply(self, ctx: ResolutionContext) -> bool:
        """Apply the consequence; returning True stops the pipeline"""
        raise NotImplementedError


class SetsFlagHandler(ConsequenceHandler):
    key = "setsFlag"

    def applies(self, consequences):
        return bool(consequences.sets_flag)

    def apply(self, ctx):
        ctx.state.merge_flags(dict(ctx.consequences.sets_flag or {}))
        ctx.resolution.state_changed = True
        return False


class LocksLocationHandler(ConsequenceHandler):
    key = "locksLocation"

    def applies(self, consequences):
        return consequences.locks_location

    def apply(self, ctx):
        notice = LeadPolicy.lock(ctx.address, ctx.state)
        if notice is not None:
            ctx.resolution.notifications.append(notice)
            ctx.resolution.state_changed = True
        return False


class RecordsChoiceHandler(ConsequenceHandler):
    """At most one recorded choice per location"""

    key = "recordsChoice"

    def applies(self, consequences):
        return bool(consequences.records_choice)

    def check(self, ctx):
        if ctx.state.flag_is_truthy(choice_guard_flag(ctx.address)):
            logger.warning(f"[Resolver] Choice already recorded at {ctx.address}")
            return EngineError(
                kind=ErrorKind.INVALID_CHOICE_REPEAT,
                message="You already made a choice here.",
            )
        return None

    def apply(self, ctx):
        ctx.state.set_flag(ctx.consequences.records_choice, ctx.action_id)  # type: ignore[arg-type]
        ctx.state.set_flag(choice_guard_flag(ctx.address), True)
        ctx.resolution.notifications.append(
            Notification(
                message=f"You chose {ctx.action_id.replace('_', ' ')}.", severity="info"
            )
        )
        ctx.resolution.state_changed = True
        return False


class AddsTextHandler(ConsequenceHandler):
    key = "addsText"

    def __init__(self, text: TextProcessor):
        self.text = text

    def applies(self, consequences):
        return bool(consequences.adds_text)

    def apply(self, ctx):
        processed = self.text.process(ctx.consequences.adds_text)
        if processed:
            ctx.resolution.blocks.extend([ContentBlock.separator(), ContentBlock(html=processed)])
        return False


class TriggersSequenceHandler(ConsequenceHandler):
    key = "triggersSequence"

    def applies(self, consequences):
        return bool(consequences.triggers_sequence)

    def check(self, ctx):
        sequence_id = ctx.consequences.triggers_sequence
        if ctx.location is None or sequence_id not in ctx.location.sequences:
            logger.error(f"[Resolver] Sequence {sequence_id} not found at {ctx.address}")
            return unknown_sequence(sequence_id)  # type: ignore[arg-type]
        return None

    def apply(self, ctx):
        ctx.resolution.sequence_id = ctx.consequences.triggers_sequence
        return True


class EndsInteractionHandler(ConsequenceHandler):
    key = "endsInteraction"

    def applies(self, consequences):
        return consequences.ends_interaction

    def apply(self, ctx):
        ctx.resolution.ends_interaction = True
        consequences = ctx.consequences
        ctx.resolution.offer_leave = not (consequences.adds_text or consequences.triggers_sequence)
        return False


class ActionResolver:
    """Runs the consequence pipeline for a fired action"""

    def __init__(self, text: TextProcessor, handlers: Optional[List[ConsequenceHandler]] = None):
        self.handlers: List[ConsequenceHandler] = handlers or [
            SetsFlagHandler(),
            LocksLocationHandler(),
            RecordsChoiceHandler(),
            AddsTextHandler(text),
            TriggersSequenceHandler(),
            EndsInteractionHandler(),
        ]

    def resolve(
        self,
        action_id: str,
        consequences: Optional[Consequences],
        state: StateStore,
        location: Optional[Location] = None,
    ) -> Resolution:
        ctx = ResolutionContext(action_id, consequences or Consequences(), state, location)
        logger.info(f"[Resolver] Action triggered: {action_id} at location {ctx.address}")

        active = [handler for handler in self.handlers if handler.applies(ctx.consequences)]
        for handler in active:
            error = handler.check(ctx)
            if error is not None:
                return Resolution(error=error)

        for handler in active:
            logger.verbose(f"[Resolver] Applying {handler.key} for {action_id}")  # type: ignore[attr-defined]
            if handler.apply(ctx):
                break

        return ctx.resolution
