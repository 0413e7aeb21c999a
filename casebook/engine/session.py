"""
Game session - the Core -> Renderer entry point.

A session owns one State Store and the current display (content blocks
plus offered actions). ``visit`` and ``act`` always return a
RenderResult; failures are reported on ``RenderResult.error`` and leave
the State Store exactly as it was.
"""

import uuid
from typing import Any, Dict, List, Optional, Union

from casebook.config import Settings, settings as default_settings
from casebook.data.loader import CaseRepository
from casebook.engine.actions import ActionPresenter
from casebook.engine.composer import NarrativeComposer
from casebook.engine.conditions import ConditionEvaluator
from casebook.engine.directory import DistrictGroup, build_directory
from casebook.engine.leads import LeadPolicy
from casebook.engine.resolver import ActionResolver
from casebook.engine.sequences import SequenceRunner
from casebook.engine.state import StateStore
from casebook.engine.summary import CaseSummaryReport, build_summary
from casebook.engine.text import TextProcessor
from casebook.schemas.location import Consequences, Location
from casebook.schemas.render import (
    LEAVE_ACTION_ID,
    ActionView,
    ContentBlock,
    EngineError,
    ErrorKind,
    Notification,
    RenderResult,
    StateSnapshot,
)
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class GameSession:
    """One player's play session over a loaded case"""

    def __init__(
        self,
        repository: CaseRepository,
        settings: Optional[Settings] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self.repository = repository
        self.settings = settings or default_settings
        self.state = StateStore(alphabet=self.settings.letters)

        self.text = TextProcessor(self.settings.text_placeholders)
        self.evaluator = ConditionEvaluator()
        self.presenter = ActionPresenter(self.text)
        self.composer = NarrativeComposer(self.evaluator, self.presenter, self.text)
        self.resolver = ActionResolver(self.text)
        self.sequences = SequenceRunner(self.presenter, self.text)
        self.leads = LeadPolicy(self.settings.free_leads, self.settings.hints, self.text)

        # Current display
        self.blocks: List[ContentBlock] = []
        self.actions: List[ActionView] = []

    # ==================== Results ====================

    def _result(
        self,
        notifications: Optional[List[Notification]] = None,
        error: Optional[EngineError] = None,
    ) -> RenderResult:
        return RenderResult(
            location=self.state.current_location,
            content_blocks=[block.model_copy(deep=True) for block in self.blocks],
            actions=[action.model_copy(deep=True) for action in self.actions],
            notifications=list(notifications or []),
            error=error,
            leads=self.state.leads,
            letters=sorted(self.state.letters),
        )

    def _reject(self, kind: ErrorKind, message: str) -> RenderResult:
        logger.warning(f"[Session {self.id[:8]}] Rejected: {kind.value}: {message}")
        error = EngineError(kind=kind, message=message)
        return self._result([Notification(message=message, severity="error")], error=error)

    def _not_loaded(self) -> RenderResult:
        detail = self.repository.load_error or "Case data is not loaded."
        return self._reject(ErrorKind.NOT_LOADED, detail)

    # ==================== Navigation ====================

    def introduction(self) -> RenderResult:
        """Show the case introduction and leave the current location"""
        case = self.repository.case
        if case is None:
            return self._not_loaded()

        self.state.current_location = None
        self.blocks = []
        date = TextProcessor.inline(case.date)
        if date:
            self.blocks.append(ContentBlock(html=f'<div class="date">{date}</div>'))
        self.blocks.append(ContentBlock(html=f"<p>{TextProcessor.inline(case.intro)}</p>"))
        self.actions = []
        return self._result()

    def visit(self, address: str) -> RenderResult:
        """Navigate to an address"""
        if not self.repository.loaded:
            return self._not_loaded()
        if self.state.is_locked(address):
            return self._reject(ErrorKind.LOCATION_LOCKED, f"You cannot return to {address}.")

        location = self.repository.get_location(address)
        if location is None:
            logger.error(f"[Session {self.id[:8]}] Location data not found for: {address}")
            return self._reject(ErrorKind.DATA_MISSING, f"Location data not found for: {address}")

        logger.info(f"[Session {self.id[:8]}] Visiting: {address}")
        self.state.current_location = address
        notifications = self.leads.record_visit(address, self.state)
        return self._enter(address, location, notifications)

    def _enter(
        self, address: str, location: Location, notifications: List[Notification]
    ) -> RenderResult:
        composition = self.composer.compose(address, location, self.state)
        self.blocks = composition.blocks
        self.actions = composition.actions
        return self._result(notifications + composition.notifications)

    # ==================== Actions ====================

    def offered(self, action_id: str) -> Optional[ActionView]:
        """The currently displayed view that fires action_id, if any"""
        for view in self.actions:
            for candidate in view.dispatchable():
                if candidate.id == action_id:
                    return candidate
        return None

    def act(
        self,
        action_id: str,
        consequences: Optional[Union[Consequences, Dict[str, Any]]] = None,
    ) -> RenderResult:
        """Fire an action; consequences default to those of the offered action"""
        if not self.repository.loaded:
            return self._not_loaded()
        if action_id == LEAVE_ACTION_ID:
            return self.introduction()

        if self.leads.is_hint(action_id):
            return self._take_hint(action_id)

        if consequences is None:
            view = self.offered(action_id)
            if view is None:
                return self._reject(ErrorKind.DATA_MISSING, f"Action {action_id} is not available.")
            consequences = view.consequences
        elif isinstance(consequences, dict):
            consequences = Consequences.model_validate(consequences)

        location = self.repository.get_location(self.state.current_location)
        resolution = self.resolver.resolve(action_id, consequences, self.state, location)
        if resolution.error is not None:
            return self._reject(resolution.error.kind, resolution.error.message)

        notifications = list(resolution.notifications)
        self.blocks.extend(resolution.blocks)

        if resolution.sequence_id:
            outcome = self.sequences.run(location, resolution.sequence_id, self.state)
            self.blocks.extend(outcome.blocks)
            self.actions = outcome.actions
            notifications.extend(outcome.notifications)
            address = self.state.current_location
            if resolution.state_changed and location is not None and not self.state.is_locked(address):
                logger.debug(f"[Session {self.id[:8]}] Re-entering {address} after sequence")
                return self._enter(address, location, notifications)  # type: ignore[arg-type]
            return self._result(notifications)

        if resolution.ends_interaction:
            self.actions = [ActionView.leave()] if resolution.offer_leave else []
        elif resolution.state_changed:
            self._redraw_flat_actions(location)
        return self._result(notifications)

    def _take_hint(self, action_id: str) -> RenderResult:
        outcome = self.leads.take_hint(action_id, self.state)
        if outcome.error is not None:
            return self._reject(outcome.error.kind, outcome.error.message)

        if self.blocks:
            self.blocks.append(ContentBlock.separator())
        self.blocks.extend(outcome.blocks)
        self._redraw_flat_actions(self.repository.get_location(self.state.current_location))
        return self._result(outcome.notifications)

    def _redraw_flat_actions(self, location: Optional[Location]) -> None:
        """Redraw the location's top-level actions; condition-derived actions are not re-evaluated"""
        if location is None:
            return
        logger.debug(f"[Session {self.id[:8]}] Re-rendering actions")
        self.actions = self.presenter.present_all(location.actions, self.state)

    # ==================== Read-only views ====================

    def snapshot(self) -> StateSnapshot:
        return self.state.snapshot()

    def directory(self) -> List[DistrictGroup]:
        return build_directory(self.repository.addresses, self.settings.district_order, self.state)

    def summary(self) -> CaseSummaryReport:
        return build_summary(
            self.repository.case,
            self.state.leads,
            default_canonical_leads=self.settings.default_canonical_leads,
            penalty_per_lead=self.settings.lead_penalty,
        )
