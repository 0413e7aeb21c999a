"""
Narrative composer - turns a location's declarative tree into a
presentation script.

Processing order for a location:
1. Entry letter grant
2. Heading and base text
3. Flat updates
4. Top-level actions
5. Condition dispatch; the first non-empty source wins:
   conditions -> legacy conditionalText -> top-level followUpConditions
6. Actions collected during dispatch, after the top-level actions

State mutations are applied as the pass runs, so a letter granted in
step 1 satisfies a condition evaluated in step 5 of the same pass.
"""

import html
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from casebook.engine.actions import ActionPresenter
from casebook.engine.conditions import ConditionEvaluator
from casebook.engine.leads import LeadPolicy
from casebook.engine.state import StateStore
from casebook.engine.text import TextProcessor
from casebook.engine.updates import apply_updates, grant_letter
from casebook.schemas.location import (
    Action,
    Condition,
    ConditionalText,
    Effect,
    Location,
    Prompt,
)
from casebook.schemas.render import ActionView, ContentBlock, Notification
from casebook.utils.logger import get_logger

logger = get_logger(__name__)

NO_SEPARATOR_AFTER = {"heading", "separator"}


class Composition(BaseModel):
    """Output of one composer pass"""

    blocks: List[ContentBlock] = Field(default_factory=list)
    actions: List[ActionView] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)


class ComposerPass:
    """Accumulator for a single composition"""

    def __init__(self, address: str, state: StateStore):
        self.address = address
        self.state = state
        self.blocks: List[ContentBlock] = []
        self.notifications: List[Notification] = []
        self.collected: List[Action] = []
        self.suppressed: Set[str] = set()
        self.prompt_hide_flags: Dict[str, str] = {}
        self._prompt_count = 0

    def notify(self, notice: Optional[Notification]) -> None:
        if notice is not None:
            self.notifications.append(notice)

    def add_section(self, html_text: str, kind: str = "text", block_id: Optional[str] = None) -> None:
        if not html_text:
            return
        if self.blocks:
            last = self.blocks[-1]
            consecutive_prompts = kind == "prompt" and last.kind == "prompt"
            if last.kind not in NO_SEPARATOR_AFTER and not consecutive_prompts:
                self.blocks.append(ContentBlock.separator())
        self.blocks.append(ContentBlock(kind=kind, html=html_text, block_id=block_id))  # type: ignore[arg-type]

    def prompt_id(self, prompt: Prompt) -> Optional[str]:
        if prompt.id:
            return prompt.id
        if not prompt.hide_if_flag:
            return None
        self._prompt_count += 1
        return f"{self.address}-prompt-{self._prompt_count}"

    def visible_blocks(self) -> List[ContentBlock]:
        """Drop suppressed prompts and the separators they leave dangling"""
        hidden = set(self.suppressed)
        for block_id, flag in self.prompt_hide_flags.items():
            if self.state.flag_is_truthy(flag):
                hidden.add(block_id)

        visible: List[ContentBlock] = []
        for block in self.blocks:
            if block.block_id is not None and block.block_id in hidden:
                continue
            if block.kind == "separator" and (not visible or visible[-1].kind in NO_SEPARATOR_AFTER):
                continue
            visible.append(block)
        while visible and visible[-1].kind == "separator":
            visible.pop()
        return visible


class NarrativeComposer:
    """Walks a location and produces content blocks plus actions"""

    def __init__(
        self,
        evaluator: ConditionEvaluator,
        presenter: ActionPresenter,
        text: TextProcessor,
    ):
        self.evaluator = evaluator
        self.presenter = presenter
        self.text = text

    def compose(self, address: str, location: Location, state: StateStore) -> Composition:
        """Compose a location for the current state, applying its mutations"""
        run = ComposerPass(address, state)
        logger.debug(f"[Composer] Composing {address}")

        # Entry letter
        run.notify(grant_letter(state, location.circles_letter))

        # Heading and base text
        run.blocks.append(ContentBlock(kind="heading", html=f"<h1>{html.escape(address)}</h1>"))
        run.add_section(self.text.process(location.body))

        # Flat updates
        run.notifications.extend(apply_updates(state, location.updates))

        # Top-level actions
        top_actions = self.presenter.present_all(location.actions, state)

        # Condition dispatch
        if location.conditions:
            logger.debug(f"[Composer] Processing conditions for {address}")
            self.run_conditions(location.conditions, run)
        elif location.conditional_text:
            logger.warning(f"[Composer] Location {address} uses deprecated 'conditionalText'")
            self.run_legacy(location.conditional_text, run)
        elif location.follow_up_conditions and not location.actions:
            logger.debug(f"[Composer] Processing top-level followUpConditions for {address}")
            self.run_conditions(location.follow_up_conditions, run)

        collected = self.presenter.present_all(run.collected, state)
        if collected and top_actions:
            collected[0].separator_before = True

        composition = Composition(
            blocks=run.visible_blocks(),
            actions=top_actions + collected,
            notifications=run.notifications,
        )
        logger.verbose(  # type: ignore[attr-defined]
            f"[Composer] {address}: {len(composition.blocks)} blocks, "
            f"{len(composition.actions)} actions"
        )
        return composition

    # ==================== Conditions ====================

    def run_conditions(self, conditions: List[Condition], run: ComposerPass) -> bool:
        """Evaluate each condition in order; returns True if any was met"""
        any_met = False
        for condition in conditions:
            if self.evaluator.evaluate(condition, run.state):
                any_met = True
                self.run_effect(condition.on_success, run)
            else:
                self.emit_prompt(condition.failure_prompt, run)
        return any_met

    def run_effect(self, effect: Optional[Effect], run: ComposerPass) -> None:
        if effect is None:
            return
        if effect.text:
            run.add_section(self.text.process(effect.text))
        run.notifications.extend(apply_updates(run.state, effect.updates))
        run.suppressed.update(effect.suppresses_prompts)
        if effect.follow_up_conditions:
            self.run_conditions(effect.follow_up_conditions, run)
        run.collected.extend(effect.actions)

    def emit_prompt(self, prompt: Optional[Prompt], run: ComposerPass) -> None:
        if prompt is None or not prompt.text.strip():
            return
        processed = self.text.process_prompt(prompt.text)
        block_id = run.prompt_id(prompt)
        if block_id and prompt.hide_if_flag:
            run.prompt_hide_flags[block_id] = prompt.hide_if_flag
        run.add_section(processed, kind="prompt", block_id=block_id)

    # ==================== Legacy conditionalText ====================

    def run_legacy(self, entries: List[ConditionalText], run: ComposerPass) -> None:
        for entry in entries:
            if self.evaluator.evaluate_legacy(entry, run.state):
                if entry.text:
                    run.add_section(self.text.process(entry.text))
                elif entry.prompt and entry.prompt.strip():
                    run.add_section(self.text.process_prompt(entry.prompt), kind="prompt")

                updates = entry.effective_updates
                if updates:
                    logger.warning("[Composer] Applying updates from deprecated 'conditionalText'")
                    run.notifications.extend(apply_updates(run.state, updates))

                if entry.location_lock:
                    run.notify(LeadPolicy.lock(run.state.current_location, run.state))

                run.collected.extend(entry.actions)
            else:
                failure = entry.prompt_if_false or entry.prompt
                if failure and failure.strip():
                    run.add_section(self.text.process_prompt(failure), kind="prompt")
