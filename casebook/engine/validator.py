"""
Case validator - lints loaded case data for authoring defects
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from casebook.config import Settings, settings as default_settings
from casebook.data.loader import CaseBundle
from casebook.engine.conditions import compile_rule
from casebook.engine.directory import parse_address
from casebook.schemas.location import (
    Action,
    Condition,
    LetterRule,
    Location,
    UnknownRule,
)
from casebook.utils.jsonlogic import JSONLogicEvaluator
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class CaseValidator:
    """Validates case data against the engine's conventions"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        evaluator: Optional[JSONLogicEvaluator] = None,
    ):
        settings = settings or default_settings
        self.logic = evaluator or JSONLogicEvaluator()
        self.alphabet = {letter.upper() for letter in settings.letters}
        self.free_leads = list(settings.free_leads)
        self.hint_letters = {letter.upper() for letter in settings.hints}

    def validate_bundle(self, bundle: CaseBundle) -> Tuple[bool, List[str]]:
        """Validate every location; returns (is_valid, issues)"""
        issues: List[str] = []

        for address, location in bundle.locations.items():
            if parse_address(address) is None:
                issues.append(f"{address}: address does not follow '<number> <DISTRICT>'")
            issues.extend(f"{address}: {issue}" for issue in self.validate_location(location))

        for address in self.free_leads:
            if address not in bundle.locations:
                issues.append(f"Free lead {address} has no location data")

        for letter in self.hint_letters - self.alphabet:
            issues.append(f"Hint letter {letter} is outside the letter alphabet")

        return len(issues) == 0, issues

    def validate_location(self, location: Location) -> List[str]:
        issues: List[str] = []

        self._check_letter(location.circles_letter, "circlesLetter", issues)
        self._check_updates(location.updates, "updates", issues)

        actions = list(location.actions)
        for index, condition in enumerate(location.conditions):
            actions.extend(self._check_condition(condition, f"conditions[{index}]", issues))
        for index, condition in enumerate(location.follow_up_conditions):
            actions.extend(
                self._check_condition(condition, f"followUpConditions[{index}]", issues)
            )
        for index, entry in enumerate(location.conditional_text):
            self._check_letter(entry.requires_letter, f"conditionalText[{index}]", issues)
            self._check_updates(entry.effective_updates, f"conditionalText[{index}]", issues)
            actions.extend(entry.actions)
        for sequence_id, sequence in location.sequences.items():
            self._check_updates(sequence.updates, f"sequences.{sequence_id}", issues)
            actions.extend(sequence.actions)

        self._check_actions(actions, set(location.sequences), issues)
        return issues

    def _check_condition(self, condition: Condition, path: str, issues: List[str]) -> List[Action]:
        rule = condition.rule
        if isinstance(rule, UnknownRule):
            if rule.check in ("requiresLetter", "requiresLetter:"):
                issues.append(f"{path}: requiresLetter check without a letter")
            else:
                issues.append(f"{path}: unknown condition check type '{rule.check}'")
        else:
            expression = compile_rule(rule)
            if not self.logic.validate_expression(expression):
                issues.append(f"{path}: unsupported rule expression {expression}")
            if isinstance(rule, LetterRule):
                self._check_letter(rule.letter, path, issues)

        effect = condition.on_success
        if effect is None:
            return []
        self._check_updates(effect.updates, f"{path}.onSuccess", issues)
        actions = list(effect.actions)
        for index, follow_up in enumerate(effect.follow_up_conditions):
            actions.extend(
                self._check_condition(follow_up, f"{path}.followUpConditions[{index}]", issues)
            )
        return actions

    def _check_actions(self, actions: Iterable[Action], sequences: Set[str], issues: List[str]) -> None:
        seen: Dict[str, int] = {}
        for action in actions:
            for candidate in [action, *action.choices]:
                if not candidate.id or not candidate.text:
                    issues.append("action without id or text will not be shown")
                    continue
                seen[candidate.id] = seen.get(candidate.id, 0) + 1
                consequences = candidate.effective_consequences(
                    action if candidate is not action else None
                )
                sequence_id = consequences.triggers_sequence
                if sequence_id and sequence_id not in sequences:
                    issues.append(f"action {candidate.id}: unknown sequence '{sequence_id}'")

        for action_id, count in seen.items():
            if count > 1:
                issues.append(f"action id {action_id} is declared {count} times")

    def _check_updates(self, updates, path: str, issues: List[str]) -> None:
        if updates:
            self._check_letter(updates.get("circlesLetter"), f"{path}.circlesLetter", issues)

    def _check_letter(self, letter, path: str, issues: List[str]) -> None:
        if letter and str(letter).upper() not in self.alphabet:
            issues.append(f"{path}: letter {letter} is outside the letter alphabet")

    def log_issues(self, bundle: CaseBundle) -> List[str]:
        """Validate and log every issue as a warning"""
        is_valid, issues = self.validate_bundle(bundle)
        if is_valid:
            logger.info("[Validator] Case data passed validation")
        for issue in issues:
            logger.warning(f"[Validator] {issue}")
        return issues
