"""
Condition evaluation.

A condition's ``check`` descriptor is parsed into a Rule (always, letter,
flag or unknown) which compiles to a JSONLogic expression evaluated
against a read-only context built from the State Store. Evaluation never
mutates state, so it can be called speculatively.
"""

from typing import Any, Dict, Optional, Union

from casebook.engine.state import StateStore
from casebook.schemas.location import (
    AlwaysRule,
    Condition,
    ConditionalText,
    FlagRule,
    LetterRule,
    UnknownRule,
)
from casebook.utils.jsonlogic import JSONLogicEvaluator
from casebook.utils.logger import get_logger

logger = get_logger(__name__)

AnyRule = Union[AlwaysRule, LetterRule, FlagRule, UnknownRule]


def compile_rule(rule: AnyRule) -> Optional[Any]:
    """Translate a rule into JSONLogic; unknown rules have no expression"""
    if isinstance(rule, AlwaysRule):
        return True
    if isinstance(rule, LetterRule):
        return {"in": [rule.letter.upper(), {"var": "letters"}]}
    if isinstance(rule, FlagRule):
        return {"===": [{"var": "value"}, True]}
    return None


def state_context(state: StateStore) -> Dict[str, Any]:
    """Build the evaluation context; a copy, never the live store"""
    return {"letters": sorted(state.letters), "flags": dict(state.flags)}


def rule_context(rule: AnyRule, state: StateStore) -> Dict[str, Any]:
    """
    Context a compiled rule is evaluated against.

    Flag names may contain dots, which JSONLogic ``var`` would read as a
    path, so a flag rule sees only its own value under ``value``.
    """
    if isinstance(rule, FlagRule):
        return {"value": state.flag(rule.flag)}
    return state_context(state)


class ConditionEvaluator:
    """Pure predicate engine over a State Store"""

    def __init__(self, evaluator: Optional[JSONLogicEvaluator] = None):
        self.logic = evaluator or JSONLogicEvaluator()

    def evaluate_rule(self, rule: AnyRule, state: StateStore) -> bool:
        if isinstance(rule, UnknownRule):
            logger.warning(f"[Conditions] Unknown condition check type: {rule.check}")
            return False

        expression = compile_rule(rule)
        result = self.logic.evaluate_condition(expression, rule_context(rule, state))
        logger.verbose(f"[Conditions] {rule.kind} rule {expression} -> {result}")  # type: ignore[attr-defined]
        return result

    def evaluate(self, condition: Condition, state: StateStore) -> bool:
        """True when the condition's success branch should run"""
        return self.evaluate_rule(condition.rule, state)

    def evaluate_legacy(self, entry: ConditionalText, state: StateStore) -> bool:
        """
        Legacy conditionalText predicate.

        Met when no letter is required or the letter is owned; otherwise
        met when a required flag is truthy (not strictly True).
        """
        if not entry.requires_letter or state.has_letter(entry.requires_letter):
            return True
        if entry.requires_flag:
            expression = {"!!": [{"var": "value"}]}
            return self.logic.evaluate_condition(expression, {"value": state.flag(entry.requires_flag)})
        return False
