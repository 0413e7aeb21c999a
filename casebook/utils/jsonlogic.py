"""
JSONLogic evaluator for location rule predicates
"""

from typing import Any, Dict

import json_logic as jsonlogic

# Operators the rule compiler emits
SUPPORTED_OPERATORS = {"in", "===", "!!", "var", "and", "or", "!"}


class JSONLogicEvaluator:
    """Evaluates JSONLogic expressions against a state context"""

    def __init__(self):
        self.evaluator = jsonlogic

    def evaluate(self, expression: Any, context: Dict[str, Any]) -> Any:
        """Evaluate a JSONLogic expression against context"""

        try:
            return self.evaluator.jsonLogic(expression, context)
        except Exception as e:
            raise ValueError(f"JSONLogic evaluation failed: {e}")

    def evaluate_condition(self, condition: Any, context: Dict[str, Any]) -> bool:
        """Evaluate a condition and return boolean result"""

        return self.evaluate(condition, context) is True

    def validate_expression(self, expression: Any) -> bool:
        """Validate that an expression is a JSONLogic literal or a supported operation"""

        if isinstance(expression, bool):
            return True
        if not isinstance(expression, dict) or len(expression) != 1:
            return False

        operator = next(iter(expression))
        return operator in SUPPORTED_OPERATORS
