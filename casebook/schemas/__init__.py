"""
Schemas and validation for the Casebook engine
"""

from .case import CaseData, CaseLead, CaseSummaryData
from .location import (
    LETTER_KEY,
    Action,
    AlwaysRule,
    Condition,
    ConditionalText,
    Consequences,
    Effect,
    FlagRule,
    LetterRule,
    Location,
    Prompt,
    Rule,
    Sequence,
    UnknownRule,
)
from .render import (
    LEAVE_ACTION_ID,
    ActionView,
    ContentBlock,
    EngineError,
    ErrorKind,
    Notification,
    RenderResult,
    StateSnapshot,
)
from .validation import (
    validate_case_data,
    validate_json_schema,
    validate_location,
    validate_locations,
)

__all__ = [
    # Location data
    "LETTER_KEY",
    "Location",
    "Action",
    "Consequences",
    "Condition",
    "ConditionalText",
    "Effect",
    "Prompt",
    "Sequence",
    # Rules
    "Rule",
    "AlwaysRule",
    "LetterRule",
    "FlagRule",
    "UnknownRule",
    # Case data
    "CaseData",
    "CaseLead",
    "CaseSummaryData",
    # Presentation script
    "LEAVE_ACTION_ID",
    "ActionView",
    "ContentBlock",
    "EngineError",
    "ErrorKind",
    "Notification",
    "RenderResult",
    "StateSnapshot",
    # Validation functions
    "validate_json_schema",
    "validate_location",
    "validate_locations",
    "validate_case_data",
]
