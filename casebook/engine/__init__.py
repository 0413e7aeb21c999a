"""
Core engine components for the Casebook engine
"""

from .composer import Composition, NarrativeComposer
from .conditions import ConditionEvaluator
from .leads import LeadPolicy
from .resolver import ActionResolver, Resolution
from .sequences import SequenceRunner
from .session import GameSession
from .state import StateStore
from .validator import CaseValidator

__all__ = [
    "StateStore",
    "ConditionEvaluator",
    "NarrativeComposer",
    "Composition",
    "ActionResolver",
    "Resolution",
    "SequenceRunner",
    "LeadPolicy",
    "GameSession",
    "CaseValidator",
]
