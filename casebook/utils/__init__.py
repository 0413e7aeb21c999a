"""
Utility modules for the Casebook engine
"""

from .jsonlogic import JSONLogicEvaluator
from .logger import VERBOSE, get_logger, setup_logging

__all__ = [
    "JSONLogicEvaluator",
    "VERBOSE",
    "get_logger",
    "setup_logging",
]
