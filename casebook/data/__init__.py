"""
Case data loading for Casebook.
"""

from .loader import (
    CaseBundle,
    CaseDataLoadError,
    CaseRepository,
    load_case_bundle,
    parse_case_bundle,
)

__all__ = [
    "CaseBundle",
    "CaseDataLoadError",
    "CaseRepository",
    "load_case_bundle",
    "parse_case_bundle",
]
