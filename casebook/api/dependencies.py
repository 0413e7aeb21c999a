"""
Shared dependencies for the API routers.
"""

from fastapi import HTTPException

from casebook.config import settings
from casebook.data.loader import CaseRepository

# Loaded once at application startup
repository = CaseRepository.from_settings(settings)


def get_repository() -> CaseRepository:
    return repository


def require_loaded(repo: CaseRepository) -> None:
    """Refuse to serve until case data is available"""
    if not repo.loaded:
        raise HTTPException(
            status_code=503,
            detail=repo.load_error or "Case data is not loaded",
        )
