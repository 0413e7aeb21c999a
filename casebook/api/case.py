"""
Case data API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from casebook.api.dependencies import get_repository, require_loaded
from casebook.config import settings
from casebook.data.loader import CaseRepository
from casebook.engine.text import TextProcessor
from casebook.engine.validator import CaseValidator
from casebook.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


class CaseInfoResponse(BaseModel):
    title: Optional[str] = None
    date: Optional[str] = None
    intro: str = ""
    location_count: int = 0


class CaseValidationResponse(BaseModel):
    is_valid: bool
    issues: List[str]


@router.get("/", response_model=CaseInfoResponse)
async def get_case(repo: CaseRepository = Depends(get_repository)):
    """Title, date and introduction of the loaded case"""
    require_loaded(repo)
    case = repo.case
    return CaseInfoResponse(
        title=case.title if case else None,
        date=TextProcessor.inline(case.date) if case else None,
        intro=TextProcessor.inline(case.intro) if case else "",
        location_count=len(repo.addresses),
    )


@router.get("/validation", response_model=CaseValidationResponse)
async def validate_case(repo: CaseRepository = Depends(get_repository)):
    """Authoring-defect report for the loaded case data"""
    require_loaded(repo)
    is_valid, issues = CaseValidator(settings).validate_bundle(repo.bundle)  # type: ignore[arg-type]
    logger.info(f"[API] Case validation: {len(issues)} issues")
    return CaseValidationResponse(is_valid=is_valid, issues=issues)
