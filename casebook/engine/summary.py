"""
End-of-case summary: compares the player's leads with the reference
solution's canonical leads.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from casebook.engine.text import TextProcessor
from casebook.schemas.case import CaseData


class CaseSummaryReport(BaseModel):
    outro_html: str = ""
    case_description: str = ""
    canonical_leads: List[str] = Field(default_factory=list)
    canonical_lead_count: int = 0
    player_leads: int = 0
    lead_penalty: int = 0


def build_summary(
    case: Optional[CaseData],
    player_leads: int,
    default_canonical_leads: int = 4,
    penalty_per_lead: int = 5,
) -> CaseSummaryReport:
    """Build the summary record; each lead over the canonical count costs penalty_per_lead"""
    summary = case.case_summary if case else None

    canonical_count = default_canonical_leads
    if summary and summary.canonical_leads is not None:
        canonical_count = summary.canonical_leads

    description = TextProcessor.label(summary.case_description if summary else None)
    if not description:
        description = f"Holmes solved this case in {canonical_count} leads."

    extra_leads = player_leads - canonical_count
    return CaseSummaryReport(
        outro_html=TextProcessor.inline(case.outro if case else None),
        case_description=description,
        canonical_leads=[TextProcessor.label(lead.name) for lead in summary.leads] if summary else [],
        canonical_lead_count=canonical_count,
        player_leads=player_leads,
        lead_penalty=extra_leads * penalty_per_lead if extra_leads > 0 else 0,
    )
