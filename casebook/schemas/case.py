"""
Case document schema definitions
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CaseLead(BaseModel):
    """A canonical lead followed in the reference solution"""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Lead label, usually an address")


class CaseSummaryData(BaseModel):
    """Reference solution used by the end-of-case summary"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    case_description: Optional[str] = None
    leads: List[CaseLead] = Field(default_factory=list)
    canonical_leads: Optional[int] = Field(None, alias="holmesLeads")


class CaseData(BaseModel):
    """Introduction, outro and summary for a case"""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    title: Optional[str] = Field(None, alias="case title")
    date: Optional[str] = None
    intro: Optional[str] = None
    outro: Optional[str] = None
    case_summary: Optional[CaseSummaryData] = None
