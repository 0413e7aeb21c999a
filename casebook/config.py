"""
Configuration management for the Casebook engine
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_HINTS: Dict[str, str] = {
    "F": (
        'Hint (F): "Having difficulty finding our racing miscreant? Have you '
        "considered that where he is going is less important than where he has "
        'been? Even less important than who he actually is, in my opinion."'
    ),
    "T": (
        'Hint (T): "Have you spoken to the formidable woman who runs the '
        "orphanage? If not, I suggest you locate her quickly. If you are "
        "struggling to identify those items you are carrying, perhaps our friend "
        'H.R. Murray can set you on the correct path."'
    ),
    "G": (
        'Hint (G): "I fear you will struggle if you are attempting to locate '
        "Lord Goodwin; if you look in the newspaper you will find that he passed "
        "away last week. Now ask yourself; is someone trying to impersonate Lord "
        'Harold Goodwin, or are they trying to achieve something else?"'
    ),
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Case data
    data_dir: str = Field(default="data")
    locations_file: str = Field(default="locations.json")
    case_file: str = Field(default="caseIntro.json")

    # Game rules
    letters: List[str] = Field(
        default_factory=lambda: ["B", "C", "E", "F", "G", "H", "R", "T"],
        description="Fixed alphabet of collectible letters",
    )
    free_leads: List[str] = Field(
        default_factory=lambda: ["35 NW", "45 NW", "80 NW", "81 NW", "82 NW", "83 NW"],
        description="Addresses whose first visit does not count as a lead",
    )
    hints: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HINTS),
        description="Hint text per letter, offered through hint_<LETTER> actions",
    )
    # Placeholder token -> {"label": ..., "target": ...}
    text_placeholders: Dict[str, Dict[str, str]] = Field(
        default_factory=lambda: {
            "(Image: Pawn Slip Fragment)": {
                "label": "Burn piece of paper",
                "target": "media/images/clue.png",
            }
        }
    )
    district_order: List[str] = Field(
        default_factory=lambda: ["WC", "SW", "NW", "N", "EC", "E", "SE", "S"]
    )
    lead_penalty: int = Field(default=5, ge=0)
    default_canonical_leads: int = Field(default=4, ge=0)

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)

    # Logging
    log_level: Literal["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"] = (
        Field(default="INFO")
    )
    log_file: Optional[str] = Field(default=None)
    # Per-module overrides, e.g. {"casebook.engine.composer": "VERBOSE"}
    module_log_levels: Dict[str, str] = Field(default_factory=dict)

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}


# Global settings instance
settings = Settings()
