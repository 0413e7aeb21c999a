"""
Location directory grouped by district, for the renderer's address picker.

Addresses follow the "<number> <DISTRICT>" convention ("22 NW").
"""

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from casebook.engine.state import StateStore
from casebook.utils.logger import get_logger

logger = get_logger(__name__)


class DirectoryEntry(BaseModel):
    address: str
    number: int
    visited: bool = False
    locked: bool = False


class DistrictGroup(BaseModel):
    district: str
    entries: List[DirectoryEntry] = Field(default_factory=list)


def parse_address(address: str) -> Optional[Tuple[int, str]]:
    """Split an address into (number, district); None when it does not parse"""
    parts = address.split()
    if len(parts) < 2:
        return None
    try:
        number = int(parts[0])
    except ValueError:
        return None
    return number, parts[-1].upper()


def build_directory(
    addresses: Iterable[str],
    district_order: List[str],
    state: Optional[StateStore] = None,
) -> List[DistrictGroup]:
    """Group addresses by district in the configured order, numerically sorted"""
    by_district: Dict[str, List[DirectoryEntry]] = {}
    for address in addresses:
        parsed = parse_address(address)
        if parsed is None:
            logger.warning(f"[Directory] Could not parse district for address: {address}")
            continue
        number, district = parsed
        by_district.setdefault(district, []).append(
            DirectoryEntry(
                address=address,
                number=number,
                visited=state.is_visited(address) if state else False,
                locked=state.is_locked(address) if state else False,
            )
        )

    groups = []
    for district in district_order:
        entries = by_district.get(district.upper())
        if entries:
            groups.append(
                DistrictGroup(district=district.upper(), entries=sorted(entries, key=lambda e: e.number))
            )
    return groups
