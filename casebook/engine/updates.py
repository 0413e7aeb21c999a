"""
Shared state mutations used by the composer, resolver and sequence runner.
"""

from typing import List, Optional

from casebook.engine.state import StateStore
from casebook.schemas.location import LETTER_KEY, Updates
from casebook.schemas.render import Notification


def grant_letter(state: StateStore, letter: Optional[str]) -> Optional[Notification]:
    """Grant a letter once; the notice is only produced on the first grant"""
    if not letter or not isinstance(letter, str):
        return None
    if state.grant_letter(letter):
        return Notification(message=f"Found Letter {letter.upper()}!", severity="success")
    return None


def apply_updates(state: StateStore, updates: Optional[Updates]) -> List[Notification]:
    """Grant the reserved letter key, then merge every other key into flags"""
    if not updates:
        return []

    notifications: List[Notification] = []
    notice = grant_letter(state, updates.get(LETTER_KEY))  # type: ignore[arg-type]
    if notice is not None:
        notifications.append(notice)

    flags = {key: value for key, value in updates.items() if key != LETTER_KEY}
    if flags:
        state.merge_flags(flags)
    return notifications


def lock_location(state: StateStore, address: Optional[str]) -> Optional[Notification]:
    """Lock an address once; re-locking produces no notice"""
    if not address or not state.lock(address):
        return None
    return Notification(message=f"{address} is now locked.", severity="info")
