"""
Player state for a single play session.

The store is owned by a GameSession and passed by reference to every
engine call. Letters are only ever added, the lead counter only ever
grows, and a locked address stays locked for the life of the session.
"""

from typing import Any, Dict, Iterable, Optional, Set, Union

from casebook.schemas.render import StateSnapshot
from casebook.utils.logger import get_logger

logger = get_logger(__name__)

FlagValue = Union[bool, str]


class StateStore:
    """Mutable progress of one player"""

    def __init__(self, alphabet: Optional[Iterable[str]] = None):
        self.alphabet: Optional[Set[str]] = (
            {letter.upper() for letter in alphabet} if alphabet is not None else None
        )
        self.visited: Set[str] = set()
        self.locked: Set[str] = set()
        self.letters: Set[str] = set()
        self.flags: Dict[str, FlagValue] = {}
        self.leads: int = 0
        self.current_location: Optional[str] = None

    # ==================== Letters ====================

    def has_letter(self, letter: str) -> bool:
        return letter.upper() in self.letters

    def grant_letter(self, letter: str) -> bool:
        """Add a letter; returns False when it was already owned or is not in the alphabet"""
        letter = letter.upper()
        if self.alphabet is not None and letter not in self.alphabet:
            logger.warning(f"[State] Ignoring letter outside the alphabet: {letter}")
            return False
        if letter in self.letters:
            return False
        self.letters.add(letter)
        logger.debug(f"[State] Letter granted: {letter}")
        return True

    # ==================== Flags ====================

    def flag(self, name: str) -> Optional[FlagValue]:
        return self.flags.get(name)

    def flag_is_true(self, name: str) -> bool:
        return self.flags.get(name) is True

    def flag_is_truthy(self, name: Optional[str]) -> bool:
        return bool(name) and bool(self.flags.get(name))

    def set_flag(self, name: str, value: FlagValue) -> None:
        self.flags[name] = value

    def merge_flags(self, values: Dict[str, FlagValue]) -> None:
        self.flags.update(values)
        logger.debug(f"[State] Flags merged: {values}")

    # ==================== Locations ====================

    def is_visited(self, address: str) -> bool:
        return address in self.visited

    def mark_visited(self, address: str) -> bool:
        """Record a visit; returns True on the first visit only"""
        if address in self.visited:
            return False
        self.visited.add(address)
        return True

    def is_locked(self, address: Optional[str]) -> bool:
        return address is not None and address in self.locked

    def lock(self, address: str) -> bool:
        """Lock an address; re-locking is a no-op returning False"""
        if address in self.locked:
            return False
        self.locked.add(address)
        logger.debug(f"[State] Location locked: {address}")
        return True

    # ==================== Leads ====================

    def increment_leads(self) -> int:
        self.leads += 1
        return self.leads

    def snapshot(self) -> StateSnapshot:
        """Copy of the store safe to hand to a renderer"""
        flags: Dict[str, Any] = dict(self.flags)
        return StateSnapshot(
            current_location=self.current_location,
            visited=sorted(self.visited),
            locked=sorted(self.locked),
            letters=sorted(self.letters),
            flags=flags,
            leads=self.leads,
        )
