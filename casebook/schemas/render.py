"""
Presentation script definitions returned to the renderer
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from casebook.schemas.location import Consequences

BlockKind = Literal["heading", "text", "prompt", "separator"]
Severity = Literal["info", "success", "error"]

LEAVE_ACTION_ID = "leave"


class ErrorKind(str, Enum):
    """Core error taxonomy. Every kind leaves the State Store untouched."""

    DATA_MISSING = "data_missing"
    LOCATION_LOCKED = "location_locked"
    INVALID_CHOICE_REPEAT = "invalid_choice_repeat"
    HINT_UNAVAILABLE = "hint_unavailable"
    NOT_LOADED = "not_loaded"


class EngineError(BaseModel):
    """Descriptive error value surfaced to the caller"""

    kind: ErrorKind
    message: str


class ContentBlock(BaseModel):
    """One HTML-safe fragment of the presentation script"""

    kind: BlockKind = "text"
    html: str = ""
    block_id: Optional[str] = Field(None, description="Stable logical id for prompts")

    @classmethod
    def separator(cls) -> "ContentBlock":
        return cls(kind="separator", html="<hr>")


class ActionView(BaseModel):
    """An action as presented to the player"""

    id: str
    label: str
    disabled: bool = False
    disabled_reason: Optional[str] = None
    prompt: Optional[str] = Field(None, description="Group prompt shown above choices")
    choices: Optional[List["ActionView"]] = None
    separator_before: bool = False
    consequences: Consequences = Field(default_factory=Consequences, exclude=True)

    @classmethod
    def leave(cls) -> "ActionView":
        return cls(id=LEAVE_ACTION_ID, label="Leave")

    def dispatchable(self) -> List["ActionView"]:
        """Flatten groups into the views that can actually be fired"""
        if self.choices is None:
            return [self]
        return list(self.choices)


class Notification(BaseModel):
    """Transient message for the renderer's notification area"""

    message: str
    severity: Severity = "info"


class RenderResult(BaseModel):
    """Snapshot of the current display after a core call"""

    location: Optional[str] = None
    content_blocks: List[ContentBlock] = Field(default_factory=list)
    actions: List[ActionView] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    error: Optional[EngineError] = None
    leads: int = 0
    letters: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class StateSnapshot(BaseModel):
    """Read-only view of a State Store"""

    current_location: Optional[str] = None
    visited: List[str] = Field(default_factory=list)
    locked: List[str] = Field(default_factory=list)
    letters: List[str] = Field(default_factory=list)
    flags: dict = Field(default_factory=dict)
    leads: int = 0


ActionView.model_rebuild()
