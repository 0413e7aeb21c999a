"""
Location schema definitions

Location data is authored as camelCase JSON (``circlesLetter``,
``onSuccess``, ``promptIfFalse``...). Models accept the authored keys
through aliases and expose snake_case attributes. All models are frozen:
location data is never mutated at runtime.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

FlagValue = Union[bool, str]

# Flat update records mix flags with the reserved letter key
LETTER_KEY = "circlesLetter"
Updates = Dict[str, FlagValue]


class LocationModel(BaseModel):
    """Base for authored location data"""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class Consequences(LocationModel):
    """Consequences fired by an action, applied in a fixed order"""

    sets_flag: Optional[Dict[str, FlagValue]] = Field(None, alias="setsFlag")
    locks_location: bool = Field(False, alias="locksLocation")
    records_choice: Optional[str] = Field(None, alias="recordsChoice")
    adds_text: Optional[str] = Field(None, alias="addsText")
    triggers_sequence: Optional[str] = Field(None, alias="triggersSequence")
    ends_interaction: bool = Field(False, alias="endsInteraction")


class Action(LocationModel):
    """Player-triggerable action, optionally grouping choices"""

    id: str = Field("", description="Dispatch key")
    text: str = Field("", description="Button label, or group prompt for choices")
    choices: List["Action"] = Field(default_factory=list)
    hide_if_flag: Optional[str] = Field(None, alias="hideIfFlag")
    hide_prompt_if_flag: Optional[str] = Field(None, alias="hidePromptIfFlag")
    disable_if_flag: Optional[str] = Field(None, alias="disableIfFlag")
    disabled_text: Optional[str] = Field(None, alias="disabledText")
    consequences: Optional[Consequences] = None

    def effective_consequences(self, parent: Optional["Action"] = None) -> Consequences:
        """A choice without its own consequences inherits its parent's"""
        if self.consequences is not None:
            return self.consequences
        if parent is not None and parent.consequences is not None:
            return parent.consequences
        return Consequences()


class Prompt(LocationModel):
    """Failure-branch prompt with a stable logical id"""

    id: Optional[str] = None
    text: str = ""
    hide_if_flag: Optional[str] = Field(None, alias="hideIfFlag")


class AlwaysRule(BaseModel):
    kind: Literal["always"] = "always"


class LetterRule(BaseModel):
    kind: Literal["letter"] = "letter"
    letter: str


class FlagRule(BaseModel):
    kind: Literal["flag"] = "flag"
    flag: str


class UnknownRule(BaseModel):
    kind: Literal["unknown"] = "unknown"
    check: str


Rule = Annotated[
    Union[AlwaysRule, LetterRule, FlagRule, UnknownRule], Field(discriminator="kind")
]


class Effect(LocationModel):
    """Success branch of a condition"""

    text: Optional[str] = None
    updates: Optional[Updates] = None
    follow_up_conditions: List["Condition"] = Field(
        default_factory=list, alias="followUpConditions"
    )
    actions: List[Action] = Field(default_factory=list)
    suppresses_prompts: List[str] = Field(
        default_factory=list, alias="suppressesPrompts"
    )


class Condition(LocationModel):
    """Predicate descriptor with a success effect and a failure prompt"""

    check: Optional[str] = None
    letter: Optional[str] = None
    on_success: Optional[Effect] = Field(None, alias="onSuccess")
    prompt_if_false: Optional[Union[str, Prompt]] = Field(None, alias="promptIfFalse")

    @property
    def rule(self) -> Union[AlwaysRule, LetterRule, FlagRule, UnknownRule]:
        if not self.check:
            return AlwaysRule()
        if self.check == "requiresLetter" and self.letter:
            return LetterRule(letter=self.letter)
        if self.check.startswith("requiresLetter:") and len(self.check) > len("requiresLetter:"):
            return LetterRule(letter=self.check[len("requiresLetter:"):])
        if self.check.startswith("flag:") and len(self.check) > len("flag:"):
            return FlagRule(flag=self.check[len("flag:"):])
        return UnknownRule(check=self.check)

    @property
    def failure_prompt(self) -> Optional[Prompt]:
        if self.prompt_if_false is None:
            return None
        if isinstance(self.prompt_if_false, str):
            return Prompt(text=self.prompt_if_false)
        return self.prompt_if_false


class ConditionalText(LocationModel):
    """Legacy conditional passage"""

    requires_letter: Optional[str] = Field(None, alias="requiresLetter")
    requires_flag: Optional[str] = Field(None, alias="requiresFlag")
    text: Optional[str] = None
    prompt: Optional[str] = None
    prompt_if_false: Optional[str] = Field(None, alias="promptIfFalse")
    updates: Optional[Updates] = None
    updates_game_state: Optional[Updates] = Field(None, alias="updatesGameState")
    location_lock: bool = Field(False, alias="locationLock")
    actions: List[Action] = Field(default_factory=list)

    @property
    def effective_updates(self) -> Optional[Updates]:
        return self.updates_game_state or self.updates


class Sequence(LocationModel):
    """Location-local content block triggered by an action"""

    text: Optional[str] = None
    updates: Optional[Updates] = None
    actions: List[Action] = Field(default_factory=list)
    ends_interaction: Optional[bool] = Field(None, alias="endsInteraction")


class Location(LocationModel):
    """A single address in the case"""

    text: Optional[str] = None
    base_text: Optional[str] = Field(None, alias="baseText")
    circles_letter: Optional[str] = Field(None, alias=LETTER_KEY)
    updates: Optional[Updates] = None
    actions: List[Action] = Field(default_factory=list)
    conditions: List[Condition] = Field(default_factory=list)
    conditional_text: List[ConditionalText] = Field(
        default_factory=list, alias="conditionalText"
    )
    follow_up_conditions: List[Condition] = Field(
        default_factory=list, alias="followUpConditions"
    )
    sequences: Dict[str, Sequence] = Field(default_factory=dict)

    @field_validator("circles_letter")
    @classmethod
    def normalize_letter(cls, v):
        return v.upper() if v else v

    @property
    def body(self) -> str:
        return self.text or self.base_text or ""


Action.model_rebuild()
Effect.model_rebuild()
