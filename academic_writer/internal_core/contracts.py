from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ReferencingStyle = Literal["Harvard", "IEEE"]

REFERENCING_STYLES: tuple[str, ...] = ("Harvard", "IEEE")
DEFAULT_STYLE: ReferencingStyle = "Harvard"

GenerationErrorKind = Literal["validation", "configuration", "transport", "unknown"]


class HistoryItem(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int
    draft: str
    output: str
    style: ReferencingStyle
    timestamp: str


class PersistedState(BaseModel):
    """Everything written under the single storage key; loading/error flags never are."""

    model_config = ConfigDict(extra="forbid")

    style: ReferencingStyle = DEFAULT_STYLE
    draft: str = ""
    output: str = ""
    history: List[HistoryItem] = Field(default_factory=list)


class SessionView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    style: ReferencingStyle
    draft: str
    output: str
    is_loading: bool = False
    error: Optional[str] = None


class GenerationOutcomeView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ok: bool
    error_kind: Optional[GenerationErrorKind] = None
    error: Optional[str] = None
    history_item_id: Optional[int] = None


class GenerateRequest(BaseModel):
    draft: str = Field(max_length=200_000)
    style: ReferencingStyle
    instructions: str = Field(default="", max_length=8000)


class GenerateResponse(BaseModel):
    text: str


class GenerateErrorResponse(BaseModel):
    error: str
