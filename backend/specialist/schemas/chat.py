"""Schemas for chat turn endpoints and the turn status record."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from specialist.schemas.proposal import ChangeProposal, ConfirmationChoice, ConfirmationOutcome


class FileContext(BaseModel):
    """Active editor file handed to the assistant as context."""

    name: str = Field(min_length=1)
    content: str = ""
    content_type: str = "plaintext"


class ChatTurnRequest(BaseModel):
    """One user utterance with optional editor context."""

    prompt: str = Field(min_length=1)
    command: str | None = None
    file: FileContext | None = None


class TurnStatus(str, Enum):
    """Terminal status of a chat turn."""

    COMPLETED = "completed"
    APPROVED = "approved"
    REVIEW_REQUESTED = "review_requested"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    NO_MODELS = "no_models"
    ERROR = "error"


class TurnErrorKind(str, Enum):
    """Classification of a failed model request."""

    PERMISSION_DENIED = "permission_denied"
    CONTENT_FILTERED = "content_filtered"
    GENERIC = "generic"


class ChatTurnResult(BaseModel):
    """Normalized completion record returned by every chat turn."""

    status: TurnStatus
    outcome: ConfirmationOutcome | None = None
    proposals: list[ChangeProposal] = Field(default_factory=list)
    error_kind: TurnErrorKind | None = None
    error_message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=lambda: {"command": ""})


class ChatTurnHttpRequest(ChatTurnRequest):
    """HTTP payload for a non-interactive chat turn."""

    decision: ConfirmationChoice | None = None


class OpenedDocument(BaseModel):
    """Document the assistant asked the host to display."""

    content: str
    content_type: str


class ChatTurnResponse(BaseModel):
    """Response payload for one HTTP chat turn."""

    result: ChatTurnResult
    markdown: str
    opened_documents: list[OpenedDocument] = Field(default_factory=list)
