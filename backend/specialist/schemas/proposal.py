"""Change proposal and confirmation schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeProposal(BaseModel):
    """One code edit suggested by the model, pending human approval."""

    model_config = ConfigDict(frozen=True)

    explanation: str = Field(min_length=1)
    new_code: str = Field(min_length=1)
    language: str = "text"
    file_path: str | None = None
    old_code: str | None = None


class ConfirmationChoice(str, Enum):
    """Options offered to the human when changes are proposed."""

    APPLY = "Apply"
    REVIEW_FIRST = "Review First"
    CANCEL = "Cancel"


class ConfirmationOutcome(str, Enum):
    """Resolved result of a confirmation prompt."""

    APPROVED = "approved"
    REVIEW_REQUESTED = "review_requested"
    CANCELLED = "cancelled"


class ProposalPreviewRequest(BaseModel):
    """Raw response text to extract proposals from."""

    text: str = Field(min_length=1)


class ProposalPreviewResult(BaseModel):
    """Extracted proposals with their rendered preview document."""

    proposals: list[ChangeProposal]
    preview: str
