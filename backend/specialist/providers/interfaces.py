"""Collaborator contracts consumed by the chat turn orchestrator."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Protocol


class CancellationToken:
    """Cooperative cancellation flag checked between streamed fragments."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled


class ModelHandle(Protocol):
    """A language model able to stream a response."""

    name: str

    def send_request(
        self,
        messages: list[dict[str, str]],
        cancellation: CancellationToken,
    ) -> AsyncIterator[str]:
        """Stream response text fragments in arrival order."""


class ModelProvider(Protocol):
    """Source of available language models."""

    async def select_models(self) -> Sequence[ModelHandle]:
        """Return the models usable for this turn, possibly none."""


class OutputSurface(Protocol):
    """Append-only markdown sink shown to the user."""

    def write_markdown(self, text: str) -> None:
        """Append markdown text."""


class InteractionSurface(Protocol):
    """Blocking human interaction used for confirmation."""

    async def ask_choice(self, message: str, options: Sequence[str]) -> str | None:
        """Return the selected option, or ``None`` when the prompt is dismissed."""

    async def open_document(self, content: str, content_type: str) -> None:
        """Display a document to the user."""
