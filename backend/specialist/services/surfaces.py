"""Output and interaction surfaces for the HTTP and terminal hosts."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO

from specialist.schemas.chat import OpenedDocument


@dataclass(slots=True)
class MarkdownBuffer:
    """Collects streamed markdown in write order."""

    parts: list[str] = field(default_factory=list)

    def write_markdown(self, text: str) -> None:
        self.parts.append(text)

    def getvalue(self) -> str:
        return "".join(self.parts)


@dataclass(slots=True)
class ScriptedInteraction:
    """Answers the confirmation prompt with a preset choice.

    ``choice=None`` behaves like a dismissed dialog.
    """

    choice: str | None = None
    prompts: list[str] = field(default_factory=list)
    opened_documents: list[OpenedDocument] = field(default_factory=list)

    async def ask_choice(self, message: str, options: Sequence[str]) -> str | None:
        self.prompts.append(message)
        if self.choice is not None and self.choice not in options:
            return None
        return self.choice

    async def open_document(self, content: str, content_type: str) -> None:
        self.opened_documents.append(OpenedDocument(content=content, content_type=content_type))


class ConsoleOutput:
    """Writes markdown straight to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    def write_markdown(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()


class ConsoleInteraction:
    """Prompts on the terminal; an empty answer or EOF dismisses the dialog."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    async def ask_choice(self, message: str, options: Sequence[str]) -> str | None:
        self._stream.write(f"\n{message}\n")
        for number, option in enumerate(options, start=1):
            self._stream.write(f"  [{number}] {option}\n")
        self._stream.flush()
        try:
            answer = await asyncio.to_thread(input, "Choose an option: ")
        except EOFError:
            return None
        return _resolve_choice(answer, options)

    async def open_document(self, content: str, content_type: str) -> None:
        self._stream.write(f"\n===== preview ({content_type}) =====\n{content}\n===== end preview =====\n")
        self._stream.flush()


def _resolve_choice(answer: str, options: Sequence[str]) -> str | None:
    cleaned = answer.strip()
    if not cleaned:
        return None
    if cleaned.isdigit():
        index = int(cleaned) - 1
        return options[index] if 0 <= index < len(options) else None
    for option in options:
        if option.lower() == cleaned.lower():
            return option
    return None
