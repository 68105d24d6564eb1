"""Run one interactive chat turn against the configured model.

Usage (from repo root):
    python backend/scripts/chat_turn.py "How should I test this parser?" --file src/parser.ts

Usage (from backend/):
    python scripts/chat_turn.py "Why is my fixture leaking state?"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from specialist.config import get_settings
from specialist.providers.interfaces import CancellationToken
from specialist.providers.interrupts import InterruptibleModelProvider
from specialist.providers.openai_chat import get_default_model_provider
from specialist.schemas.chat import ChatTurnRequest, FileContext, TurnStatus
from specialist.services.chat_turn import handle_chat_turn
from specialist.services.surfaces import ConsoleInteraction, ConsoleOutput

_CONTENT_TYPES = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".cs": "csharp",
    ".md": "markdown",
}


def _load_file_context(path: str | None) -> FileContext | None:
    if not path:
        return None
    file_path = Path(path)
    return FileContext(
        name=str(file_path),
        content=file_path.read_text(encoding="utf-8"),
        content_type=_CONTENT_TYPES.get(file_path.suffix.lower(), "plaintext"),
    )


async def _run(args: argparse.Namespace) -> int:
    request = ChatTurnRequest(prompt=args.prompt, command=args.command, file=_load_file_context(args.file))
    cancellation = CancellationToken()
    result = await handle_chat_turn(
        request,
        ConsoleOutput(),
        provider=InterruptibleModelProvider(get_default_model_provider()),
        interaction=ConsoleInteraction(),
        cancellation=cancellation,
    )
    print()
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 1 if result.status in {TurnStatus.ERROR, TurnStatus.NO_MODELS} else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Ask The Test Specialist a question.")
    parser.add_argument("prompt", help="Question or request for the assistant")
    parser.add_argument("--file", help="File to share as editor context")
    parser.add_argument("--command", help="Slash command name to record in the result metadata")
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().log_level.upper())
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
