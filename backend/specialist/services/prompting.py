"""Prompt assembly for chat turns."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from specialist.config import get_settings
from specialist.schemas.chat import FileContext

_PROMPT_DIR = Path(__file__).resolve().parents[1] / "prompts"
_PROMPT_FILES: dict[str, Path] = {
    "test_specialist.v1": _PROMPT_DIR / "test_specialist_v1.txt",
}


class PromptConfigurationError(RuntimeError):
    """Raised when the system instruction cannot be loaded."""


@lru_cache(maxsize=8)
def get_system_instruction(version: str | None = None) -> str:
    """Load the system instruction text for ``version`` (defaults to the configured one)."""

    resolved_version = version or get_settings().prompt_version
    prompt_file = _PROMPT_FILES.get(resolved_version)
    if prompt_file is None:
        raise PromptConfigurationError(f"System prompt version is not registered: {resolved_version}")
    try:
        prompt_text = prompt_file.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise PromptConfigurationError(f"Failed to load system prompt file: {prompt_file}") from exc
    if not prompt_text:
        raise PromptConfigurationError(f"System prompt file is empty: {prompt_file}")
    return prompt_text


def build_prompt(
    user_prompt: str,
    file_context: FileContext | None = None,
    *,
    system_instruction: str | None = None,
) -> str:
    """Concatenate the system instruction, optional file context, and the user's request."""

    sections = [system_instruction if system_instruction is not None else get_system_instruction()]
    if file_context is not None:
        sections.append(
            f"The user has the file {file_context.name} open with the following content:\n\n"
            f"```{file_context.content_type}\n{file_context.content}\n```"
        )
    sections.append(f"User request: {user_prompt}")
    return "\n\n".join(sections)


def build_prompt_messages(
    user_prompt: str,
    file_context: FileContext | None = None,
    *,
    system_instruction: str | None = None,
) -> list[dict[str, str]]:
    """Return the single-message conversation sent to the model."""

    return [
        {
            "role": "user",
            "content": build_prompt(user_prompt, file_context, system_instruction=system_instruction),
        }
    ]
