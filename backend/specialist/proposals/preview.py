"""Render change proposals as a reviewable markdown document."""

from __future__ import annotations

from collections.abc import Sequence

from specialist.schemas.proposal import ChangeProposal

PREVIEW_TITLE = "# Proposed Changes"
PREVIEW_CONTENT_TYPE = "markdown"


def render_preview(proposals: Sequence[ChangeProposal]) -> str:
    """Return the preview document for ``proposals`` in their given order."""

    parts = [f"{PREVIEW_TITLE}\n\n"]
    for number, proposal in enumerate(proposals, start=1):
        parts.append(f"## Change {number}\n\n")
        if proposal.file_path:
            parts.append(f"**File:** `{proposal.file_path}`\n\n")
        parts.append(f"{proposal.explanation}\n\n")
        if proposal.old_code:
            parts.append(f"**Current code:**\n\n```{proposal.language}\n{proposal.old_code}\n```\n\n")
            parts.append("**Proposed code:**\n\n")
        parts.append(f"```{proposal.language}\n{proposal.new_code}\n```\n\n")
        parts.append("---\n\n")
    return "".join(parts)
