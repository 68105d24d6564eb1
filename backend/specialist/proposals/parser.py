"""Extract change proposals from free-form model responses.

A response may contain any number of segments introduced by the marker
``**PROPOSED_CHANGE:**``. Each segment carries a short explanation followed by
a fenced code block::

    **PROPOSED_CHANGE:** Add a null check.

    ```ts
    if (!x) return;
    ```

Segments missing either part are dropped without error.
"""

from __future__ import annotations

import re

from specialist.schemas.proposal import ChangeProposal

PROPOSAL_MARKER = "**PROPOSED_CHANGE:**"
DEFAULT_LANGUAGE = "text"
_FENCE_OPEN = re.compile(r"(?<!`)(`{3,})(\w*)[ \t]*\r?\n")


def parse_change_proposals(text: str) -> list[ChangeProposal]:
    """Return proposals in the order their markers appear in ``text``."""

    proposals: list[ChangeProposal] = []
    for segment in split_marker_segments(text):
        proposal = _parse_segment(segment)
        if proposal is not None:
            proposals.append(proposal)
    return proposals


def split_marker_segments(text: str) -> list[str]:
    """Split ``text`` into the bodies following each marker occurrence.

    A segment ends at the next marker, so one segment never absorbs another.
    Text before the first marker is discarded.
    """

    if not text:
        return []
    starts: list[int] = []
    position = text.find(PROPOSAL_MARKER)
    while position >= 0:
        starts.append(position)
        position = text.find(PROPOSAL_MARKER, position + len(PROPOSAL_MARKER))

    segments: list[str] = []
    for index, start in enumerate(starts):
        end = starts[index + 1] if index + 1 < len(starts) else len(text)
        segments.append(text[start + len(PROPOSAL_MARKER) : end])
    return segments


def _parse_segment(segment: str) -> ChangeProposal | None:
    opener = _FENCE_OPEN.search(segment)
    if opener is None:
        return None
    body_start = opener.end()
    closing = segment.find(opener.group(1), body_start)
    if closing < 0:
        return None

    explanation = segment[: opener.start()].strip()
    code = segment[body_start:closing].strip()
    if not explanation or not code:
        return None
    return ChangeProposal(
        explanation=explanation,
        new_code=code,
        language=opener.group(2) or DEFAULT_LANGUAGE,
    )
