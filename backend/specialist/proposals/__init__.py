"""Change proposal extraction and rendering."""

from specialist.proposals.parser import PROPOSAL_MARKER, parse_change_proposals
from specialist.proposals.preview import PREVIEW_CONTENT_TYPE, render_preview

__all__ = [
    "PROPOSAL_MARKER",
    "PREVIEW_CONTENT_TYPE",
    "parse_change_proposals",
    "render_preview",
]
