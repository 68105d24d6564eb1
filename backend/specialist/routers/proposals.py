"""Proposal extraction routes."""

from fastapi import APIRouter

from specialist.proposals.parser import parse_change_proposals
from specialist.proposals.preview import render_preview
from specialist.schemas.common import ApiResponse
from specialist.schemas.proposal import ProposalPreviewRequest, ProposalPreviewResult


router = APIRouter(prefix="/proposals")


@router.post("/preview", response_model=ApiResponse[ProposalPreviewResult])
def preview_proposals(payload: ProposalPreviewRequest) -> ApiResponse[ProposalPreviewResult]:
    """Extract change proposals from response text and render their preview."""

    proposals = parse_change_proposals(payload.text)
    return ApiResponse(data=ProposalPreviewResult(proposals=proposals, preview=render_preview(proposals)))
