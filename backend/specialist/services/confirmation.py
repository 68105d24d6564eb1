"""Human-in-the-loop confirmation for proposed changes."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from specialist.proposals.preview import PREVIEW_CONTENT_TYPE, render_preview
from specialist.providers.interfaces import InteractionSurface
from specialist.schemas.proposal import ChangeProposal, ConfirmationChoice, ConfirmationOutcome

logger = logging.getLogger(__name__)

CONFIRMATION_OPTIONS: tuple[str, ...] = tuple(choice.value for choice in ConfirmationChoice)


def build_confirmation_message(proposals: Sequence[ChangeProposal]) -> str:
    """Summarize proposals as a count plus a numbered list of explanations."""

    noun = "change" if len(proposals) == 1 else "changes"
    lines = [f"The Test Specialist proposes {len(proposals)} {noun}:", ""]
    lines.extend(f"{number}. {proposal.explanation}" for number, proposal in enumerate(proposals, start=1))
    lines.extend(["", "Do you want to apply these changes?"])
    return "\n".join(lines)


async def request_confirmation(
    proposals: Sequence[ChangeProposal],
    interaction: InteractionSurface,
) -> ConfirmationOutcome:
    """Ask the human to approve, review, or cancel the proposed changes.

    Nothing is modified here; ``APPROVED`` only tells the caller that applying
    the changes is now allowed. Choosing "Review First" opens the preview
    document and reports ``REVIEW_REQUESTED``.
    """

    if not proposals:
        return ConfirmationOutcome.CANCELLED

    answer = await interaction.ask_choice(build_confirmation_message(proposals), CONFIRMATION_OPTIONS)
    if answer == ConfirmationChoice.APPLY.value:
        return ConfirmationOutcome.APPROVED
    if answer == ConfirmationChoice.REVIEW_FIRST.value:
        await interaction.open_document(render_preview(proposals), PREVIEW_CONTENT_TYPE)
        return ConfirmationOutcome.REVIEW_REQUESTED
    if answer is not None and answer != ConfirmationChoice.CANCEL.value:
        logger.warning("confirmation.unknown_choice choice=%r", answer)
    return ConfirmationOutcome.CANCELLED
