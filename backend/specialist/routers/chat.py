"""Chat turn routes."""

from fastapi import APIRouter, Depends

from specialist.providers.interfaces import CancellationToken, ModelProvider
from specialist.providers.openai_chat import get_default_model_provider
from specialist.schemas.chat import ChatTurnHttpRequest, ChatTurnResponse
from specialist.schemas.common import ApiResponse
from specialist.services.chat_turn import handle_chat_turn
from specialist.services.surfaces import MarkdownBuffer, ScriptedInteraction


router = APIRouter(prefix="/chat")


@router.post("/turn", response_model=ApiResponse[ChatTurnResponse])
async def create_chat_turn(
    payload: ChatTurnHttpRequest,
    provider: ModelProvider = Depends(get_default_model_provider),
) -> ApiResponse[ChatTurnResponse]:
    """Run one chat turn, answering any confirmation with the request's decision."""

    output = MarkdownBuffer()
    interaction = ScriptedInteraction(choice=payload.decision.value if payload.decision else None)
    result = await handle_chat_turn(
        payload,
        output,
        provider=provider,
        interaction=interaction,
        cancellation=CancellationToken(),
    )
    return ApiResponse(
        data=ChatTurnResponse(
            result=result,
            markdown=output.getvalue(),
            opened_documents=interaction.opened_documents,
        )
    )
