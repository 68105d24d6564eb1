"""Chat turn orchestration: prompt, stream, extract proposals, confirm."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter

from specialist.proposals.parser import parse_change_proposals
from specialist.providers.interfaces import (
    CancellationToken,
    InteractionSurface,
    ModelHandle,
    ModelProvider,
    OutputSurface,
)
from specialist.schemas.chat import (
    ChatTurnRequest,
    ChatTurnResult,
    FileContext,
    TurnErrorKind,
    TurnStatus,
)
from specialist.schemas.proposal import ChangeProposal, ConfirmationOutcome
from specialist.services.confirmation import request_confirmation
from specialist.services.prompting import build_prompt_messages

logger = logging.getLogger(__name__)

NO_MODELS_MESSAGE = "No language model is available. Configure a chat model and try again."
PERMISSION_DENIED_MESSAGE = (
    "I don't have permission to use the language model. Check that access to the model has been granted."
)
CONTENT_FILTERED_MESSAGE = "The response was blocked by the content filter. Try rephrasing your request."
NO_FILE_NOTICE = "No file is currently open in the editor.\n\n"
HITL_BANNER = (
    "\n\n---\n\n"
    "**Human approval required.** The response above proposes code changes. "
    "Nothing is modified until you review and approve them, so the final decision stays with you.\n\n"
)
APPROVED_MESSAGE = "\n\n**Changes approved.** They are ready to be applied to your workspace.\n"
NOT_APPLIED_MESSAGE = "\n\n**No changes were applied.** Review the proposals and ask again when you are ready.\n"


class TurnState(str, Enum):
    """Lifecycle states of a single chat turn."""

    IDLE = "idle"
    DISPATCHED = "dispatched"
    STREAMING = "streaming"
    PARSING = "parsing"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DONE = "done"


_ALLOWED_TRANSITIONS: dict[TurnState, frozenset[TurnState]] = {
    TurnState.IDLE: frozenset({TurnState.DISPATCHED, TurnState.DONE}),
    TurnState.DISPATCHED: frozenset({TurnState.STREAMING, TurnState.DONE}),
    TurnState.STREAMING: frozenset({TurnState.PARSING, TurnState.DONE}),
    TurnState.PARSING: frozenset({TurnState.AWAITING_CONFIRMATION, TurnState.DONE}),
    TurnState.AWAITING_CONFIRMATION: frozenset({TurnState.DONE}),
    TurnState.DONE: frozenset(),
}


class TurnStateError(RuntimeError):
    """Raised on an illegal chat turn state transition."""


@dataclass(slots=True)
class ConversationTurn:
    """Turn-local state; discarded once the turn is done."""

    prompt: str
    file_context: FileContext | None = None
    fragments: list[str] = field(default_factory=list)
    proposals: list[ChangeProposal] = field(default_factory=list)
    state: TurnState = TurnState.IDLE
    stream_ms: float = 0.0

    @property
    def response_text(self) -> str:
        return "".join(self.fragments)

    def advance(self, target: TurnState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise TurnStateError(f"Illegal chat turn transition: {self.state.value} -> {target.value}")
        logger.debug("chat_turn.transition from=%s to=%s", self.state.value, target.value)
        self.state = target


async def handle_chat_turn(
    request: ChatTurnRequest,
    output: OutputSurface,
    *,
    provider: ModelProvider,
    interaction: InteractionSurface,
    cancellation: CancellationToken | None = None,
) -> ChatTurnResult:
    """Run one request/response turn and return its terminal status record.

    Model output is streamed to ``output`` as it arrives. When the finished
    response contains change proposals the human is asked to confirm them
    through ``interaction``. Errors are reported to ``output`` and folded
    into the returned record; this function does not raise them.
    """

    token = cancellation or CancellationToken()
    metadata = {"command": request.command or ""}
    turn = ConversationTurn(prompt=request.prompt, file_context=request.file)
    total_started = perf_counter()
    try:
        result = await _run_turn(turn, output, provider=provider, interaction=interaction, cancellation=token)
    except Exception as exc:
        logger.exception(
            "chat_turn.failed state=%s fragments=%d elapsed_ms=%.2f",
            turn.state.value,
            len(turn.fragments),
            (perf_counter() - total_started) * 1000.0,
        )
        turn.state = TurnState.DONE
        result = _error_result(exc, output)

    result.metadata = metadata
    logger.info(
        "chat_turn.completed status=%s proposals=%d fragments=%d stream_ms=%.2f total_ms=%.2f",
        result.status.value,
        len(result.proposals),
        len(turn.fragments),
        turn.stream_ms,
        (perf_counter() - total_started) * 1000.0,
    )
    return result


async def _run_turn(
    turn: ConversationTurn,
    output: OutputSurface,
    *,
    provider: ModelProvider,
    interaction: InteractionSurface,
    cancellation: CancellationToken,
) -> ChatTurnResult:
    turn.advance(TurnState.DISPATCHED)
    models = await provider.select_models()
    if not models:
        output.write_markdown(NO_MODELS_MESSAGE)
        turn.advance(TurnState.DONE)
        return ChatTurnResult(status=TurnStatus.NO_MODELS, error_message=NO_MODELS_MESSAGE)

    output.write_markdown(_context_notice(turn.file_context))
    messages = build_prompt_messages(turn.prompt, turn.file_context)
    turn.advance(TurnState.STREAMING)

    started = perf_counter()
    try:
        finished = await _stream_response(models[0], messages, turn, output, cancellation)
    finally:
        turn.stream_ms = (perf_counter() - started) * 1000.0
    logger.debug(
        "chat_turn.stream_timing model=%s fragments=%d stream_ms=%.2f cancelled=%s",
        models[0].name,
        len(turn.fragments),
        turn.stream_ms,
        not finished,
    )
    if not finished:
        turn.advance(TurnState.DONE)
        return ChatTurnResult(status=TurnStatus.CANCELLED)

    turn.advance(TurnState.PARSING)
    turn.proposals = parse_change_proposals(turn.response_text)
    if not turn.proposals:
        turn.advance(TurnState.DONE)
        return ChatTurnResult(status=TurnStatus.COMPLETED)

    turn.advance(TurnState.AWAITING_CONFIRMATION)
    output.write_markdown(HITL_BANNER)
    outcome = await request_confirmation(turn.proposals, interaction)
    if outcome is ConfirmationOutcome.APPROVED:
        output.write_markdown(APPROVED_MESSAGE)
        status = TurnStatus.APPROVED
    else:
        output.write_markdown(NOT_APPLIED_MESSAGE)
        status = (
            TurnStatus.REVIEW_REQUESTED
            if outcome is ConfirmationOutcome.REVIEW_REQUESTED
            else TurnStatus.DECLINED
        )
    turn.advance(TurnState.DONE)
    return ChatTurnResult(status=status, outcome=outcome, proposals=list(turn.proposals))


async def _stream_response(
    model: ModelHandle,
    messages: list[dict[str, str]],
    turn: ConversationTurn,
    output: OutputSurface,
    cancellation: CancellationToken,
) -> bool:
    """Forward and accumulate fragments in order; return False if cancelled."""

    stream = model.send_request(messages, cancellation)
    try:
        async for fragment in stream:
            if cancellation.is_cancellation_requested:
                return False
            output.write_markdown(fragment)
            turn.fragments.append(fragment)
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
    return not cancellation.is_cancellation_requested


def _context_notice(file_context: FileContext | None) -> str:
    if file_context is None:
        return NO_FILE_NOTICE
    return f"I can see you have **{file_context.name}** open.\n\n"


def classify_model_error(exc: BaseException) -> TurnErrorKind:
    """Classify a failure by the words in its message."""

    text = str(exc).lower()
    if "permission" in text or "access" in text:
        return TurnErrorKind.PERMISSION_DENIED
    if "blocked" in text or "filtered" in text:
        return TurnErrorKind.CONTENT_FILTERED
    return TurnErrorKind.GENERIC


def describe_model_error(exc: BaseException, kind: TurnErrorKind | None = None) -> str:
    """Return the user-facing message for a failed turn."""

    kind = kind or classify_model_error(exc)
    if kind is TurnErrorKind.PERMISSION_DENIED:
        return PERMISSION_DENIED_MESSAGE
    if kind is TurnErrorKind.CONTENT_FILTERED:
        return CONTENT_FILTERED_MESSAGE
    return f"An error occurred while talking to the language model: {exc}"


def _error_result(exc: Exception, output: OutputSurface) -> ChatTurnResult:
    kind = classify_model_error(exc)
    message = describe_model_error(exc, kind)
    try:
        output.write_markdown(message)
    except Exception:
        logger.exception("chat_turn.report_failed error_kind=%s", kind.value)
    return ChatTurnResult(status=TurnStatus.ERROR, error_kind=kind, error_message=message)

