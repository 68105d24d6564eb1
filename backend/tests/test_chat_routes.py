"""Tests for chat and proposal routes."""

from __future__ import annotations

import unittest

from specialist.main import app
from specialist.proposals.parser import PROPOSAL_MARKER
from specialist.routers.chat import create_chat_turn
from specialist.routers.proposals import preview_proposals
from specialist.schemas.chat import ChatTurnHttpRequest, TurnStatus
from specialist.schemas.proposal import ProposalPreviewRequest
from specialist.services.chat_turn import HITL_BANNER, NO_MODELS_MESSAGE

RESPONSE_TEXT = (
    "Here is an improvement.\n\n"
    f"{PROPOSAL_MARKER} Reset the mock between tests.\n\n```python\nmock.reset_mock()\n```\n"
)


class _StubModel:
    name = "stub-model"

    async def send_request(self, messages, cancellation):  # noqa: ANN001
        _ = messages, cancellation
        for index in range(0, len(RESPONSE_TEXT), 16):
            yield RESPONSE_TEXT[index : index + 16]


class _StubProvider:
    def __init__(self, models: list[_StubModel]) -> None:
        self.models = models

    async def select_models(self):
        return self.models


class ChatRouteTests(unittest.IsolatedAsyncioTestCase):
    async def test_review_decision_returns_preview_document(self) -> None:
        response = await create_chat_turn(
            ChatTurnHttpRequest(prompt="Why do my mocks leak?", decision="Review First"),
            provider=_StubProvider([_StubModel()]),
        )

        data = response.data
        self.assertEqual(data.result.status, TurnStatus.REVIEW_REQUESTED)
        self.assertEqual(len(data.result.proposals), 1)
        self.assertIn(RESPONSE_TEXT, data.markdown)
        self.assertIn(HITL_BANNER, data.markdown)
        self.assertEqual(len(data.opened_documents), 1)
        self.assertTrue(data.opened_documents[0].content.startswith("# Proposed Changes"))

    async def test_missing_decision_declines(self) -> None:
        response = await create_chat_turn(
            ChatTurnHttpRequest(prompt="Why do my mocks leak?"),
            provider=_StubProvider([_StubModel()]),
        )

        self.assertEqual(response.data.result.status, TurnStatus.DECLINED)
        self.assertEqual(response.data.opened_documents, [])

    async def test_no_models_returns_diagnostic(self) -> None:
        response = await create_chat_turn(ChatTurnHttpRequest(prompt="hi"), provider=_StubProvider([]))

        self.assertEqual(response.data.result.status, TurnStatus.NO_MODELS)
        self.assertEqual(response.data.markdown, NO_MODELS_MESSAGE)

    def test_preview_route_parses_and_renders(self) -> None:
        response = preview_proposals(ProposalPreviewRequest(text=RESPONSE_TEXT))

        self.assertEqual(len(response.data.proposals), 1)
        self.assertEqual(response.data.proposals[0].new_code, "mock.reset_mock()")
        self.assertIn("## Change 1", response.data.preview)

    def test_routes_are_registered(self) -> None:
        paths = set(app.openapi()["paths"])

        self.assertTrue({"/health", "/chat/turn", "/proposals/preview"}.issubset(paths))


if __name__ == "__main__":
    unittest.main()
