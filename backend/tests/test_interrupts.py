"""Tests for binding terminal interrupts to stream cancellation."""

from __future__ import annotations

import signal
import unittest

from specialist.providers.interfaces import CancellationToken
from specialist.providers.interrupts import InterruptibleModel, InterruptibleModelProvider


class _FakeLoop:
    def __init__(self, supported: bool = True) -> None:
        self.supported = supported
        self.handlers: dict[int, object] = {}
        self.removed: list[int] = []

    def add_signal_handler(self, signum, callback):  # noqa: ANN001
        if not self.supported:
            raise NotImplementedError
        self.handlers[signum] = callback

    def remove_signal_handler(self, signum):  # noqa: ANN001
        self.removed.append(signum)
        return self.handlers.pop(signum, None) is not None


class _StubModel:
    name = "stub-model"

    def __init__(self, loop: _FakeLoop) -> None:
        self.loop = loop
        self.installed_while_streaming: list[bool] = []
        self.closed = False

    async def send_request(self, messages, cancellation):  # noqa: ANN001
        try:
            for fragment in ("a", "b", "c"):
                self.installed_while_streaming.append(signal.SIGINT in self.loop.handlers)
                yield fragment
        finally:
            self.closed = True


class _StubProvider:
    def __init__(self, models) -> None:  # noqa: ANN001
        self.models = models

    async def select_models(self):
        return self.models


class InterruptibleModelTests(unittest.IsolatedAsyncioTestCase):
    async def test_handler_is_installed_only_while_streaming(self) -> None:
        loop = _FakeLoop()
        inner = _StubModel(loop)
        model = InterruptibleModel(inner, loop=loop)

        fragments = [fragment async for fragment in model.send_request([], CancellationToken())]

        self.assertEqual(fragments, ["a", "b", "c"])
        self.assertEqual(inner.installed_while_streaming, [True, True, True])
        self.assertEqual(loop.removed, [signal.SIGINT])
        self.assertNotIn(signal.SIGINT, loop.handlers)

    async def test_interrupt_cancels_the_turn_token(self) -> None:
        loop = _FakeLoop()
        token = CancellationToken()
        stream = InterruptibleModel(_StubModel(loop), loop=loop).send_request([], token)

        self.assertEqual(await stream.__anext__(), "a")
        loop.handlers[signal.SIGINT]()
        await stream.aclose()

        self.assertTrue(token.is_cancellation_requested)
        self.assertEqual(loop.removed, [signal.SIGINT])

    async def test_early_close_removes_handler_and_closes_inner_stream(self) -> None:
        loop = _FakeLoop()
        inner = _StubModel(loop)
        stream = InterruptibleModel(inner, loop=loop).send_request([], CancellationToken())

        await stream.__anext__()
        await stream.aclose()

        self.assertTrue(inner.closed)
        self.assertNotIn(signal.SIGINT, loop.handlers)

    async def test_unsupported_loop_still_streams(self) -> None:
        loop = _FakeLoop(supported=False)
        model = InterruptibleModel(_StubModel(loop), loop=loop)

        fragments = [fragment async for fragment in model.send_request([], CancellationToken())]

        self.assertEqual(fragments, ["a", "b", "c"])
        self.assertEqual(loop.removed, [])

    async def test_provider_wraps_each_model(self) -> None:
        loop = _FakeLoop()
        provider = InterruptibleModelProvider(_StubProvider([_StubModel(loop)]), loop=loop)

        models = await provider.select_models()

        self.assertEqual([m.name for m in models], ["stub-model"])
        self.assertIsInstance(models[0], InterruptibleModel)


if __name__ == "__main__":
    unittest.main()
