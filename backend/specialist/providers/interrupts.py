"""Bind a terminal interrupt to turn cancellation while a response streams."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import AsyncIterator, Sequence

from specialist.providers.interfaces import CancellationToken, ModelHandle, ModelProvider

logger = logging.getLogger(__name__)


class InterruptibleModel:
    """Cancels the turn on SIGINT, but only for the duration of one stream.

    Outside streaming the default handler is back in place, so an interrupt
    at the confirmation prompt stops the process as usual.
    """

    def __init__(
        self,
        model: ModelHandle,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        signum: int = signal.SIGINT,
    ) -> None:
        self._model = model
        self._loop = loop
        self._signum = signum

    @property
    def name(self) -> str:
        return self._model.name

    async def send_request(
        self,
        messages: list[dict[str, str]],
        cancellation: CancellationToken,
    ) -> AsyncIterator[str]:
        loop = self._loop or asyncio.get_running_loop()
        try:
            loop.add_signal_handler(self._signum, cancellation.cancel)
            installed = True
        except NotImplementedError:  # Windows event loops
            logger.debug("interrupts.unsupported signum=%s", self._signum)
            installed = False

        stream = self._model.send_request(messages, cancellation)
        try:
            async for fragment in stream:
                yield fragment
        finally:
            if installed:
                loop.remove_signal_handler(self._signum)
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()


class InterruptibleModelProvider:
    """Wraps every model of ``provider`` in :class:`InterruptibleModel`."""

    def __init__(self, provider: ModelProvider, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._provider = provider
        self._loop = loop

    async def select_models(self) -> Sequence[InterruptibleModel]:
        return [InterruptibleModel(model, loop=self._loop) for model in await self._provider.select_models()]
