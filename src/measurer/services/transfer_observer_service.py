# src/measurer/services/transfer_observer_service.py
"""
Scoped observation of the bytes a page load transfers.

An observer subscribes to browser events on entry, adds what it sees to a
ByteAccumulator it was handed, and unsubscribes on exit, whether navigation
succeeded or not.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Set

from playwright.async_api import CDPSession, Error as PlaywrightError, Page, Response

from website_carbon.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ByteAccumulator:
    """Running total of transferred bytes for one measurement."""

    def __init__(self):
        self.total = 0
        self.responses = 0

    def add(self, size: int) -> None:
        if size < 0:
            return
        self.total += size
        self.responses += 1

    def __repr__(self) -> str:
        return f"<ByteAccumulator total={self.total} responses={self.responses}>"


class TransferObserver(ABC):
    def __init__(self, page: Page, client: CDPSession, accumulator: ByteAccumulator):
        self.page = page
        self.client = client
        self.accumulator = accumulator

    async def __aenter__(self) -> "TransferObserver":
        self.subscribe()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unsubscribe()
        await self.drain()

    @abstractmethod
    def subscribe(self) -> None:
        """Starts listening to the browser events this observer counts."""

    @abstractmethod
    def unsubscribe(self) -> None:
        pass

    async def drain(self) -> None:
        """Waits for work still in flight after unsubscribing."""


class CdpTransferObserver(TransferObserver):
    """
    Sums `encodedDataLength` of every `Network.loadingFinished` event: the
    compressed, over-the-wire size of each resource.
    """

    EVENT = "Network.loadingFinished"

    def _on_loading_finished(self, params: Dict[str, Any]) -> None:
        length = params.get("encodedDataLength", -1)
        if isinstance(length, (int, float)) and length >= 0:
            self.accumulator.add(int(length))

    def subscribe(self) -> None:
        self.client.on(self.EVENT, self._on_loading_finished)

    def unsubscribe(self) -> None:
        self.client.remove_listener(self.EVENT, self._on_loading_finished)


class BufferTransferObserver(TransferObserver):
    """
    Sums the decoded body length of every response. Overstates transfer for
    compressed resources, so it is not the default.
    """

    EVENT = "response"

    def __init__(self, page: Page, client: CDPSession, accumulator: ByteAccumulator):
        super().__init__(page, client, accumulator)
        self._pending: Set[asyncio.Task] = set()

    def _on_response(self, response: Response) -> None:
        task = asyncio.ensure_future(self._read_body(response))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _read_body(self, response: Response) -> None:
        try:
            body = await response.body()
        except PlaywrightError:
            # Redirects and aborted requests have no body
            return
        self.accumulator.add(len(body))

    def subscribe(self) -> None:
        self.page.on(self.EVENT, self._on_response)

    def unsubscribe(self) -> None:
        self.page.remove_listener(self.EVENT, self._on_response)

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


OBSERVERS = {
    "cdp": CdpTransferObserver,
    "buffer": BufferTransferObserver,
}


def build_observer(mode: str, page: Page, client: CDPSession, accumulator: ByteAccumulator) -> TransferObserver:
    try:
        observer_cls = OBSERVERS[mode]
    except KeyError:
        raise ConfigurationError(f"Unsupported measurement mode: {mode}") from None
    return observer_cls(page, client, accumulator)
