# starchain/validation/registry.py
import asyncio
import logging
from typing import Callable, Dict, Optional

from starchain.config import Settings, get_settings
from starchain.crypto import BitcoinMessageVerifier, SignatureVerifier
from .record import Validation, now

logger = logging.getLogger(__name__)


class ValidationList:
    """
    Currently pending validation requests, at most one per address.

    Expired requests are dropped lazily on lookup and by a periodic sweep
    task started with ``start()`` and stopped with ``close()``.
    """

    def __init__(
        self,
        verifier: Optional[SignatureVerifier] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], int] = now,
    ):
        settings = settings or get_settings()
        self.verifier = verifier or BitcoinMessageVerifier()
        self.window = settings.validation_window
        self.suffix = settings.message_suffix
        self.sweep_interval = settings.sweep_interval
        self._clock = clock
        self._requests: Dict[str, Validation] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self):
        return len(self._requests)

    def find(self, address: str) -> Optional[Validation]:
        """The active request for ``address``, or None."""
        request = self._requests.get(address)
        if request is not None and request.is_active():
            return request
        return None

    def get_or_create(self, address: str) -> Validation:
        request = self.find(address)
        if request:
            request.update()
            logger.debug("Renewed validation for %s (%ds left)", address, request.validation_window)
        else:
            request = Validation(address, window=self.window, suffix=self.suffix, clock=self._clock)
            self._requests[address] = request
            logger.debug("New validation for %s", address)
        return request

    def validate_signature(self, request: Validation, signature: str) -> bool:
        return request.validate_signature(signature, self.verifier)

    def sweep(self) -> int:
        """Drop expired requests; returns how many were removed."""
        expired = [addr for addr, req in self._requests.items() if not req.is_active()]
        for addr in expired:
            del self._requests[addr]
        if expired:
            logger.debug("Swept %d expired validation requests", len(expired))
        return len(expired)

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())

    @property
    def is_sweeping(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    async def close(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
