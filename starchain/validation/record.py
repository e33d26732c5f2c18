# starchain/validation/record.py
import logging
import time
from typing import Callable, Dict

from starchain.config import DEFAULT_MESSAGE_SUFFIX, DEFAULT_VALIDATION_WINDOW
from starchain.crypto import SignatureVerifier

logger = logging.getLogger(__name__)


def now() -> int:
    """Current time in whole seconds."""
    return round(time.time())


class Validation:
    """
    A pending request to prove control of ``address``.

    The remaining window is derived from the clock on every read; a record is
    active while it is non-negative.
    """

    def __init__(
        self,
        address: str,
        window: int = DEFAULT_VALIDATION_WINDOW,
        suffix: str = DEFAULT_MESSAGE_SUFFIX,
        clock: Callable[[], int] = now,
    ):
        self.address = address
        self._suffix = suffix
        self._clock = clock
        self.request_timestamp = clock()
        self.validation_window = window
        self.message = self._message()

    def _message(self) -> str:
        return f"{self.address}:{self.request_timestamp}:{self._suffix}"

    def remaining_window(self) -> int:
        return (self.request_timestamp + self.validation_window) - self._clock()

    def is_active(self) -> bool:
        return self.remaining_window() >= 0

    def update(self) -> None:
        """Renew: carry over what is left of the window, not the full default."""
        self.validation_window = self.remaining_window()
        self.request_timestamp = self._clock()
        self.message = self._message()

    def validate_signature(self, signature: str, verifier: SignatureVerifier) -> bool:
        if not self.is_active():
            return False
        try:
            return bool(verifier.verify(self.message, self.address, signature))
        except Exception as e:
            logger.warning("Signature check for %s failed: %s", self.address, e)
            return False

    def to_dict(self) -> Dict[str, object]:
        return {
            "address": self.address,
            "requestTimeStamp": self.request_timestamp,
            "message": self.message,
            "validationWindow": self.validation_window,
        }

    def __repr__(self):
        return f"Validation(address={self.address!r}, remaining={self.remaining_window()})"
