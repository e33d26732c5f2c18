# starchain/crypto/__init__.py
from typing import Protocol


class SignatureVerifier(Protocol):
    """Anything that can check a signed message against an address."""

    def verify(self, message: str, address: str, signature: str) -> bool:
        ...


from .bitcoin import BitcoinMessageVerifier, sign_message, p2pkh_address

__all__ = ["SignatureVerifier", "BitcoinMessageVerifier", "sign_message", "p2pkh_address"]
