# starchain/crypto/bitcoin.py
"""
Legacy Bitcoin signed-message scheme ("Bitcoin Signed Message"), as produced by
wallets for P2PKH addresses.

Signatures are 65 bytes, base64 encoded: one header byte (27 + recovery id,
+4 for compressed keys) followed by r and s. Verification recovers the public
key from the signature and compares its HASH160 with the address payload.
"""

import base64
import hashlib

import base58
from coincurve import PrivateKey, PublicKey
from Crypto.Hash import RIPEMD160

from starchain.core.encoding import b64_decode_strict

MAGIC_PREFIX = b"\x18Bitcoin Signed Message:\n"
MAINNET_P2PKH = 0x00


def _varint(n: int) -> bytes:
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def message_digest(message: str) -> bytes:
    data = message.encode("utf-8")
    payload = MAGIC_PREFIX + _varint(len(data)) + data
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()


def hash160(data: bytes) -> bytes:
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def p2pkh_address(public_key: bytes, version: int = MAINNET_P2PKH) -> str:
    return base58.b58encode_check(bytes([version]) + hash160(public_key)).decode("ascii")


class BitcoinMessageVerifier:
    """
    verify(message, address, signature) for legacy P2PKH addresses.
    Raises ValueError on malformed address or signature encodings.
    """

    def verify(self, message: str, address: str, signature: str) -> bool:
        try:
            decoded = base58.b58decode_check(address)
        except ValueError as e:
            raise ValueError(f"Invalid address {address!r}: {e}") from e
        if len(decoded) != 21:
            raise ValueError(f"Unsupported address type: {address!r}")
        expected_h160 = decoded[1:]

        sig = b64_decode_strict(signature)
        if len(sig) != 65:
            raise ValueError(f"Signature must be 65 bytes, got {len(sig)}")
        header = sig[0]
        if not 27 <= header <= 34:
            raise ValueError(f"Invalid signature header byte: {header}")
        recid = (header - 27) & 3
        compressed = bool((header - 27) & 4)

        # coincurve wants r || s || recid
        public_key = PublicKey.from_signature_and_message(
            sig[1:] + bytes([recid]), message_digest(message), hasher=None
        )
        recovered = public_key.format(compressed=compressed)
        return hash160(recovered) == expected_h160


def sign_message(private_key: PrivateKey, message: str, compressed: bool = True) -> str:
    """Sign ``message`` the way a wallet does; returns base64 signature."""
    raw = private_key.sign_recoverable(message_digest(message), hasher=None)
    header = 27 + raw[64] + (4 if compressed else 0)
    return base64.b64encode(bytes([header]) + raw[:64]).decode("ascii")
