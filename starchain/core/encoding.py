# starchain/core/encoding.py
import base64
import binascii


def story_encode(story: str) -> str:
    """Encode a free-text star story as a hex string for storage."""
    return story.encode("utf-8").hex()


def story_decode(encoded: str) -> str:
    """Decode a stored hex story back to text. Undecodable bytes are replaced."""
    return bytes.fromhex(encoded).decode("utf-8", errors="replace")


def b64_decode_strict(s: str) -> bytes:
    """Decode standard base64 (as used by wallet signatures), rejecting junk."""
    try:
        return base64.b64decode(s, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64: {e}") from e
