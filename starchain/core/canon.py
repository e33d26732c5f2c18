# starchain/core/canon.py
from typing import Any

import jcs


def canonical_json(obj: Any) -> bytes:
    """
    Produce deterministic UTF-8 bytes according to RFC 8785 (JSON Canonicalization Scheme).
    Returns bytes ready for hashing or persisting.
    """
    return jcs.canonicalize(obj)


def canonical_json_str(obj: Any) -> str:
    """Same as above, but returns string (this is what the store holds)."""
    return canonical_json(obj).decode("utf-8")
