# starchain/core/hashing.py
import hashlib

from starchain.core.canon import canonical_json
from starchain.core.types import Block


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def block_hash(block: Block) -> str:
    """Digest of the block's canonical record with its own hash field cleared."""
    return sha256_hex(canonical_json(block.without_hash().to_record()))
