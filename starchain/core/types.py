# starchain/core/types.py
import copy
from dataclasses import dataclass, replace
from typing import Any, Dict

from starchain.core.errors import StorageError

GENESIS_BODY = "First block in the chain - Genesis block"

# Field names as persisted; replay accepts exactly these.
RECORD_FIELDS = ("hash", "height", "body", "time", "previousBlockHash")


@dataclass(frozen=True)
class Block:
    """Single entry in the hash-linked star chain."""
    height: int
    timestamp: int                  # seconds since epoch
    body: Any                       # genesis marker or {"address", "star"}
    previous_hash: str = ""         # hex(sha256) or empty for genesis
    hash: str = ""                  # empty until computed

    @property
    def is_genesis(self) -> bool:
        return self.height == 0

    def to_record(self) -> Dict[str, Any]:
        """Persisted / wire representation."""
        return {
            "hash": self.hash,
            "height": self.height,
            "body": copy.deepcopy(self.body),
            "time": self.timestamp,
            "previousBlockHash": self.previous_hash,
        }

    def without_hash(self) -> "Block":
        return replace(self, hash="")

    def copy(self) -> "Block":
        """Deep copy, so callers never share the body with the chain."""
        return replace(self, body=copy.deepcopy(self.body))

    @classmethod
    def from_record(cls, record: Any) -> "Block":
        if not isinstance(record, dict):
            raise StorageError(f"Block record must be an object, got {type(record).__name__}")
        keys = set(record)
        expected = set(RECORD_FIELDS)
        if keys != expected:
            missing = sorted(expected - keys)
            unknown = sorted(keys - expected)
            raise StorageError(f"Malformed block record (missing={missing}, unknown={unknown})")

        height, ts = record["height"], record["time"]
        if not isinstance(height, int) or isinstance(height, bool) or height < 0:
            raise StorageError(f"Invalid block height: {height!r}")
        if not isinstance(ts, int) or isinstance(ts, bool):
            raise StorageError(f"Invalid block time: {ts!r}")
        for name in ("hash", "previousBlockHash"):
            if not isinstance(record[name], str):
                raise StorageError(f"Invalid {name} at height {height}: {record[name]!r}")

        return cls(
            height=height,
            timestamp=ts,
            body=record["body"],
            previous_hash=record["previousBlockHash"],
            hash=record["hash"],
        )
