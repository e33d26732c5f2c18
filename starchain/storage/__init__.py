# starchain/storage/__init__.py
"""
Storage backends for the persisted chain.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Tuple


class StorageBackend(ABC):
    """Abstract base for ordered, height-keyed block stores."""

    @abstractmethod
    async def open(self) -> None:
        pass

    @abstractmethod
    async def put(self, height: int, value: str) -> None:
        pass

    @abstractmethod
    async def scan_all(self) -> List[Tuple[int, str]]:
        """All (height, value) pairs in ascending height order."""

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def destroy(self) -> None:
        """Close (if needed) and irrecoverably delete the backing storage."""


def create_storage(uri: str | Path) -> StorageBackend:
    from .sqlite import SQLiteStorage

    if isinstance(uri, Path):
        return SQLiteStorage(uri)

    stripped = uri.strip()
    if stripped.startswith("sqlite://"):
        raw_path = stripped[len("sqlite://"):]
        if not raw_path:
            raise ValueError(f"Missing path in storage URI: {uri}")
        return SQLiteStorage(Path(raw_path).resolve())
    elif "://" in stripped:
        raise ValueError(f"Unsupported storage URI: {uri}")
    elif stripped:
        # Plain file path → SQLite
        return SQLiteStorage(Path(stripped).resolve())
    else:
        raise ValueError("Empty storage location")


from .sqlite import SQLiteStorage

__all__ = ["StorageBackend", "create_storage", "SQLiteStorage"]
