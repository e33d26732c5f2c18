# tests/conftest.py
from pathlib import Path

import pytest

from starchain.chain.blockchain import Blockchain
from starchain.config import Settings
from starchain.core.errors import StorageError
from starchain.storage import SQLiteStorage


class FakeClock:
    """Deterministic seconds-since-epoch clock."""

    def __init__(self, start: int = 1_700_000_000):
        self.t = start

    def __call__(self) -> int:
        return self.t

    def advance(self, seconds: int) -> None:
        self.t += seconds


class StubVerifier:
    """Accepts exactly one signature string; can be told to blow up."""

    def __init__(self, good: str = "good-signature", raises: Exception | None = None):
        self.good = good
        self.raises = raises
        self.calls = []

    def verify(self, message: str, address: str, signature: str) -> bool:
        self.calls.append((message, address, signature))
        if self.raises:
            raise self.raises
        return signature == self.good


class FlakyStorage(SQLiteStorage):
    """SQLite store whose writes can be switched to fail."""

    fail_puts = False

    async def put(self, height: int, value: str) -> None:
        if self.fail_puts:
            raise StorageError(f"Block {height} submission failed: disk full")
        await super().put(height, value)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "chain.db"


@pytest.fixture
def settings(db_path: Path) -> Settings:
    return Settings(db_path=db_path, validation_window=300, sweep_interval=0.01)


@pytest.fixture
async def chain(db_path: Path, clock: FakeClock):
    chain = await Blockchain.create(db_path, clock=clock)
    yield chain
    await chain.close()
