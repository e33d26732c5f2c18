# starchain/chain/blockchain.py
import asyncio
import copy
import json
import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Union

from starchain.core.canon import canonical_json_str
from starchain.core.errors import NotReadyError, StorageError
from starchain.core.hashing import block_hash
from starchain.core.types import GENESIS_BODY, Block
from starchain.storage import StorageBackend, create_storage
from starchain.verify.verifier import VerificationResult, verify_block, verify_chain

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(time.time())


class Blockchain:
    """
    Hash-linked chain of blocks, mirrored 1:1 into a persistent store.

    The chain is unusable until ``open()`` has replayed the store; every
    operation raises ``NotReadyError`` before that. Blocks handed out are
    copies, never the chain's own instances.
    """

    def __init__(
        self,
        storage: Union[StorageBackend, str, Path],
        clock: Callable[[], int] = _now,
    ):
        if isinstance(storage, (str, Path)):
            storage = create_storage(storage)
        self.storage: StorageBackend = storage
        self._clock = clock
        self._blocks: List[Block] = []
        self._ready = asyncio.Event()
        self._append_lock = asyncio.Lock()

    @classmethod
    async def create(cls, storage: Union[StorageBackend, str, Path], **kwargs) -> "Blockchain":
        chain = cls(storage, **kwargs)
        await chain.open()
        return chain

    # ── lifecycle

    async def open(self) -> None:
        """Open the store, replay every block, and add genesis if the store is empty."""
        if self._ready.is_set():
            return
        await self.storage.open()
        try:
            self._blocks = self._replay(await self.storage.scan_all())
            logger.info("Loaded %d blocks from storage", len(self._blocks))

            if not self._blocks:
                await self._append_unchecked(GENESIS_BODY)
                logger.info("Created genesis block")
        except StorageError:
            self._blocks = []
            await self.storage.close()
            raise

        self._ready.set()

    @staticmethod
    def _replay(rows) -> List[Block]:
        blocks: List[Block] = []
        for key, raw in rows:
            try:
                record = json.loads(raw)
            except (TypeError, ValueError) as e:
                raise StorageError(f"Unreadable block at key {key}: {e}") from e
            block = Block.from_record(record)
            if block.height != key:
                raise StorageError(f"Block at key {key} claims height {block.height}")
            if key != len(blocks):
                raise StorageError(f"Gap in stored chain: expected height {len(blocks)}, found {key}")
            blocks.append(block)
        return blocks

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    async def wait_ready(self) -> None:
        await self._ready.wait()

    def _check_ready(self) -> None:
        if not self._ready.is_set():
            raise NotReadyError()

    async def close(self) -> None:
        """Release the store handle. The chain is not usable afterwards."""
        self._ready.clear()
        await self.storage.close()

    async def destroy(self) -> None:
        """Close, then delete the backing store for good."""
        self._ready.clear()
        self._blocks = []
        await self.storage.destroy()

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ── writes

    async def append(self, body: Any) -> Block:
        """
        Append a block holding ``body`` and persist it.
        Height, time, previous hash and hash are assigned here.
        Returns a copy of the new block.
        """
        self._check_ready()
        return await self._append_unchecked(body)

    async def _append_unchecked(self, body: Any) -> Block:
        async with self._append_lock:
            height = len(self._blocks)
            prev_hash = self._blocks[-1].hash if self._blocks else ""

            unhashed = Block(
                height=height,
                timestamp=self._clock(),
                body=copy.deepcopy(body),
                previous_hash=prev_hash,
            )
            block = replace(unhashed, hash=block_hash(unhashed))

            self._blocks.append(block)
            try:
                await self.storage.put(height, canonical_json_str(block.to_record()))
            except StorageError:
                # keep memory and store in step
                self._blocks.pop()
                logger.error("Block %d submission failed, reverted in-memory append", height)
                raise

            logger.debug("Appended block %d (%s)", height, block.hash)
            return block.copy()

    # ── reads

    def get_block_height(self) -> int:
        """Height of the newest block (genesis is 0)."""
        self._check_ready()
        return len(self._blocks) - 1

    @property
    def length(self) -> int:
        self._check_ready()
        return len(self._blocks)

    def get_block(self, height: int) -> Optional[Block]:
        """Copy of the block at ``height``, or None when out of range."""
        self._check_ready()
        if not isinstance(height, int) or isinstance(height, bool):
            return None
        if height < 0 or height >= len(self._blocks):
            return None
        return self._blocks[height].copy()

    def blocks(self, start: int = 0) -> Iterator[Block]:
        self._check_ready()
        for block in self._blocks[start:]:
            yield block.copy()

    def find_by_hash(self, hash_hex: str) -> Optional[Block]:
        self._check_ready()
        for block in self._blocks:
            if block.hash == hash_hex:
                return block.copy()
        return None

    def find_by_address(self, address: str) -> List[Block]:
        """All star blocks recorded for ``address`` (genesis never matches)."""
        self._check_ready()
        return [
            block.copy()
            for block in self._blocks[1:]
            if isinstance(block.body, dict) and block.body.get("address") == address
        ]

    # ── validation

    def validate_block(self, height: int) -> bool:
        """False when the block fails its hash check or does not exist."""
        self._check_ready()
        if isinstance(height, bool) or height < 0 or height >= len(self._blocks):
            logger.warning("No block at height %s to validate", height)
            return False
        block = self._blocks[height]
        return verify_block(block) is None

    def validate_chain(self) -> VerificationResult:
        self._check_ready()
        return verify_chain(self._blocks)
