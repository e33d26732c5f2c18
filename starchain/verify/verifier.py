# starchain/verify/verifier.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from starchain.core.hashing import block_hash
from starchain.core.types import Block

logger = logging.getLogger(__name__)


@dataclass
class VerificationFailure:
    height: int
    message: str
    category: str = "general"  # "hash", "link", "height"


@dataclass
class VerificationResult:
    is_valid: bool
    message: str = ""
    failures: List[VerificationFailure] = field(default_factory=list)

    @property
    def offending_heights(self) -> List[int]:
        """Heights in detection order; a block can appear once per failed check."""
        return [f.height for f in self.failures]

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "Chain is valid ✓"
        lines = [f"Verification FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.height}] {f.category}: {f.message}")
        return "\n".join(lines)


def verify_block(block: Block) -> Optional[VerificationFailure]:
    """Recompute the digest of one block and compare with its stored hash."""
    expected = block_hash(block)
    if block.hash == expected:
        return None
    logger.warning("Block #%d invalid hash: %s <> %s", block.height, block.hash, expected)
    return VerificationFailure(block.height, f"stored hash {block.hash} != computed {expected}", "hash")


def verify_chain(chain: Sequence[Block]) -> VerificationResult:
    """
    Check every block's own hash and every link to its successor.

    A broken link between heights i and i+1 is reported at height i, so a block
    whose stored hash was tampered with shows up twice.
    """
    result = VerificationResult(True)

    for i, block in enumerate(chain):
        if block.height != i:
            result.failures.append(
                VerificationFailure(i, f"height mismatch: expected {i}, got {block.height}", "height")
            )

        failure = verify_block(block)
        if failure:
            result.failures.append(failure)

        # hash link - only till the last-but-one
        if i < len(chain) - 1 and block.hash != chain[i + 1].previous_hash:
            result.failures.append(
                VerificationFailure(i, f"hash does not match previousBlockHash of block {i + 1}", "link")
            )

    result.is_valid = not result.failures
    if result.is_valid:
        result.message = "No errors detected"
        logger.info("Validated %d blocks: no errors detected", len(chain))
    else:
        result.message = f"Block errors = {len(result.failures)}"
        logger.warning("Block errors = %d at heights %s", len(result.failures), result.offending_heights)
    return result
