# starchain/registry/service.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from starchain.chain.blockchain import Blockchain
from starchain.core.encoding import story_decode, story_encode
from starchain.core.errors import BadRequestError
from starchain.core.types import Block
from starchain.validation.record import Validation
from starchain.validation.registry import ValidationList

logger = logging.getLogger(__name__)


@dataclass
class SignatureCheck:
    register_star: bool
    status: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"registerStar": self.register_star, "status": self.status}


def block_output(block: Block) -> Dict[str, Any]:
    """Block record with the hex story decoded alongside (``storyDecoded``)."""
    record = block.to_record()
    body = record["body"]
    if isinstance(body, dict):
        star = body.get("star")
        if isinstance(star, dict) and star.get("story"):
            star["storyDecoded"] = story_decode(star["story"])
    return record


class StarRegistry:
    """
    Star registration workflow: request validation → sign the challenge →
    register one star per successful signature.
    """

    def __init__(self, chain: Blockchain, validations: ValidationList):
        self.chain = chain
        self.validations = validations
        self.verified: Set[str] = set()

    def request_validation(self, address: str) -> Validation:
        if not address:
            raise BadRequestError("No address specified")
        return self.validations.get_or_create(address)

    def validate_signature(self, address: str, signature: str) -> SignatureCheck:
        if not address:
            raise BadRequestError("Missing address in validation")
        if not signature:
            raise BadRequestError("Missing signature in validation")

        request = self.validations.find(address)
        if request is None:
            raise BadRequestError("No active validation request found")

        valid = self.validations.validate_signature(request, signature)
        status = request.to_dict()
        status["messageSignature"] = "valid" if valid else "invalid"
        if valid:
            self.verified.add(address)
            logger.info("Address %s verified", address)
        return SignatureCheck(register_star=valid, status=status)

    async def register_star(self, address: str, star: Optional[Dict[str, Any]]) -> Block:
        if not address:
            raise BadRequestError("No wallet address specified")
        if address not in self.verified:
            raise BadRequestError("Wallet address is not validated yet")
        if not isinstance(star, dict) or not star.get("dec") or not star.get("ra"):
            raise BadRequestError(
                "Star attributes not fully specified - star, star.dec and star.ra are needed"
            )

        the_star = {"dec": star["dec"], "ra": star["ra"]}
        if star.get("story"):
            the_star["story"] = story_encode(str(star["story"]))

        block = await self.chain.append({"address": address, "star": the_star})
        # one star per validation
        self.verified.discard(address)
        logger.info("Registered star for %s at height %d", address, block.height)
        return block

    def get_block(self, height: int) -> Optional[Dict[str, Any]]:
        block = self.chain.get_block(height)
        return block_output(block) if block else None

    def stars_by_address(self, address: str) -> List[Dict[str, Any]]:
        return [block_output(b) for b in self.chain.find_by_address(address)]

    def star_by_hash(self, hash_hex: str) -> Optional[Dict[str, Any]]:
        block = self.chain.find_by_hash(hash_hex)
        # genesis is not a star
        if block is None or block.is_genesis:
            return None
        return block_output(block)

    async def close(self) -> None:
        await self.validations.close()
        await self.chain.close()
