# tests/test_registry.py
import pytest
from coincurve import PrivateKey

from starchain.chain.blockchain import Blockchain
from starchain.config import Settings
from starchain.core.errors import BadRequestError
from starchain.crypto import sign_message, p2pkh_address
from starchain.registry import StarRegistry
from starchain.validation import ValidationList
from conftest import StubVerifier

STAR = {
    "dec": "-26° 29' 24.9",
    "ra": "16h 29m 1.0s",
    "story": "Found star using https://www.google.com/sky/",
}


@pytest.fixture
def registry(chain: Blockchain, settings: Settings, clock) -> StarRegistry:
    validations = ValidationList(verifier=StubVerifier(), settings=settings, clock=clock)
    return StarRegistry(chain, validations)


def verified(registry: StarRegistry, address: str) -> None:
    registry.request_validation(address)
    assert registry.validate_signature(address, "good-signature").register_star


def test_request_validation_requires_address(registry: StarRegistry):
    with pytest.raises(BadRequestError, match="No address"):
        registry.request_validation("")


def test_validate_signature_input_checks(registry: StarRegistry):
    with pytest.raises(BadRequestError, match="Missing address"):
        registry.validate_signature("", "sig")
    with pytest.raises(BadRequestError, match="Missing signature"):
        registry.validate_signature("addr1", "")
    with pytest.raises(BadRequestError, match="No active validation"):
        registry.validate_signature("addr1", "good-signature")


def test_invalid_signature_status(registry: StarRegistry):
    registry.request_validation("addr1")
    check = registry.validate_signature("addr1", "nope")
    assert check.register_star is False
    assert check.status["messageSignature"] == "invalid"
    assert "addr1" not in registry.verified


def test_valid_signature_status(registry: StarRegistry):
    request = registry.request_validation("addr1")
    check = registry.validate_signature("addr1", "good-signature")
    assert check.to_dict() == {
        "registerStar": True,
        "status": {
            "address": "addr1",
            "requestTimeStamp": request.request_timestamp,
            "message": request.message,
            "validationWindow": request.validation_window,
            "messageSignature": "valid",
        },
    }
    assert "addr1" in registry.verified


def test_expired_request_cannot_be_signed(registry: StarRegistry, clock):
    registry.request_validation("addr1")
    clock.advance(301)
    with pytest.raises(BadRequestError, match="No active validation"):
        registry.validate_signature("addr1", "good-signature")


async def test_register_star_requires_verification(registry: StarRegistry):
    with pytest.raises(BadRequestError, match="not validated"):
        await registry.register_star("addr1", STAR)


async def test_register_star_requires_coordinates(registry: StarRegistry):
    verified(registry, "addr1")
    with pytest.raises(BadRequestError, match="star.dec and star.ra"):
        await registry.register_star("addr1", {"ra": "1h"})
    with pytest.raises(BadRequestError, match="star.dec and star.ra"):
        await registry.register_star("addr1", None)
    # a rejected star does not consume the verification
    assert "addr1" in registry.verified


async def test_register_star_appends_block(registry: StarRegistry, chain: Blockchain):
    verified(registry, "addr1")
    block = await registry.register_star("addr1", {**STAR, "magnitude": 4})

    assert block.height == 1
    assert chain.get_block_height() == 1
    assert block.body == {
        "address": "addr1",
        "star": {
            "dec": STAR["dec"],
            "ra": STAR["ra"],
            "story": STAR["story"].encode("utf-8").hex(),
        },
    }
    # one star per validation
    assert "addr1" not in registry.verified
    with pytest.raises(BadRequestError):
        await registry.register_star("addr1", STAR)


async def test_star_without_story(registry: StarRegistry):
    verified(registry, "addr1")
    block = await registry.register_star("addr1", {"ra": "1h", "dec": "2d"})
    assert "story" not in block.body["star"]
    assert "storyDecoded" not in registry.get_block(1)["body"]["star"]


async def test_lookups_decode_story(registry: StarRegistry):
    verified(registry, "addr1")
    block = await registry.register_star("addr1", STAR)
    verified(registry, "addr2")
    await registry.register_star("addr2", {"ra": "1h", "dec": "2d"})
    verified(registry, "addr1")
    await registry.register_star("addr1", {"ra": "3h", "dec": "4d"})

    output = registry.get_block(1)
    assert output["body"]["star"]["storyDecoded"] == STAR["story"]
    assert output["hash"] == block.hash

    mine = registry.stars_by_address("addr1")
    assert [b["height"] for b in mine] == [1, 3]
    assert registry.stars_by_address("nobody") == []

    assert registry.star_by_hash(block.hash)["height"] == 1
    assert registry.star_by_hash("ff" * 32) is None
    assert registry.get_block(99) is None


async def test_genesis_is_not_a_star(registry: StarRegistry, chain: Blockchain):
    genesis = chain.get_block(0)
    assert registry.star_by_hash(genesis.hash) is None
    assert registry.get_block(0)["body"] == genesis.body


async def test_end_to_end_with_real_signatures(chain: Blockchain, settings: Settings, clock):
    registry = StarRegistry(chain, ValidationList(settings=settings, clock=clock))
    key = PrivateKey()
    address = p2pkh_address(key.public_key.format(compressed=True))

    request = registry.request_validation(address)
    clock.advance(3)
    request = registry.request_validation(address)
    assert request.validation_window == 297

    assert not registry.validate_signature(address, sign_message(key, "something else")).register_star
    assert not registry.validate_signature(address, "garbage").register_star

    check = registry.validate_signature(address, sign_message(key, request.message))
    assert check.register_star

    block = await registry.register_star(address, STAR)
    assert chain.validate_chain()
    assert registry.stars_by_address(address)[0]["hash"] == block.hash
    await registry.close()
    assert not chain.is_ready
