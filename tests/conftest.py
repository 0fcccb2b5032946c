"""Test fixtures and utilities."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from litestar.testing import AsyncTestClient

from claimsigner.chain import ChainClient
from claimsigner.config import Config
from claimsigner.server import create_app
from claimsigner.signer import ClaimSigner

# secp256k1 private key 1; its address is a well-known constant
TEST_PRIVATE_KEY = "0x" + "00" * 31 + "01"
TEST_ADDRESS = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

OTHER_PRIVATE_KEY = "0x" + "00" * 31 + "02"

# Substrate dev account //Alice
ALICE_SS58 = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
ALICE_PUBLIC_KEY = bytes.fromhex(
    "d43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d",
)

# Key 0x..01 signing a claim for numeric destination 42
FIXTURE_42 = b"\x19Ethereum Signed Message:\n46Pay RUSTs to the TEST account:2a00000000000000"
FIXTURE_42_HASH = bytes.fromhex(
    "4a7d66374a9f919da39931c9bfc0853f8ed0a0a3596b00febae3c4c3369c58af",
)
FIXTURE_42_SIGNATURE = bytes.fromhex(
    "a4f969d774025c659494404e110ac1d14c43ae8f0be0b1ce5408628029da8346"
    "61f9749b71a97e4e30731f89967612891c97f67dcbf05368831004f2219eb703"
    "01",
)


@pytest.fixture
def private_key() -> str:
    """Return the test private key."""
    return TEST_PRIVATE_KEY


@pytest.fixture
def signer() -> ClaimSigner:
    """Create a signer holding the test key."""
    return ClaimSigner(private_key=TEST_PRIVATE_KEY)


@pytest.fixture
def config() -> Config:
    """Create a test configuration."""
    return Config(host="127.0.0.1", port=8080, log_level="DEBUG")


@pytest.fixture
def private_key_file(tmp_path: Path) -> Path:
    """Write the test key to a file."""
    key_path = tmp_path / "claim.key"
    key_path.write_text(f"{TEST_PRIVATE_KEY}\n")
    return key_path


@pytest.fixture
async def client(signer: ClaimSigner) -> AsyncGenerator[AsyncTestClient, None]:
    """Create a test client with a signing key loaded."""
    app = create_app(signer=signer)
    async with AsyncTestClient(app) as client:
        yield client


@pytest.fixture
async def client_without_key() -> AsyncGenerator[AsyncTestClient, None]:
    """Create a test client with no signing key."""
    app = create_app(signer=ClaimSigner())
    async with AsyncTestClient(app) as client:
        yield client


@pytest.fixture
def substrate() -> MagicMock:
    """Stand-in for SubstrateInterface whose extrinsics succeed."""
    substrate = MagicMock()
    receipt = MagicMock()
    receipt.is_success = True
    receipt.extrinsic_hash = "0x" + "ab" * 32
    receipt.block_hash = "0x" + "cd" * 32
    substrate.submit_extrinsic.return_value = receipt
    return substrate


@pytest.fixture
def chain_client(substrate: MagicMock) -> ChainClient:
    """Create a chain client bound to the substrate stand-in."""
    return ChainClient(substrate=substrate)
