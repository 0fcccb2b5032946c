"""Tests for the airdrop pallet client."""

import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from conftest import ALICE_SS58, TEST_ADDRESS, TEST_PRIVATE_KEY
from substrateinterface.exceptions import SubstrateRequestException

from claimsigner.chain import ChainClient, claim_account_id, pallet_account_id
from claimsigner.config import Config
from claimsigner.errors import ChainError, InclusionTimeout, MalformedSignatureInput
from claimsigner.models import ClaimReceipt
from claimsigner.signer import ClaimSigner


def _claim_params(substrate: MagicMock) -> dict:
    for call in substrate.compose_call.call_args_list:
        if call.kwargs["call_function"] == "claim":
            return call.kwargs["call_params"]
    raise AssertionError("claim call was not composed")


class TestPalletAccount:
    """Tests for the pallet account derivation."""

    def test_account_id(self) -> None:
        account = pallet_account_id(b"airdrop!")
        assert account == b"modlairdrop!" + b"\x00" * 20
        assert len(account) == 32

    def test_too_long(self) -> None:
        with pytest.raises(ValueError):
            pallet_account_id(b"x" * 29)

    def test_ss58(self, chain_client: ChainClient) -> None:
        address = chain_client.pallet_account()
        assert address.startswith("5")


class TestSubmitClaim:
    """Tests for unsigned claim submission."""

    def test_submit(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        claim = ClaimSigner(TEST_PRIVATE_KEY).sign_claim("42")
        receipt = chain_client.submit_claim(claim.account, claim.signature)

        assert receipt == ClaimReceipt(extrinsic_hash="0x" + "ab" * 32, block_hash="0x" + "cd" * 32)
        assert _claim_params(substrate) == {
            "dest": "0x2a" + "00" * 31,
            "ethereum_signature": "0x" + claim.signature.hex(),
        }
        substrate.create_unsigned_extrinsic.assert_called_once()
        substrate.submit_extrinsic.assert_called_once()
        assert substrate.submit_extrinsic.call_args.kwargs["wait_for_inclusion"] is True

    def test_legacy_recovery_id_normalized(
        self,
        chain_client: ChainClient,
        substrate: MagicMock,
    ) -> None:
        signature = b"\x01" * 64 + b"\x1b"
        chain_client.submit_claim(b"\x2a" + b"\x00" * 7, signature)
        assert _claim_params(substrate)["ethereum_signature"] == "0x" + "01" * 64 + "00"

    @pytest.mark.parametrize("length", [64, 66])
    def test_wrong_signature_length(
        self,
        chain_client: ChainClient,
        substrate: MagicMock,
        length: int,
    ) -> None:
        """A signature that is not 65 bytes never reaches the node."""
        with pytest.raises(MalformedSignatureInput):
            chain_client.submit_claim(b"\x2a" + b"\x00" * 7, b"\x01" * length)
        substrate.compose_call.assert_not_called()
        substrate.submit_extrinsic.assert_not_called()

    def test_failed_extrinsic(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        substrate.submit_extrinsic.return_value.is_success = False
        substrate.submit_extrinsic.return_value.error_message = {"name": "InvalidSignature"}

        with pytest.raises(ChainError, match="InvalidSignature"):
            chain_client.submit_claim(b"\x2a" + b"\x00" * 7, b"\x01" * 65)

    def test_rejected_by_node(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        substrate.submit_extrinsic.side_effect = SubstrateRequestException("bad proof")

        with pytest.raises(ChainError, match="rejected by node"):
            chain_client.submit_claim(b"\x2a" + b"\x00" * 7, b"\x01" * 65)

    def test_address_account_not_padded(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        account = bytes(range(32))
        chain_client.submit_claim(account, b"\x01" * 65)
        assert _claim_params(substrate)["dest"] == "0x" + account.hex()

    def test_account_too_long(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        with pytest.raises(ChainError, match="AccountId"):
            chain_client.submit_claim(b"x" * 33, b"\x01" * 65)
        substrate.submit_extrinsic.assert_not_called()

    def test_encoder_rejects_params(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        substrate.compose_call.side_effect = ValueError("Value should start with \"0x\"")

        with pytest.raises(ChainError, match="Cannot encode Airdrop.claim"):
            chain_client.submit_claim(b"\x2a" + b"\x00" * 7, b"\x01" * 65)
        substrate.submit_extrinsic.assert_not_called()


class TestClaimAccountId:
    """Tests for widening claim accounts to AccountId."""

    def test_numeric_account_zero_padded(self) -> None:
        assert claim_account_id(b"\x2a" + b"\x00" * 7) == b"\x2a" + b"\x00" * 31

    def test_full_account_unchanged(self) -> None:
        assert claim_account_id(bytes(range(32))) == bytes(range(32))


class TestSubmitClaimAsync:
    """Tests for claim submission with an inclusion timeout."""

    @pytest.mark.asyncio
    async def test_submit(self, chain_client: ChainClient) -> None:
        receipt = await chain_client.submit_claim_async(b"\x2a" + b"\x00" * 7, b"\x01" * 65, timeout=5)
        assert receipt.block_hash == "0x" + "cd" * 32

    @pytest.mark.asyncio
    async def test_timeout(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        receipt = substrate.submit_extrinsic.return_value

        def slow_submit(*args: object, **kwargs: object) -> MagicMock:
            time.sleep(0.5)
            return receipt

        substrate.submit_extrinsic.side_effect = slow_submit

        with pytest.raises(InclusionTimeout):
            await chain_client.submit_claim_async(b"\x2a" + b"\x00" * 7, b"\x01" * 65, timeout=0.05)

    @pytest.mark.asyncio
    async def test_malformed_signature_checked_first(
        self,
        chain_client: ChainClient,
        substrate: MagicMock,
    ) -> None:
        with pytest.raises(MalformedSignatureInput):
            await chain_client.submit_claim_async(b"\x2a" + b"\x00" * 7, "0x" + "01" * 64)
        substrate.submit_extrinsic.assert_not_called()


class TestSudoCalls:
    """Tests for funding and claim registration."""

    def test_register_claim(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        chain_client.register_claim(TEST_ADDRESS, 1000)

        first, second = substrate.compose_call.call_args_list
        assert first.kwargs["call_module"] == "Airdrop"
        assert first.kwargs["call_function"] == "register_claim"
        assert first.kwargs["call_params"] == {"who": TEST_ADDRESS.lower(), "value": 1000}
        assert second.kwargs["call_module"] == "Sudo"
        substrate.create_signed_extrinsic.assert_called_once()

    def test_register_claim_bad_address(self, chain_client: ChainClient) -> None:
        with pytest.raises(ChainError, match="20 bytes"):
            chain_client.register_claim("0x1234", 1000)

    def test_fund_pallet_account(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        chain_client.fund_pallet_account(5000)

        call = substrate.compose_call.call_args
        assert call.kwargs["call_module"] == "Balances"
        assert call.kwargs["call_params"] == {
            "dest": chain_client.pallet_account(),
            "value": 5000,
        }


class TestQueries:
    """Tests for event and storage queries."""

    def test_query_claim_events(self, chain_client: ChainClient) -> None:
        records = [
            SimpleNamespace(
                value={"event": {"module_id": "System", "event_id": "ExtrinsicSuccess", "attributes": {}}},
            ),
            SimpleNamespace(
                value={
                    "event": {
                        "module_id": "Airdrop",
                        "event_id": "Claimed",
                        "attributes": (ALICE_SS58, TEST_ADDRESS.lower(), 1000),
                    },
                },
            ),
        ]
        receipt = ClaimReceipt(extrinsic_hash="0x" + "ab" * 32, block_hash="0x" + "cd" * 32)

        with patch("claimsigner.chain.ExtrinsicReceipt") as extrinsic_receipt:
            extrinsic_receipt.return_value.triggered_events = records
            events = chain_client.query_claim_events(receipt)

        assert len(events) == 1
        assert events[0].claimant == ALICE_SS58
        assert events[0].ethereum_address == TEST_ADDRESS
        assert events[0].amount == 1000

    def test_claim_amount(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        substrate.query.return_value = SimpleNamespace(value=1000)
        assert chain_client.claim_amount(TEST_ADDRESS) == 1000

    def test_claim_amount_missing(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        substrate.query.return_value = SimpleNamespace(value=None)
        assert chain_client.claim_amount(TEST_ADDRESS) is None

    def test_total_claims(self, chain_client: ChainClient, substrate: MagicMock) -> None:
        substrate.query.return_value = SimpleNamespace(value=None)
        assert chain_client.total_claims() == 0


def test_from_config() -> None:
    client = ChainClient.from_config(Config(node_url="ws://node:9944", ss58_format=0))
    assert client.pallet_account().startswith("1")


def test_registered_claims(chain_client: ChainClient, substrate: MagicMock) -> None:
    other = "0x" + "11" * 20
    substrate.query_map.return_value = [
        (SimpleNamespace(value=TEST_ADDRESS.lower()), SimpleNamespace(value=1000)),
        (SimpleNamespace(value=other), SimpleNamespace(value=5)),
    ]

    claims = chain_client.registered_claims()

    assert claims == {TEST_ADDRESS: 1000, other: 5}
    assert substrate.query_map.call_args.kwargs == {"module": "Airdrop", "storage_function": "Claims"}


def test_query_failure(chain_client: ChainClient, substrate: MagicMock) -> None:
    substrate.query.side_effect = SubstrateRequestException("storage not found")
    with pytest.raises(ChainError, match="Airdrop.Total"):
        chain_client.total_claims()


def test_connection_refused() -> None:
    client = ChainClient(node_url="ws://127.0.0.1:1")
    with (
        patch("claimsigner.chain.SubstrateInterface", side_effect=ConnectionRefusedError(111, "refused")),
        pytest.raises(ChainError, match="Cannot connect"),
    ):
        client.total_claims()
