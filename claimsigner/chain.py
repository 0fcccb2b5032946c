"""Airdrop pallet client over substrate-interface.

Funding, claim registration, claim submission and event lookup are ordinary
RPC plumbing around the codec: the signature and account bytes are produced
by :mod:`claimsigner.codec` and :mod:`claimsigner.account`, and the runtime
re-derives the signable message itself.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from eth_utils import to_checksum_address
from scalecodec.utils.ss58 import ss58_encode
from substrateinterface import ExtrinsicReceipt, Keypair, SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException
from websocket import WebSocketException

from .codec import parse_signature
from .errors import ChainError, InclusionTimeout
from .hexcodec import decode_hex, encode_hex
from .metrics import CLAIMS_SUBMITTED_TOTAL
from .models import ClaimEvent, ClaimReceipt

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)

PALLET_MODULE = "Airdrop"
MODULE_ACCOUNT_PREFIX = b"modl"
ETHEREUM_ADDRESS_LENGTH = 20
ACCOUNT_ID_LENGTH = 32


def pallet_account_id(pallet_id: bytes) -> bytes:
    """Derive the 32-byte account id of a pallet (``modl`` + id, zero padded)."""
    account = MODULE_ACCOUNT_PREFIX + pallet_id
    if len(account) > 32:
        raise ValueError(f"pallet_id too long: {len(pallet_id)} bytes")
    return account.ljust(32, b"\x00")


def _ethereum_address_param(ethereum_address: str) -> str:
    raw = decode_hex(ethereum_address)
    if len(raw) != ETHEREUM_ADDRESS_LENGTH:
        raise ChainError(
            f"Ethereum address must be {ETHEREUM_ADDRESS_LENGTH} bytes, got {len(raw)}",
        )
    return encode_hex(raw)


def claim_account_id(account: bytes) -> bytes:
    """Widen claim account bytes to the 32-byte on-chain AccountId.

    Numeric ids are signed over their 8-byte form but credited to the
    account whose id is those bytes zero padded to 32.

    Raises:
        ChainError: If the account is longer than an AccountId

    """
    if len(account) > ACCOUNT_ID_LENGTH:
        raise ChainError(
            f"Account is {len(account)} bytes, cannot be submitted as a {ACCOUNT_ID_LENGTH}-byte AccountId",
        )
    return bytes(account).ljust(ACCOUNT_ID_LENGTH, b"\x00")


def _event_field(attributes: Any, name: str, index: int) -> Any:
    """Read an event attribute by name (struct events) or position (tuple events)."""
    if isinstance(attributes, dict):
        return attributes[name]
    return attributes[index]


class ChainClient:
    """Client for the airdrop pallet.

    The websocket connection is opened lazily on first use; tests inject a
    ``substrate`` stand-in instead.
    """

    def __init__(
        self,
        node_url: str = "ws://127.0.0.1:9944",
        sudo_uri: str = "//Alice",
        pallet_id: str = "airdrop!",
        ss58_format: int = 42,
        substrate: SubstrateInterface | None = None,
    ) -> None:
        self._node_url = node_url
        self._sudo_uri = sudo_uri
        self._pallet_id = pallet_id.encode("utf-8")
        self._ss58_format = ss58_format
        self._substrate = substrate

    @classmethod
    def from_config(cls, config: Config) -> ChainClient:
        return cls(
            node_url=config.node_url,
            sudo_uri=config.sudo_uri,
            pallet_id=config.pallet_id,
            ss58_format=config.ss58_format,
        )

    @property
    def substrate(self) -> SubstrateInterface:
        if self._substrate is None:
            logger.info(f"Connecting to {self._node_url}")
            try:
                self._substrate = SubstrateInterface(url=self._node_url, ss58_format=self._ss58_format)
            except (OSError, WebSocketException) as e:
                raise ChainError(f"Cannot connect to {self._node_url}: {e}") from e
        return self._substrate

    def close(self) -> None:
        if self._substrate is not None:
            self._substrate.close()
            self._substrate = None

    def pallet_account(self) -> str:
        """SS58 address of the pallet's on-chain account."""
        return ss58_encode(pallet_account_id(self._pallet_id), ss58_format=self._ss58_format)

    def _sudo_keypair(self) -> Keypair:
        try:
            return Keypair.create_from_uri(self._sudo_uri, ss58_format=self._ss58_format)
        except ValueError as e:
            raise ChainError(f"Invalid sudo URI: {e}") from e

    def _compose_call(self, call_module: str, call_function: str, call_params: dict[str, Any]) -> Any:
        """Compose a call, reporting parameters the runtime metadata rejects as ChainError."""
        try:
            return self.substrate.compose_call(
                call_module=call_module,
                call_function=call_function,
                call_params=call_params,
            )
        except (ValueError, TypeError, SubstrateRequestException) as e:
            raise ChainError(f"Cannot encode {call_module}.{call_function}: {e}") from e

    def _query(self, storage_function: str, params: list[Any] | None = None) -> Any:
        try:
            return self.substrate.query(
                module=PALLET_MODULE,
                storage_function=storage_function,
                params=params,
            )
        except (ValueError, SubstrateRequestException) as e:
            raise ChainError(f"Query {PALLET_MODULE}.{storage_function} failed: {e}") from e

    def _submit(self, extrinsic: Any, call_name: str) -> ClaimReceipt:
        try:
            receipt = self.substrate.submit_extrinsic(extrinsic, wait_for_inclusion=True)
        except SubstrateRequestException as e:
            CLAIMS_SUBMITTED_TOTAL.labels(call=call_name, outcome="rejected").inc()
            raise ChainError(f"{call_name} rejected by node: {e}") from e

        if not receipt.is_success:
            CLAIMS_SUBMITTED_TOTAL.labels(call=call_name, outcome="failed").inc()
            raise ChainError(f"{call_name} failed: {receipt.error_message}")

        CLAIMS_SUBMITTED_TOTAL.labels(call=call_name, outcome="success").inc()
        logger.info(f"{call_name} included in block {receipt.block_hash}")
        return ClaimReceipt(extrinsic_hash=receipt.extrinsic_hash, block_hash=receipt.block_hash)

    def fund_pallet_account(self, amount: int) -> ClaimReceipt:
        """Transfer ``amount`` from the sudo account to the pallet account."""
        destination = self.pallet_account()
        logger.info(f"Funding pallet account {destination} with {amount}")
        call = self._compose_call(
            "Balances",
            "transfer_allow_death",
            {"dest": destination, "value": amount},
        )
        extrinsic = self.substrate.create_signed_extrinsic(call=call, keypair=self._sudo_keypair())
        return self._submit(extrinsic, "fund_pallet_account")

    def register_claim(self, ethereum_address: str, amount: int) -> ClaimReceipt:
        """Credit a claim of ``amount`` to ``ethereum_address`` via sudo."""
        logger.info(f"Registering claim of {amount} for {ethereum_address}")
        inner = self._compose_call(
            PALLET_MODULE,
            "register_claim",
            {"who": _ethereum_address_param(ethereum_address), "value": amount},
        )
        call = self._compose_call("Sudo", "sudo", {"call": inner.value})
        extrinsic = self.substrate.create_signed_extrinsic(call=call, keypair=self._sudo_keypair())
        return self._submit(extrinsic, "register_claim")

    def submit_claim(self, account: bytes, signature: bytes | str) -> ClaimReceipt:
        """Submit an unsigned claim for ``account`` carrying the 65-byte signature.

        ``account`` is the signed account form; it is zero padded to a
        32-byte AccountId for the extrinsic.

        Raises:
            MalformedSignatureInput: If ``signature`` is not exactly 65 bytes
            ChainError: If the account does not fit, or the extrinsic is rejected or fails

        """
        signature_bytes = parse_signature(signature)
        account_id = claim_account_id(account)
        logger.info(f"Submitting claim for account {encode_hex(account_id)}")
        call = self._compose_call(
            PALLET_MODULE,
            "claim",
            {
                "dest": encode_hex(account_id),
                "ethereum_signature": encode_hex(signature_bytes),
            },
        )
        extrinsic = self.substrate.create_unsigned_extrinsic(call)
        return self._submit(extrinsic, "claim")

    async def submit_claim_async(
        self,
        account: bytes,
        signature: bytes | str,
        timeout: float | None = None,
    ) -> ClaimReceipt:
        """Submit a claim, giving up on waiting for inclusion after ``timeout`` seconds.

        The signature is validated before anything is sent; a timeout only
        abandons the wait, it does not invalidate the signed claim.
        """
        signature_bytes = parse_signature(signature)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.submit_claim, account, signature_bytes),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            CLAIMS_SUBMITTED_TOTAL.labels(call="claim", outcome="timeout").inc()
            raise InclusionTimeout(f"Claim not included within {timeout} seconds") from e

    def query_claim_events(self, receipt: ClaimReceipt) -> list[ClaimEvent]:
        """Return the ``Claimed`` events triggered by an included claim."""
        extrinsic_receipt = ExtrinsicReceipt(
            substrate=self.substrate,
            extrinsic_hash=receipt.extrinsic_hash,
            block_hash=receipt.block_hash,
        )
        try:
            records = extrinsic_receipt.triggered_events
        except SubstrateRequestException as e:
            raise ChainError(f"Cannot read events of {receipt.extrinsic_hash}: {e}") from e

        events = []
        for record in records:
            event = record.value["event"]
            if event["module_id"] != PALLET_MODULE or event["event_id"] != "Claimed":
                continue
            attributes = event["attributes"]
            events.append(
                ClaimEvent(
                    claimant=str(_event_field(attributes, "who", 0)),
                    ethereum_address=to_checksum_address(_event_field(attributes, "ethereum_address", 1)),
                    amount=int(_event_field(attributes, "amount", 2)),
                ),
            )
        return events

    def claim_amount(self, ethereum_address: str) -> int | None:
        """Registered claim amount for ``ethereum_address``, or None."""
        result = self._query("Claims", [_ethereum_address_param(ethereum_address)])
        return None if result.value is None else int(result.value)

    def total_claims(self) -> int:
        """Total amount of outstanding claims."""
        result = self._query("Total")
        return int(result.value or 0)

    def registered_claims(self) -> dict[str, int]:
        """Every registered claim, keyed by checksummed Ethereum address."""
        try:
            entries = self.substrate.query_map(module=PALLET_MODULE, storage_function="Claims")
            return {
                to_checksum_address(key.value): int(value.value)
                for key, value in entries
            }
        except (ValueError, SubstrateRequestException) as e:
            raise ChainError(f"Query {PALLET_MODULE}.Claims failed: {e}") from e
