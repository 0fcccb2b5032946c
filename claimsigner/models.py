"""Data classes for claimsigner.

This module contains dataclasses and structured types used across the codebase.
"""

from dataclasses import dataclass

from .hexcodec import encode_hex


@dataclass(frozen=True, slots=True)
class SignedClaim:
    """Result of signing one airdrop claim.

    Attributes:
        account: Canonical destination account bytes
        message: The exact signable message that was hashed
        message_hash: Keccak-256 digest of ``message``
        signature: 65-byte r || s || recovery_id (0/1)
        ethereum_address: Checksummed address of the signing key

    """

    account: bytes
    message: bytes
    message_hash: bytes
    signature: bytes
    ethereum_address: str

    def to_dict(self) -> dict[str, str]:
        """Return the claim with byte fields as 0x-prefixed hex."""
        return {
            "account": encode_hex(self.account),
            "message": encode_hex(self.message),
            "message_hash": encode_hex(self.message_hash),
            "signature": encode_hex(self.signature),
            "ethereum_address": self.ethereum_address,
        }


@dataclass(frozen=True, slots=True)
class ClaimReceipt:
    """Handle of an extrinsic included on chain.

    Attributes:
        extrinsic_hash: Hash of the submitted extrinsic
        block_hash: Hash of the block that included it

    """

    extrinsic_hash: str
    block_hash: str | None


@dataclass(frozen=True, slots=True)
class ClaimEvent:
    """A ``Claimed`` event emitted by the airdrop pallet."""

    claimant: str
    ethereum_address: str
    amount: int
