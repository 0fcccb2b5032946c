"""Keccak-256 hashing and recoverable secp256k1 signatures.

The airdrop runtime hashes the signable message once with Keccak-256 (the
original Keccak padding, not standardized SHA3-256) and recovers the signer
from a 65-byte ``r || s || recovery_id`` signature where the recovery id uses
the 0/1 convention rather than Ethereum's 27/28.
"""

import logging

from eth_hash.auto import keccak
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from .errors import MalformedSignatureInput, SigningError
from .hexcodec import decode_hex
from .types import EthereumAddress, SignatureBytes

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65
PRIVATE_KEY_LENGTH = 32
DIGEST_LENGTH = 32

# Order of the secp256k1 group; valid private keys are 1 <= k < N.
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte Keccak-256 digest of ``data``."""
    return keccak(bytes(data))


def normalize_recovery_id(v: int) -> int:
    """Map a recovery indicator to the chain's 0/1 convention.

    0 and 1 pass through; Ethereum-style 27 and 28 become 0 and 1.

    Raises:
        MalformedSignatureInput: For any other value

    """
    if v in (0, 1):
        return v
    if v in (27, 28):
        return v - 27
    raise MalformedSignatureInput(f"Invalid recovery id {v}, expected 0, 1, 27 or 28")


def parse_private_key(private_key: bytes | str) -> keys.PrivateKey:
    """Parse a 32-byte private key given as raw bytes or hex text.

    Raises:
        SigningError: If the key has the wrong length, is not hex, or is out of range

    """
    if isinstance(private_key, str):
        try:
            key_bytes = decode_hex(private_key)
        except MalformedSignatureInput as e:
            raise SigningError("Private key is not valid hex") from e
    else:
        key_bytes = bytes(private_key)

    if len(key_bytes) != PRIVATE_KEY_LENGTH:
        raise SigningError(
            f"Private key must be {PRIVATE_KEY_LENGTH} bytes, got {len(key_bytes)}",
        )

    secret = int.from_bytes(key_bytes, "big")
    if not 0 < secret < SECP256K1_N:
        raise SigningError("Private key is outside the secp256k1 range")

    try:
        return keys.PrivateKey(key_bytes)
    except ValidationError as e:
        raise SigningError(f"Invalid private key: {e}") from e


def address_from_private_key(private_key: bytes | str) -> EthereumAddress:
    """Return the checksummed Ethereum address controlled by ``private_key``."""
    return EthereumAddress(parse_private_key(private_key).public_key.to_checksum_address())


def sign_digest(digest: bytes, private_key: bytes | str) -> SignatureBytes:
    """Sign an already-hashed 32-byte digest without hashing it again."""
    key = parse_private_key(private_key)
    if len(digest) != DIGEST_LENGTH:
        raise SigningError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")

    try:
        signature = key.sign_msg_hash(bytes(digest))
    except (ValidationError, BadSignature) as e:
        raise SigningError(f"Signing failed: {e}") from e

    return SignatureBytes(
        signature.r.to_bytes(32, "big")
        + signature.s.to_bytes(32, "big")
        + bytes([normalize_recovery_id(signature.v)]),
    )


def sign(message: bytes, private_key: bytes | str) -> SignatureBytes:
    """Hash ``message`` with Keccak-256 and sign the digest.

    Args:
        message: The signable message bytes
        private_key: 32 raw bytes or hex text (with or without 0x)

    Returns:
        65 bytes: r(32) || s(32) || recovery_id(1), recovery_id in {0, 1}

    Raises:
        SigningError: If the key is invalid (checked before hashing) or signing fails

    """
    key = parse_private_key(private_key)
    digest = keccak256(message)
    logger.debug(f"Signing {len(message)}-byte message, digest 0x{digest.hex()}")
    return sign_digest(digest, key.to_bytes())


def parse_signature(signature: bytes | str) -> SignatureBytes:
    """Validate a supplied signature and return it in the 0/1 recovery form.

    Accepts raw bytes or hex text; the value must be exactly 65 bytes and is
    never truncated or padded.

    Raises:
        MalformedSignatureInput: On wrong length, bad hex or bad recovery id

    """
    raw = decode_hex(signature) if isinstance(signature, str) else bytes(signature)
    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedSignatureInput(
            f"Invalid signature length: {len(raw)} bytes. Expected {SIGNATURE_LENGTH} bytes.",
        )
    return SignatureBytes(raw[:64] + bytes([normalize_recovery_id(raw[64])]))


def recover_address(message: bytes, signature: bytes | str) -> EthereumAddress:
    """Recover the checksummed address that signed ``keccak256(message)``."""
    sig = parse_signature(signature)
    try:
        public_key = keys.Signature(sig).recover_public_key_from_msg_hash(keccak256(message))
    except (ValidationError, BadSignature) as e:
        raise MalformedSignatureInput(f"Cannot recover signer: {e}") from e
    return EthereumAddress(public_key.to_checksum_address())
