"""Claim signing orchestration."""

import logging
import time

from .account import encode_account
from .codec import address_from_private_key, keccak256, parse_private_key, sign_digest
from .errors import ClaimSignerError, SigningError
from .hexcodec import to_ascii_hex
from .message import DEFAULT_FORMAT, MessageFormat, SignableMessageBuilder
from .metrics import SIGNING_DURATION_SECONDS, SIGNING_ERRORS_TOTAL, SIGNING_REQUESTS_TOTAL
from .models import SignedClaim
from .specifiers import DestinationInput

logger = logging.getLogger(__name__)

KEY_TYPE = "secp256k1"


class ClaimSigner:
    """Signs airdrop claims for destination accounts.

    Holds at most one private key, supplied by the caller; a signer without a
    key can still build and hash messages for an external wallet to sign.
    """

    def __init__(
        self,
        private_key: bytes | str | None = None,
        message_format: MessageFormat = DEFAULT_FORMAT,
    ) -> None:
        self._builder = SignableMessageBuilder(message_format)
        self._private_key: bytes | None = None
        self._address: str | None = None
        if private_key is not None:
            key = parse_private_key(private_key)
            self._private_key = key.to_bytes()
            self._address = key.public_key.to_checksum_address()
            logger.info(f"Loaded claim signing key for {self._address}")

    @property
    def has_key(self) -> bool:
        return self._private_key is not None

    @property
    def address(self) -> str | None:
        """Checksummed address of the loaded key, if any."""
        return self._address

    @property
    def message_format(self) -> MessageFormat:
        return self._builder.message_format

    def build_message(self, destination: DestinationInput, extra: bytes = b"") -> tuple[bytes, bytes]:
        """Return ``(account_bytes, signable_message)`` for a destination."""
        account = encode_account(destination)
        message = self._builder.build(to_ascii_hex(account), extra)
        return account, message

    def sign_claim(
        self,
        destination: DestinationInput,
        extra: bytes = b"",
        private_key: bytes | str | None = None,
    ) -> SignedClaim:
        """Sign a claim for ``destination``.

        Args:
            destination: Tagged specifier, or text / integer to classify
            extra: Optional trailing message bytes
            private_key: Overrides the loaded key for this call

        Returns:
            The signed claim

        Raises:
            SigningError: If no key is available or signing fails
            InvalidSpecifier: If the destination cannot be encoded
            EncodingOverflow: If a numeric destination exceeds 64 bits

        """
        SIGNING_REQUESTS_TOTAL.labels(key_type=KEY_TYPE).inc()
        start_time = time.perf_counter()

        key = private_key if private_key is not None else self._private_key
        if key is None:
            SIGNING_ERRORS_TOTAL.labels(error_type="key_not_loaded").inc()
            raise SigningError("No signing key loaded")

        try:
            address = (
                self._address
                if private_key is None and self._address is not None
                else address_from_private_key(key)
            )
            account, message = self.build_message(destination, extra)
            message_hash = keccak256(message)
            signature = sign_digest(message_hash, key)
        except SigningError:
            SIGNING_ERRORS_TOTAL.labels(error_type="signing_failed").inc()
            raise
        except ClaimSignerError:
            SIGNING_ERRORS_TOTAL.labels(error_type="invalid_destination").inc()
            raise

        duration = time.perf_counter() - start_time
        SIGNING_DURATION_SECONDS.labels(key_type=KEY_TYPE).observe(duration)
        logger.debug(f"Signed claim for {len(account)}-byte account by {address}")

        return SignedClaim(
            account=account,
            message=message,
            message_hash=message_hash,
            signature=signature,
            ethereum_address=address,
        )
