"""Signable message framing.

The airdrop runtime rebuilds this byte sequence independently from the
destination account and recovers the signer from its Keccak-256 hash, so
every byte here must match the runtime's compiled constants:

    PREAMBLE || ascii_decimal(L) || PREFIX || account_hex || extra

where ``L = len(PREFIX) + len(account_hex) + len(extra)``. The length is
taken over ``account_hex`` as passed in, i.e. after ASCII-hex expansion.
"""

import msgspec

DEFAULT_PREAMBLE = b"\x19Ethereum Signed Message:\n"
DEFAULT_PREFIX = b"Pay RUSTs to the TEST account:"


class MessageFormat(msgspec.Struct, frozen=True):
    """Fixed text framing the signed payload.

    Attributes:
        preamble: Ethereum personal-message preamble
        prefix: Runtime-specific claim prefix, preceding the account hex

    """

    preamble: bytes = DEFAULT_PREAMBLE
    prefix: bytes = DEFAULT_PREFIX

    def __post_init__(self) -> None:
        if not self.preamble:
            raise ValueError("preamble must not be empty")

    @classmethod
    def with_prefix(cls, prefix: str) -> "MessageFormat":
        """Build a format with a custom claim prefix and the standard preamble."""
        return cls(prefix=prefix.encode("utf-8"))


DEFAULT_FORMAT = MessageFormat()


class SignableMessageBuilder:
    """Assembles the exact byte sequence that is hashed and signed."""

    def __init__(self, message_format: MessageFormat = DEFAULT_FORMAT) -> None:
        self._format = message_format

    @property
    def message_format(self) -> MessageFormat:
        return self._format

    def payload_length(self, account_hex: bytes, extra: bytes = b"") -> int:
        """Length announced in the message header."""
        return len(self._format.prefix) + len(account_hex) + len(extra)

    def build(self, account_hex: bytes, extra: bytes = b"") -> bytes:
        """Frame ``account_hex`` (and optional ``extra``) into a signable message.

        Args:
            account_hex: ASCII-hex expanded account bytes
            extra: Optional trailing bytes, empty by default

        Returns:
            The message bytes; no hashing is performed

        """
        length_digits = str(self.payload_length(account_hex, extra)).encode("ascii")
        return b"".join(
            (
                self._format.preamble,
                length_digits,
                self._format.prefix,
                bytes(account_hex),
                bytes(extra),
            ),
        )


def build_signable_message(account_hex: bytes, extra: bytes = b"") -> bytes:
    """Build a signable message with the default runtime format."""
    return SignableMessageBuilder().build(account_hex, extra)
