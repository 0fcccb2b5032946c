"""Error taxonomy for claimsigner.

Codec errors are raised synchronously where they are detected and are never
retried: the codec is deterministic, so identical input fails identically.
"""


class ClaimSignerError(Exception):
    """Base class for all claimsigner errors."""


class InvalidSpecifier(ClaimSignerError):
    """Destination specifier cannot be resolved to account bytes."""


class EncodingOverflow(ClaimSignerError):
    """Numeric destination does not fit in 64 bits."""


class SigningError(ClaimSignerError):
    """Private key or digest rejected by the signing operation."""


class MalformedSignatureInput(ClaimSignerError):
    """Signature is not exactly 65 bytes, or hex does not decode to whole bytes."""


class ChainError(ClaimSignerError):
    """Extrinsic could not be submitted or failed on chain."""


class InclusionTimeout(ChainError):
    """Gave up waiting for an extrinsic to be included."""
