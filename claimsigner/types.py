"""Type definitions for claimsigner.

This module contains NewType definitions for domain-specific byte and text
values so they are not confused with one another at call sites.
"""

from typing import NewType

AccountBytes = NewType("AccountBytes", bytes)
"""Canonical destination account bytes (8, 32 or len(utf8) bytes)."""

AccountHex = NewType("AccountHex", bytes)
"""Account bytes rendered as lowercase ASCII-hex bytes."""

SignatureBytes = NewType("SignatureBytes", bytes)
"""65-byte recoverable signature: r(32) || s(32) || recovery_id(1)."""

EthereumAddress = NewType("EthereumAddress", str)
"""EIP-55 checksummed Ethereum address with 0x prefix."""
