"""Configuration management using msgspec Struct."""

import argparse
import os
from collections.abc import Sequence
from pathlib import Path

import msgspec

from .errors import MalformedSignatureInput
from .hexcodec import decode_hex
from .message import DEFAULT_PREFIX, MessageFormat

PRIVATE_KEY_ENV = "CLAIMSIGNER_PRIVATE_KEY"

COMMANDS = ("serve", "message", "sign", "claim")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config(msgspec.Struct, frozen=True):
    """Application configuration using msgspec Struct."""

    command: str = "serve"

    # HTTP server settings
    host: str = "127.0.0.1"
    port: int = 8080
    workers: int = 1

    # Logging
    log_level: str = "INFO"

    # Metrics settings
    metrics_enabled: bool = False
    metrics_host: str = "127.0.0.1"
    metrics_port: int = 8081

    # Signing key (file containing hex); falls back to CLAIMSIGNER_PRIVATE_KEY
    private_key_file: str | None = None

    # Message framing; must match the runtime's compiled constant
    claim_prefix: str = DEFAULT_PREFIX.decode("ascii")

    # Chain settings
    node_url: str = "ws://127.0.0.1:9944"
    sudo_uri: str = "//Alice"
    pallet_id: str = "airdrop!"
    ss58_format: int = 42
    inclusion_timeout: float = 60.0

    # One-shot command arguments
    destination: str | None = None
    extra: str = ""
    register_amount: int | None = None
    fund_amount: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.command not in COMMANDS:
            raise ValueError(f"command must be one of {COMMANDS}, got {self.command}")

        if self.port < 1 or self.port > 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")

        if self.metrics_port < 1 or self.metrics_port > 65535:
            raise ValueError(f"metrics_port must be between 1 and 65535, got {self.metrics_port}")

        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

        # Each worker is a separate process with its own registry and would
        # contend for the metrics port
        if self.metrics_enabled and self.workers > 1:
            raise ValueError("metrics_enabled requires a single worker")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level}")

        if self.private_key_file is not None:
            key_path = Path(self.private_key_file)
            if not key_path.exists():
                raise ValueError(f"private_key_file not found: {key_path}")
            if not key_path.is_file():
                raise ValueError(f"private_key_file must be a file: {key_path}")

        if not self.claim_prefix:
            raise ValueError("claim_prefix must not be empty")

        # PalletId is a fixed [u8; 8] on chain
        if len(self.pallet_id.encode("utf-8")) != 8:
            raise ValueError(f"pallet_id must be exactly 8 bytes, got {self.pallet_id!r}")

        if self.ss58_format < 0 or self.ss58_format > 16383:
            raise ValueError(f"ss58_format must be between 0 and 16383, got {self.ss58_format}")

        if self.inclusion_timeout <= 0:
            raise ValueError(f"inclusion_timeout must be positive, got {self.inclusion_timeout}")

        if self.command != "serve" and not self.destination:
            raise ValueError(f"destination is required for the {self.command} command")

        try:
            decode_hex(self.extra)
        except MalformedSignatureInput as e:
            raise ValueError(f"extra must be hex: {e}") from e

        for name in ("register_amount", "fund_amount"):
            amount = getattr(self, name)
            if amount is not None and amount <= 0:
                raise ValueError(f"{name} must be positive, got {amount}")

    @property
    def normalized_log_level(self) -> str:
        """Return normalized uppercase log level."""
        return self.log_level.upper()

    @property
    def message_format(self) -> MessageFormat:
        """Message framing built from the configured claim prefix."""
        return MessageFormat.with_prefix(self.claim_prefix)

    @property
    def extra_bytes(self) -> bytes:
        return decode_hex(self.extra)

    def load_private_key(self) -> str | None:
        """Read the signing key from ``private_key_file`` or the environment.

        Returns:
            The hex-encoded key, or None if neither source is set

        """
        if self.private_key_file is not None:
            return Path(self.private_key_file).read_text().strip()
        return os.environ.get(PRIVATE_KEY_ENV) or None


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        choices=list(LOG_LEVELS),
        default="INFO",
        help="Logging level (default: INFO)",
    )
    common.add_argument(
        "--private-key-file",
        default=None,
        help=f"File containing the hex Ethereum private key (default: ${PRIVATE_KEY_ENV})",
    )
    common.add_argument(
        "--claim-prefix",
        default=DEFAULT_PREFIX.decode("ascii"),
        help="Claim prefix compiled into the runtime",
    )
    common.add_argument("--node-url", default="ws://127.0.0.1:9944", help="Substrate node websocket URL")

    parser = argparse.ArgumentParser(
        description="claimsigner - Ethereum-key claim signatures for a Substrate airdrop pallet",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", parents=[common], help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1", help="HTTP server host (default: 127.0.0.1)")
    serve.add_argument("-p", "--port", type=int, default=8080, help="HTTP server port (default: 8080)")
    serve.add_argument("--workers", type=int, default=1, help="Number of server workers (default: 1)")
    serve.add_argument(
        "--metrics-enabled",
        action="store_true",
        default=False,
        help="Enable Prometheus metrics endpoint (default: false)",
    )
    serve.add_argument(
        "--metrics-port", type=int, default=8081, help="Port for metrics server (default: 8081)"
    )
    serve.add_argument(
        "--metrics-host", default="127.0.0.1", help="Host for metrics server (default: 127.0.0.1)"
    )

    for name, help_text in (
        ("message", "Print the signable message and its hash"),
        ("sign", "Sign a claim and print it as JSON"),
        ("claim", "Sign a claim and submit it to the chain"),
    ):
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("destination", help="Numeric account id, SS58 address or raw text")
        sub.add_argument("--extra", default="", help="Hex bytes appended to the message")

        if name == "claim":
            sub.add_argument("--sudo-uri", default="//Alice", help="Secret URI of the sudo account")
            sub.add_argument("--pallet-id", default="airdrop!", help="8-byte airdrop pallet id")
            sub.add_argument("--ss58-format", type=int, default=42, help="SS58 address format")
            sub.add_argument(
                "--inclusion-timeout",
                type=float,
                default=60.0,
                help="Seconds to wait for each extrinsic to be included",
            )
            sub.add_argument(
                "--register-amount",
                type=int,
                default=None,
                help="Register a claim of this amount for the signer first (sudo)",
            )
            sub.add_argument(
                "--fund-amount",
                type=int,
                default=None,
                help="Transfer this amount to the pallet account first",
            )

    return parser


def get_config(argv: Sequence[str] | None = None) -> Config:
    """Parse command line arguments and return configuration."""
    args = _build_parser().parse_args(argv)

    # Only keep arguments the chosen subcommand defines; the rest use Config defaults
    config_dict: dict[str, object] = {
        key: value for key, value in vars(args).items() if value is not None
    }

    try:
        config = msgspec.convert(config_dict, Config)
    except msgspec.ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}")

    return config
