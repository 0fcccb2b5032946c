"""CLI entry point for claimsigner."""

import asyncio
import logging
import sys
from typing import Any

import msgspec

from .config import Config, get_config
from .errors import ClaimSignerError
from .hexcodec import encode_hex

logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _print_json(data: Any) -> None:
    print(msgspec.json.format(msgspec.json.encode(data)).decode("utf-8"))


def _require_key(config: Config) -> str:
    private_key = config.load_private_key()
    if private_key is None:
        raise ClaimSignerError(
            "No private key: pass --private-key-file or set CLAIMSIGNER_PRIVATE_KEY",
        )
    return private_key


def run_message(config: Config) -> None:
    """Print the signable message and its hash for a destination."""
    from .codec import keccak256
    from .signer import ClaimSigner

    signer = ClaimSigner(message_format=config.message_format)
    account, message = signer.build_message(config.destination or "", config.extra_bytes)
    _print_json(
        {
            "account": encode_hex(account),
            "message": encode_hex(message),
            "message_hash": encode_hex(keccak256(message)),
        },
    )


def run_sign(config: Config) -> None:
    """Sign a claim and print it."""
    from .signer import ClaimSigner

    signer = ClaimSigner(private_key=_require_key(config), message_format=config.message_format)
    claim = signer.sign_claim(config.destination or "", config.extra_bytes)
    _print_json(claim.to_dict())


def run_claim(config: Config) -> None:
    """Optionally fund and register, then sign and submit a claim."""
    from .chain import ChainClient
    from .signer import ClaimSigner

    signer = ClaimSigner(private_key=_require_key(config), message_format=config.message_format)
    claim = signer.sign_claim(config.destination or "", config.extra_bytes)

    client = ChainClient.from_config(config)
    try:
        if config.fund_amount is not None:
            client.fund_pallet_account(config.fund_amount)
        if config.register_amount is not None:
            client.register_claim(claim.ethereum_address, config.register_amount)

        receipt = asyncio.run(
            client.submit_claim_async(
                claim.account,
                claim.signature,
                timeout=config.inclusion_timeout,
            ),
        )
        events = client.query_claim_events(receipt)
    finally:
        client.close()

    _print_json(
        {
            "claim": claim.to_dict(),
            "extrinsic_hash": receipt.extrinsic_hash,
            "block_hash": receipt.block_hash,
            "events": events,
        },
    )


def main() -> None:
    """Main entry point."""
    try:
        config = get_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.normalized_log_level)

    if config.command == "serve":
        from .server import run_server

        try:
            run_server(config)
        except KeyboardInterrupt:
            print("\nShutting down...")
            sys.exit(0)
        except Exception:
            logger.exception("Server error")
            sys.exit(1)
        return

    commands = {
        "message": run_message,
        "sign": run_sign,
        "claim": run_claim,
    }
    try:
        commands[config.command](config)
    except ClaimSignerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
