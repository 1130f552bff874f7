"""Command line interface for the swap router.

Operates on an in-memory ledger seeded from a JSON snapshot, so swaps and
wraps are dry runs: the snapshot file is never written back.

Usage:
    swap-router-cli keygen --keyfile keys/keypair.json
    swap-router-cli --snapshot ledger.json pools USDC ETH
    swap-router-cli --snapshot ledger.json quote USDC ETH 2.5
    swap-router-cli --snapshot ledger.json swap USDC ETH 2.5 --keyfile keys/keypair.json
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import structlog
from solders.keypair import Keypair

from swap_router.accounts.keys import parse_signer
from swap_router.config import RouterConfig
from swap_router.errors import InvalidSignerError, SwapRouterError
from swap_router.ledger.memory import InMemoryLedger
from swap_router.log import configure_logging
from swap_router.service import SwapService

logger = structlog.get_logger()

DEFAULT_KEYFILE = Path("keys/keypair.json")


def generate_keypair(path: Path) -> Keypair:
    """Generate a keypair and store it as ``{"publicKey", "secretKey"}`` JSON.

    Raises:
        FileExistsError: If ``path`` already exists
    """
    if path.exists():
        raise FileExistsError(f"{path} already exists")
    keypair = Keypair()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"publicKey": str(keypair.pubkey()), "secretKey": list(bytes(keypair))})
    )
    return keypair


def load_keypair(path: Path) -> Keypair:
    """Read a keypair written by generate_keypair.

    Raises:
        InvalidSignerError: If the file is missing or malformed
    """
    try:
        data = json.loads(path.read_text())
        secret = data["secretKey"]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise InvalidSignerError(
            f"Failed to read keypair from {path}. Run 'keygen' first? ({e})"
        ) from e
    return parse_signer(json.dumps(secret))


def _decimal(value: str) -> Decimal:
    try:
        number = Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"Not a number: {value}") from e
    if not number.is_finite():
        raise argparse.ArgumentTypeError(f"Not a finite number: {value}")
    return number


def _build_service(args: argparse.Namespace) -> SwapService:
    config = RouterConfig.from_env()
    if args.snapshot is None:
        logger.warning("empty_ledger", reason="no --snapshot given")
        return SwapService(InMemoryLedger(config), config=config)
    return SwapService(InMemoryLedger.from_snapshot(args.snapshot, config), config=config)


def _cmd_keygen(args: argparse.Namespace) -> dict[str, Any]:
    keypair = generate_keypair(args.keyfile)
    return {"publicKey": str(keypair.pubkey()), "keyfile": str(args.keyfile)}


def _cmd_tokens(args: argparse.Namespace) -> Any:
    return _build_service(args).list_tokens()


def _cmd_pools(args: argparse.Namespace) -> Any:
    service = _build_service(args)
    if args.from_token is None or args.to_token is None:
        return service.all_pools()
    return service.find_pools(args.from_token, args.to_token)


def _cmd_quote(args: argparse.Namespace) -> Any:
    return _build_service(args).quote(args.from_token, args.to_token, args.amount, args.slippage)


def _cmd_swap(args: argparse.Namespace) -> Any:
    signer = load_keypair(args.keyfile)
    return _build_service(args).swap(
        args.from_token, args.to_token, args.amount, signer, args.slippage
    )


def _cmd_balance(args: argparse.Namespace) -> Any:
    service = _build_service(args)
    owner = load_keypair(args.keyfile).pubkey()
    if args.token is None:
        return service.wallet_info(owner)
    return service.balance(args.token, owner)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swap-router-cli",
        description="Fee-ranked swap routing against an in-memory ledger snapshot",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="JSON ledger snapshot (default: empty ledger)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen = subparsers.add_parser("keygen", help="Generate and store a new keypair")
    keygen.add_argument("--keyfile", type=Path, default=DEFAULT_KEYFILE)
    keygen.set_defaults(handler=_cmd_keygen)

    tokens = subparsers.add_parser("tokens", help="List supported tokens")
    tokens.set_defaults(handler=_cmd_tokens)

    pools = subparsers.add_parser("pools", help="List pools, optionally for one pair")
    pools.add_argument("from_token", nargs="?")
    pools.add_argument("to_token", nargs="?")
    pools.set_defaults(handler=_cmd_pools)

    for name, handler in (("quote", _cmd_quote), ("swap", _cmd_swap)):
        sub = subparsers.add_parser(name, help=f"{name.capitalize()} a swap")
        sub.add_argument("from_token")
        sub.add_argument("to_token")
        sub.add_argument("amount", type=_decimal, help="Amount in human units")
        sub.add_argument(
            "--slippage", type=_decimal, default=None, help="Slippage in percent (default: 0.5)"
        )
        if name == "swap":
            sub.add_argument("--keyfile", type=Path, default=DEFAULT_KEYFILE)
        sub.set_defaults(handler=handler)

    balance = subparsers.add_parser("balance", help="Show wallet or token balance")
    balance.add_argument("token", nargs="?")
    balance.add_argument("--keyfile", type=Path, default=DEFAULT_KEYFILE)
    balance.set_defaults(handler=_cmd_balance)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point. Prints the result as JSON and returns the exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    handler: Callable[[argparse.Namespace], Any] = args.handler
    try:
        result = handler(args)
    except SwapRouterError as e:
        print(
            json.dumps({"success": False, "error": str(e), "reason": e.code, **e.details()}, indent=2)
        )
        return 1
    except (OSError, ValueError) as e:
        print(json.dumps({"success": False, "error": str(e), "reason": "invalid_input"}, indent=2))
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
