"""CLI entrypoints for card SDK operational tasks."""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence

from cardsdk.config import configure_structlog, get_settings
from cardsdk.sdk import CardSDK
from cardsdk.types import TicketKind


async def _run_ticket(kind: TicketKind, force_refresh: bool) -> int:
    """Refresh a credential if needed and print its expiry metadata."""
    settings = get_settings()
    async with CardSDK.from_settings(settings) as sdk:
        await sdk.refresher.get_or_refresh(kind, force_refresh)
        record = sdk.store.get_record(kind)

    print(
        json.dumps(
            {
                "kind": kind.value,
                "expires_at": record.expires_at if record is not None else None,
                "forced": force_refresh,
            }
        )
    )
    return 0


async def _run_signature(params: Sequence[str]) -> int:
    """Print a card API signature artifact over params."""
    settings = get_settings()
    async with CardSDK.from_settings(settings) as sdk:
        artifact = await sdk.card.create_card_api_signature(*params)

    print(json.dumps(artifact.as_dict()))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build command-line parser for supported operational commands."""
    parser = argparse.ArgumentParser(prog="python -m cardsdk.cli")
    subcommands = parser.add_subparsers(dest="command", required=True)

    ticket_parser = subcommands.add_parser("ticket")
    ticket_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in TicketKind],
        default=TicketKind.WX_CARD.value,
        help="Credential kind to refresh.",
    )
    ticket_parser.add_argument(
        "--force",
        action="store_true",
        help="Discard the cached credential before fetching.",
    )

    signature_parser = subcommands.add_parser("signature")
    signature_parser.add_argument(
        "params",
        nargs="*",
        help="Values signed ahead of timestamp, nonce and ticket, in order.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI command."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_structlog(get_settings())
    if args.command == "ticket":
        return asyncio.run(_run_ticket(TicketKind(args.kind), force_refresh=args.force))
    if args.command == "signature":
        return asyncio.run(_run_signature(args.params))
    parser.error("Unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
