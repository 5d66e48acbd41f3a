#!/usr/bin/env python3
"""
Build a buy transaction for a marketplace escrow and simulate it.

Example:
  python scripts/simulate_buy.py \
      --escrow 1aQYQjPHsBxZrdDWtFbGrdjjts1uwLTasfaTpuE3QXd \
      --buyer AXUChvpRwUUPMJhA4d23WcoyAL7W8zgAeo7KoH57c75F \
      --max-sol 2.5

Uses SOLANA_RPC / HELIUS_RPC_URL from the environment (or .env).
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys

from solders.pubkey import Pubkey

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from marketplace_escrow import EscrowError, RpcLookups, build_buy_transaction  # noqa: E402
from marketplace_escrow.config import get_settings  # noqa: E402
from marketplace_escrow.transaction import transaction_to_dict  # noqa: E402

LAMPORTS_PER_SOL = 1_000_000_000


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate buying an NFT out of a marketplace escrow.")
    parser.add_argument("--escrow", required=True, help="Escrow account address")
    parser.add_argument("--buyer", required=True, help="Buyer wallet address (fee payer)")
    price = parser.add_mutually_exclusive_group(required=True)
    price.add_argument("--max-lamports", type=int, help="Highest acceptable price in lamports")
    price.add_argument("--max-sol", type=float, help="Highest acceptable price in SOL")
    parser.add_argument("--rpc", help="RPC url override")
    parser.add_argument("--dump", action="store_true", help="Print the instructions as JSON")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    if args.rpc:
        settings = settings.model_copy(update={"solana_rpc": args.rpc, "helius_rpc_url": ""})
    max_price = args.max_lamports if args.max_lamports is not None else int(round(args.max_sol * LAMPORTS_PER_SOL))

    lookups = RpcLookups.from_settings(settings)
    try:
        tx = build_buy_transaction(
            lookups,
            Pubkey.from_string(args.escrow),
            Pubkey.from_string(args.buyer),
            max_price=max_price,
        )
    except EscrowError as exc:
        print(f"Unable to build buy: {exc}")
        return 1

    if args.dump:
        print(json.dumps(transaction_to_dict(tx), indent=2))

    try:
        result = lookups.simulate(tx)
    except EscrowError as exc:
        print(f"Simulation request failed: {exc}")
        return 1
    print(f"err={result.err}")
    for line in result.logs or []:
        print(line)
    return 0 if result.err is None else 2


if __name__ == "__main__":
    sys.exit(main())
