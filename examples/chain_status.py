#!/usr/bin/env python3
"""
Example: chain status checker

Prints the chain height, the next validator set, a few catalog contracts
and, optionally, the status of a transaction.

Usage:
    python examples/chain_status.py [txid]

Environment Variables (or a .env file):
    NEO_NETWORK_MODE: mainnet_only | testnet_only | both (default: both)
    NEO_MAINNET_RPC_URL / NEO_TESTNET_RPC_URL: node endpoints
    LOG_LEVEL: DEBUG to see cache and retry activity
"""

import asyncio
import sys

from neo_access import (
    ContractService,
    NeoAccessError,
    NetworkRegistry,
    load_settings,
    to_error_response,
)
from neo_access.utils.logging import configure_logging


async def main() -> None:
    settings = load_settings(env_file=".env")
    configure_logging(settings.log_level)
    registry = NetworkRegistry.from_settings(settings)

    print("=" * 60)
    print("Neo N3 chain status")
    print("=" * 60)

    try:
        for network in registry.networks:
            service = registry.service_for(network)
            info = await service.get_blockchain_info()
            print(f"\n[{network.value}] height: {info.height}")
            print(f"[{network.value}] next validators: {len(info.validators)}")

            contracts = ContractService(service)
            for entry in contracts.list_supported_contracts():
                marker = "yes" if entry["available"] else "no"
                print(f"  {entry['name']:<12} deployed: {marker}")

        if len(sys.argv) > 1:
            service = registry.service_for()
            status = await service.check_transaction_status(sys.argv[1])
            print(f"\n[{service.network.value}] transaction {status.txid}: {status.status}")
            if status.status == "confirmed":
                print(f"  block {status.block_height}, {status.confirmations} confirmations")
    except NeoAccessError as e:
        print(to_error_response(e))
    finally:
        await registry.aclose()


if __name__ == "__main__":
    asyncio.run(main())
