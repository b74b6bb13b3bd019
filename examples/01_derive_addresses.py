#!/usr/bin/env python3
"""
Example 01: Program-owned addresses.

Derives the pool, bridge, chain and token-pair addresses for a deployment.
Pure computation: no ledger connection is needed.

Usage:
    python examples/01_derive_addresses.py
    python examples/01_derive_addresses.py <mixer_program_id> <bridge_program_id>
"""

import sys

from miya_sdk.core.address import (
    find_bridge_address,
    find_chain_address,
    find_pool_address,
    find_token_pair_address,
    is_valid_pubkey,
)

mixer_id = "Mixer11111111111111111111111111111111111111"
bridge_id = "Bridge1111111111111111111111111111111111111"
mint = "11111111111111111111111111111111"

if len(sys.argv) > 2:
    mixer_id, bridge_id = sys.argv[1], sys.argv[2]

for label, program in (("Mixer", mixer_id), ("Bridge", bridge_id)):
    if not is_valid_pubkey(program):
        sys.exit(f"{label} program id is not a 32-byte base58 key: {program}")

print("--- [Mixer] Pools ---")
for amount in (100_000_000, 1_000_000_000, 10_000_000_000):
    address, bump = find_pool_address(mixer_id, mint, amount)
    print(f"  {amount:>14,} : {address} (bump {bump})")

print("\n--- [Bridge] State ---")
address, bump = find_bridge_address(bridge_id)
print(f"  bridge         : {address} (bump {bump})")
for chain_id in (1, 2, 56):
    address, bump = find_chain_address(bridge_id, chain_id)
    print(f"  chain {chain_id:<8} : {address} (bump {bump})")

address, bump = find_token_pair_address(bridge_id, 1, 2, mint)
print(f"  pair 1 -> 2    : {address} (bump {bump})")
