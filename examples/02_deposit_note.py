#!/usr/bin/env python3
"""
Example 02: Build a mixer deposit against a local validator.

Mints a deposit note, builds the Deposit instruction and prints what would be
published. Submission is left to your wallet: plug an InstructionSubmitter
into MiyaClient to send it.

Usage:
    python examples/02_deposit_note.py
"""

import json
import logging

from miya_sdk import MiyaClient, ProtocolConfig
from miya_sdk.core.errors import LedgerRpcError

logging.basicConfig(level=logging.DEBUG)

config = ProtocolConfig(
    mixer_program_id="Mixer11111111111111111111111111111111111111",
    bridge_program_id="Bridge1111111111111111111111111111111111111",
)

mint = "11111111111111111111111111111111"
amount = 1_000_000_000
user = "4Nd1mBQtrMJVYVfKf2PJy9NZUZdTAsp7D4xWLs4gDB4T"

with MiyaClient(config) as client:
    try:
        pool = client.mixer.get_pool_info(mint, amount)
    except LedgerRpcError as e:
        pool = None
        print(f"Ledger unavailable ({e}); continuing offline")

    if pool is None:
        print("Pool not initialized yet")
    else:
        print(f"Pool {pool.address}: {pool.total_deposits} deposits, active={pool.is_active}")

    note, ix = client.mixer.deposit(user, mint, amount, user, user)

print("\n--- [Deposit] Instruction ---")
print(f"Program     : {ix.program_id}")
print(f"Accounts    : {[a.pubkey for a in ix.accounts]}")
print(f"Data        : {ix.data.hex()}")

print("\n--- [Note] Store this securely; it is the only way to withdraw ---")
print(json.dumps(note.to_dict(), indent=2))
