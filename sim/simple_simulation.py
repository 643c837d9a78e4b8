"""
Simple simulation for the DSN SupportToken.

This script walks through the ledger's main flows by hand and prints the
state after each step.
"""

import sys
import os

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))
from support_token import SupportToken


def print_state(token, accounts):
    print(f"  Total minted: {token.get_total_minted().value}")
    print(f"  Mint counter: {token.get_mint_counter().value}")
    print(f"  Paused: {token.is_paused().value}")
    for account in accounts:
        flag = " (blacklisted)" if token.get_blacklisted(account).value else ""
        print(f"  {account}: {token.get_balance(account).value}{flag}")


def run_basic_simulation():
    token = SupportToken()
    owner = token.owner
    users = ["wallet_1", "wallet_2", "wallet_3"]

    print(f"{token.get_name().value} ({token.get_symbol().value}), "
          f"{token.get_decimals().value} decimals, max supply {token.get_total_supply().value}")

    print("\nMinting initial balances...")
    for i, user in enumerate(users):
        result = token.mint(owner, 1000 * (i + 1), user, f"Initial grant for {user}")
        print(f"Mint to {user}: {result}")
    print_state(token, users)

    print("\nwallet_1 pays wallet_2 for a resolved complaint...")
    print(token.transfer("wallet_1", 400, "wallet_1", "wallet_2", b"complaint-17"))

    print("\nPausing the ledger and retrying...")
    token.pause(owner)
    print(token.transfer("wallet_1", 100, "wallet_1", "wallet_2"))
    token.unpause(owner)
    print(token.transfer("wallet_1", 100, "wallet_1", "wallet_2"))

    print("\nBlacklisting wallet_3...")
    token.blacklist(owner, "wallet_3")
    print(f"Transfer from wallet_3: {token.transfer('wallet_3', 1, 'wallet_3', 'wallet_1')}")
    print(f"Mint to wallet_3: {token.mint(owner, 1, 'wallet_3', 'reward')}")
    print(f"Burn by wallet_3: {token.burn('wallet_3', 500)}")

    print("\nFinal state:")
    print_state(token, users)
    token.check_invariants()
    print("Invariants hold.")


if __name__ == "__main__":
    run_basic_simulation()
