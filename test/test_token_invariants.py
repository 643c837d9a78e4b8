"""
Invariant tests for the SupportToken ledger.

These tests drive the ledger with random call sequences, including calls
from non-owners and calls that are expected to fail, and verify the supply
invariants after every call.
"""

import unittest
import sys
import os
import threading

import numpy as np

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))

from support_token import SupportToken
from token_errors import InvariantViolation
from token_state import MAX_SUPPLY


class TestTokenInvariants(unittest.TestCase):
    def setUp(self):
        self.token = SupportToken()
        self.owner = self.token.owner
        self.accounts = ["deployer", "wallet_1", "wallet_2", "wallet_3", "wallet_4"]

    def _snapshot(self):
        return {
            'balances': {a: self.token.get_balance(a).value for a in self.accounts},
            'total_minted': self.token.get_total_minted().value,
            'mint_counter': self.token.get_mint_counter().value,
            'paused': self.token.is_paused().value,
        }

    def _random_call(self, rng):
        pick = lambda: self.accounts[int(rng.integers(len(self.accounts)))]
        amount = int(rng.integers(-2, 2_000))
        op = int(rng.integers(8))
        if op == 0:
            return self.token.mint(pick(), amount, pick(), "n" * int(rng.integers(0, 300)))
        if op == 1:
            return self.token.burn(pick(), amount)
        if op == 2:
            return self.token.pause(pick())
        if op == 3:
            return self.token.unpause(pick())
        if op == 4:
            return self.token.blacklist(pick(), pick())
        if op == 5:
            return self.token.unblacklist(pick(), pick())
        sender = pick()
        caller = sender if rng.random() < 0.9 else pick()
        return self.token.transfer(caller, amount, sender, pick())

    def test_random_sequences_preserve_invariants(self):
        """Test supply and non-negativity invariants over random call sequences."""
        rng = np.random.default_rng(1234)
        self.token.mint(self.owner, 10_000, "wallet_1", "seed")

        for _ in range(2_000):
            before = self._snapshot()
            response = self._random_call(rng)

            self.token.check_invariants()
            after = self._snapshot()
            if not response.ok:
                self.assertEqual(before, after, f"Failed call {response} changed state")
            self.assertGreaterEqual(after['mint_counter'], before['mint_counter'])
            self.assertLessEqual(after['mint_counter'] - before['mint_counter'], 1)
            self.assertLessEqual(after['total_minted'], MAX_SUPPLY)
            self.assertEqual(sum(after['balances'].values()), after['total_minted'])

    def test_blacklisted_accounts_never_move_value(self):
        rng = np.random.default_rng(99)
        for account in self.accounts[1:]:
            self.token.mint(self.owner, 5_000, account, "seed")
        self.token.blacklist(self.owner, "wallet_2")

        for _ in range(500):
            sender = self.accounts[int(rng.integers(1, len(self.accounts)))]
            recipient = self.accounts[int(rng.integers(1, len(self.accounts)))]
            response = self.token.transfer(sender, int(rng.integers(1, 100)), sender, recipient)
            if "wallet_2" in (sender, recipient):
                self.assertFalse(response.ok)

        self.assertEqual(self.token.get_balance("wallet_2").value, 5_000)

    def test_check_invariants_detects_corruption(self):
        self.token.mint(self.owner, 100, "wallet_1", "seed")
        self.token._state.balances["wallet_1"] = 99
        with self.assertRaises(InvariantViolation):
            self.token.check_invariants()

    def test_concurrent_transfers_conserve_supply(self):
        """Test that threads hammering the ledger cannot break conservation."""
        users = [f"user{i}" for i in range(8)]
        for user in users:
            self.token.mint(self.owner, 1_000, user, "seed")

        def worker(index):
            rng = np.random.default_rng(index)
            sender = users[index]
            for _ in range(300):
                recipient = users[int(rng.integers(len(users)))]
                self.token.transfer(sender, int(rng.integers(1, 50)), sender, recipient)
                self.token.burn(sender, 1)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(len(users))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.token.check_invariants()
        total = sum(self.token.get_balance(u).value for u in users)
        self.assertEqual(total, self.token.get_total_minted().value)


if __name__ == '__main__':
    unittest.main()
