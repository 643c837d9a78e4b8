"""
Economic Model for the DSN SupportToken.

This module drives a SupportToken with a population of platform users to
simulate how value moves through the support platform over time. Users pay
each other (the collaborating contracts only ever call `transfer`), burn
tokens for upgrades, and the owner mints rewards and occasionally blacklists
abusive accounts. The ledger invariants are checked after every simulated
hour.
"""

import logging
from collections import Counter

import numpy as np
import matplotlib.pyplot as plt

from support_token import SupportToken
from token_state import DEFAULT_OWNER, MAX_SUPPLY

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 60 * 60
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


class SupportTokenEconomy:
    """
    Economic model of the SupportToken ledger.
    Combines the token with a user population and provides simulation capabilities.
    """

    def __init__(self, num_users=10, initial_grant=10_000, seed=None, owner=DEFAULT_OWNER):
        if num_users < 2:
            raise ValueError("At least two users are needed to simulate transfers")

        self.owner = owner
        self.token = SupportToken(owner=owner)
        self.users = [f"user{i}" for i in range(num_users)]
        self.rng = np.random.default_rng(seed)

        # Operation tallies
        self.accepted = Counter()  # operation -> count
        self.rejected = Counter()  # error code name -> count

        # History tracking
        self.time_history = []
        self.total_minted_history = []
        self.holders_history = []
        self.top_share_history = []
        self.blacklisted_history = []

        for user in self.users:
            self._record("mint", self.token.mint(owner, initial_grant, user, "Initial grant"))

        self._update_history()

    def _record(self, operation, response):
        if response.ok:
            self.accepted[operation] += 1
        else:
            self.rejected[response.code.name] += 1
        return response

    def balance_of(self, account):
        return self.token.get_balance(account).unwrap()

    def update_time(self, seconds):
        """
        Advances the ledger clock and records a history point.

        Args:
            seconds: Seconds to advance
        """
        self.token.update_time(seconds)
        self._update_history()

    def get_system_state(self):
        """
        Returns the current state of the ledger.

        Returns:
            Dictionary with system state
        """
        balances = np.array([self.balance_of(a) for a in self.token.get_accounts()], dtype=float)
        circulating = int(balances.sum()) if balances.size else 0
        top_share = float(balances.max() / balances.sum()) if circulating > 0 else 0.0

        return {
            'time': self.token.current_time,
            'total_minted': self.token.get_total_minted().unwrap(),
            'circulating': circulating,
            'holders': int(np.count_nonzero(balances > 0)),
            'blacklisted': sum(1 for u in self.users if self.token.get_blacklisted(u).unwrap()),
            'paused': self.token.is_paused().unwrap(),
            'mint_counter': self.token.get_mint_counter().unwrap(),
            'top_holder_share': top_share,
            'remaining_supply': MAX_SUPPLY - self.token.get_total_minted().unwrap(),
        }

    def _update_history(self):
        """Updates history tracking for simulations."""
        state = self.get_system_state()

        self.time_history.append(state['time'] / SECONDS_PER_DAY)
        self.total_minted_history.append(state['total_minted'])
        self.holders_history.append(state['holders'])
        self.top_share_history.append(state['top_holder_share'])
        self.blacklisted_history.append(state['blacklisted'])

    def _random_user(self, exclude=None):
        candidates = [u for u in self.users if u != exclude]
        return candidates[int(self.rng.integers(len(candidates)))]

    def _random_amount(self, balance):
        # Occasionally overshoot the balance so rejections show up in the tallies
        return int(self.rng.integers(1, int(balance * 1.2) + 2))

    def _random_transfer(self):
        sender = self._random_user()
        recipient = self._random_user(exclude=sender)
        amount = self._random_amount(self.balance_of(sender))
        memo = b"support-payment"
        self._record("transfer", self.token.transfer(sender, amount, sender, recipient, memo))

    def _random_burn(self):
        user = self._random_user()
        amount = self._random_amount(self.balance_of(user) // 4)
        self._record("burn", self.token.burn(user, amount))

    def _random_mint(self):
        recipient = self._random_user()
        amount = int(self.rng.integers(1, 5_000))
        self._record("mint", self.token.mint(self.owner, amount, recipient, "Resolution reward"))

    def _random_blacklist_toggle(self):
        user = self._random_user()
        if self.token.get_blacklisted(user).unwrap():
            self._record("unblacklist", self.token.unblacklist(self.owner, user))
        else:
            self._record("blacklist", self.token.blacklist(self.owner, user))

    def simulate_activity(self, days, actions_per_hour=3.0, mint_probability=0.05,
                          burn_probability=0.1, blacklist_probability=0.01, plot_results=True):
        """
        Runs a simulation of random platform activity over the specified period.

        Each hour a Poisson-distributed number of actions is drawn. Each
        action is an owner mint, a user burn, a blacklist toggle or, most of
        the time, a user-to-user transfer. Invariants are checked after
        every hour.

        Args:
            days: Number of days to simulate
            actions_per_hour: Mean number of ledger calls per hour
            mint_probability: Probability that an action is an owner mint
            burn_probability: Probability that an action is a burn
            blacklist_probability: Probability that an action is a blacklist toggle
            plot_results: Whether to plot the results

        Returns:
            Dictionary with simulation results

        Raises:
            InvariantViolation: If any ledger invariant breaks during the run
        """
        if mint_probability + burn_probability + blacklist_probability > 1:
            raise ValueError("Action probabilities cannot sum to more than 1")

        steps = days * 24
        initial_minted = self.token.get_total_minted().unwrap()
        logger.info("Simulating %d days at %.1f actions per hour", days, actions_per_hour)

        for _ in range(steps):
            for _ in range(int(self.rng.poisson(actions_per_hour))):
                draw = self.rng.random()
                if draw < mint_probability:
                    self._random_mint()
                elif draw < mint_probability + burn_probability:
                    self._random_burn()
                elif draw < mint_probability + burn_probability + blacklist_probability:
                    self._random_blacklist_toggle()
                else:
                    self._random_transfer()

            self.token.check_invariants()
            self.update_time(SECONDS_PER_HOUR)

        if plot_results:
            self.plot_history()

        final_state = self.get_system_state()
        logger.info("Simulation finished: total minted %d, %d holders, %d rejected calls",
                    final_state['total_minted'], final_state['holders'], sum(self.rejected.values()))
        return {
            'days': days,
            'initial_total_minted': initial_minted,
            'final_total_minted': final_state['total_minted'],
            'final_holders': final_state['holders'],
            'final_blacklisted': final_state['blacklisted'],
            'final_top_holder_share': final_state['top_holder_share'],
            'mint_counter': final_state['mint_counter'],
            'accepted_operations': dict(self.accepted),
            'rejected_operations': dict(self.rejected),
            'events': len(self.token.get_events()),
        }

    def plot_history(self):
        """Plots supply, holder count, concentration and blacklist size over time."""
        fig, axs = plt.subplots(4, 1, figsize=(12, 16), sharex=True)

        axs[0].plot(self.time_history, self.total_minted_history)
        axs[0].set_title('Total Minted')
        axs[0].set_ylabel('DSN')

        axs[1].plot(self.time_history, self.holders_history)
        axs[1].set_title('Holders')
        axs[1].set_ylabel('Count')

        axs[2].plot(self.time_history, self.top_share_history)
        axs[2].set_title('Top Holder Share')
        axs[2].set_ylabel('Fraction')

        axs[3].plot(self.time_history, self.blacklisted_history)
        axs[3].set_title('Blacklisted Accounts')
        axs[3].set_ylabel('Count')
        axs[3].set_xlabel('Days')

        plt.tight_layout()
        plt.show()
