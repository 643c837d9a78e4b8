"""
Ledger state for the DSN SupportToken model.

This module holds the constants of the token and the plain data records the
ledger is made of:
- per-account balances (sparse, absent means zero)
- supply accounting and the pause flag
- the blacklist
- the append-only mint audit log
- the advisory event log used for off-chain indexing
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

# Token constants
TOKEN_NAME = "DSN Token"
TOKEN_SYMBOL = "DSN"
DECIMALS = 8
MAX_SUPPLY = 1_000_000_000
MAX_METADATA_LEN = 256  # characters, for mint notes and the token URI
MAX_MEMO_LEN = 34       # bytes

# Deployment defaults
DEFAULT_OWNER = "deployer"
DEFAULT_TOKEN_URI = "https://dsn.example.com/token-metadata.json"


class EventKind(Enum):
    """Kinds of events emitted by successful value movements."""
    TRANSFER = 0
    MINT = 1
    BURN = 2


@dataclass(frozen=True)
class MintRecord:
    """
    Immutable audit entry written once per successful mint.

    The minter is always the owner since mint is owner-gated.
    """
    minter: str
    amount: int
    timestamp: int
    notes: str


@dataclass(frozen=True)
class TokenEvent:
    """Event emitted for off-chain indexing. Not part of the ledger invariants."""
    kind: EventKind
    actor: str
    amount: int
    timestamp: int
    recipient: Optional[str] = None
    memo: Optional[bytes] = None


@dataclass
class LedgerState:
    """
    The full state bundle owned by a SupportToken.

    Mutated only by SupportToken operations while holding the ledger lock.
    """
    owner: str
    token_uri: Optional[str] = DEFAULT_TOKEN_URI
    balances: Dict[str, int] = field(default_factory=dict)
    total_minted: int = 0
    paused: bool = False
    blacklisted: Set[str] = field(default_factory=set)
    mint_metadata: Dict[int, MintRecord] = field(default_factory=dict)
    mint_counter: int = 0
    events: List[TokenEvent] = field(default_factory=list)
    current_time: int = 0  # block time in seconds

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def is_blacklisted(self, account: str) -> bool:
        return account in self.blacklisted
