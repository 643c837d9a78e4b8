"""
Error codes and call results for the DSN SupportToken model.

Ledger operations never raise on a rejected call. They return a Response
carrying either the result value or exactly one ErrorCode, the same way the
on-chain contract returns (ok ...) / (err u10x).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """
    Numeric error kinds returned by the SupportToken contract.

    The numbers match the contract's ERR_* constants so off-chain tooling can
    decode receipts without a lookup table.
    """
    OWNER_ONLY = 100            # Caller is not the token owner
    INSUFFICIENT_BALANCE = 101  # Sender or burner holds less than amount
    INVALID_AMOUNT = 102        # Amount is zero or negative
    PAUSED = 103                # Value movement is paused
    BLACKLISTED = 104           # Sender or recipient is blacklisted
    MAX_SUPPLY_REACHED = 105    # Mint would exceed MAX_SUPPLY
    INVALID_RECIPIENT = 106     # Reserved, never returned
    ALREADY_BLACKLISTED = 107
    NOT_BLACKLISTED = 108
    UNAUTHORIZED = 109          # Caller is not the sender
    INVALID_METADATA = 110      # Mint notes too long


class TokenError(ValueError):
    """Raised when a failed Response is unwrapped."""

    def __init__(self, code: ErrorCode):
        super().__init__(f"{code.name} (u{code.value})")
        self.code = code


class InvariantViolation(ValueError):
    """Raised by SupportToken.check_invariants when the ledger state is inconsistent."""


@dataclass(frozen=True)
class Response:
    """
    Result of a ledger call.

    Attributes:
        ok: True if the call succeeded
        value: The result on success, the ErrorCode on failure
    """
    ok: bool
    value: Any

    @classmethod
    def success(cls, value: Any = True) -> "Response":
        return cls(ok=True, value=value)

    @classmethod
    def error(cls, code: ErrorCode) -> "Response":
        return cls(ok=False, value=code)

    @property
    def code(self):
        """The ErrorCode of a failed response, None for a successful one."""
        return None if self.ok else self.value

    def unwrap(self):
        """
        Returns the success value.

        Raises:
            TokenError: If the response is an error
        """
        if not self.ok:
            raise TokenError(self.value)
        return self.value
