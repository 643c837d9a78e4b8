"""
SupportToken Model for the DSN support platform.

This module simulates the SupportToken contract, the fungible token that backs
the token-gated support platform. It handles transfers, owner-gated minting,
self-burning, pausing, blacklisting and token metadata.

The complaint registry, resolution tracking, rewards, tier-gating, upgrade and
governance contracts only call `transfer` and the balance/supply queries; they
own no ledger state.

Every operation validates its preconditions in a fixed order and either
mutates the ledger completely or not at all. Rejections are returned as
Response values carrying an ErrorCode, never raised.
"""

import functools
import logging
import threading
from typing import List, Optional

from token_errors import ErrorCode, InvariantViolation, Response
from token_state import (
    DECIMALS,
    DEFAULT_OWNER,
    DEFAULT_TOKEN_URI,
    MAX_MEMO_LEN,
    MAX_METADATA_LEN,
    MAX_SUPPLY,
    TOKEN_NAME,
    TOKEN_SYMBOL,
    EventKind,
    LedgerState,
    MintRecord,
    TokenEvent,
)

logger = logging.getLogger(__name__)


def _atomic(method):
    """Runs the wrapped ledger call while holding the ledger-wide lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _require_int_amount(amount):
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"Amount must be an integer, got {type(amount).__name__}")


class SupportToken:
    """
    Simulates the SupportToken contract.

    All calls against one instance are serialized by a single re-entrant lock
    around the whole state bundle, so the cross-field invariants
    (sum of balances == total minted <= MAX_SUPPLY) hold even when the model
    is driven from several threads.
    """

    def __init__(self, owner=DEFAULT_OWNER, token_uri=DEFAULT_TOKEN_URI):
        self._state = LedgerState(owner=owner, token_uri=token_uri)
        self._lock = threading.RLock()

    @property
    def owner(self) -> str:
        """The fixed owner identity. There is no way to reassign it."""
        return self._state.owner

    @property
    def current_time(self) -> int:
        return self._state.current_time

    @_atomic
    def update_time(self, seconds: int) -> None:
        """
        Advances the block clock used to timestamp mint records.

        Args:
            seconds: Number of seconds to move forward
        """
        if seconds < 0:
            raise ValueError("Time cannot move backwards")
        self._state.current_time += seconds

    def _is_owner(self, caller) -> bool:
        return caller == self._state.owner

    def _reject(self, operation, code: ErrorCode) -> Response:
        logger.debug("%s rejected: %s", operation, code.name)
        return Response.error(code)

    def _emit(self, kind, actor, amount, recipient=None, memo=None):
        self._state.events.append(TokenEvent(
            kind=kind,
            actor=actor,
            amount=amount,
            timestamp=self._state.current_time,
            recipient=recipient,
            memo=memo,
        ))

    # --- Ledger operations ---

    @_atomic
    def transfer(self, caller: str, amount: int, sender: str, recipient: str,
                 memo: Optional[bytes] = None) -> Response:
        """
        Transfers tokens from sender to recipient.

        Only the sender may move its own tokens; there are no allowances.
        Checks run in this order and the first failure is returned:
        paused, caller is sender, amount > 0, sender balance, sender
        blacklisted, recipient blacklisted.

        Args:
            caller: Identity invoking the call
            amount: Amount of tokens to transfer
            sender: Address sending the tokens
            recipient: Address receiving the tokens
            memo: Optional memo of at most MAX_MEMO_LEN bytes

        Returns:
            Response with True on success or the ErrorCode of the failed check

        Raises:
            ValueError: If memo is longer than MAX_MEMO_LEN bytes
            TypeError: If memo is not bytes or amount is not an integer
        """
        if memo is not None:
            if not isinstance(memo, (bytes, bytearray)):
                raise TypeError(f"Memo must be bytes, got {type(memo).__name__}")
            if len(memo) > MAX_MEMO_LEN:
                raise ValueError(f"Memo cannot exceed {MAX_MEMO_LEN} bytes")
            memo = bytes(memo)
        _require_int_amount(amount)

        state = self._state
        if state.paused:
            return self._reject("transfer", ErrorCode.PAUSED)
        if caller != sender:
            return self._reject("transfer", ErrorCode.UNAUTHORIZED)
        if amount <= 0:
            return self._reject("transfer", ErrorCode.INVALID_AMOUNT)

        sender_balance = state.balance_of(sender)
        if sender_balance < amount:
            return self._reject("transfer", ErrorCode.INSUFFICIENT_BALANCE)
        if state.is_blacklisted(sender):
            return self._reject("transfer", ErrorCode.BLACKLISTED)
        if state.is_blacklisted(recipient):
            return self._reject("transfer", ErrorCode.BLACKLISTED)

        # Update balances
        state.balances[sender] = sender_balance - amount
        state.balances[recipient] = state.balance_of(recipient) + amount

        self._emit(EventKind.TRANSFER, sender, amount, recipient=recipient, memo=memo)
        logger.info("Transfer %d from %s to %s", amount, sender, recipient)
        return Response.success()

    @_atomic
    def mint(self, caller: str, amount: int, recipient: str, notes: str) -> Response:
        """
        Mints new tokens to the recipient and records a mint audit entry.
        Only callable by the owner.

        Checks, in order: owner, paused, amount > 0, supply ceiling,
        notes length, recipient blacklisted.

        Args:
            caller: Identity invoking the call
            amount: Amount of tokens to mint
            recipient: Address receiving the minted tokens
            notes: Free-text notes stored in the mint record

        Returns:
            Response with True on success or the ErrorCode of the failed check
        """
        _require_int_amount(amount)

        state = self._state
        if not self._is_owner(caller):
            return self._reject("mint", ErrorCode.OWNER_ONLY)
        if state.paused:
            return self._reject("mint", ErrorCode.PAUSED)
        if amount <= 0:
            return self._reject("mint", ErrorCode.INVALID_AMOUNT)
        if state.total_minted + amount > MAX_SUPPLY:
            return self._reject("mint", ErrorCode.MAX_SUPPLY_REACHED)
        if len(notes) > MAX_METADATA_LEN:
            return self._reject("mint", ErrorCode.INVALID_METADATA)
        if state.is_blacklisted(recipient):
            return self._reject("mint", ErrorCode.BLACKLISTED)

        state.balances[recipient] = state.balance_of(recipient) + amount
        state.total_minted += amount

        mint_id = state.mint_counter + 1
        state.mint_metadata[mint_id] = MintRecord(
            minter=caller,
            amount=amount,
            timestamp=state.current_time,
            notes=notes,
        )
        state.mint_counter = mint_id

        self._emit(EventKind.MINT, caller, amount, recipient=recipient)
        logger.info("Mint #%d: %d to %s", mint_id, amount, recipient)
        return Response.success()

    @_atomic
    def burn(self, caller: str, amount: int) -> Response:
        """
        Burns tokens from the caller's own balance.

        Blacklisted accounts may still burn: the blacklist restricts
        acquiring and moving funds, not destroying them.

        Args:
            caller: Address burning its tokens
            amount: Amount of tokens to burn

        Returns:
            Response with True on success or the ErrorCode of the failed check
        """
        _require_int_amount(amount)

        state = self._state
        if state.paused:
            return self._reject("burn", ErrorCode.PAUSED)
        if amount <= 0:
            return self._reject("burn", ErrorCode.INVALID_AMOUNT)

        balance = state.balance_of(caller)
        if balance < amount:
            return self._reject("burn", ErrorCode.INSUFFICIENT_BALANCE)

        state.balances[caller] = balance - amount
        state.total_minted -= amount

        self._emit(EventKind.BURN, caller, amount)
        logger.info("Burn %d from %s", amount, caller)
        return Response.success()

    # --- Administration ---

    @_atomic
    def pause(self, caller: str) -> Response:
        """Pauses transfer, mint and burn. Pausing an already paused ledger succeeds."""
        if not self._is_owner(caller):
            return self._reject("pause", ErrorCode.OWNER_ONLY)
        self._state.paused = True
        logger.info("Ledger paused")
        return Response.success()

    @_atomic
    def unpause(self, caller: str) -> Response:
        if not self._is_owner(caller):
            return self._reject("unpause", ErrorCode.OWNER_ONLY)
        self._state.paused = False
        logger.info("Ledger unpaused")
        return Response.success()

    @_atomic
    def blacklist(self, caller: str, account: str) -> Response:
        """Adds an account to the blacklist. Fails if it is already there."""
        if not self._is_owner(caller):
            return self._reject("blacklist", ErrorCode.OWNER_ONLY)
        if self._state.is_blacklisted(account):
            return self._reject("blacklist", ErrorCode.ALREADY_BLACKLISTED)
        self._state.blacklisted.add(account)
        logger.info("Blacklisted %s", account)
        return Response.success()

    @_atomic
    def unblacklist(self, caller: str, account: str) -> Response:
        """Removes an account from the blacklist. Fails if it is not there."""
        if not self._is_owner(caller):
            return self._reject("unblacklist", ErrorCode.OWNER_ONLY)
        if not self._state.is_blacklisted(account):
            return self._reject("unblacklist", ErrorCode.NOT_BLACKLISTED)
        self._state.blacklisted.discard(account)
        logger.info("Unblacklisted %s", account)
        return Response.success()

    @_atomic
    def set_token_uri(self, caller: str, new_uri: Optional[str] = None) -> Response:
        """
        Sets or clears (with None) the token metadata URI.

        Raises:
            ValueError: If the URI is longer than MAX_METADATA_LEN characters
        """
        if new_uri is not None and len(new_uri) > MAX_METADATA_LEN:
            raise ValueError(f"Token URI cannot exceed {MAX_METADATA_LEN} characters")
        if not self._is_owner(caller):
            return self._reject("set-token-uri", ErrorCode.OWNER_ONLY)
        self._state.token_uri = new_uri
        logger.info("Token URI set to %s", new_uri)
        return Response.success()

    # --- Getter functions ---

    def get_name(self) -> Response:
        return Response.success(TOKEN_NAME)

    def get_symbol(self) -> Response:
        return Response.success(TOKEN_SYMBOL)

    def get_decimals(self) -> Response:
        return Response.success(DECIMALS)

    def get_total_supply(self) -> Response:
        """Returns the supply ceiling, not the amount in circulation (see get_total_minted)."""
        return Response.success(MAX_SUPPLY)

    @_atomic
    def get_balance(self, account: str) -> Response:
        return Response.success(self._state.balance_of(account))

    @_atomic
    def get_token_uri(self) -> Response:
        return Response.success(self._state.token_uri)

    @_atomic
    def is_paused(self) -> Response:
        return Response.success(self._state.paused)

    @_atomic
    def get_blacklisted(self, account: str) -> Response:
        return Response.success(self._state.is_blacklisted(account))

    @_atomic
    def get_total_minted(self) -> Response:
        return Response.success(self._state.total_minted)

    @_atomic
    def get_mint_metadata(self, mint_id: int) -> Response:
        """Returns the MintRecord stored under mint_id, or None if there is none."""
        return Response.success(self._state.mint_metadata.get(mint_id))

    @_atomic
    def get_mint_counter(self) -> Response:
        return Response.success(self._state.mint_counter)

    @_atomic
    def get_events(self) -> List[TokenEvent]:
        """Returns a copy of the event log, oldest first."""
        return list(self._state.events)

    @_atomic
    def get_accounts(self) -> List[str]:
        """Returns every account that has ever held a balance entry."""
        return list(self._state.balances)

    @_atomic
    def check_invariants(self) -> None:
        """
        Verifies the ledger's supply and audit-log invariants.

        Raises:
            InvariantViolation: Naming the first invariant that does not hold
        """
        state = self._state
        negative = [a for a, b in state.balances.items() if b < 0]
        if negative:
            raise InvariantViolation(f"Negative balance for {negative}")

        circulating = sum(state.balances.values())
        if circulating != state.total_minted:
            raise InvariantViolation(
                f"Sum of balances {circulating} != total minted {state.total_minted}"
            )
        if state.total_minted > MAX_SUPPLY:
            raise InvariantViolation(f"Total minted {state.total_minted} exceeds MAX_SUPPLY")

        if sorted(state.mint_metadata) != list(range(1, state.mint_counter + 1)):
            raise InvariantViolation("Mint log ids are not exactly 1..mint counter")
