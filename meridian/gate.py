"""
Meridian Transfer Gate

Evaluates whether a wallet may move a given amount, and commits transfers
that pass.

Evaluation order for a wallet (first failure wins):
    1. Active blacklist entry          -> BLACKLISTED
    2. No active whitelist entry       -> NOT_WHITELISTED
    3. expiry_timestamp < now          -> EXPIRED
    4. Jurisdiction restricted         -> JURISDICTION_NOT_ALLOWED
    5. Daily limit would be exceeded   -> DAILY_LIMIT_EXCEEDED
    6. Account frozen on the ledger    -> ACCOUNT_FROZEN

An inactive registry denies everything with REGISTRY_INACTIVE before any
wallet is looked at. Probes never mutate state; only ``execute_transfer``
advances the sender's daily volume, and a zero-amount transfer that passes
commits nothing.
"""

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ErrorCode, InvalidAmount, MeridianError
from .ledger import TokenLedger
from .logging_config import audit_log
from .registry import ComplianceRegistry, WhitelistEntry

logger = logging.getLogger(__name__)


@dataclass
class TransferDecision:
    """Result of evaluating one wallet for one transfer."""
    wallet: str
    eligible: bool
    reason: Optional[ErrorCode] = None
    required: Optional[str] = None
    observed: Optional[str] = None
    evaluated_at: int = 0

    def passed(self) -> bool:
        return self.eligible

    def to_dict(self) -> Dict[str, Any]:
        d = {"wallet": self.wallet, "eligible": self.eligible, "evaluated_at": self.evaluated_at}
        if self.reason:
            d["reason"] = self.reason.value
        if self.required:
            d["required"] = self.required
        if self.observed:
            d["observed"] = self.observed
        return d


class TransferDeniedError(MeridianError):
    """Raised when a committed transfer is rejected by the gate."""

    def __init__(self, decision: TransferDecision):
        self.decision = decision
        self.code = decision.reason or ErrorCode.NOT_WHITELISTED
        super().__init__(
            f"Transfer denied for {decision.wallet}: {self.code.value}",
            decision.to_dict(),
        )


class TransferGate:
    """
    Transfer eligibility and commit path over one registry and ledger.
    """

    def __init__(self, registry: ComplianceRegistry, ledger: TokenLedger):
        self.registry = registry
        self.ledger = ledger

    def check_transfer_eligible(self, wallet: str, amount: int, now: Optional[int] = None) -> TransferDecision:
        """Pure probe: evaluate ``wallet`` sending ``amount`` at ``now``."""
        _require_amount(amount)
        now = self.registry.now() if now is None else now
        with self.registry.record_lock(wallet):
            decision = self._evaluate(wallet, amount, now, check_limit=True)
        if not decision.eligible:
            logger.debug("Wallet %s ineligible: %s", wallet, decision.reason.value)
        return decision

    def check_recipient_eligible(self, wallet: str, now: Optional[int] = None) -> TransferDecision:
        """Evaluate ``wallet`` as a recipient. Daily limits bind senders only."""
        now = self.registry.now() if now is None else now
        with self.registry.record_lock(wallet):
            return self._evaluate(wallet, 0, now, check_limit=False)

    def execute_transfer(
        self,
        source: str,
        destination: str,
        amount: int,
        now: Optional[int] = None
    ) -> TransferDecision:
        """
        Check both parties, move the balance, and commit the sender's volume.

        Both wallets' records are held for the whole step, so the
        check-reset-increment of the sender's counter is atomic with respect
        to any other transfer touching either wallet.

        Raises:
            TransferDeniedError: Either party failed evaluation, a frozen
                account included.
            InsufficientBalance: The ledger refused the debit.
        """
        _require_amount(amount)
        now = self.registry.now() if now is None else now

        with ExitStack() as stack:
            for wallet in sorted({source, destination}):
                stack.enter_context(self.registry.record_lock(wallet))

            decision = self._evaluate(source, amount, now, check_limit=True)
            if decision.eligible:
                recipient = self._evaluate(destination, 0, now, check_limit=False)
                if not recipient.eligible:
                    decision = recipient

            if not decision.eligible:
                audit_log.transfer_decision(source, destination, amount, False, decision.reason.value)
                raise TransferDeniedError(decision)

            if amount:
                self.ledger.move(source, destination, amount)

                entry = self.registry.find_whitelist_entry(source)
                entry.volume.add(amount, now)
                entry.last_activity = now

        audit_log.transfer_decision(source, destination, amount, True, committed=bool(amount))
        return decision

    def _evaluate(self, wallet: str, amount: int, now: int, check_limit: bool) -> TransferDecision:
        if not self.registry.is_active:
            return _deny(wallet, ErrorCode.REGISTRY_INACTIVE, now)

        if self.registry.is_blacklisted(wallet):
            return _deny(wallet, ErrorCode.BLACKLISTED, now)

        entry: Optional[WhitelistEntry] = self.registry.find_whitelist_entry(wallet)
        if entry is None or not entry.is_active:
            return _deny(wallet, ErrorCode.NOT_WHITELISTED, now)

        if entry.is_expired(now):
            return _deny(
                wallet, ErrorCode.EXPIRED, now,
                required=f">= {now}", observed=str(entry.expiry_timestamp),
            )

        if not self.registry.policy.allows(entry.jurisdiction):
            return _deny(wallet, ErrorCode.JURISDICTION_NOT_ALLOWED, now, observed=entry.jurisdiction.value)

        if check_limit and not entry.volume.allows(entry.daily_limit, amount, now):
            return _deny(
                wallet, ErrorCode.DAILY_LIMIT_EXCEEDED, now,
                required=f"<= {entry.daily_limit}",
                observed=str(entry.volume.current(now) + amount),
            )

        if self.ledger.is_frozen(wallet):
            return _deny(wallet, ErrorCode.ACCOUNT_FROZEN, now)

        return TransferDecision(wallet=wallet, eligible=True, evaluated_at=now)


def _deny(
    wallet: str,
    reason: ErrorCode,
    now: int,
    required: Optional[str] = None,
    observed: Optional[str] = None
) -> TransferDecision:
    return TransferDecision(
        wallet=wallet,
        eligible=False,
        reason=reason,
        required=required,
        observed=observed,
        evaluated_at=now,
    )


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise InvalidAmount("amount must be a non-negative integer", {"amount": amount})
