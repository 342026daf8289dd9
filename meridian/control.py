"""
Meridian Control Plane

The explicit per-token context handle. Each ``ControlPlane`` owns its own
registry, transfer gate, issuance control, ledger and threshold authorizer,
so several tokens (or tests) run side by side without shared state.

It also composes the operations that span components: committed transfers,
threshold-approved emergency pause and large-value mint approval.
"""

import logging
import threading
from typing import Callable, List, Optional, Sequence

from .authorization import ThresholdAuthorizer
from .config import control_plane_options
from .errors import Unauthorized
from .gate import TransferDecision, TransferGate
from .issuance import IssuanceControl, StablecoinPreset
from .ledger import InMemoryTokenLedger, TokenLedger
from .logging_config import set_operation_id
from .registry import ComplianceRegistry, JurisdictionPolicy
from .threshold import ShamirShare
from .util import now_epoch

logger = logging.getLogger(__name__)

EMERGENCY_PAUSE = "emergency_pause"
LARGE_MINT = "large_mint"


class ControlPlane:
    """
    Compliance and issuance control plane for one token.

    Example:
        plane = ControlPlane("authority", "mint", preset="sss-2", treasury="treasury")
        plane.registry.add_to_whitelist("authority", "wallet", "standard", "singapore",
                                        kyc_hash, 100_000_000, expiry)
        plane.transfer("wallet", "other", 50_000_000)
    """

    def __init__(
        self,
        authority: str,
        mint: str,
        preset=StablecoinPreset.SSS_1,
        decimals: int = 2,
        treasury: Optional[str] = None,
        ledger: Optional[TokenLedger] = None,
        time_provider: Optional[Callable[[], int]] = None,
        jurisdiction_policy: Optional[JurisdictionPolicy] = None,
        deduplicate_references: bool = False,
        large_mint_threshold: int = 0,
        approval_threshold: int = 2,
        approval_shares: int = 3,
        **preset_overrides
    ):
        self._time = time_provider or now_epoch
        self.ledger = ledger if ledger is not None else InMemoryTokenLedger()
        self.registry = ComplianceRegistry(authority, mint, jurisdiction_policy, self._time)
        self.gate = TransferGate(self.registry, self.ledger)
        self.issuance = IssuanceControl.initialize(
            authority,
            mint,
            self.ledger,
            preset=preset,
            decimals=decimals,
            treasury=treasury,
            time_provider=self._time,
            deduplicate_references=deduplicate_references,
            **preset_overrides,
        )
        self.authorizer = ThresholdAuthorizer(approval_threshold, approval_shares)
        self.large_mint_threshold = large_mint_threshold
        self._approval_lock = threading.Lock()

    @classmethod
    def from_config(cls, authority: str, mint: str, policy_path: Optional[str] = None, **kwargs) -> "ControlPlane":
        """Build a control plane from environment settings; ``kwargs`` win."""
        options = control_plane_options(policy_path)
        options.update(kwargs)
        return cls(authority, mint, **options)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def check_transfer_eligible(self, wallet: str, amount: int, now: Optional[int] = None) -> TransferDecision:
        return self.gate.check_transfer_eligible(wallet, amount, now)

    def transfer(self, source: str, destination: str, amount: int) -> TransferDecision:
        set_operation_id()
        return self.gate.execute_transfer(source, destination, amount, self._time())

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def mint(self, issuer: str, recipient: str, amount: int, reference=None) -> int:
        """Ordinary mint. Amounts at or above the large-mint threshold need ``approve_large_mint``."""
        set_operation_id()
        if self._is_large(amount):
            raise Unauthorized(
                "mint requires threshold approval",
                {"amount": amount, "large_mint_threshold": self.large_mint_threshold},
            )
        return self.issuance.mint(issuer, recipient, amount, reference)

    def burn(self, issuer: str, holder: str, amount: int, redemption_info=None) -> int:
        set_operation_id()
        return self.issuance.burn(issuer, holder, amount, redemption_info)

    def seize(self, authority: str, source: str, treasury: str, amount: int = 0, reason: str = "") -> int:
        set_operation_id()
        return self.issuance.seize(authority, source, treasury, amount, reason)

    def _is_large(self, amount) -> bool:
        return self.large_mint_threshold > 0 and isinstance(amount, int) and amount >= self.large_mint_threshold

    # ------------------------------------------------------------------
    # Threshold-approved operations
    # ------------------------------------------------------------------

    def enroll_emergency_pause(self) -> List[ShamirShare]:
        """Issue custodian shares that together can pause issuance."""
        return self.authorizer.enroll(EMERGENCY_PAUSE)

    def enroll_large_mint(self) -> List[ShamirShare]:
        """Issue custodian shares for one large-value mint approval."""
        return self.authorizer.enroll(LARGE_MINT)

    def emergency_pause(self, shares: Sequence[ShamirShare]) -> None:
        """Pause issuance on threshold approval, without a pauser signature."""
        set_operation_id()
        self.authorizer.authorize(EMERGENCY_PAUSE, shares)
        self.issuance.force_pause("threshold:" + EMERGENCY_PAUSE)
        logger.warning("Issuance paused by threshold approval")

    def approve_large_mint(
        self,
        issuer: str,
        recipient: str,
        amount: int,
        reference,
        shares: Sequence[ShamirShare]
    ) -> int:
        """
        Mint under threshold approval.

        An approval is single-use: once the mint succeeds the shares are
        revoked and custodians must enroll again. A mint that fails leaves
        the approval in place.
        """
        set_operation_id()
        with self._approval_lock:
            self.authorizer.authorize(LARGE_MINT, shares)
            supply = self.issuance.mint(issuer, recipient, amount, reference)
            self.authorizer.revoke(LARGE_MINT)
        logger.info("Large mint of %s approved by threshold", amount)
        return supply
