"""
Meridian Issuance Ledger & Issuance Control

Owns the mint configuration, role assignments, issuer records and the
collateral vault for one token, and decides every mint, burn, seizure and
pause request against them.

Invariants enforced here:
- Total supply never exceeds vault collateral (100% backing).
- Seizure is impossible unless ``enable_permanent_delegate`` is set, which
  the SSS-1 preset forbids.
- Each issuer's daily mint and burn volumes stay within their ceilings.

All issuance state is guarded by one re-entrant lock, so every
check-reset-increment is a single atomic step and a rejected request leaves
every record unchanged.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set

from .epoch import DailyCounter, epoch_start
from .errors import (
    AccountNotFrozen,
    AlreadyPaused,
    CollateralInsufficient,
    DailyLimitExceeded,
    DuplicateReference,
    InsufficientBalance,
    InsufficientSupply,
    InvalidAmount,
    InvalidConfiguration,
    IssuerInactive,
    MeridianError,
    NotFound,
    NotPaused,
    Paused,
    PermanentDelegateNotEnabled,
    TreasuryNotConfigured,
    Unauthorized,
)
from .ledger import TokenLedger, derive_address
from .logging_config import audit_log
from .util import (
    KYC_HASH_LENGTH,
    REDEMPTION_INFO_LENGTH,
    REFERENCE_LENGTH,
    REASON_LENGTH,
    fixed_bytes,
    now_epoch,
    text_to_fixed,
)

logger = logging.getLogger(__name__)

FULL_BACKING_BPS = 10000


def _parse_enum(cls, value, name: str):
    if isinstance(value, cls):
        return value
    key = str(value).strip().lower().replace("_", "-").replace(" ", "-")
    try:
        return cls(key)
    except ValueError:
        raise InvalidConfiguration(f"Unknown {name}: {value}", {"field": name})


class StablecoinPreset(str, Enum):
    """Named bundles of default configuration flags."""
    SSS_1 = "sss-1"    # minimal: mint, freeze, metadata
    SSS_2 = "sss-2"    # compliant: SSS-1 + permanent delegate + transfer hook
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "StablecoinPreset":
        if isinstance(value, str) and value.strip().lower() in ("sss1", "sss2"):
            value = value.strip()[:3] + "-" + value.strip()[3:]
        return _parse_enum(cls, value, "preset")


class IssuerType(str, Enum):
    TRUST_BANK = "trust-bank"
    DISTRIBUTOR = "distributor"
    EXCHANGE = "exchange"
    API_PARTNER = "api-partner"

    @classmethod
    def parse(cls, value) -> "IssuerType":
        return _parse_enum(cls, value, "issuer_type")


class CollateralType(str, Enum):
    FIAT = "fiat"
    GOVERNMENT_BOND = "government-bond"
    BANK_DEPOSIT = "bank-deposit"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> "CollateralType":
        return _parse_enum(cls, value, "collateral_type")


class VaultStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    UNDER_AUDIT = "under-audit"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value) -> "VaultStatus":
        return _parse_enum(cls, value, "vault_status")


class Role(str, Enum):
    """Privileged roles. The master authority implicitly holds all of them."""
    ISSUER_ADMIN = "issuer-admin"
    COMPLIANCE_OFFICER = "compliance-officer"
    PAUSER = "pauser"
    SEIZER = "seizer"

    @classmethod
    def parse(cls, value) -> "Role":
        return _parse_enum(cls, value, "role")


@dataclass(frozen=True)
class PresetFlags:
    enable_permanent_delegate: bool
    enable_transfer_hook: bool
    default_account_frozen: bool
    requires_treasury: bool = False
    fixed: bool = True


def preset_defaults(preset: StablecoinPreset) -> PresetFlags:
    """
    Default flags for a preset.

    SSS-1 and SSS-2 fix their flags; Custom only supplies defaults that the
    caller may override.
    """
    if preset is StablecoinPreset.SSS_1:
        return PresetFlags(False, False, False)
    if preset is StablecoinPreset.SSS_2:
        return PresetFlags(True, True, True, requires_treasury=True)
    if preset is StablecoinPreset.CUSTOM:
        return PresetFlags(False, False, False, fixed=False)
    raise InvalidConfiguration(f"Unknown preset: {preset}", {"field": "preset"})


@dataclass
class MintConfig:
    authority: str
    mint: str
    preset: StablecoinPreset
    decimals: int
    enable_permanent_delegate: bool
    enable_transfer_hook: bool
    default_account_frozen: bool
    treasury: Optional[str] = None
    collateral_ratio_bps: int = FULL_BACKING_BPS
    is_paused: bool = False
    total_supply: int = 0
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authority": self.authority,
            "mint": self.mint,
            "preset": self.preset.value,
            "decimals": self.decimals,
            "enable_permanent_delegate": self.enable_permanent_delegate,
            "enable_transfer_hook": self.enable_transfer_hook,
            "default_account_frozen": self.default_account_frozen,
            "treasury": self.treasury,
            "collateral_ratio_bps": self.collateral_ratio_bps,
            "is_paused": self.is_paused,
            "total_supply": self.total_supply,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class RoleConfig:
    master_authority: str
    assignments: Dict[Role, Optional[str]] = field(
        default_factory=lambda: {role: None for role in Role}
    )

    def holds(self, role: Role, identity: str) -> bool:
        return identity == self.master_authority or self.assignments.get(role) == identity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "master_authority": self.master_authority,
            **{role.value: holder for role, holder in self.assignments.items()},
        }


@dataclass
class Issuer:
    authority: str
    issuer_type: IssuerType
    daily_mint_limit: int
    daily_burn_limit: int
    minted: DailyCounter = field(default_factory=DailyCounter)
    burned: DailyCounter = field(default_factory=DailyCounter)
    total_minted: int = 0
    total_burned: int = 0
    is_active: bool = True
    registered_at: int = 0

    @property
    def daily_minted(self) -> int:
        return self.minted.volume

    @property
    def daily_burned(self) -> int:
        return self.burned.volume

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authority": self.authority,
            "issuer_type": self.issuer_type.value,
            "daily_mint_limit": self.daily_mint_limit,
            "daily_burn_limit": self.daily_burn_limit,
            "daily_minted": self.daily_minted,
            "daily_burned": self.daily_burned,
            "total_minted": self.total_minted,
            "total_burned": self.total_burned,
            "is_active": self.is_active,
            "registered_at": self.registered_at,
        }


@dataclass
class CollateralVault:
    collateral_type: CollateralType
    auditor: Optional[str] = None
    total_collateral: int = 0
    last_audit_at: int = 0
    last_audit_hash: bytes = bytes(KYC_HASH_LENGTH)
    status: VaultStatus = VaultStatus.ACTIVE
    created_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collateral_type": self.collateral_type.value,
            "auditor": self.auditor,
            "total_collateral": self.total_collateral,
            "last_audit_at": self.last_audit_at,
            "last_audit_hash": self.last_audit_hash.hex(),
            "status": self.status.value,
            "created_at": self.created_at,
        }


def _require_limit(value: int, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidConfiguration(f"{name} must be a non-negative integer", {name: value})
    return value


def _require_positive(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmount("amount must be a positive integer", {"amount": amount})
    return amount


class IssuanceControl:
    """
    Decision functions for mint, burn, seize and pause on one token.

    Construct through ``IssuanceControl.initialize`` so preset rules are
    applied. Read accessors return snapshots.
    """

    MINT_CONFIG_SEED = b"mint_config"
    ROLE_CONFIG_SEED = b"role_config"
    ISSUER_SEED = b"issuer"
    VAULT_SEED = b"collateral_vault"

    def __init__(
        self,
        config: MintConfig,
        roles: RoleConfig,
        ledger: TokenLedger,
        time_provider: Optional[Callable[[], int]] = None,
        deduplicate_references: bool = False
    ):
        self._config = config
        self._roles = roles
        self.ledger = ledger
        self._time = time_provider or now_epoch
        self._vault: Optional[CollateralVault] = None
        self._issuers: Dict[str, Issuer] = {}
        self._seen_references: Optional[Set[bytes]] = set() if deduplicate_references else None
        self._lock = threading.RLock()
        self.address = derive_address(self.MINT_CONFIG_SEED, config.mint)

    @classmethod
    def initialize(
        cls,
        authority: str,
        mint: str,
        ledger: TokenLedger,
        preset=StablecoinPreset.SSS_1,
        decimals: int = 2,
        treasury: Optional[str] = None,
        enable_permanent_delegate: Optional[bool] = None,
        enable_transfer_hook: Optional[bool] = None,
        default_account_frozen: Optional[bool] = None,
        collateral_ratio_bps: int = FULL_BACKING_BPS,
        time_provider: Optional[Callable[[], int]] = None,
        deduplicate_references: bool = False
    ) -> "IssuanceControl":
        """
        Create the mint configuration and role set for a token.

        Raises:
            InvalidConfiguration: A flag contradicts a fixed preset, SSS-2 has
                no treasury, the ratio is not 10000 bps, or decimals are out
                of range.
        """
        preset = StablecoinPreset.parse(preset)
        defaults = preset_defaults(preset)

        if collateral_ratio_bps != FULL_BACKING_BPS:
            raise InvalidConfiguration(
                "collateral_ratio_bps must be 10000",
                {"collateral_ratio_bps": collateral_ratio_bps},
            )
        if not isinstance(decimals, int) or not 0 <= decimals <= 255:
            raise InvalidConfiguration("decimals must be between 0 and 255", {"decimals": decimals})

        overrides = {
            "enable_permanent_delegate": enable_permanent_delegate,
            "enable_transfer_hook": enable_transfer_hook,
            "default_account_frozen": default_account_frozen,
        }
        flags = {}
        for name, value in overrides.items():
            default = getattr(defaults, name)
            if value is None:
                flags[name] = default
            elif defaults.fixed and bool(value) != default:
                raise InvalidConfiguration(
                    f"{preset.value} requires {name}={default}",
                    {"preset": preset.value, "field": name},
                )
            else:
                flags[name] = bool(value)

        if defaults.requires_treasury and not treasury:
            raise InvalidConfiguration(f"{preset.value} requires a treasury account", {"preset": preset.value})

        now = (time_provider or now_epoch)()
        config = MintConfig(
            authority=authority,
            mint=mint,
            preset=preset,
            decimals=decimals,
            treasury=treasury,
            created_at=now,
            updated_at=now,
            **flags,
        )
        logger.info("Initialized mint %s with preset %s", mint, preset.value)
        return cls(config, RoleConfig(master_authority=authority), ledger, time_provider, deduplicate_references)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> MintConfig:
        with self._lock:
            return replace(self._config)

    @property
    def roles(self) -> RoleConfig:
        with self._lock:
            return replace(self._roles, assignments=dict(self._roles.assignments))

    @property
    def vault(self) -> CollateralVault:
        with self._lock:
            return replace(self._require_vault())

    @property
    def total_supply(self) -> int:
        return self._config.total_supply

    @property
    def is_paused(self) -> bool:
        return self._config.is_paused

    def issuer_address(self, authority: str) -> str:
        return derive_address(self.ISSUER_SEED, self._config.mint, authority)

    def get_issuer(self, authority: str) -> Issuer:
        with self._lock:
            issuer = self._issuers.get(self.issuer_address(authority))
            if issuer is None:
                raise NotFound(f"issuer {authority} is not registered", {"issuer": authority})
            return replace(issuer, minted=replace(issuer.minted), burned=replace(issuer.burned))

    def collateral_ratio(self) -> int:
        """Current collateral/supply in basis points; 10000 when nothing is issued."""
        with self._lock:
            supply = self._config.total_supply
            if supply == 0:
                return FULL_BACKING_BPS
            collateral = self._vault.total_collateral if self._vault else 0
            return collateral * FULL_BACKING_BPS // supply

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def _require_role(self, role: Role, caller: str) -> None:
        if not self._roles.holds(role, caller):
            audit_log.security_event("role_denied", role=role.value, caller=caller)
            raise Unauthorized(f"{caller} does not hold {role.value}", {"role": role.value, "caller": caller})

    def _require_master(self, caller: str) -> None:
        if caller != self._roles.master_authority:
            audit_log.security_event("master_authority_denied", caller=caller)
            raise Unauthorized("caller is not the master authority", {"caller": caller})

    def update_roles(self, caller: str, assignments: Dict[Any, Optional[str]]) -> RoleConfig:
        """Assign (or clear, with None) roles. Master authority only."""
        parsed = {Role.parse(role): holder for role, holder in assignments.items()}
        with self._lock:
            self._require_master(caller)
            self._roles.assignments.update(parsed)
            logger.info("Roles updated by %s: %s", caller, sorted(r.value for r in parsed))
        return self.roles

    # ------------------------------------------------------------------
    # Collateral vault
    # ------------------------------------------------------------------

    def _require_vault(self) -> CollateralVault:
        if self._vault is None:
            raise NotFound("collateral vault is not initialized")
        return self._vault

    def initialize_vault(self, caller: str, collateral_type, auditor: Optional[str] = None) -> CollateralVault:
        collateral_type = CollateralType.parse(collateral_type)
        with self._lock:
            self._require_master(caller)
            if self._vault is not None:
                raise InvalidConfiguration("collateral vault already initialized")
            self._vault = CollateralVault(
                collateral_type=collateral_type,
                auditor=auditor,
                created_at=self._time(),
            )
            logger.info("Collateral vault initialized (%s)", collateral_type.value)
            return replace(self._vault)

    def set_vault_status(self, caller: str, status) -> CollateralVault:
        status = VaultStatus.parse(status)
        with self._lock:
            self._require_master(caller)
            vault = self._require_vault()
            vault.status = status
            return replace(vault)

    def deposit_collateral(self, caller: str, amount: int, proof_hash=None) -> int:
        """Add collateral. Returns the new vault total."""
        _require_positive(amount)
        proof = fixed_bytes(proof_hash, KYC_HASH_LENGTH, "proof_hash")
        with self._lock:
            self._require_role(Role.ISSUER_ADMIN, caller)
            vault = self._require_active_vault()
            vault.total_collateral += amount
            self._touch()
            total = vault.total_collateral
        audit_log.collateral_changed("deposit", amount, total, self.collateral_ratio(), proof.hex())
        return total

    def withdraw_collateral(self, caller: str, amount: int, proof_hash=None) -> int:
        """Remove collateral, never below the outstanding supply."""
        _require_positive(amount)
        proof = fixed_bytes(proof_hash, KYC_HASH_LENGTH, "proof_hash")
        with self._lock:
            self._require_role(Role.ISSUER_ADMIN, caller)
            vault = self._require_active_vault()
            remaining = vault.total_collateral - amount
            if remaining < self._config.total_supply:
                raise CollateralInsufficient(
                    "withdrawal would leave supply under-collateralized",
                    {"collateral_after": remaining, "total_supply": self._config.total_supply},
                )
            vault.total_collateral = remaining
            self._touch()
        audit_log.collateral_changed("withdraw", amount, remaining, self.collateral_ratio(), proof.hex())
        return remaining

    def submit_audit(self, auditor: str, verified_amount: int, audit_hash) -> CollateralVault:
        """
        Record an auditor's verified collateral figure.

        The verified amount replaces the vault total and the vault returns to
        active. A figure below the outstanding supply is refused so the
        backing invariant holds; the shortfall is logged as a security event.
        """
        _require_limit(verified_amount, "verified_amount")
        digest = fixed_bytes(audit_hash, KYC_HASH_LENGTH, "audit_hash")
        with self._lock:
            vault = self._require_vault()
            if vault.auditor is None or auditor != vault.auditor:
                audit_log.security_event("audit_unauthorized", caller=auditor)
                raise Unauthorized("caller is not the vault auditor", {"caller": auditor})
            if verified_amount < self._config.total_supply:
                audit_log.security_event(
                    "audit_shortfall", severity="critical",
                    verified_amount=verified_amount, total_supply=self._config.total_supply,
                )
                raise CollateralInsufficient(
                    "audited collateral is below total supply",
                    {"verified_amount": verified_amount, "total_supply": self._config.total_supply},
                )
            now = self._time()
            vault.total_collateral = verified_amount
            vault.last_audit_hash = digest
            vault.last_audit_at = now
            vault.status = VaultStatus.ACTIVE
            self._touch()
            snapshot = replace(vault)
        audit_log.collateral_changed("audit", verified_amount, verified_amount, self.collateral_ratio(), digest.hex())
        return snapshot

    def _require_active_vault(self) -> CollateralVault:
        vault = self._require_vault()
        if vault.status is not VaultStatus.ACTIVE:
            raise InvalidConfiguration(f"collateral vault is {vault.status.value}", {"status": vault.status.value})
        return vault

    # ------------------------------------------------------------------
    # Issuers
    # ------------------------------------------------------------------

    def register_issuer(
        self,
        caller: str,
        authority: str,
        issuer_type,
        daily_mint_limit: int = 0,
        daily_burn_limit: int = 0
    ) -> Issuer:
        issuer_type = IssuerType.parse(issuer_type)
        _require_limit(daily_mint_limit, "daily_mint_limit")
        _require_limit(daily_burn_limit, "daily_burn_limit")
        with self._lock:
            self._require_role(Role.ISSUER_ADMIN, caller)
            address = self.issuer_address(authority)
            if address in self._issuers:
                raise InvalidConfiguration(f"issuer {authority} is already registered", {"issuer": authority})
            now = self._time()
            day = epoch_start(now)
            self._issuers[address] = Issuer(
                authority=authority,
                issuer_type=issuer_type,
                daily_mint_limit=daily_mint_limit,
                daily_burn_limit=daily_burn_limit,
                minted=DailyCounter(epoch=day),
                burned=DailyCounter(epoch=day),
                registered_at=now,
            )
            logger.info("Registered %s issuer %s", issuer_type.value, authority)
        return self.get_issuer(authority)

    def update_issuer(
        self,
        caller: str,
        authority: str,
        daily_mint_limit: Optional[int] = None,
        daily_burn_limit: Optional[int] = None,
        is_active: Optional[bool] = None
    ) -> Issuer:
        if daily_mint_limit is not None:
            _require_limit(daily_mint_limit, "daily_mint_limit")
        if daily_burn_limit is not None:
            _require_limit(daily_burn_limit, "daily_burn_limit")
        with self._lock:
            self._require_role(Role.ISSUER_ADMIN, caller)
            issuer = self._find_issuer(authority)
            if daily_mint_limit is not None:
                issuer.daily_mint_limit = daily_mint_limit
            if daily_burn_limit is not None:
                issuer.daily_burn_limit = daily_burn_limit
            if is_active is not None:
                issuer.is_active = bool(is_active)
            logger.info("Updated issuer %s", authority)
        return self.get_issuer(authority)

    def _find_issuer(self, authority: str) -> Issuer:
        issuer = self._issuers.get(self.issuer_address(authority))
        if issuer is None:
            raise NotFound(f"issuer {authority} is not registered", {"issuer": authority})
        return issuer

    def _active_issuer(self, authority: str) -> Issuer:
        issuer = self._find_issuer(authority)
        if not issuer.is_active:
            raise IssuerInactive(f"issuer {authority} is inactive", {"issuer": authority})
        return issuer

    # ------------------------------------------------------------------
    # Mint / burn
    # ------------------------------------------------------------------

    def mint(self, issuer: str, recipient: str, amount: int, reference=None) -> int:
        """
        Issue ``amount`` to ``recipient`` on behalf of ``issuer``.

        ``reference`` is the 32-byte bank transfer reference (hex or bytes,
        zero-filled when absent). References are only deduplicated when the
        control was built with ``deduplicate_references``.

        Returns:
            Total supply after the mint.
        """
        try:
            with self._lock:
                if self._config.is_paused:
                    raise Paused("issuance is paused")
                record = self._active_issuer(issuer)
                _require_positive(amount)
                ref = fixed_bytes(reference, REFERENCE_LENGTH, "reference")
                if self._seen_references is not None and any(ref) and ref in self._seen_references:
                    raise DuplicateReference("reference already used", {"reference": ref.hex()})

                vault = self._require_vault()
                now = self._time()
                if not record.minted.allows(record.daily_mint_limit, amount, now):
                    raise DailyLimitExceeded(
                        "issuer daily mint limit exceeded",
                        {"limit": record.daily_mint_limit, "used": record.minted.current(now), "amount": amount},
                    )
                supply_after = self._config.total_supply + amount
                if supply_after > vault.total_collateral:
                    raise CollateralInsufficient(
                        "mint would exceed collateral",
                        {"total_collateral": vault.total_collateral, "supply_after": supply_after},
                    )

                self.ledger.credit(recipient, amount)
                self._config.total_supply = supply_after
                record.minted.add(amount, now)
                record.total_minted += amount
                if self._seen_references is not None and any(ref):
                    self._seen_references.add(ref)
                self._touch(now)
        except MeridianError as e:
            audit_log.issuance_rejected("mint", issuer, e.code.value, amount if isinstance(amount, int) else 0)
            raise

        audit_log.issuance("mint", issuer, amount, supply_after, counterparty=recipient, reference=ref.hex())
        return supply_after

    def burn(self, issuer: str, holder: str, amount: int, redemption_info=None) -> int:
        """
        Redeem ``amount`` from ``holder`` through ``issuer``.

        ``redemption_info`` is the 64-byte (encrypted) bank account field.
        Vault collateral is released in proportion to the backing ratio.

        Returns:
            Total supply after the burn.
        """
        try:
            with self._lock:
                if self._config.is_paused:
                    raise Paused("issuance is paused")
                record = self._active_issuer(issuer)
                _require_positive(amount)
                fixed_bytes(redemption_info, REDEMPTION_INFO_LENGTH, "redemption_info")

                balance = self.ledger.balance_of(holder)
                if amount > balance:
                    raise InsufficientBalance(
                        f"balance {balance} < {amount}",
                        {"holder": holder, "balance": balance, "amount": amount},
                    )
                if amount > self._config.total_supply:
                    raise InsufficientSupply(
                        "burn exceeds total supply",
                        {"total_supply": self._config.total_supply, "amount": amount},
                    )
                now = self._time()
                if not record.burned.allows(record.daily_burn_limit, amount, now):
                    raise DailyLimitExceeded(
                        "issuer daily burn limit exceeded",
                        {"limit": record.daily_burn_limit, "used": record.burned.current(now), "amount": amount},
                    )
                vault = self._require_vault()

                self.ledger.debit(holder, amount)
                released = amount * self._config.collateral_ratio_bps // FULL_BACKING_BPS
                vault.total_collateral = max(0, vault.total_collateral - released)
                self._config.total_supply -= amount
                supply_after = self._config.total_supply
                record.burned.add(amount, now)
                record.total_burned += amount
                self._touch(now)
        except MeridianError as e:
            audit_log.issuance_rejected("burn", issuer, e.code.value, amount if isinstance(amount, int) else 0)
            raise

        audit_log.issuance("burn", issuer, amount, supply_after, counterparty=holder)
        return supply_after

    # ------------------------------------------------------------------
    # Seizure and account freezing
    # ------------------------------------------------------------------

    def freeze_account(self, caller: str, account: str) -> None:
        with self._lock:
            self._require_role(Role.COMPLIANCE_OFFICER, caller)
            self.ledger.freeze(account)
        audit_log.security_event("account_frozen", severity="low", account=account, actor=caller)

    def thaw_account(self, caller: str, account: str) -> None:
        with self._lock:
            self._require_role(Role.COMPLIANCE_OFFICER, caller)
            self.ledger.thaw(account)
        audit_log.security_event("account_thawed", severity="low", account=account, actor=caller)

    def seize(self, authority: str, source: str, treasury: str, amount: int = 0, reason: str = "") -> int:
        """
        Move tokens from a frozen account to the treasury, bypassing transfer rules.

        ``amount == 0`` seizes the entire balance. Returns the amount moved.
        """
        reason_field = text_to_fixed(reason or "", REASON_LENGTH)
        try:
            with self._lock:
                if not self._config.enable_permanent_delegate:
                    raise PermanentDelegateNotEnabled(
                        f"seizure is disabled for preset {self._config.preset.value}",
                        {"preset": self._config.preset.value},
                    )
                self._require_role(Role.SEIZER, authority)
                if not self._config.treasury or treasury != self._config.treasury:
                    raise TreasuryNotConfigured("treasury does not match configuration", {"treasury": treasury})
                if not self.ledger.is_frozen(source):
                    raise AccountNotFrozen(f"{source} is not frozen", {"source": source})
                if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
                    raise InvalidAmount("amount must be a non-negative integer", {"amount": amount})

                seized = amount or self.ledger.balance_of(source)
                _require_positive(seized)
                self.ledger.move(source, treasury, seized, allow_frozen=True)
                self._touch()
        except MeridianError as e:
            audit_log.issuance_rejected("seize", authority, e.code.value, amount if isinstance(amount, int) else 0)
            raise

        audit_log.issuance(
            "seize", authority, seized, self._config.total_supply,
            counterparty=source, reference=reason_field.rstrip(b"\x00").decode("utf-8", "replace"),
        )
        return seized

    # ------------------------------------------------------------------
    # Pause
    # ------------------------------------------------------------------

    def pause(self, caller: str) -> None:
        with self._lock:
            self._require_role(Role.PAUSER, caller)
            self._set_paused(True, caller)

    def unpause(self, caller: str) -> None:
        with self._lock:
            self._require_role(Role.PAUSER, caller)
            self._set_paused(False, caller)

    def force_pause(self, actor: str) -> None:
        """Pause without a role check. For callers that hold a threshold approval."""
        with self._lock:
            self._set_paused(True, actor, threshold_approved=True)

    def _set_paused(self, paused: bool, actor: str, threshold_approved: bool = False) -> None:
        if paused and self._config.is_paused:
            raise AlreadyPaused("issuance is already paused")
        if not paused and not self._config.is_paused:
            raise NotPaused("issuance is not paused")
        self._config.is_paused = paused
        self._touch()
        audit_log.pause_changed(paused, actor, threshold_approved)

    def _touch(self, now: Optional[int] = None) -> None:
        self._config.updated_at = self._time() if now is None else now
