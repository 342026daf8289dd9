"""
Meridian Compliance Registry

Owns whitelist and blacklist entries per wallet, keyed to one token's
registry. Entries are created and deactivated only by the registry
authority; they are never physically deleted.

Invariants:
- Expiry is evaluated at use time, not swept.
- A wallet may hold active whitelist and blacklist entries at the same time;
  the blacklist wins every eligibility decision.
"""

import logging
import threading
import weakref
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from .epoch import DailyCounter, epoch_start
from .errors import (
    InvalidConfiguration,
    JurisdictionNotAllowed,
    NotFound,
    Unauthorized,
)
from .ledger import derive_address
from .logging_config import audit_log
from .util import KYC_HASH_LENGTH, now_epoch, require_length

logger = logging.getLogger(__name__)


def _normalize(name: str) -> str:
    return name.strip().lower().replace(" ", "_").replace("-", "_")


class KycLevel(str, Enum):
    """KYC verification levels."""
    BASIC = "basic"                  # email, phone
    STANDARD = "standard"            # ID document
    ENHANCED = "enhanced"            # video call, address proof
    INSTITUTIONAL = "institutional"  # corporate KYC/KYB

    @classmethod
    def parse(cls, value) -> "KycLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(_normalize(str(value)))
        except ValueError:
            raise InvalidConfiguration(f"Unknown KYC level: {value}", {"field": "kyc_level"})


class Jurisdiction(str, Enum):
    """Supported jurisdictions."""
    JAPAN = "japan"
    SINGAPORE = "singapore"
    HONG_KONG = "hong_kong"
    EU = "eu"
    USA = "usa"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> "Jurisdiction":
        if isinstance(value, cls):
            return value
        key = _normalize(str(value))
        key = {"hongkong": "hong_kong", "hk": "hong_kong", "us": "usa", "jp": "japan", "sg": "singapore"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidConfiguration(f"Unknown jurisdiction: {value}", {"field": "jurisdiction"})


@dataclass(frozen=True)
class JurisdictionPolicy:
    """
    Jurisdiction screening policy.

    Nothing is restricted by default. Restricted jurisdictions are denied
    at transfer time; with ``screen_at_enrollment`` they are also refused
    when a wallet is whitelisted.
    """
    restricted: FrozenSet[Jurisdiction] = frozenset()
    screen_at_enrollment: bool = False

    def allows(self, jurisdiction: Jurisdiction) -> bool:
        return jurisdiction not in self.restricted


@dataclass
class Registry:
    """One registry per token."""
    authority: str
    mint: str
    is_active: bool = True
    whitelist_count: int = 0
    created_at: int = 0
    updated_at: int = 0


@dataclass
class WhitelistEntry:
    """Whitelist entry for a verified wallet."""
    wallet: str
    kyc_level: KycLevel
    jurisdiction: Jurisdiction
    kyc_hash: bytes
    daily_limit: int
    expiry_timestamp: int
    is_active: bool = True
    volume: DailyCounter = field(default_factory=DailyCounter)
    verified_at: int = 0
    last_activity: int = 0

    @property
    def daily_volume(self) -> int:
        return self.volume.volume

    @property
    def epoch_start(self) -> int:
        return self.volume.epoch

    def is_expired(self, now: int) -> bool:
        return self.expiry_timestamp < now

    def to_dict(self) -> Dict:
        return {
            "wallet": self.wallet,
            "kyc_level": self.kyc_level.value,
            "jurisdiction": self.jurisdiction.value,
            "kyc_hash": self.kyc_hash.hex(),
            "daily_limit": self.daily_limit,
            "daily_volume": self.daily_volume,
            "epoch_start": self.epoch_start,
            "expiry_timestamp": self.expiry_timestamp,
            "is_active": self.is_active,
            "verified_at": self.verified_at,
            "last_activity": self.last_activity,
        }


@dataclass
class BlacklistEntry:
    """Blacklist entry; overrides any whitelist state."""
    wallet: str
    reason: str
    added_at: int
    removed_at: int = 0
    is_active: bool = True

    def to_dict(self) -> Dict:
        return {
            "wallet": self.wallet,
            "reason": self.reason,
            "added_at": self.added_at,
            "removed_at": self.removed_at,
            "is_active": self.is_active,
        }


class ComplianceRegistry:
    """
    Whitelist/blacklist registry for one token.

    Every wallet's entries are an independent record with its own lock.
    Read calls return snapshots, so callers cannot mutate stored state.
    """

    SEED_PREFIX = b"kyc_registry"
    WHITELIST_SEED = b"whitelist"
    BLACKLIST_SEED = b"blacklist"

    def __init__(
        self,
        authority: str,
        mint: str,
        policy: Optional[JurisdictionPolicy] = None,
        time_provider: Optional[Callable[[], int]] = None
    ):
        self._time = time_provider or now_epoch
        self.policy = policy or JurisdictionPolicy()
        now = self._time()
        self._registry = Registry(authority=authority, mint=mint, created_at=now, updated_at=now)
        self.address = derive_address(self.SEED_PREFIX, mint)

        self._whitelist: Dict[str, WhitelistEntry] = {}
        self._blacklist: Dict[str, BlacklistEntry] = {}
        self._record_locks = weakref.WeakValueDictionary()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Addressing and locking
    # ------------------------------------------------------------------

    def whitelist_address(self, wallet: str) -> str:
        return derive_address(self.WHITELIST_SEED, self._registry.mint, wallet)

    def blacklist_address(self, wallet: str) -> str:
        return derive_address(self.BLACKLIST_SEED, self._registry.mint, wallet)

    def record_lock(self, wallet: str) -> threading.RLock:
        """
        Lock serializing every mutation of one wallet's records.

        Locks are held weakly: one lives only while some caller holds it, so
        read-only probes of unknown wallets leave nothing behind.
        """
        with self._lock:
            lock = self._record_locks.get(wallet)
            if lock is None:
                lock = self._record_locks[wallet] = threading.RLock()
            return lock

    def now(self) -> int:
        return self._time()

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def registry(self) -> Registry:
        with self._lock:
            return replace(self._registry)

    @property
    def authority(self) -> str:
        return self._registry.authority

    @property
    def is_active(self) -> bool:
        return self._registry.is_active

    def set_active(self, caller: str, active: bool) -> Registry:
        self._require_authority(caller)
        with self._lock:
            self._registry.is_active = active
            self._registry.updated_at = self._time()
            logger.info("Registry %s for mint %s", "activated" if active else "deactivated", self._registry.mint)
            return replace(self._registry)

    def _require_authority(self, caller: str) -> None:
        if caller != self._registry.authority:
            audit_log.security_event("registry_unauthorized", caller=caller)
            raise Unauthorized("caller is not the registry authority", {"caller": caller})

    # ------------------------------------------------------------------
    # Whitelist
    # ------------------------------------------------------------------

    def add_to_whitelist(
        self,
        caller: str,
        wallet: str,
        kyc_level,
        jurisdiction,
        kyc_hash: bytes,
        daily_limit: int,
        expiry_timestamp: int
    ) -> WhitelistEntry:
        """
        Create or overwrite a wallet's whitelist entry.

        The entry becomes active with a fresh daily volume. Jurisdictions are
        only refused here when the policy screens at enrollment.
        """
        self._require_authority(caller)
        level = KycLevel.parse(kyc_level)
        region = Jurisdiction.parse(jurisdiction)
        kyc_hash = require_length(kyc_hash, KYC_HASH_LENGTH, "kyc_hash")
        if not isinstance(daily_limit, int) or daily_limit < 0:
            raise InvalidConfiguration("daily_limit must be a non-negative integer", {"daily_limit": daily_limit})
        if not isinstance(expiry_timestamp, int):
            raise InvalidConfiguration("expiry_timestamp must be an integer", {"expiry_timestamp": expiry_timestamp})

        if self.policy.screen_at_enrollment and not self.policy.allows(region):
            raise JurisdictionNotAllowed(
                f"jurisdiction {region.value} is restricted",
                {"wallet": wallet, "jurisdiction": region.value},
            )

        address = self.whitelist_address(wallet)
        with self.record_lock(wallet):
            now = self._time()
            previous = self._whitelist.get(address)
            entry = WhitelistEntry(
                wallet=wallet,
                kyc_level=level,
                jurisdiction=region,
                kyc_hash=kyc_hash,
                daily_limit=daily_limit,
                expiry_timestamp=expiry_timestamp,
                is_active=True,
                volume=DailyCounter(volume=0, epoch=epoch_start(now)),
                verified_at=now,
                last_activity=now,
            )
            self._whitelist[address] = entry

            with self._lock:
                if previous is None or not previous.is_active:
                    self._registry.whitelist_count += 1
                self._registry.updated_at = now

        audit_log.whitelist_changed(wallet, True, level.value, region.value, expiry_timestamp)
        return self._snapshot(entry)

    def remove_from_whitelist(self, caller: str, wallet: str) -> WhitelistEntry:
        """Deactivate a wallet's whitelist entry. History is kept."""
        self._require_authority(caller)
        with self.record_lock(wallet):
            entry = self._whitelist.get(self.whitelist_address(wallet))
            if entry is None:
                raise NotFound(f"no whitelist entry for {wallet}", {"wallet": wallet})
            with self._lock:
                if entry.is_active:
                    self._registry.whitelist_count = max(0, self._registry.whitelist_count - 1)
                self._registry.updated_at = self._time()
            entry.is_active = False

        audit_log.whitelist_changed(wallet, False)
        return self._snapshot(entry)

    def get_whitelist_entry(self, wallet: str) -> WhitelistEntry:
        entry = self._whitelist.get(self.whitelist_address(wallet))
        if entry is None:
            raise NotFound(f"no whitelist entry for {wallet}", {"wallet": wallet})
        with self.record_lock(wallet):
            return self._snapshot(entry)

    def find_whitelist_entry(self, wallet: str) -> Optional[WhitelistEntry]:
        """Live record or None. Callers must hold ``record_lock(wallet)``."""
        return self._whitelist.get(self.whitelist_address(wallet))

    # ------------------------------------------------------------------
    # Blacklist
    # ------------------------------------------------------------------

    def add_to_blacklist(self, caller: str, wallet: str, reason: str) -> BlacklistEntry:
        """Create or overwrite a blacklist entry, independent of whitelist state."""
        self._require_authority(caller)
        with self.record_lock(wallet):
            entry = BlacklistEntry(wallet=wallet, reason=reason, added_at=self._time())
            self._blacklist[self.blacklist_address(wallet)] = entry

        audit_log.blacklist_changed(wallet, True, reason)
        return replace(entry)

    def remove_from_blacklist(self, caller: str, wallet: str) -> BlacklistEntry:
        self._require_authority(caller)
        with self.record_lock(wallet):
            entry = self._blacklist.get(self.blacklist_address(wallet))
            if entry is None:
                raise NotFound(f"no blacklist entry for {wallet}", {"wallet": wallet})
            entry.is_active = False
            entry.removed_at = self._time()

        audit_log.blacklist_changed(wallet, False)
        return replace(entry)

    def get_blacklist_entry(self, wallet: str) -> BlacklistEntry:
        entry = self._blacklist.get(self.blacklist_address(wallet))
        if entry is None:
            raise NotFound(f"no blacklist entry for {wallet}", {"wallet": wallet})
        return replace(entry)

    def is_blacklisted(self, wallet: str) -> bool:
        entry = self._blacklist.get(self.blacklist_address(wallet))
        return entry is not None and entry.is_active

    @staticmethod
    def _snapshot(entry: WhitelistEntry) -> WhitelistEntry:
        return replace(entry, volume=replace(entry.volume))
