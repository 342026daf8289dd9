"""
Configuration module for Meridian.

Centralizes runtime policy with environment variable support and an
optional JSON policy file loaded through a thread-safe TTL cache.
"""

import json
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("MERIDIAN_ENV", "dev")  # dev|stage|prod

LOG_LEVEL = os.getenv("MERIDIAN_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("MERIDIAN_LOG_JSON", "true").lower() in ("1", "true", "yes")

# Jurisdiction screening
RESTRICTED_JURISDICTIONS = os.getenv("MERIDIAN_RESTRICTED_JURISDICTIONS", "")
SCREEN_AT_ENROLLMENT = os.getenv("MERIDIAN_SCREEN_AT_ENROLLMENT", "").lower() in ("1", "true", "yes")

# Issuance
DEDUPLICATE_REFERENCES = os.getenv("MERIDIAN_DEDUPLICATE_REFERENCES", "").lower() in ("1", "true", "yes")
LARGE_MINT_THRESHOLD = int(os.getenv("MERIDIAN_LARGE_MINT_THRESHOLD", "0"))

# M-of-N approval
APPROVAL_THRESHOLD = int(os.getenv("MERIDIAN_APPROVAL_THRESHOLD", "2"))
APPROVAL_SHARES = int(os.getenv("MERIDIAN_APPROVAL_SHARES", "3"))

# Optional policy file overriding the jurisdiction settings
POLICY_PATH = os.getenv("MERIDIAN_POLICY_PATH", "")

# Cache TTL (seconds)
CONFIG_CACHE_TTL = int(os.getenv("MERIDIAN_CONFIG_CACHE_TTL", "60"))


# ============================================================
# Cached Configuration Loaders
# ============================================================

class CachedConfig:
    """
    Thread-safe cached configuration loader.
    Reloads configuration files periodically based on TTL.
    """

    def __init__(self, ttl_seconds: int = 60):
        self._cache: Dict[str, Any] = {}
        self._timestamps: Dict[str, float] = {}
        self._lock = threading.RLock()
        self._ttl = ttl_seconds

    def _is_stale(self, key: str) -> bool:
        if key not in self._timestamps:
            return True
        return (time.time() - self._timestamps[key]) > self._ttl

    def get_json(self, path: str, force_reload: bool = False) -> Dict[str, Any]:
        """
        Load JSON file with caching.
        Returns cached version if within TTL, otherwise reloads.
        """
        with self._lock:
            if not force_reload and path in self._cache and not self._is_stale(path):
                return self._cache[path]

            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)

            self._cache[path] = data
            self._timestamps[path] = time.time()
            return data

    def invalidate(self, path: Optional[str] = None) -> None:
        """Invalidate cache for a specific path or all paths."""
        with self._lock:
            if path:
                self._cache.pop(path, None)
                self._timestamps.pop(path, None)
            else:
                self._cache.clear()
                self._timestamps.clear()


_config_cache = CachedConfig(ttl_seconds=CONFIG_CACHE_TTL)


def load_policy(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the policy file, or an empty policy when none is configured.

    Recognized keys: ``restricted_jurisdictions`` (list of names),
    ``screen_at_enrollment`` (bool).
    """
    path = path if path is not None else POLICY_PATH
    if not path or not Path(path).exists():
        return {}
    return _config_cache.get_json(path)


def invalidate_config_cache() -> None:
    """Invalidate all cached configuration."""
    _config_cache.invalidate()


# ============================================================
# Runtime policy objects
# ============================================================

def jurisdiction_policy(policy_path: Optional[str] = None):
    """Build the jurisdiction policy from the environment and policy file."""
    from .registry import Jurisdiction, JurisdictionPolicy

    policy = load_policy(policy_path)
    names = policy.get("restricted_jurisdictions")
    if names is None:
        names = [n for n in RESTRICTED_JURISDICTIONS.split(",") if n.strip()]
    screen = policy.get("screen_at_enrollment", SCREEN_AT_ENROLLMENT)

    return JurisdictionPolicy(
        restricted=frozenset(Jurisdiction.parse(n) for n in names),
        screen_at_enrollment=bool(screen),
    )


def control_plane_options(policy_path: Optional[str] = None) -> Dict[str, Any]:
    """Keyword arguments for ``ControlPlane`` derived from settings."""
    return {
        "jurisdiction_policy": jurisdiction_policy(policy_path),
        "deduplicate_references": DEDUPLICATE_REFERENCES,
        "large_mint_threshold": LARGE_MINT_THRESHOLD,
        "approval_threshold": APPROVAL_THRESHOLD,
        "approval_shares": APPROVAL_SHARES,
    }


# ============================================================
# Feature Flags
# ============================================================

def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("MERIDIAN_DEBUG", "").lower() in ("1", "true", "yes")
