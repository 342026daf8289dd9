"""
Meridian Compliance Control Plane

Version: 1.0.0
License: Apache 2.0

Compliance and issuance control for a collateral-backed token.

Every transfer, mint, burn and seizure is decided against current state and
either applied or rejected with a typed reason. Rejections never mutate
state.

Components:
- ComplianceRegistry: whitelist/blacklist entries per wallet
- TransferGate: eligibility decisions, blacklist first
- IssuanceControl: issuers, daily ceilings, 100% collateral, pause, seizure
- ConfidentialChannel: NaCl box encryption of KYC payloads, SHA-256 anchoring
- ShamirSecretSharing / ThresholdAuthorizer: M-of-N approval over GF(256)
- ControlPlane: the per-token handle tying them together
- Request models: pydantic validation of operator input at the boundary

Usage:
    from meridian import ControlPlane, ConfidentialChannel

    plane = ControlPlane("authority", "mint", preset="sss-2", treasury="treasury")
    plane.issuance.initialize_vault("authority", "fiat")
    plane.issuance.deposit_collateral("authority", 1_000_000_000)
    plane.issuance.register_issuer("authority", "bank", "trust-bank")

    plane.registry.add_to_whitelist(
        "authority", "wallet", "standard", "singapore",
        kyc_hash, daily_limit=100_000_000, expiry_timestamp=expiry,
    )
    plane.mint("bank", "wallet", 200_000_000)

    decision = plane.check_transfer_eligible("wallet", 50_000_000)
    if decision.passed():
        plane.transfer("wallet", "other", 50_000_000)
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Errors
from .errors import (
    ErrorCode,
    MeridianError,
    NotFound,
    NotWhitelisted,
    Blacklisted,
    Expired,
    DailyLimitExceeded,
    PermanentDelegateNotEnabled,
    Paused,
    CollateralInsufficient,
    DecryptionFailed,
    InsufficientShares,
    InvalidConfiguration,
    Unauthorized,
    AccountFrozen,
    error_for,
)

# Daily epochs
from .epoch import DailyCounter, epoch_start, SECONDS_PER_DAY

# Ledger substrate
from .ledger import TokenLedger, InMemoryTokenLedger, derive_address

# Registry and transfer gate
from .registry import (
    ComplianceRegistry,
    Registry,
    WhitelistEntry,
    BlacklistEntry,
    KycLevel,
    Jurisdiction,
    JurisdictionPolicy,
)
from .gate import TransferGate, TransferDecision, TransferDeniedError

# Issuance
from .issuance import (
    IssuanceControl,
    MintConfig,
    RoleConfig,
    Issuer,
    CollateralVault,
    StablecoinPreset,
    PresetFlags,
    preset_defaults,
    IssuerType,
    CollateralType,
    VaultStatus,
    Role,
)

# Confidential channel
from .channel import (
    ConfidentialChannel,
    EncryptedPayload,
    KeyPair,
    generate_key_pair,
    sha256,
)

# Threshold authorization
from .threshold import ShamirSecretSharing, ShamirShare, gf_mul, gf_inv, gf_div
from .authorization import ThresholdAuthorizer, split_secret_key, recover_channel

# Control plane
from .control import ControlPlane, EMERGENCY_PAUSE, LARGE_MINT

# Boundary request models
from .models import (
    WhitelistRequest,
    BlacklistRequest,
    InitializeRequest,
    InitializeVaultRequest,
    CollateralRequest,
    RegisterIssuerRequest,
    MintRequest,
    BurnRequest,
    SeizeRequest,
    parse_request,
)


__all__ = [
    # Version
    "__version__",

    # Errors
    "ErrorCode",
    "MeridianError",
    "NotFound",
    "NotWhitelisted",
    "Blacklisted",
    "Expired",
    "DailyLimitExceeded",
    "PermanentDelegateNotEnabled",
    "Paused",
    "CollateralInsufficient",
    "DecryptionFailed",
    "InsufficientShares",
    "InvalidConfiguration",
    "Unauthorized",
    "AccountFrozen",
    "error_for",

    # Epochs
    "DailyCounter",
    "epoch_start",
    "SECONDS_PER_DAY",

    # Ledger
    "TokenLedger",
    "InMemoryTokenLedger",
    "derive_address",

    # Registry
    "ComplianceRegistry",
    "Registry",
    "WhitelistEntry",
    "BlacklistEntry",
    "KycLevel",
    "Jurisdiction",
    "JurisdictionPolicy",
    "TransferGate",
    "TransferDecision",
    "TransferDeniedError",

    # Issuance
    "IssuanceControl",
    "MintConfig",
    "RoleConfig",
    "Issuer",
    "CollateralVault",
    "StablecoinPreset",
    "PresetFlags",
    "preset_defaults",
    "IssuerType",
    "CollateralType",
    "VaultStatus",
    "Role",

    # Channel
    "ConfidentialChannel",
    "EncryptedPayload",
    "KeyPair",
    "generate_key_pair",
    "sha256",

    # Threshold
    "ShamirSecretSharing",
    "ShamirShare",
    "gf_mul",
    "gf_inv",
    "gf_div",
    "ThresholdAuthorizer",
    "split_secret_key",
    "recover_channel",

    # Control plane
    "ControlPlane",
    "EMERGENCY_PAUSE",
    "LARGE_MINT",

    # Request models
    "WhitelistRequest",
    "BlacklistRequest",
    "InitializeRequest",
    "InitializeVaultRequest",
    "CollateralRequest",
    "RegisterIssuerRequest",
    "MintRequest",
    "BurnRequest",
    "SeizeRequest",
    "parse_request",
]
