"""
Meridian Error Codes

Every rejection in the control plane is a typed, non-retriable error.
The caller must change the request; retrying it unchanged fails the same way.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Rejection codes surfaced to callers."""
    NOT_FOUND = "NOT_FOUND"
    NOT_WHITELISTED = "NOT_WHITELISTED"
    BLACKLISTED = "BLACKLISTED"
    EXPIRED = "EXPIRED"
    DAILY_LIMIT_EXCEEDED = "DAILY_LIMIT_EXCEEDED"
    PERMANENT_DELEGATE_NOT_ENABLED = "PERMANENT_DELEGATE_NOT_ENABLED"
    PAUSED = "PAUSED"
    COLLATERAL_INSUFFICIENT = "COLLATERAL_INSUFFICIENT"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    INSUFFICIENT_SHARES = "INSUFFICIENT_SHARES"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    UNAUTHORIZED = "UNAUTHORIZED"
    REGISTRY_INACTIVE = "REGISTRY_INACTIVE"
    JURISDICTION_NOT_ALLOWED = "JURISDICTION_NOT_ALLOWED"
    ISSUER_INACTIVE = "ISSUER_INACTIVE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INSUFFICIENT_SUPPLY = "INSUFFICIENT_SUPPLY"
    ALREADY_PAUSED = "ALREADY_PAUSED"
    NOT_PAUSED = "NOT_PAUSED"
    TREASURY_NOT_CONFIGURED = "TREASURY_NOT_CONFIGURED"
    ACCOUNT_NOT_FROZEN = "ACCOUNT_NOT_FROZEN"
    ACCOUNT_FROZEN = "ACCOUNT_FROZEN"
    DUPLICATE_REFERENCE = "DUPLICATE_REFERENCE"


class MeridianError(Exception):
    """Base class for all control-plane rejections."""

    code: ErrorCode = ErrorCode.INVALID_CONFIGURATION

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        self.details = details or {}
        super().__init__(message or self.code.value)

    def to_dict(self) -> Dict[str, Any]:
        d = {"code": self.code.value, "message": str(self)}
        if self.details:
            d["details"] = self.details
        return d


class NotFound(MeridianError):
    code = ErrorCode.NOT_FOUND


class NotWhitelisted(MeridianError):
    code = ErrorCode.NOT_WHITELISTED


class Blacklisted(MeridianError):
    code = ErrorCode.BLACKLISTED


class Expired(MeridianError):
    code = ErrorCode.EXPIRED


class DailyLimitExceeded(MeridianError):
    code = ErrorCode.DAILY_LIMIT_EXCEEDED


class PermanentDelegateNotEnabled(MeridianError):
    code = ErrorCode.PERMANENT_DELEGATE_NOT_ENABLED


class Paused(MeridianError):
    code = ErrorCode.PAUSED


class CollateralInsufficient(MeridianError):
    code = ErrorCode.COLLATERAL_INSUFFICIENT


class DecryptionFailed(MeridianError):
    code = ErrorCode.DECRYPTION_FAILED


class InsufficientShares(MeridianError):
    code = ErrorCode.INSUFFICIENT_SHARES


class InvalidConfiguration(MeridianError):
    code = ErrorCode.INVALID_CONFIGURATION


class Unauthorized(MeridianError):
    code = ErrorCode.UNAUTHORIZED


class RegistryInactive(MeridianError):
    code = ErrorCode.REGISTRY_INACTIVE


class JurisdictionNotAllowed(MeridianError):
    code = ErrorCode.JURISDICTION_NOT_ALLOWED


class IssuerInactive(MeridianError):
    code = ErrorCode.ISSUER_INACTIVE


class InvalidAmount(MeridianError):
    code = ErrorCode.INVALID_AMOUNT


class InsufficientBalance(MeridianError):
    code = ErrorCode.INSUFFICIENT_BALANCE


class InsufficientSupply(MeridianError):
    code = ErrorCode.INSUFFICIENT_SUPPLY


class AlreadyPaused(MeridianError):
    code = ErrorCode.ALREADY_PAUSED


class NotPaused(MeridianError):
    code = ErrorCode.NOT_PAUSED


class TreasuryNotConfigured(MeridianError):
    code = ErrorCode.TREASURY_NOT_CONFIGURED


class AccountNotFrozen(MeridianError):
    code = ErrorCode.ACCOUNT_NOT_FROZEN


class AccountFrozen(MeridianError):
    code = ErrorCode.ACCOUNT_FROZEN


class DuplicateReference(MeridianError):
    code = ErrorCode.DUPLICATE_REFERENCE


ERROR_TYPES: Dict[ErrorCode, type] = {
    cls.code: cls
    for cls in (
        NotFound, NotWhitelisted, Blacklisted, Expired, DailyLimitExceeded,
        PermanentDelegateNotEnabled, Paused, CollateralInsufficient,
        DecryptionFailed, InsufficientShares, InvalidConfiguration,
        Unauthorized, RegistryInactive, JurisdictionNotAllowed, IssuerInactive,
        InvalidAmount, InsufficientBalance, InsufficientSupply, AlreadyPaused,
        NotPaused, TreasuryNotConfigured, AccountNotFrozen, AccountFrozen,
        DuplicateReference,
    )
}


def error_for(code: ErrorCode, message: str = "", **details) -> MeridianError:
    """Build the exception that matches an error code."""
    return ERROR_TYPES[code](message, details or None)
