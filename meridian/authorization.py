"""
Meridian Threshold Authorization

M-of-N approval for high-impact operations (emergency pause, large-value
mint approval) and recovery of a compliance secret key from custodian shares.

An enrolled operation keeps only the SHA-256 commitment of its approval
secret. The secret itself exists only as shares held by custodians and is
rebuilt transiently when enough of them present their shares.
"""

import hashlib
import logging
import secrets
import threading
from typing import Dict, List, Sequence

from .channel import ConfidentialChannel
from .errors import InsufficientShares, InvalidConfiguration, MeridianError, Unauthorized
from .logging_config import audit_log
from .threshold import ShamirSecretSharing, ShamirShare
from .util import constant_time_compare

logger = logging.getLogger(__name__)

APPROVAL_SECRET_LENGTH = 32


class ThresholdAuthorizer:
    """
    Holds approval commitments for named operations.

    Args:
        threshold: Custodian shares required per approval.
        total_shares: Shares issued per enrolled operation.
    """

    def __init__(self, threshold: int = 2, total_shares: int = 3):
        self._scheme = ShamirSecretSharing(threshold, total_shares)
        self._commitments: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    @property
    def threshold(self) -> int:
        return self._scheme.threshold

    @property
    def total_shares(self) -> int:
        return self._scheme.total_shares

    def is_enrolled(self, operation: str) -> bool:
        with self._lock:
            return operation in self._commitments

    def enroll(self, operation: str) -> List[ShamirShare]:
        """
        Draw a fresh approval secret for ``operation`` and return its shares.

        Re-enrolling replaces the commitment, revoking every earlier share.
        """
        secret = secrets.token_bytes(APPROVAL_SECRET_LENGTH)
        shares = self._scheme.split(secret)
        with self._lock:
            self._commitments[operation] = hashlib.sha256(secret).digest()
        logger.info("Enrolled %s for %d-of-%d approval", operation, self.threshold, self.total_shares)
        return shares

    def revoke(self, operation: str) -> None:
        """Drop the commitment; outstanding shares stop working."""
        with self._lock:
            self._commitments.pop(operation, None)

    def authorize(self, operation: str, shares: Sequence[ShamirShare]) -> None:
        """
        Grant ``operation`` if ``shares`` rebuild its approval secret.

        Raises:
            Unauthorized: Not enrolled, too few shares, or the shares do not
                rebuild the committed secret.
        """
        with self._lock:
            commitment = self._commitments.get(operation)
        if commitment is None:
            audit_log.threshold_authorization(operation, False, len(shares))
            raise Unauthorized(f"{operation} is not enrolled for threshold approval", {"operation": operation})

        try:
            candidate = self._scheme.reconstruct(list(shares))
        except (InsufficientShares, InvalidConfiguration) as e:
            audit_log.threshold_authorization(operation, False, len(shares))
            raise Unauthorized(f"threshold approval failed: {e}", {"operation": operation, "cause": e.code.value})

        if not constant_time_compare(hashlib.sha256(candidate).digest(), commitment):
            audit_log.threshold_authorization(operation, False, len(shares))
            raise Unauthorized("threshold approval failed", {"operation": operation})

        audit_log.threshold_authorization(operation, True, len(shares))


def split_secret_key(channel: ConfidentialChannel, threshold: int, total_shares: int) -> List[ShamirShare]:
    """Split a channel's secret key among custodians."""
    return ShamirSecretSharing(threshold, total_shares).split(channel.secret_key)


def recover_channel(shares: Sequence[ShamirShare], threshold: int) -> ConfidentialChannel:
    """
    Rebuild a ``ConfidentialChannel`` from at least ``threshold`` key shares.

    Raises:
        InsufficientShares: Fewer than ``threshold`` shares.
    """
    total = max(threshold, max((s.index for s in shares), default=threshold))
    scheme = ShamirSecretSharing(threshold, total)
    secret_key = scheme.reconstruct(list(shares))
    try:
        channel = ConfidentialChannel(secret_key)
    except MeridianError:
        raise InvalidConfiguration("recovered key has the wrong length")
    audit_log.security_event("channel_key_recovered", severity="high", shares=len(shares))
    return channel
