"""
Logging configuration for Meridian.

Provides structured JSON logging for compliance audit trails and debugging.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import List, Optional, TextIO

PACKAGE_LOGGER = "meridian"

# Context variable for operation ID tracking
operation_id_var: ContextVar[str] = ContextVar('operation_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record, suitable for log aggregation
    and for archiving alongside compliance evidence.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        operation_id = operation_id_var.get()
        if operation_id:
            log_data["operation_id"] = operation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Specialized logger for compliance audit events.

    One method per domain event: registry changes, transfer decisions,
    issuance, seizure, pause state, collateral and threshold approvals.
    """

    def __init__(self, name: str = "meridian.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        extra = {
            "event_type": event_type,
            "operation_id": operation_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def whitelist_changed(
        self,
        wallet: str,
        active: bool,
        kyc_level: Optional[str] = None,
        jurisdiction: Optional[str] = None,
        expiry: Optional[int] = None
    ) -> None:
        self._log(
            logging.INFO,
            "WHITELIST_ADDED" if active else "WHITELIST_REMOVED",
            wallet=wallet,
            kyc_level=kyc_level,
            jurisdiction=jurisdiction,
            expiry=expiry,
            message=f"Whitelist entry {'activated' if active else 'deactivated'} for {wallet}"
        )

    def blacklist_changed(self, wallet: str, active: bool, reason: Optional[str] = None) -> None:
        self._log(
            logging.WARNING if active else logging.INFO,
            "BLACKLIST_ADDED" if active else "BLACKLIST_REMOVED",
            wallet=wallet,
            reason=reason,
            message=f"Blacklist entry {'activated' if active else 'deactivated'} for {wallet}"
        )

    def transfer_decision(
        self,
        source: str,
        destination: Optional[str],
        amount: int,
        eligible: bool,
        reason: Optional[str] = None,
        committed: bool = False
    ) -> None:
        """Log a transfer eligibility decision."""
        self._log(
            logging.INFO if eligible else logging.WARNING,
            "TRANSFER_DECISION",
            source=source,
            destination=destination,
            amount=amount,
            eligible=eligible,
            reason=reason,
            committed=committed,
            message=f"Transfer {'eligible' if eligible else 'denied'}: {reason or 'OK'}"
        )

    def issuance(
        self,
        operation: str,
        actor: str,
        amount: int,
        total_supply: int,
        counterparty: Optional[str] = None,
        reference: Optional[str] = None
    ) -> None:
        """Log a mint, burn or seizure."""
        self._log(
            logging.INFO,
            operation.upper(),
            actor=actor,
            amount=amount,
            total_supply=total_supply,
            counterparty=counterparty,
            reference=reference,
            message=f"{operation} of {amount} by {actor}"
        )

    def issuance_rejected(self, operation: str, actor: str, code: str, amount: int = 0) -> None:
        self._log(
            logging.WARNING,
            "ISSUANCE_REJECTED",
            operation=operation,
            actor=actor,
            code=code,
            amount=amount,
            message=f"{operation} rejected: {code}"
        )

    def pause_changed(self, paused: bool, actor: str, threshold_approved: bool = False) -> None:
        self._log(
            logging.WARNING if paused else logging.INFO,
            "ISSUANCE_PAUSED" if paused else "ISSUANCE_UNPAUSED",
            actor=actor,
            threshold_approved=threshold_approved,
            message=f"Issuance {'paused' if paused else 'unpaused'} by {actor}"
        )

    def collateral_changed(
        self,
        operation: str,
        amount: int,
        total_collateral: int,
        collateral_ratio_bps: int,
        proof_hash: Optional[str] = None
    ) -> None:
        self._log(
            logging.INFO,
            "COLLATERAL_" + operation.upper(),
            amount=amount,
            total_collateral=total_collateral,
            collateral_ratio_bps=collateral_ratio_bps,
            proof_hash=proof_hash,
            message=f"Collateral {operation}: {amount}"
        )

    def threshold_authorization(self, operation: str, granted: bool, shares: int) -> None:
        self._log(
            logging.INFO if granted else logging.ERROR,
            "THRESHOLD_AUTHORIZATION",
            operation=operation,
            granted=granted,
            shares=shares,
            message=f"Threshold authorization for {operation}: {'granted' if granted else 'denied'}"
        )

    def security_event(
        self,
        event: str,
        severity: str = "medium",
        **details
    ) -> None:
        """Log a security-relevant event."""
        level = {
            "low": logging.INFO,
            "medium": logging.WARNING,
            "high": logging.ERROR,
            "critical": logging.CRITICAL
        }.get(severity, logging.WARNING)

        self._log(
            level,
            "SECURITY_EVENT",
            security_event=event,
            severity=severity,
            **details,
            message=f"Security event: {event}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Attach handlers to the ``meridian`` logger hierarchy.

    Handlers from an earlier call are closed and replaced, so the CLI can
    configure once per invocation without duplicating output. The root
    logger is left alone.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: One JSON object per record; plain text otherwise
        log_file: Also write records to this file
        stream: Console stream, stderr by default
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s')

    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    return package_logger


def set_operation_id(operation_id: Optional[str] = None) -> str:
    """
    Set the operation ID for the current context.

    Returns:
        The operation ID that was set
    """
    if operation_id is None:
        operation_id = str(uuid.uuid4())
    operation_id_var.set(operation_id)
    return operation_id


def get_operation_id() -> str:
    """Get the current operation ID."""
    return operation_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
