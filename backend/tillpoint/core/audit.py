"""
Audit logging for authentication and money-moving operations.

Every sale, payment, debt and catalogue change is written to the "audit"
logger as one JSON object per line so it can be shipped separately from
the application log. Passwords and tokens are never logged.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for security-critical events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "logout", "signup"
        email: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "till@example.com", "192.168.1.1", True)
            AuditLog.log_authentication("login", "till@example.com", "192.168.1.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"auth.{action}",
            "email": email,
            "ip_address": ip_address,
            "success": success,
        }

        if reason and not success:
            log_entry["reason"] = reason

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete", "consolidate", "payment", "debt"
        resource_type: str,  # "sale", "product", "expense"
        resource_id: int,
        user,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a business-critical change: who, what, when, and the amounts involved.

        Usage:
            AuditLog.log_action("consolidate", "sale", 12, current_user, changes={"total": "30.00"})
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": f"{resource_type}.{action}",
            "user_id": getattr(user, "id", None),
            "user_email": getattr(user, "email", None),
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_access_denied(
        action: str,
        resource_type: str,
        user_id: Optional[int],
        reason: str,
    ):
        """Log a denied write (non-admin touching the catalogue or expenses)."""
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "access_denied",
            "action": action,
            "resource_type": resource_type,
            "user_id": user_id,
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry))
