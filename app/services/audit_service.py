"""
Visa Processing System - Audit Service
Structured audit trail for user actions, staff decisions and workflow transitions

Audit events are emitted through structlog as key/value records so they can be
shipped separately from the application log.
"""

from typing import Dict, Any, Optional
from datetime import datetime, timezone
from dataclasses import dataclass, asdict, field
import uuid

import structlog

logger = structlog.get_logger("audit")


@dataclass
class AuditLogData:
    """One audit record"""
    action_type: str        # CREATE, UPDATE, STATUS_CHANGE, LOGIN, UPLOAD, EMAIL, ...
    resource_type: str      # APPLICATION, PAYMENT, DOCUMENT, BIOMETRIC_APPOINTMENT, USER, ...
    resource_id: Optional[str] = None
    user_id: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    details: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def dict(self):
        return asdict(self)


class AuditService:
    """
    Audit event emitter used by the workflow services and endpoints.
    Stateless; every method returns the correlation id it logged under.
    """

    def log_action(self, action_data: AuditLogData, transaction_id: Optional[str] = None) -> str:
        if transaction_id is None:
            transaction_id = str(uuid.uuid4())

        log = logger.info if action_data.success else logger.warning
        log(
            "audit_event",
            transaction_id=transaction_id,
            action=f"{action_data.action_type}:{action_data.resource_type}",
            **{k: v for k, v in action_data.dict().items() if v not in (None, {}, [])},
        )
        return transaction_id

    def log_user_action(self, user_id: Any, action: str, details: Optional[Dict[str, Any]] = None) -> str:
        return self.log_action(AuditLogData(
            action_type=action.upper(),
            resource_type="USER_ACTION",
            user_id=str(user_id),
            details=details or {},
        ))

    def log_admin_action(
        self, admin_id: Any, action: str, target_id: Any = None, details: Optional[Dict[str, Any]] = None
    ) -> str:
        return self.log_action(AuditLogData(
            action_type=action.upper(),
            resource_type="ADMIN_ACTION",
            resource_id=str(target_id) if target_id is not None else None,
            user_id=str(admin_id),
            details=details or {},
        ))

    def log_application_status_change(
        self, application_id: Any, old_status: Any, new_status: Any, changed_by: Any,
        trigger: Optional[str] = None
    ) -> str:
        return self.log_action(AuditLogData(
            action_type="STATUS_CHANGE",
            resource_type="APPLICATION",
            resource_id=str(application_id),
            user_id=str(changed_by),
            old_values={"status": getattr(old_status, "value", old_status)},
            new_values={"status": getattr(new_status, "value", new_status)},
            details={"trigger": trigger} if trigger else {},
        ))

    def log_payment_processed(self, payment_id: Any, status: Any, processed_by: Any, amount: Any = None) -> str:
        return self.log_action(AuditLogData(
            action_type="PAYMENT_UPDATE",
            resource_type="PAYMENT",
            resource_id=str(payment_id),
            user_id=str(processed_by),
            new_values={"status": getattr(status, "value", status), "amount": str(amount) if amount is not None else None},
        ))

    def log_document_reviewed(self, document_id: Any, status: Any, reviewed_by: Any, reason: Optional[str] = None) -> str:
        return self.log_action(AuditLogData(
            action_type="REVIEW",
            resource_type="DOCUMENT",
            resource_id=str(document_id),
            user_id=str(reviewed_by),
            new_values={"status": getattr(status, "value", status), "rejection_reason": reason},
        ))

    def log_file_upload(self, user_id: Any, file_name: str, file_size: int, document_id: Any = None) -> str:
        return self.log_action(AuditLogData(
            action_type="UPLOAD",
            resource_type="DOCUMENT",
            resource_id=str(document_id) if document_id is not None else None,
            user_id=str(user_id),
            details={"file_name": file_name, "file_size": file_size},
        ))

    def log_email_sent(self, recipient: str, subject: str, template: str, related_id: Any = None) -> str:
        """Outbound email is simulated; the audit record is the delivery"""
        return self.log_action(AuditLogData(
            action_type="EMAIL",
            resource_type="NOTIFICATION",
            resource_id=str(related_id) if related_id is not None else None,
            details={"recipient": recipient, "subject": subject, "template": template},
        ))


audit_service = AuditService()
