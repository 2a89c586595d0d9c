"""
Services package for the Visa Processing System
"""

from .audit_service import AuditService, AuditLogData, audit_service
from .workflow import WorkflowAction, TransitionPlan, plan_transition
from .file_storage import DocumentFileManager, get_file_manager

__all__ = [
    "AuditService",
    "AuditLogData",
    "audit_service",
    "WorkflowAction",
    "TransitionPlan",
    "plan_transition",
    "DocumentFileManager",
    "get_file_manager",
]
