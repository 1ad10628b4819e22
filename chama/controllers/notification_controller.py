# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: member notifications and the audit log."""
from typing import List, Optional

from fastapi import APIRouter, Depends

from chama.core.dependencies import (
    current_principal, get_audit_log, get_notification_service, require,
)
from chama.core.policy import POLICY
from chama.schemas import LogCreate, LogOut, NotificationCreate, NotificationOut, Principal
from chama.services.audit_service import AuditLog
from chama.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@router.get("/notifications", response_model=List[NotificationOut])
def list_notifications(member: Optional[str] = None, unread: bool = False,
                       principal: Principal = Depends(current_principal),
                       notifications: NotificationService = Depends(get_notification_service)):
    return notifications.list(POLICY.scope(principal, "records:read_all", member), unread)


@router.post("/notifications", status_code=201, response_model=NotificationOut)
def send_notification(body: NotificationCreate,
                      _: Principal = Depends(require("notifications:send")),
                      notifications: NotificationService = Depends(get_notification_service)):
    return notifications.notify(body.member, body.message)


@router.patch("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str,
              principal: Principal = Depends(current_principal),
              notifications: NotificationService = Depends(get_notification_service)):
    return notifications.mark_read(notification_id, principal)


@router.get("/logs", response_model=List[LogOut])
def list_logs(action: Optional[str] = None,
              _: Principal = Depends(require("logs:read")),
              audit: AuditLog = Depends(get_audit_log)):
    return audit.list(action)


@router.post("/logs", status_code=201, response_model=LogOut)
def write_log(body: LogCreate,
              principal: Principal = Depends(require("logs:write")),
              audit: AuditLog = Depends(get_audit_log)):
    return audit.record(body.action, principal.email, body.details)
