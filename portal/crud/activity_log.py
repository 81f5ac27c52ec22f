from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from portal.crud.base import CRUDBase
from portal.models.activity_log import ActivityLog


class CRUDActivityLog(CRUDBase[ActivityLog]):

    def create(
        self,
        db: Session,
        *,
        action: str,
        customer_id: Optional[int] = None,
        account_id: Optional[int] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """Append one entry. The caller commits."""
        entry = ActivityLog(
            customer_id=customer_id,
            account_id=account_id,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
            details=details,
        )
        db.add(entry)
        db.flush()
        return entry


activity_log_crud = CRUDActivityLog(ActivityLog)
