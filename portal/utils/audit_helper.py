"""
Activity log helper used by the routers
"""
from typing import Any, Dict, Optional
from fastapi import Request
from sqlalchemy.orm import Session

from common_utils.auth.middleware import Identity
from portal.config import settings
from portal.core.logging_config import get_logger
from portal.crud.activity_log import activity_log_crud

logger = get_logger(__name__)


def client_ip(request: Optional[Request]) -> Optional[str]:
    """
    Address of the caller as seen by the outermost trusted proxy.

    X-Forwarded-For is read from the right, skipping ``TRUSTED_PROXY_HOPS``
    proxies; entries further left are client-supplied and ignored.
    """
    if request is None:
        return None
    peer = request.client.host if request.client else None
    hops = settings.TRUSTED_PROXY_HOPS
    forwarded = request.headers.get("x-forwarded-for") if hops > 0 else None
    if not forwarded:
        return peer

    chain = [peer] + [addr.strip() for addr in reversed(forwarded.split(",")) if addr.strip()]
    return chain[min(hops, len(chain) - 1)]


def log_activity(
    db: Session,
    action: str,
    identity: Optional[Identity] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
    customer_id: Optional[int] = None,
    account_id: Optional[int] = None,
):
    """
    Record an activity log entry in its own commit.

    Failures are logged and never propagate to the request that triggered them.

    Args:
        db: Database session
        action: Action performed ('login', 'create_role', 'revoke_api_key', ...)
        identity: Caller identity; supplies customer and account ids
        resource_type: Kind of resource touched ('role', 'api_key', ...)
        resource_id: ID of the resource
        details: Extra JSON payload
        request: FastAPI request object (IP and user agent)
    """
    try:
        activity_log_crud.create(
            db,
            action=action,
            customer_id=customer_id if customer_id is not None else (identity.customer_id if identity else None),
            account_id=account_id if account_id is not None else (identity.account_id if identity else None),
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent") if request else None,
            details=details,
        )
        db.commit()
        logger.debug(f"Activity logged: {action} {resource_type or ''} {resource_id or ''}".rstrip())
    except Exception as log_error:
        db.rollback()
        logger.error(f"Failed to write activity log: {str(log_error)}", exc_info=True)
