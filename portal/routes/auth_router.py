from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from common_utils.auth.middleware import Identity, authenticate
from portal.config import settings
from portal.core.logging_config import get_logger
from portal.core.rate_limit import TOO_MANY_LOGINS, limiter
from portal.database.session import get_db
from portal.schemas.auth import ChangePasswordRequest, CustomerProfile, LoginRequest, LoginResponse, TokenResponse
from portal.services.login_service import build_profile, login_service
from portal.utils.audit_helper import client_ip, log_activity
from portal.utils.response_utils import ResponseWrapper

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


@router.post("/login", status_code=status.HTTP_200_OK)
@limiter.limit(settings.RATE_LIMIT_LOGIN, error_message=TOO_MANY_LOGINS)
async def login(
    form_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Log in with username or email and password.

    Five consecutive wrong passwords lock the account for 30 minutes.
    Each client IP also gets a limited number of login attempts per window.
    """
    ip_address = client_ip(request)
    result = login_service.login(db, form_data.login_id, form_data.password, ip_address=ip_address)

    customer = result["customer"]
    log_activity(
        db,
        "login",
        customer_id=customer["customer_id"],
        account_id=customer["id"],
        request=request,
    )

    return ResponseWrapper.success(
        data=LoginResponse(token=result["token"], customer=CustomerProfile(**customer)),
        message="Login successful",
    )


@router.get("/me", status_code=status.HTTP_200_OK)
async def get_me(
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    """Current account, read fresh from the database"""
    account = login_service.current_account(db, identity)
    return ResponseWrapper.success(data=CustomerProfile(**build_profile(account)))


@router.post("/change-password", status_code=status.HTTP_200_OK)
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    login_service.change_password(db, identity, body.old_password, body.new_password)
    log_activity(db, "change_password", identity, resource_type="account",
                 resource_id=identity.account_id, request=request)
    return ResponseWrapper.success(message="Password changed successfully")


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(authenticate),
):
    # Tokens are stateless; logging out only records the event
    log_activity(db, "logout", identity, request=request)
    return ResponseWrapper.success(message="Logged out successfully")


@router.post("/refresh", status_code=status.HTTP_200_OK)
async def refresh_token(identity: Identity = Depends(authenticate)):
    token = login_service.refresh(identity)
    logger.debug(f"Token refreshed for account {identity.account_id}")
    return ResponseWrapper.success(data=TokenResponse(token=token), message="Token refreshed successfully")
