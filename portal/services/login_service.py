from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from common_utils import utcnow
from common_utils.auth.middleware import Identity, USER_TYPE_MASTER, USER_TYPE_SUB
from common_utils.auth.utils import create_access_token, hash_password, verify_password
from portal.config import settings
from portal.core.exceptions import AuthError, NotFoundError, ValidationError
from portal.core.logging_config import get_logger
from portal.crud.account import account_crud
from portal.crud.base import transaction
from portal.models.account import Account, AccountStatusEnum
from portal.models.role import RoleStatusEnum

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
ACCOUNT_LOCKED = "Account is locked, please try again later"
ACCOUNT_DISABLED = "Account is disabled, please contact the administrator"


def build_identity(account: Account) -> Identity:
    """
    Identity carried in the token of a freshly authenticated account.

    Accounts without a role are master accounts. Sub-accounts carry the
    permission codes of their role; a role that has since been deleted
    grants nothing.
    """
    customer = account.customer
    role = account.role

    permissions = ()
    if role is not None and role.status == RoleStatusEnum.ACTIVE:
        permissions = tuple(p.code for p in role.permissions)

    company_name = None
    customer_code = str(account.customer_id)
    contact_person = account.username
    if customer is not None:
        customer_code = customer.code or customer_code
        company_name = customer.company_name or customer.customer_name or ""
        contact_person = customer.contact_person or account.username

    return Identity(
        account_id=account.id,
        customer_id=account.customer_id,
        username=account.username,
        email=account.email,
        customer_code=customer_code,
        company_name=company_name,
        contact_person=contact_person,
        phone=account.phone,
        user_type=USER_TYPE_SUB if account.role_id else USER_TYPE_MASTER,
        role_id=account.role_id,
        role_name=role.name if role is not None else None,
        permissions=permissions,
    )


def build_profile(account: Account, identity: Optional[Identity] = None) -> Dict[str, Any]:
    identity = identity or build_identity(account)
    status = account.status.value if isinstance(account.status, AccountStatusEnum) else account.status
    return {
        "id": account.id,
        "customer_id": account.customer_id,
        "customer_code": identity.customer_code,
        "username": account.username,
        "email": account.email,
        "company_name": identity.company_name,
        "contact_person": identity.contact_person,
        "phone": account.phone,
        "status": status,
        "user_type": identity.user_type,
        "role_id": identity.role_id,
        "role_name": identity.role_name,
    }


class LoginService:
    """
    Password login with lockout.

    Each failed password check increments ``login_attempts``; reaching
    ``LOGIN_MAX_ATTEMPTS`` sets ``locked_until``. While locked, every attempt
    is refused without checking the password. The lock lapses by time alone
    and the counter resets only on a successful login.
    """

    def __init__(self, now_func=utcnow):
        self.now = now_func

    def _evaluate(self, account: Optional[Account], password: str, now: datetime) -> Optional[AuthError]:
        if account is None:
            return AuthError(INVALID_CREDENTIALS)

        if account.locked_until is not None and account.locked_until > now:
            logger.warning(f"Login refused for locked account {account.id} (until {account.locked_until})")
            return AuthError(ACCOUNT_LOCKED)

        if account.status != AccountStatusEnum.ACTIVE:
            logger.warning(f"Login refused for account {account.id} with status {account.status}")
            return AuthError(ACCOUNT_DISABLED)

        if not verify_password(password, account.password_hash):
            account.login_attempts = (account.login_attempts or 0) + 1
            if account.login_attempts >= settings.LOGIN_MAX_ATTEMPTS:
                account.locked_until = now + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
                logger.warning(
                    f"Account {account.id} locked until {account.locked_until} "
                    f"after {account.login_attempts} failed attempts"
                )
            else:
                logger.info(f"Failed login for account {account.id} ({account.login_attempts} attempts)")
            return AuthError(INVALID_CREDENTIALS)

        return None

    def login(
        self,
        db: Session,
        login_id: Optional[str],
        password: Optional[str],
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Returns ``{"token": ..., "customer": profile}``; raises ``AuthError`` on any refusal."""
        if not login_id or not password:
            raise ValidationError("Please enter your username and password")

        now = self.now()
        # The failure counter must be committed even though the login is refused
        with transaction(db):
            account = account_crud.get_by_login_id(db, login_id, for_update=True)
            failure = self._evaluate(account, password, now)
            if failure is None:
                account.login_attempts = 0
                account.locked_until = None
                account.last_login_at = now
                account.last_login_ip = ip_address
            if account is not None:
                db.add(account)

        if failure is not None:
            raise failure

        db.refresh(account)
        identity = build_identity(account)
        token = create_access_token(identity.to_claims())
        logger.info(f"Account {account.id} logged in from {ip_address or 'unknown'}")
        return {"token": token, "customer": build_profile(account, identity)}

    def current_account(self, db: Session, identity: Identity) -> Account:
        account = account_crud.get_for_customer(db, identity.account_id, identity.customer_id)
        if account is None:
            raise AuthError("Account not found")
        return account

    def change_password(
        self, db: Session, identity: Identity, old_password: Optional[str], new_password: Optional[str]
    ) -> None:
        if not old_password or not new_password:
            raise ValidationError("Please enter the old and new password")
        if len(new_password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"New password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )

        with transaction(db):
            account = account_crud.get_for_customer(
                db, identity.account_id, identity.customer_id, for_update=True
            )
            if account is None:
                raise NotFoundError("Account not found")
            if not verify_password(old_password, account.password_hash):
                raise ValidationError("Old password is incorrect")
            account_crud.set_password(db, account, hash_password(new_password))

        logger.info(f"Password changed for account {identity.account_id}")

    def refresh(self, identity: Identity) -> str:
        return create_access_token(identity.to_claims())


login_service = LoginService()
