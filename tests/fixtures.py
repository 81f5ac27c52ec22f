from common_utils.auth.utils import create_access_token, hash_password
from portal.models import Account, AccountStatusEnum, Role
from portal.services.login_service import build_identity

TEST_PASSWORD = "TestPassword123!"


def create_account(db, customer, username, email=None, role=None, status=AccountStatusEnum.ACTIVE,
                   password=TEST_PASSWORD):
    account = Account(
        customer_id=customer.id,
        username=username,
        email=email,
        password_hash=hash_password(password),
        phone="13800000000",
        status=status,
        role_id=role.id if role is not None else None,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


def create_role(db, customer, name, codes=(), permissions=None, is_default=False, is_system=False):
    role = Role(customer_id=customer.id, name=name, is_default=is_default, is_system=is_system)
    if permissions is not None:
        role.permissions = [p for p in permissions if p.code in codes]
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def auth_headers_for(account):
    token = create_access_token(build_identity(account).to_claims())
    return {"Authorization": f"Bearer {token}"}
