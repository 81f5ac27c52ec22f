import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from common_utils.auth.utils import hash_password
from portal.models import Account, AccountStatusEnum, Customer, Permission

logger = logging.getLogger(__name__)

# (code, name, module, sort_order)
PERMISSION_CATALOG: List[Tuple[str, str, str, int]] = [
    ("dashboard:view", "View dashboard", "dashboard", 10),
    ("orders:view", "View orders", "orders", 20),
    ("orders:create", "Create orders", "orders", 21),
    ("orders:edit", "Edit orders", "orders", 22),
    ("quote:view", "Online quote", "quote", 30),
    ("tariff:view", "Tariff calculator", "tariff", 40),
    ("finance:view", "View bills", "finance", 50),
    ("finance:export", "Export bills", "finance", 51),
    ("api:view", "View API keys", "api", 60),
    ("api:manage", "Manage API keys", "api", 61),
    ("users:view", "View users", "users", 70),
    ("users:manage", "Manage users", "users", 71),
    ("roles:view", "View roles", "roles", 80),
    ("roles:manage", "Manage roles", "roles", 81),
    ("settings:view", "View settings", "settings", 90),
    ("settings:manage", "Manage settings", "settings", 91),
]


def seed_permissions(db: Session) -> List[Permission]:
    """
    Seed the permission catalog (idempotent).
    """
    permissions = []
    for code, name, module, sort_order in PERMISSION_CATALOG:
        existing = db.query(Permission).filter(Permission.code == code).first()
        if existing:
            logger.debug(f"Permission {code} already exists.")
            permissions.append(existing)
            continue

        perm = Permission(
            code=code,
            name=name,
            module=module,
            description=name,
            sort_order=sort_order,
        )
        db.add(perm)
        permissions.append(perm)
        logger.info(f"Permission {code} created.")

    db.commit()
    return permissions


def seed_demo_customer(
    db: Session,
    code: str = "DEMO001",
    username: str = "demo",
    password: str = "demo123",
    email: Optional[str] = "demo@example.com",
) -> Account:
    """
    Seed a demo customer with one master account (idempotent).
    """
    customer = db.query(Customer).filter(Customer.code == code).first()
    if not customer:
        customer = Customer(
            code=code,
            customer_name="Demo Customer",
            company_name="Demo Trading Co.",
            contact_person="Demo Contact",
        )
        db.add(customer)
        db.flush()
        logger.info(f"Customer {code} created.")

    account = db.query(Account).filter(Account.username == username).first()
    if account:
        logger.info(f"Account {username} already exists, skipping.")
        return account

    account = Account(
        customer_id=customer.id,
        username=username,
        email=email,
        password_hash=hash_password(password),
        status=AccountStatusEnum.ACTIVE,
    )
    db.add(account)
    db.commit()
    logger.info(f"Master account {username} created for customer {code}.")
    return account
