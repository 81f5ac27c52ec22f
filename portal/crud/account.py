from typing import Dict, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from common_utils import utcnow
from portal.crud.base import CRUDBase
from portal.models.account import Account, AccountStatusEnum


class CRUDAccount(CRUDBase[Account]):

    def get_by_login_id(self, db: Session, login_id: str, *, for_update: bool = False) -> Optional[Account]:
        """
        Find an account by exact username or case-insensitive email.
        """
        query = db.query(Account).filter(
            or_(
                Account.username == login_id,
                func.lower(Account.email) == login_id.lower(),
            )
        ).order_by(Account.id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def count_active_by_role(self, db: Session, role_id: int) -> int:
        return (
            db.query(func.count(Account.id))
            .filter(Account.role_id == role_id, Account.status == AccountStatusEnum.ACTIVE)
            .scalar()
        ) or 0

    def active_counts_by_role(self, db: Session, customer_id: int) -> Dict[int, int]:
        rows = (
            db.query(Account.role_id, func.count(Account.id))
            .filter(
                Account.customer_id == customer_id,
                Account.role_id.isnot(None),
                Account.status == AccountStatusEnum.ACTIVE,
            )
            .group_by(Account.role_id)
            .all()
        )
        return {role_id: count for role_id, count in rows}

    def set_password(self, db: Session, account: Account, password_hash: str) -> Account:
        account.password_hash = password_hash
        account.password_changed_at = utcnow()
        db.add(account)
        return account


account_crud = CRUDAccount(Account)
