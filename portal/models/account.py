from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship
from portal.database.session import Base
from enum import Enum as PyEnum


class AccountStatusEnum(str, PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Account(Base):
    """Portal login account. Deactivated through ``status``, never deleted."""
    __tablename__ = "customer_accounts"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(150), unique=True, nullable=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(30))
    status = Column(
        Enum(AccountStatusEnum, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=AccountStatusEnum.ACTIVE,
        nullable=False,
    )
    # NULL role means a master account holding every permission
    role_id = Column(Integer, ForeignKey("portal_roles.id", ondelete="SET NULL"), nullable=True, index=True)

    login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    last_login_ip = Column(String(64), nullable=True)
    password_changed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="accounts")
    role = relationship("Role", back_populates="accounts")
