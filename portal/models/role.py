from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey, func, Table
from sqlalchemy.orm import relationship
from portal.database.session import Base
from enum import Enum as PyEnum

# Association table for Role-Permission many-to-many relationship
role_permission = Table(
    'portal_role_permissions',
    Base.metadata,
    Column('role_id', Integer, ForeignKey('portal_roles.id', ondelete="CASCADE"), primary_key=True),
    Column('permission_id', Integer, ForeignKey('portal_permissions.id', ondelete="CASCADE"), primary_key=True)
)


class RoleStatusEnum(str, PyEnum):
    ACTIVE = "active"
    DELETED = "deleted"


class Role(Base):
    __tablename__ = "portal_roles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255))
    is_system = Column(Boolean, default=False, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    status = Column(
        Enum(RoleStatusEnum, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=RoleStatusEnum.ACTIVE,
        nullable=False,
    )

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Name uniqueness only applies among non-deleted roles, enforced in crud.role
    permissions = relationship("Permission", secondary=role_permission, order_by="Permission.sort_order")
    accounts = relationship("Account", back_populates="role")
