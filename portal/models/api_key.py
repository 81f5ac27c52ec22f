from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, JSON, func
from portal.database.session import Base
from enum import Enum as PyEnum


class ApiKeyStatusEnum(str, PyEnum):
    ACTIVE = "active"
    REVOKED = "revoked"


class ApiKey(Base):
    """
    Customer-issued API key.

    The raw secret is returned once at creation and never stored; ``key_hash``
    is its SHA-256 digest and ``key_prefix`` its first 8 characters for display.
    """
    __tablename__ = "portal_api_keys"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    key_name = Column(String(100), nullable=False)
    key_hash = Column(String(64), unique=True, nullable=False)
    key_prefix = Column(String(8), nullable=False)
    permissions = Column(JSON, nullable=False, default=list)
    rate_limit = Column(Integer, nullable=False, default=1000)
    status = Column(
        Enum(ApiKeyStatusEnum, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=ApiKeyStatusEnum.ACTIVE,
        nullable=False,
        index=True,
    )
    usage_count = Column(Integer, default=0, nullable=False)
    last_used_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    revoked_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
