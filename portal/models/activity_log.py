from sqlalchemy import Column, Integer, String, DateTime, JSON, func, Index
from portal.database.session import Base


class ActivityLog(Base):
    __tablename__ = "portal_activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, nullable=True, index=True)
    account_id = Column(Integer, nullable=True)
    action = Column(String(50), nullable=False)  # 'login', 'create_role', 'revoke_api_key', ...
    resource_type = Column(String(50), nullable=True)
    resource_id = Column(String(50), nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False, index=True)

    __table_args__ = (
        Index('idx_activity_customer_action', 'customer_id', 'action'),
    )
