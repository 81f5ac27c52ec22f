from sqlalchemy import Column, Integer, String
from portal.database.session import Base


class Permission(Base):
    """Global permission catalog entry, e.g. ``orders:view``"""
    __tablename__ = "portal_permissions"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(100), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    module = Column(String(50), nullable=False, index=True)
    description = Column(String(255))
    sort_order = Column(Integer, default=0, nullable=False)
