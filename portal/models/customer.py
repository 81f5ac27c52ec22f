from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from portal.database.session import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False)
    customer_name = Column(String(200))
    company_name = Column(String(200))
    contact_person = Column(String(100))
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="customer")
