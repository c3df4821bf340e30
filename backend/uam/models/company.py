from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from uam.database import Base


class Company(Base):
    """Supplier company, identified by its tax id (RUT)."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    tax_id = Column(String(50), unique=True, nullable=False, index=True)
    legal_name = Column(String(100), nullable=False)
    trade_name = Column(String(100), nullable=True)
    email = Column(String(100), nullable=True)
    phone_number = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return self.trade_name or self.legal_name
