from typing import List, Optional
from sqlalchemy import Column, Integer, String, Enum, Date, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from uam.database import Base
import enum


ADMIN_ROLE = "Admin"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    DISABLED = "disabled"
    ON_VACATION = "on_vacation"
    PENDING_APPROVAL = "pending_approval"


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("assigned_at", DateTime(timezone=True), server_default=func.now()),
)


class Role(Base):
    """Named role, e.g. "Admin" or "Technician"."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class User(Base):
    """User account. The national id is what transfer forms refer to."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    national_id = Column(String(20), nullable=True, index=True)  # e.g. "1.234.567-8"
    status = Column(Enum(UserStatus), default=UserStatus.ACTIVE, nullable=False)
    birth_date = Column(Date, nullable=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True, index=True)
    avatar_url = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    section = relationship("Section", foreign_keys=[section_id])
    roles = relationship("Role", secondary=user_roles, order_by="Role.name")

    @property
    def full_name(self) -> Optional[str]:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or None

    @property
    def section_name(self) -> Optional[str]:
        return self.section.name if self.section else None

    @property
    def role_names(self) -> List[str]:
        return [role.name for role in self.roles]

    def has_role(self, role_name: str) -> bool:
        return role_name in self.role_names

    @property
    def is_admin(self) -> bool:
        return self.has_role(ADMIN_ROLE)
