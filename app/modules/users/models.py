from sqlalchemy import Column, String, ForeignKey, Text, Enum, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.database.database import Base
from app.common.mixins import TimestampMixin
import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SALESMAN = "salesman"
    ACCOUNTANT = "accountant"
    DRIVER = "driver"
    USER = "user"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)  # hash bcrypt
    phone = Column(String(30), unique=True, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    notes = Column(Text, nullable=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), nullable=True, index=True)

    # Relationships
    company = relationship("Company", foreign_keys=[company_id])

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"
