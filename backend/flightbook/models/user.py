from sqlalchemy import String, Boolean, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from flightbook.core.clock import utcnow
from flightbook.models.base import Base
from flightbook.models.enums import UserRole

class User(Base):
    """An account: a customer who books flights, or an admin who runs inventory."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)  # stored lowercased
    full_name: Mapped[str] = mapped_column(String(255))
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), default=UserRole.user.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)  # False blocks login and token use
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
