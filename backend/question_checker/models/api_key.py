"""
GeminiApiKey: one provider credential with health/usage metadata.
Rows are added and toggled by administrators; dispatch only reads them and updates
last_used_at / error_count.
"""
import uuid
from datetime import datetime
from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from question_checker.database import Base
from question_checker.models.types import UuidType


class GeminiApiKey(Base):
    __tablename__ = "gemini_api_keys"

    id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), primary_key=True, default=uuid.uuid4
    )
    api_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint("error_count >= 0", name="gemini_api_keys_error_count_check"),)
