"""User settings models."""
from typing import Optional

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from src.shared.models.base import Base, TimestampMixin


class UserRecord(Base, TimestampMixin):
    """Per-user settings: Kaggle credentials, learning interests and progress.

    ``id`` is the identifier issued by the external auth provider.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    kaggle_username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    kaggle_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Example: ["computer vision", "time series"]
    interests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    competitions_analysed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @validates("xp", "competitions_analysed")
    def validate_non_negative(self, key: str, value: int) -> int:
        if value is not None and value < 0:
            raise ValueError(f"{key} must be non-negative")
        return value

    @validates("level")
    def validate_level(self, key: str, value: int) -> int:
        if value is not None and value < 1:
            raise ValueError("level must be at least 1")
        return value

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id}, has_kaggle_credentials={bool(self.kaggle_key)})>"
