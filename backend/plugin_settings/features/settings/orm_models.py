"""ORM model for persisted plugin options."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime as SQLDateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from plugin_settings.core.database import Base


class OptionORM(Base):
    """One named, JSON-encoded option row (e.g. the settings blob)."""

    __tablename__ = "plugin_options"

    # Primary key
    name: Mapped[str] = mapped_column(
        String(191),
        primary_key=True,
        comment="Storage identifier (e.g., 'plugin_settings')",
    )

    # Stored value
    value: Mapped[Any] = mapped_column(
        JSON,
        nullable=False,
        comment="JSON-encoded option value",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="When this option was first written",
    )

    updated_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="When this option was last written",
    )

    def __repr__(self) -> str:
        """Return string representation of the option."""
        return f"<OptionORM(name='{self.name}')>"
