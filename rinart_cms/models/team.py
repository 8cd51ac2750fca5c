"""SQLAlchemy model for studio team members."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.session import Base


class TeamMemberModel(Base):
    __tablename__ = "TeamMember"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column("imageUrl", Text, nullable=True)
    mobile_image_url: Mapped[str | None] = mapped_column("mobileImageUrl", Text, nullable=True)
    is_featured: Mapped[bool] = mapped_column("isFeatured", Boolean, default=False, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, default=0, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt",
        DateTime(timezone=False),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )
