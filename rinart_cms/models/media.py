"""SQLAlchemy model for the shared media library."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.session import Base


class MediaAssetModel(Base):
    """Image previously uploaded or fetched through the admin panel."""

    __tablename__ = "MediaAsset"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=False), default=datetime.utcnow, nullable=False, index=True
    )
