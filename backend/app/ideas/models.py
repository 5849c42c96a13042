from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Text, DateTime, Index, func
from ..shared.db import Base


class Idea(Base):
    """매트릭스 위의 아이디어 카드. 잠금 레코드는 editing_by/editing_at 두 컬럼."""

    __tablename__ = "ideas"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    x: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    y: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    priority: Mapped[str | None] = mapped_column(String(32), nullable=True)
    project_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    # 잠금 소유자 + 획득 시각. expires_at은 저장하지 않고 읽을 때 editing_at + TTL로 계산
    editing_by: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    editing_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_ideas_editing_at", "editing_at"),)
