from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base

# Campos que a edição pode tocar; o resto só muda via cancelamento
MUTABLE_FIELDS = ("title", "description", "color")


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: dt.datetime.now(tz=dt.UTC),
    )
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    professional_id: Mapped[int | None] = mapped_column(
        ForeignKey("professionals.id", ondelete="RESTRICT")
    )
    client_id: Mapped[int | None] = mapped_column(
        ForeignKey("clients.id", ondelete="RESTRICT")
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time(timezone=True), nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time(timezone=True), nullable=False)
    title: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cancelled_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))
    color: Mapped[str | None] = mapped_column(String(20))

    client = relationship("Client")
    professional = relationship("Professional")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_appt_time_order"),
        Index("ix_appt_prof_date", "professional_id", "date"),
        Index("ix_appt_client_id", "client_id"),
        # um horário de início ativo por profissional e dia; canceladas liberam o horário
        Index(
            "ux_appt_prof_date_start_active",
            "professional_id",
            "date",
            "start_time",
            unique=True,
            postgresql_where=text("cancelled = false"),
            sqlite_where=text("cancelled = 0"),
        ),
    )
