from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unique_id: Mapped[str] = mapped_column(String, unique=True, index=True)

    team_name: Mapped[str] = mapped_column(String)
    leader_name: Mapped[str] = mapped_column(String)
    team_member_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    room_number: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    slot_number: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # scan state, written only by the scan processor
    is_checked_in: Mapped[bool] = mapped_column(Boolean, default=False)
    checked_in_at: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)  # epoch ms
    checkin_counter: Mapped[int] = mapped_column(Integer, default=0)
    last_scan_time: Mapped[int] = mapped_column(BigInteger, default=0)  # epoch ms
    scanned_by: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
