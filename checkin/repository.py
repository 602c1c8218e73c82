import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select, update

from .models import Ticket


@dataclass(frozen=True)
class TicketRecord:
    """Detached copy of a ticket row, safe to use after its session is closed."""

    unique_id: str
    team_name: str
    leader_name: str
    team_member_count: Optional[int]
    room_number: Optional[str]
    slot_number: Optional[str]
    is_checked_in: bool
    checked_in_at: Optional[int]
    checkin_counter: int
    last_scan_time: int
    scanned_by: Optional[str]

    @classmethod
    def from_row(cls, t: Ticket) -> "TicketRecord":
        return cls(
            unique_id=t.unique_id,
            team_name=t.team_name,
            leader_name=t.leader_name,
            team_member_count=t.team_member_count,
            room_number=t.room_number,
            slot_number=t.slot_number,
            is_checked_in=bool(t.is_checked_in),
            checked_in_at=t.checked_in_at,
            checkin_counter=t.checkin_counter or 0,
            last_scan_time=t.last_scan_time or 0,
            scanned_by=t.scanned_by,
        )


@dataclass(frozen=True)
class ScanPatch:
    is_checked_in: bool
    checked_in_at: int
    checkin_counter: int
    last_scan_time: int
    scanned_by: Optional[str]


class TicketRepository:
    """
    Ticket storage on top of a SQLAlchemy session factory.

    Every call runs in its own short transaction. The scan write is a single
    UPDATE guarded by the counter value the caller read, so two writers that
    read the same state cannot both apply.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def find_by_unique_id(self, unique_id: str) -> Optional[TicketRecord]:
        db = self.session_factory()
        try:
            t = db.execute(select(Ticket).where(Ticket.unique_id == unique_id)).scalars().first()
            return TicketRecord.from_row(t) if t else None
        finally:
            db.close()

    def patch(self, unique_id: str, changes: ScanPatch, expected_counter: int) -> bool:
        db = self.session_factory()
        try:
            result = db.execute(
                update(Ticket)
                .where(Ticket.unique_id == unique_id, Ticket.checkin_counter == expected_counter)
                .values(
                    is_checked_in=changes.is_checked_in,
                    checked_in_at=changes.checked_in_at,
                    checkin_counter=changes.checkin_counter,
                    last_scan_time=changes.last_scan_time,
                    scanned_by=changes.scanned_by,
                )
            )
            db.commit()
            return result.rowcount == 1
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create(
        self,
        team_name: str,
        leader_name: str,
        team_member_count: Optional[int],
        room_number: Optional[str] = None,
        slot_number: Optional[str] = None,
    ) -> Ticket:
        db = self.session_factory()
        try:
            t = Ticket(
                unique_id=str(uuid.uuid4()),
                team_name=team_name,
                leader_name=leader_name,
                team_member_count=team_member_count,
                room_number=room_number,
                slot_number=slot_number,
                is_checked_in=False,
                checkin_counter=0,
                last_scan_time=0,
            )
            db.add(t)
            db.commit()
            db.refresh(t)
            return t
        finally:
            db.close()

    def list_all(self, limit: int = 500) -> list[Ticket]:
        db = self.session_factory()
        try:
            return list(
                db.execute(select(Ticket).order_by(Ticket.created_at.desc(), Ticket.id.desc()).limit(limit))
                .scalars()
                .all()
            )
        finally:
            db.close()

    def list_checked_in(self, scanned_by: Optional[str] = None, limit: int = 500) -> list[Ticket]:
        db = self.session_factory()
        try:
            q = select(Ticket).where(Ticket.is_checked_in.is_(True))
            if scanned_by:
                q = q.where(Ticket.scanned_by == scanned_by)
            q = q.order_by(Ticket.checked_in_at.desc(), Ticket.id.desc()).limit(limit)
            return list(db.execute(q).scalars().all())
        finally:
            db.close()

    def stats(self) -> dict:
        db = self.session_factory()
        try:
            total = db.execute(select(func.count(Ticket.id))).scalar_one()
            checked_in, members = db.execute(
                select(func.count(Ticket.id), func.coalesce(func.sum(Ticket.team_member_count), 0)).where(
                    Ticket.is_checked_in.is_(True)
                )
            ).one()
            per_scanner = db.execute(
                select(Ticket.scanned_by, func.count(Ticket.id))
                .where(Ticket.is_checked_in.is_(True))
                .group_by(Ticket.scanned_by)
            ).all()
            return {
                "total_tickets": total,
                "checked_in": checked_in,
                "members_checked_in": int(members),
                "by_scanner": {(name or "unknown"): n for (name, n) in per_scanner},
            }
        finally:
            db.close()
