from typing import Optional

from fastapi import APIRouter, Depends

from .config import MAX_TEAM_MEMBERS, MIN_TEAM_MEMBERS, VALID_ROOMS, VALID_SLOTS
from .db import SessionLocal
from .logging_config import get_logger
from .models import Ticket
from .repository import TicketRepository
from .schemas import CreateTicketReq

router = APIRouter(prefix="/admin", tags=["admin"])
log = get_logger(__name__)


def get_repo() -> TicketRepository:
    return TicketRepository(SessionLocal)


# -------------------------
# Helpers
# -------------------------
def _validate_ticket(req: CreateTicketReq) -> Optional[str]:
    if not req.team_name.strip() or not req.leader_name.strip():
        return "Team name and leader name are required"
    if req.team_member_count < MIN_TEAM_MEMBERS or req.team_member_count > MAX_TEAM_MEMBERS:
        return f"Team member count must be between {MIN_TEAM_MEMBERS} and {MAX_TEAM_MEMBERS}"

    if req.room_number is not None:
        if not req.room_number.strip():
            return "Room number is required"
        if req.room_number.strip() not in VALID_ROOMS:
            return f"Invalid room number. Must be one of {', '.join(VALID_ROOMS)}"

    if req.slot_number is not None:
        if not req.slot_number.strip():
            return "Slot number is required"
        if req.slot_number.strip() not in VALID_SLOTS:
            return f"Invalid slot number. Must be one of {', '.join(VALID_SLOTS)}"
    return None


def _ticket_row(t: Ticket) -> dict:
    return {
        "uniqueId": t.unique_id,
        "teamName": t.team_name,
        "leaderName": t.leader_name,
        "teamMemberCount": t.team_member_count,
        "roomNumber": t.room_number,
        "slotNumber": t.slot_number,
        "isCheckedIn": t.is_checked_in,
        "checkedInAt": t.checked_in_at,
        "checkinCounter": t.checkin_counter,
        "scannedBy": t.scanned_by,
        "createdAt": str(t.created_at),
    }


# -------------------------
# Ticket APIs
# -------------------------
@router.post("/tickets")
def create_ticket(req: CreateTicketReq, repo: TicketRepository = Depends(get_repo)):
    error = _validate_ticket(req)
    if error:
        return {"ok": False, "error": error}

    t = repo.create(
        team_name=req.team_name.strip(),
        leader_name=req.leader_name.strip(),
        team_member_count=req.team_member_count,
        room_number=req.room_number.strip() if req.room_number else None,
        slot_number=req.slot_number.strip() if req.slot_number else None,
    )
    log.info("ticket created", extra={"unique_id": t.unique_id, "team": t.team_name})
    return {"ok": True, "ticketId": t.id, "uniqueId": t.unique_id}


@router.get("/tickets")
def list_tickets(limit: int = 500, repo: TicketRepository = Depends(get_repo)):
    return [_ticket_row(t) for t in repo.list_all(limit=limit)]


@router.get("/tickets/scanned")
def list_scanned_tickets(
    scanned_by: Optional[str] = None,
    limit: int = 500,
    repo: TicketRepository = Depends(get_repo),
):
    return [_ticket_row(t) for t in repo.list_checked_in(scanned_by=scanned_by, limit=limit)]


@router.get("/stats")
def get_stats(repo: TicketRepository = Depends(get_repo)):
    return repo.stats()
