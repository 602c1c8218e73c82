import time
from typing import Callable, Optional

from . import scan_rules
from .config import RAPID_SCAN_WINDOW_MS, SCAN_MAX_ATTEMPTS
from .logging_config import get_logger
from .repository import ScanPatch, TicketRecord, TicketRepository
from .schemas import ScanResult, TicketSnapshot

log = get_logger(__name__)


class CheckinError(Exception):
    pass


class ScanContentionError(CheckinError):
    """Raised when a ticket kept changing under us for every allowed attempt."""


def now_ms() -> int:
    return int(time.time() * 1000)


def _snapshot(t: TicketRecord, checked_in_at: Optional[int], counter: int, scanned_by: Optional[str]) -> TicketSnapshot:
    return TicketSnapshot(
        team_name=t.team_name,
        leader_name=t.leader_name,
        team_member_count=t.team_member_count,
        room_number=t.room_number,
        slot_number=t.slot_number,
        checked_in_at=checked_in_at,
        checkin_counter=counter,
        scanned_by=scanned_by,
    )


class ScanProcessor:
    """
    Applies the scan rules to one ticket and persists accepted scans.

    The server clock is the only time source. An accepted scan is written
    with a counter-conditioned patch; when that patch loses to a concurrent
    writer the ticket is read again and the scan is re-decided against the
    winner's state.
    """

    def __init__(
        self,
        repo: TicketRepository,
        clock: Callable[[], int] = now_ms,
        window_ms: int = RAPID_SCAN_WINDOW_MS,
        max_attempts: int = SCAN_MAX_ATTEMPTS,
    ):
        if window_ms <= 0:
            raise ValueError(f"rapid scan window must be positive, got {window_ms}ms")
        self.repo = repo
        self.clock = clock
        self.window_ms = window_ms
        self.max_attempts = max_attempts

    def scan(self, unique_id: str, scanner_identity: Optional[str] = None, client_timestamp: Optional[int] = None) -> ScanResult:
        for attempt in range(1, self.max_attempts + 1):
            ticket = self.repo.find_by_unique_id(unique_id)
            if ticket is None:
                log.info("scan", extra={"unique_id": unique_id, "rule": "not_found", "scanner": scanner_identity})
                return ScanResult(status=scan_rules.NOT_FOUND, message=scan_rules.MSG_NOT_FOUND)

            now = self.clock()
            rule, result, changes = self._evaluate(ticket, scanner_identity, now)
            if changes is None or self.repo.patch(unique_id, changes, expected_counter=ticket.checkin_counter):
                log.info(
                    "scan",
                    extra={
                        "unique_id": unique_id,
                        "rule": rule,
                        "status": result.status,
                        "counter": result.ticket.checkin_counter,
                        "scanner": scanner_identity,
                        "client_timestamp": client_timestamp,
                        "attempt": attempt,
                    },
                )
                return result

            log.info("scan lost race, retrying", extra={"unique_id": unique_id, "attempt": attempt})

        raise ScanContentionError(f"ticket {unique_id} changed concurrently {self.max_attempts} times")

    def _evaluate(self, t: TicketRecord, requested: Optional[str], now: int):
        existing = scan_rules.identity(t.scanned_by)
        requested = scan_rules.identity(requested)
        ctx = scan_rules.build_context(t.checkin_counter, t.last_scan_time, existing, requested, now, self.window_ms)
        decision = scan_rules.decide(ctx)
        shown_scanner = existing if existing is not None else requested

        if decision.rule == "conflicting_scanner":
            return decision.rule, ScanResult(
                status=decision.status,
                message=decision.message,
                ticket=_snapshot(t, t.checked_in_at, t.checkin_counter, existing),
            ), None

        if not decision.mutate:
            checked_in_at = t.checked_in_at
            if decision.status == scan_rules.SUCCESS and checked_in_at is None:
                checked_in_at = now
            return decision.rule, ScanResult(
                status=decision.status,
                message=decision.message,
                ticket=_snapshot(t, checked_in_at, t.checkin_counter, shown_scanner),
            ), None

        changes = ScanPatch(
            is_checked_in=True,
            checked_in_at=t.checked_in_at if t.checked_in_at is not None else now,
            checkin_counter=t.checkin_counter + 1,
            last_scan_time=max(now, t.last_scan_time),
            scanned_by=shown_scanner,
        )
        return decision.rule, ScanResult(
            status=decision.status,
            message=decision.message,
            ticket=_snapshot(t, changes.checked_in_at, changes.checkin_counter, changes.scanned_by),
        ), changes
