"""
Decision table for ticket scans.

A scan is classified by three facts about the ticket and the request:
how the requesting scanner relates to the recorded one, whether the
previous accepted scan is still inside the rapid-fire window, and the
current check-in counter. The first matching rule wins.
"""
from dataclasses import dataclass
from typing import Callable, Optional

SUCCESS = "success"
WARNING = "warning"
NOT_FOUND = "not_found"

# scanner relations
CONFLICT = "conflict"  # both recorded and requested, and they differ
SAME = "same"  # both recorded and requested, and equal
UNRECORDED = "unrecorded"  # ticket has no scanner yet
ANONYMOUS = "anonymous"  # ticket has a scanner, request carries none

MSG_NOT_FOUND = "Ticket not found"
MSG_FIRST_CHECKIN = "Ticket successfully scanned - First check-in!"
MSG_ALREADY_CHECKED_IN = "Welcome! You are already checked in"


def msg_already_scanned_by(scanner: str) -> str:
    return f"Ticket already scanned by {scanner}"


def msg_scanned_multiple(attempts: int) -> str:
    return f"Ticket scanned multiple times ({attempts} attempts)"


def identity(name: Optional[str]) -> Optional[str]:
    """Blank scanner names count as no scanner."""
    return name if name and name.strip() else None


def scanner_relation(existing: Optional[str], requested: Optional[str]) -> str:
    existing, requested = identity(existing), identity(requested)
    if existing is None:
        return UNRECORDED
    if requested is None:
        return ANONYMOUS
    return SAME if existing == requested else CONFLICT


@dataclass(frozen=True)
class ScanContext:
    counter: int
    relation: str
    within_window: bool
    existing_scanned_by: Optional[str]


@dataclass(frozen=True)
class Decision:
    rule: str
    status: str
    message: str
    mutate: bool


@dataclass(frozen=True)
class Rule:
    name: str
    applies: Callable[[ScanContext], bool]
    status: str
    message: Callable[[ScanContext], str]
    mutate: bool


RULES = (
    Rule(
        "conflicting_scanner",
        lambda c: c.relation == CONFLICT,
        WARNING,
        lambda c: msg_already_scanned_by(c.existing_scanned_by),
        False,
    ),
    Rule(
        "first_scan_replay",
        lambda c: c.within_window and c.counter == 1 and c.relation in (SAME, UNRECORDED),
        SUCCESS,
        lambda c: MSG_FIRST_CHECKIN,
        False,
    ),
    Rule(
        "rapid_repeat",
        lambda c: c.within_window and c.counter == 1,
        WARNING,
        lambda c: MSG_ALREADY_CHECKED_IN,
        False,
    ),
    Rule(
        "rapid_repeat_multiple",
        lambda c: c.within_window,
        WARNING,
        lambda c: msg_scanned_multiple(c.counter),
        False,
    ),
    Rule(
        "first_checkin",
        lambda c: c.counter == 0,
        SUCCESS,
        lambda c: MSG_FIRST_CHECKIN,
        True,
    ),
    Rule(
        "second_checkin",
        lambda c: c.counter == 1,
        WARNING,
        lambda c: MSG_ALREADY_CHECKED_IN,
        True,
    ),
    Rule(
        "repeat_checkin",
        lambda c: True,
        WARNING,
        lambda c: msg_scanned_multiple(c.counter + 1),
        True,
    ),
)


def build_context(
    counter: int,
    last_scan_time: int,
    existing_scanned_by: Optional[str],
    requested_scanned_by: Optional[str],
    now: int,
    window_ms: int,
) -> ScanContext:
    return ScanContext(
        counter=counter,
        relation=scanner_relation(existing_scanned_by, requested_scanned_by),
        within_window=counter > 0 and (now - last_scan_time) < window_ms,
        existing_scanned_by=existing_scanned_by,
    )


def decide(ctx: ScanContext) -> Decision:
    for rule in RULES:
        if rule.applies(ctx):
            return Decision(rule.name, rule.status, rule.message(ctx), rule.mutate)
    raise AssertionError("scan rule table has no catch-all")
