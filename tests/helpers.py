import threading
import time
from dataclasses import replace

import httpx

from checkin.repository import TicketRecord


class FakeClock:
    def __init__(self, start: int = 0):
        self.t = start

    def __call__(self) -> int:
        return self.t

    def set(self, t: int):
        self.t = t


class FakeRedis:
    """Just enough of redis.asyncio for the idempotency cache."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl


class InMemoryTicketRepository:
    """Thread-safe ticket store with the same conditional patch contract as the SQL one."""

    def __init__(self, read_delay: float = 0.0):
        self.lock = threading.Lock()
        self.rows = {}
        self.read_delay = read_delay

    def add(self, unique_id: str, **fields):
        self.rows[unique_id] = TicketRecord(
            unique_id=unique_id,
            team_name=fields.get("team_name", "Team"),
            leader_name=fields.get("leader_name", "Leader"),
            team_member_count=fields.get("team_member_count", 2),
            room_number=None,
            slot_number=None,
            is_checked_in=False,
            checked_in_at=None,
            checkin_counter=0,
            last_scan_time=0,
            scanned_by=None,
        )

    def find_by_unique_id(self, unique_id):
        with self.lock:
            row = self.rows.get(unique_id)
        if self.read_delay:
            time.sleep(self.read_delay)
        return row

    def patch(self, unique_id, changes, expected_counter):
        with self.lock:
            row = self.rows[unique_id]
            if row.checkin_counter != expected_counter:
                return False
            self.rows[unique_id] = replace(
                row,
                is_checked_in=changes.is_checked_in,
                checked_in_at=changes.checked_in_at,
                checkin_counter=changes.checkin_counter,
                last_scan_time=changes.last_scan_time,
                scanned_by=changes.scanned_by,
            )
            return True


async def create_ticket(client: httpx.AsyncClient, team_name="Team Rocket", leader_name="Jessie", team_member_count=3, **extra) -> str:
    body = {"teamName": team_name, "leaderName": leader_name, "teamMemberCount": team_member_count, **extra}
    r = await client.post("/admin/tickets", json=body)
    r.raise_for_status()
    data = r.json()
    assert data.get("ok") is True, data
    return data["uniqueId"]


async def scan(client: httpx.AsyncClient, unique_id: str, scanned_by=None, headers=None) -> dict:
    body = {"uniqueId": unique_id}
    if scanned_by is not None:
        body["scannedBy"] = scanned_by
    r = await client.post("/scan", json=body, headers=headers or {})
    r.raise_for_status()
    return r.json()
