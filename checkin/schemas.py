from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScanReq(CamelModel):
    unique_id: str
    timestamp: Optional[int] = None
    scanned_by: Optional[str] = None

    @field_validator("scanned_by")
    @classmethod
    def blank_scanner_is_absent(cls, v: Optional[str]) -> Optional[str]:
        return v if v and v.strip() else None


class TicketSnapshot(CamelModel):
    team_name: str
    leader_name: str
    team_member_count: Optional[int] = None
    room_number: Optional[str] = None
    slot_number: Optional[str] = None
    checked_in_at: Optional[int] = None
    checkin_counter: int
    scanned_by: Optional[str] = None


class ScanResult(CamelModel):
    status: Literal["not_found", "success", "warning"]
    message: str
    ticket: Optional[TicketSnapshot] = None

    def to_wire(self) -> dict:
        """Render the response body; a missing ticket goes out as status "error"."""
        if self.status == "not_found":
            return {"status": "error", "message": self.message}
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateTicketReq(CamelModel):
    team_name: str = Field(min_length=1)
    leader_name: str = Field(min_length=1)
    team_member_count: int
    room_number: Optional[str] = None
    slot_number: Optional[str] = None
