from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from .admin import get_repo, router as admin_router
from .config import REDIS_URL
from .db import Base, engine
from .idempotency import get_cached_response, set_cached_response
from .logging_config import get_logger
from .processor import CheckinError, ScanProcessor
from .repository import TicketRepository
from .schemas import ScanReq

log = get_logger(__name__)

app = FastAPI(title="Event Check-in Gate", version="1.0.0")
app.include_router(admin_router)

redis = Redis.from_url(REDIS_URL, decode_responses=True) if REDIS_URL else None

# Create DB tables at import time
Base.metadata.create_all(bind=engine)


def get_redis() -> Optional[Redis]:
    return redis


def get_processor(repo: TicketRepository = Depends(get_repo)) -> ScanProcessor:
    return ScanProcessor(repo)


@app.exception_handler(CheckinError)
async def checkin_error_handler(request: Request, exc: CheckinError):
    log.warning("scan failed", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=503, content={"status": "error", "message": str(exc)})


@app.get("/health")
def health():
    return {"ok": True}


@app.post("/scan")
async def scan_ticket(
    req: ScanReq,
    processor: ScanProcessor = Depends(get_processor),
    cache: Optional[Redis] = Depends(get_redis),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
):
    """
    Scanner endpoint: the client posts the decoded QR payload and its
    scanner name. Returns error / success / warning for the UI to render.
    """
    if cache is not None and idempotency_key:
        cached = await get_cached_response(cache, idempotency_key)
        if cached:
            return cached

    result = await run_in_threadpool(
        processor.scan, req.unique_id, scanner_identity=req.scanned_by, client_timestamp=req.timestamp
    )
    resp = result.to_wire()

    if cache is not None and idempotency_key:
        await set_cached_response(cache, idempotency_key, resp)
    return resp
