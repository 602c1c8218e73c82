import json

from .config import IDEMPOTENCY_TTL_SECONDS


def _key(idem_key: str) -> str:
    return f"idem:scan:{idem_key}"


async def get_cached_response(redis, idem_key: str):
    raw = await redis.get(_key(idem_key))
    return json.loads(raw) if raw else None


async def set_cached_response(redis, idem_key: str, response: dict, ttl_seconds: int = IDEMPOTENCY_TTL_SECONDS):
    await redis.setex(_key(idem_key), ttl_seconds, json.dumps(response))
