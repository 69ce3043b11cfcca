import os
import time
import logging
from dataclasses import dataclass
from fastapi import Request, status
from fastapi.responses import JSONResponse
import redis.asyncio as redis

logger = logging.getLogger(__name__)

DISABLE_RATE_LIMIT = os.getenv("DISABLE_RATE_LIMIT", "false").lower() == "true"

# Paths that accept a password get their own, much smaller bucket
CREDENTIAL_PATHS = frozenset({"/auth/login", "/auth/register"})


@dataclass(frozen=True)
class BucketPolicy:
    name: str
    rate: float  # tokens per second
    capacity: int


USER_POLICY = BucketPolicy("user", rate=2.0, capacity=30)
ANON_POLICY = BucketPolicy("ip", rate=0.5, capacity=10)
CREDENTIAL_POLICY = BucketPolicy("credentials", rate=0.1, capacity=5)

# KEYS[1] bucket key; ARGV: capacity, rate, now, cost, ttl
TOKEN_BUCKET_SCRIPT = """
local capacity = tonumber(ARGV[1])
local rate = tonumber(ARGV[2])
local now = tonumber(ARGV[3])
local cost = tonumber(ARGV[4])
local ttl = tonumber(ARGV[5])

local state = redis.call('HMGET', KEYS[1], 'tokens', 'ts')
local tokens = tonumber(state[1]) or capacity
local ts = tonumber(state[2]) or now

tokens = math.min(capacity, tokens + math.max(0, now - ts) * rate)
local allowed = 0
if tokens >= cost then
    tokens = tokens - cost
    allowed = 1
end

redis.call('HSET', KEYS[1], 'tokens', tokens, 'ts', now)
redis.call('EXPIRE', KEYS[1], ttl)
return allowed
"""

_redis_client: redis.Redis | None = None
_script_sha: str | None = None


async def get_redis_client() -> redis.Redis | None:
    """Get async Redis client singleton for rate limiting."""
    global _redis_client
    if _redis_client:
        return _redis_client

    host = os.getenv("REDIS_HOST")
    if not host:
        return None

    try:
        port = int(os.getenv("REDIS_PORT", "6379"))
        client = redis.Redis(
            host=host,
            port=port,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        await client.ping()
        _redis_client = client
        logger.info(f"Rate limiter Redis connected: {host}:{port}")
        return client
    except (redis.RedisError, OSError) as e:
        logger.warning(f"Rate limiter Redis connection failed: {host}:{port} - {type(e).__name__}: {e}")
        return None


async def load_rate_limit_script() -> str | None:
    """Load Lua script into Redis and return SHA. Call on startup."""
    global _script_sha
    if _script_sha:
        return _script_sha

    redis_client = await get_redis_client()
    if not redis_client:
        logger.warning("Redis not available, rate limiting disabled")
        return None

    try:
        _script_sha = await redis_client.script_load(TOKEN_BUCKET_SCRIPT)
        logger.info(f"Rate limit script loaded: {_script_sha[:8]}...")
        return _script_sha
    except redis.RedisError as e:
        logger.warning(f"Failed to load rate limit script: {e}")
        return None


def get_client_ip(request: Request) -> str:
    """Extract client IP from request headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def select_policy(request: Request) -> tuple[str, BucketPolicy]:
    """Pick the bucket key and policy for a request."""
    if request.method == "POST" and request.url.path in CREDENTIAL_PATHS:
        return f"credentials:{get_client_ip(request)}", CREDENTIAL_POLICY

    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}", USER_POLICY
    return f"ip:{get_client_ip(request)}", ANON_POLICY


async def check_rate_limit(identifier: str, policy: BucketPolicy, script_sha: str, cost: int = 1) -> bool:
    """Returns True if allowed. Fails open when Redis errors."""
    redis_client = await get_redis_client()
    if not redis_client:
        return True

    ttl = max(60, int(policy.capacity / policy.rate) * 2)
    try:
        result = await redis_client.evalsha(
            script_sha, 1, f"ratelimit:{identifier}", policy.capacity, policy.rate, time.time(), cost, ttl
        )
        return bool(result)
    except redis.RedisError as e:
        logger.warning(f"Rate limit check failed: {e}")
        return True


async def rate_limit_middleware(request: Request, call_next):
    """Rate limiting middleware using token bucket algorithm."""
    script_sha = _script_sha
    if DISABLE_RATE_LIMIT or not script_sha:
        return await call_next(request)

    identifier, policy = select_policy(request)
    if not await check_rate_limit(identifier, policy, script_sha):
        logger.info(f"Rate limit exceeded for {policy.name} bucket")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": "Rate limit exceeded"},
            headers={"Retry-After": str(max(1, int(1 / policy.rate)))}
        )

    response = await call_next(request)
    response.headers["X-RateLimit-Limit"] = str(policy.capacity)
    response.headers["X-RateLimit-Rate"] = f"{policy.rate:.1f}/s"
    return response
