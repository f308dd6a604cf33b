import hashlib
import json
import logging

import redis

from config import SHOTLIST_CACHE_PREFIX, SHOTLIST_CACHE_TTL_SEC

logger = logging.getLogger(__name__)


def payload_key(payload: dict) -> str:
    """Stable cache key for an agent payload."""
    digest = hashlib.sha256(
        json.dumps(payload, sort_keys=True, default=str).encode()
    ).hexdigest()
    return f"{SHOTLIST_CACHE_PREFIX}:{digest}"


class RedisStore:
    def __init__(self, redis_client=None, url=None, lazy=False, ttl=SHOTLIST_CACHE_TTL_SEC):
        self._redis = redis_client
        self.url = url
        self.lazy = lazy
        self.ttl = ttl

        if not lazy and self._redis is None:
            self._connect()

    # -----------------------------
    # Internal
    # -----------------------------

    def _connect(self):
        if self._redis is None:
            if not self.url:
                raise RuntimeError("Redis URL not provided")

            try:
                self._redis = redis.from_url(
                    self.url,
                    decode_responses=True,
                    socket_timeout=5,
                    socket_connect_timeout=5,
                )
                self._redis.ping()
                logger.info("[RedisStore] Connected to Redis")
            except Exception as e:
                logger.error(f"[RedisStore] Failed to connect to Redis: {e}")
                self._redis = None
                raise

    @property
    def redis(self):
        if self._redis is None:
            self._connect()
        return self._redis

    # -----------------------------
    # SHOT LISTS
    # -----------------------------

    def get_shotlist(self, payload: dict):
        """Cached agent shot list for this payload, or None."""
        data = self.redis.get(payload_key(payload))
        if not data:
            return None
        return json.loads(data)

    def put_shotlist(self, payload: dict, shotlist: dict):
        key = payload_key(payload)
        self.redis.set(key, json.dumps(shotlist), ex=self.ttl)
        return key
