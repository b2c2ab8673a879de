"""Best-effort response cache: Redis when reachable, process memory otherwise.

Lifecycle::

    cache = ResponseCache(redis_url)   # "init"
    cache.connect()                    # -> "ready" or "degraded"
    cache.get(...) / cache.set(...)    # never raise
    cache.close()                      # "closed"

While degraded, every operation uses the in-process store, and a reconnect is
attempted at most once per ``reconnect_interval`` seconds.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Literal, Optional, Tuple

import redis

LOGGER = logging.getLogger(__name__)

CacheState = Literal["init", "ready", "degraded", "closed"]

REDIS_RECONNECT_INTERVAL = 30.0
REDIS_SOCKET_TIMEOUT = 0.5


class ResponseCache:
    def __init__(
        self,
        url: Optional[str] = None,
        *,
        reconnect_interval: float = REDIS_RECONNECT_INTERVAL,
        socket_timeout: float = REDIS_SOCKET_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        client_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.url = url
        self.reconnect_interval = reconnect_interval
        self.socket_timeout = socket_timeout
        self.state: CacheState = "init"
        self._clock = clock
        self._client_factory = client_factory or self._default_client
        self._client: Any = None
        self._last_attempt_at: Optional[float] = None
        self._error_logged = False
        self._memory: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    # --- lifecycle -----------------------------------------------------------

    def _default_client(self, url: str):
        return redis.Redis.from_url(
            url,
            socket_timeout=self.socket_timeout,
            socket_connect_timeout=self.socket_timeout,
        )

    def connect(self) -> CacheState:
        if self.state == "closed":
            return self.state
        if not self.url:
            self.state = "degraded"
            return self.state

        self._last_attempt_at = self._clock()
        try:
            client = self._client_factory(self.url)
            client.ping()
        except (redis.RedisError, OSError) as exc:
            self._client = None
            self.state = "degraded"
            self._log_error_once("connect", exc)
            return self.state

        self._client = client
        self.state = "ready"
        self._error_logged = False
        return self.state

    def _maybe_reconnect(self) -> None:
        if self.state != "degraded" or not self.url:
            return
        if self._last_attempt_at is not None and self._clock() - self._last_attempt_at < self.reconnect_interval:
            return
        self.connect()

    def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            try:
                client.close()
            except (redis.RedisError, OSError):
                pass
        with self._lock:
            self._memory.clear()
        self.state = "closed"

    def _log_error_once(self, action: str, exc: BaseException) -> None:
        if not self._error_logged:
            self._error_logged = True
            LOGGER.warning("cache redis action=%s error=%s; falling back to memory", action, exc)

    def _degrade(self, action: str, exc: BaseException) -> None:
        self._log_error_once(action, exc)
        self._client = None
        self.state = "degraded"
        self._last_attempt_at = self._clock()

    # --- memory store --------------------------------------------------------

    def _memory_get(self, key: str) -> Optional[str]:
        now = self._clock()
        with self._lock:
            for stale in [k for k, (_, exp) in self._memory.items() if exp <= now]:
                del self._memory[stale]
            entry = self._memory.get(key)
        return entry[0] if entry else None

    def _memory_set(self, key: str, payload: str, ttl_seconds: int) -> None:
        with self._lock:
            self._memory[key] = (payload, self._clock() + ttl_seconds)

    # --- operations ----------------------------------------------------------

    def get(self, key: str) -> Any:
        self._maybe_reconnect()
        payload: Optional[str] = None

        if self.state == "ready" and self._client is not None:
            try:
                raw = self._client.get(key)
                if raw is None:
                    return None
                payload = raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
            except (redis.RedisError, OSError) as exc:
                self._degrade("get", exc)

        if payload is None:
            payload = self._memory_get(key)
        if payload is None:
            return None

        try:
            return json.loads(payload)
        except ValueError:
            with self._lock:
                self._memory.pop(key, None)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._maybe_reconnect()
        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as exc:
            LOGGER.warning("cache encode key=%s error=%s", key, exc)
            return

        if self.state == "ready" and self._client is not None:
            try:
                self._client.set(key, payload, ex=ttl_seconds)
                return
            except (redis.RedisError, OSError) as exc:
                self._degrade("set", exc)

        self._memory_set(key, payload, ttl_seconds)

    def delete(self, key: str) -> None:
        if self.state == "ready" and self._client is not None:
            try:
                self._client.delete(key)
            except (redis.RedisError, OSError) as exc:
                self._degrade("delete", exc)
        with self._lock:
            self._memory.pop(key, None)
