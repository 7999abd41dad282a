# ethoscan/utils/ratelimit.py
import os
import random
import threading
import time
from collections import deque
from typing import Optional

import requests

# Default QPS (requests per second) for registry APIs.
# Override with REGISTRY_QPS.
DEFAULT_QPS = float(os.getenv("REGISTRY_QPS", "4.0"))

RETRY_STATUSES = (429, 500, 502, 503, 504)
MAX_ATTEMPTS = 5

# One limiter per "host key" (e.g. 'locks', 'teams', 'pledges')
_LIMITERS = {}
_LOCK = threading.Lock()


class RateLimiter:
    def __init__(self, max_per_sec: float):
        self.max_per_sec = max(0.1, float(max_per_sec))
        self.window = deque()
        self.lock = threading.Lock()

    def wait(self):
        with self.lock:
            now = time.monotonic()
            # drop timestamps older than 1s
            while self.window and now - self.window[0] > 1.0:
                self.window.popleft()

            if len(self.window) >= self.max_per_sec:
                sleep_for = 1.0 - (now - self.window[0]) + 0.001
                if sleep_for > 0:
                    time.sleep(sleep_for)
                now = time.monotonic()
                while self.window and now - self.window[0] > 1.0:
                    self.window.popleft()

            self.window.append(time.monotonic())


def _get_limiter(host_key: str, max_qps: Optional[float]) -> RateLimiter:
    with _LOCK:
        qps = DEFAULT_QPS if max_qps is None else float(max_qps)
        lim = _LIMITERS.get(host_key)
        if lim is None or lim.max_per_sec != max(0.1, qps):
            lim = RateLimiter(qps)
            _LIMITERS[host_key] = lim
        return lim


def _sleep_backoff(backoff: float) -> float:
    time.sleep(backoff + random.uniform(0, 0.2))
    return min(backoff * 2, 4.0)


def http_get_json(host_key: str, url: str, params: Optional[dict] = None, max_qps: Optional[float] = None,
                  timeout: int = 15) -> dict:
    """
    GET with per-host rate limiting + retries. Returns response.json() or raises.
    Retries on 429/5xx and transport errors with jittered backoff; any other
    non-200 status raises requests.HTTPError straight away.
    """
    lim = _get_limiter(host_key, max_qps)
    backoff = 0.5
    for attempt in range(MAX_ATTEMPTS):
        lim.wait()
        try:
            resp = requests.get(url, params=params, timeout=timeout)
        except requests.RequestException as e:
            print(f"[ratelimit] {host_key} attempt {attempt + 1} transport error: {e}")
            backoff = _sleep_backoff(backoff)
            continue
        if resp.status_code in RETRY_STATUSES:
            print(f"[ratelimit] {host_key} attempt {attempt + 1} status={resp.status_code}, retrying")
            backoff = _sleep_backoff(backoff)
            continue
        resp.raise_for_status()
        return resp.json()

    # final try (let the exception surface for visibility)
    lim.wait()
    resp = requests.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    return resp.json()
