import time
import logging
from threading import Lock

from configs import DEFAULT_PER_DOMAIN_DELAY, UNKNOWN_DOMAIN


# ---------- Per-domain rate limiter ----------

class RateLimiter:
    """
    Spaces request starts to the same domain by at least `delay` seconds.

    One lock guards the whole domain map. A caller reserves its slot under
    the lock and sleeps after releasing it, so a wait on one domain never
    holds up callers for another domain.
    """

    def __init__(self, delay: float = DEFAULT_PER_DOMAIN_DELAY):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = float(delay)
        self.lock = Lock()
        self._next_allowed = {}

    def acquire(self, domain: str):
        domain = domain or UNKNOWN_DOMAIN
        with self.lock:
            now = time.monotonic()
            start = max(now, self._next_allowed.get(domain, now))
            self._next_allowed[domain] = start + self.delay
        wait = start - now
        if wait > 0:
            logging.debug("Rate limit: waiting %.2fs for %s", wait, domain)
            # sleep outside lock (other domains keep going)
            time.sleep(wait)

    def domains(self):
        with self.lock:
            return list(self._next_allowed)
