import time
import logging
import itertools
import threading
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from storefront.exceptions import RequestCancelled
from storefront.utils.cache_helpers import TTLCache, cache_key
from storefront.utils.retry import fetch_with_retry

logger = logging.getLogger(__name__)


class RequestTracker:
    """
    Hands out a generation number per (owner, resource). A newer request from
    the same owner for the same resource makes that owner's older ones stale;
    other owners are never affected.
    """

    def __init__(self):
        self._generations: Dict[Tuple[str, str], int] = {}
        # Globally increasing, so a finished (and forgotten) generation is never reissued
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def begin(self, owner: str, resource: str) -> int:
        with self._lock:
            generation = next(self._counter)
            self._generations[(owner, resource)] = generation
            return generation

    def is_stale(self, owner: str, resource: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get((owner, resource), 0) != generation

    def finish(self, owner: str, resource: str, generation: int) -> None:
        with self._lock:
            if self._generations.get((owner, resource)) == generation:
                del self._generations[(owner, resource)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._generations)


class CatalogClient:
    def __init__(
        self,
        base_url: str,
        http: Optional[requests.Session] = None,
        cache: Optional[TTLCache] = None,
        timeout: float = 10,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 8.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.cache = cache if cache is not None else TTLCache()
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.sleep = sleep
        self.tracker = RequestTracker()

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        owner: Optional[str] = None,
    ) -> Any:
        """
        Cached, retried GET. ``owner`` (the cart session) scopes superseding:
        only the same owner's newer request for ``path`` cancels this one.
        Anonymous reads are never superseded.
        """
        url = f"{self.base_url}{path}"
        key = cache_key(url, params)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if owner is None:
            generation = None
            is_cancelled = lambda: False
        else:
            generation = self.tracker.begin(owner, path)
            is_cancelled = lambda: self.tracker.is_stale(owner, path, generation)

        def sleep_unless_cancelled(delay: float) -> None:
            self.sleep(delay)
            if is_cancelled():
                raise RequestCancelled(f"Superseded request to {url}")

        try:
            data = fetch_with_retry(
                self.http,
                url,
                params=params,
                timeout=self.timeout,
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                is_cancelled=is_cancelled,
                sleep=sleep_unless_cancelled,
            )

            # A newer request for the same resource owns the result now
            if is_cancelled():
                logger.info(f"Discarding superseded response for {url}")
                raise RequestCancelled(f"Superseded request to {url}")
        finally:
            if generation is not None:
                self.tracker.finish(owner, path, generation)

        self.cache.set(key, data)
        return data

    def list_products(
        self, params: Optional[Dict[str, Any]] = None, owner: Optional[str] = None
    ) -> Any:
        return self._get("/api/productos", params, owner)

    def get_product(self, product_id: str, owner: Optional[str] = None) -> Dict[str, Any]:
        return self._get(f"/api/productos/{product_id}", owner=owner)

    def invalidate(self, path: str, params: Optional[Dict[str, Any]] = None) -> None:
        self.cache.invalidate(cache_key(f"{self.base_url}{path}", params))
