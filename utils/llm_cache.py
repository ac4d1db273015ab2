import time
import hashlib
import logging
from typing import Callable, Dict, Optional, Tuple

from models import ActionResult

logger = logging.getLogger(__name__)


class ResponseCache:
    """Process-lifetime de-duplication of generated replies

    Entries are keyed by author, a coarse time bucket and a digest of the
    message text, so a webhook delivered twice within one bucket is answered
    from cache instead of generating and publishing again. Entries from
    earlier buckets can never be hit again and are dropped on the next write.
    """

    def __init__(self, bucket_seconds: int = 60, clock: Optional[Callable[[], float]] = None):
        self.bucket_seconds = max(1, bucket_seconds)
        self.clock = clock or time.time
        self._entries: Dict[str, Tuple[int, ActionResult]] = {}

    def _current_bucket(self) -> int:
        return int(self.clock() // self.bucket_seconds)

    def get_cache_key(self, author_key: str, text: str) -> str:
        digest = hashlib.md5(text.encode()).hexdigest()[:8]
        return f"{author_key}_{self._current_bucket()}_{digest}"

    def get(self, cache_key: str) -> Optional[ActionResult]:
        entry = self._entries.get(cache_key)
        if entry is None:
            return None
        logger.info(f"Cache hit for key: {cache_key}")
        return entry[1]

    def set(self, cache_key: str, result: ActionResult) -> None:
        bucket = self._current_bucket()
        self._prune(bucket)
        self._entries[cache_key] = (bucket, result)
        logger.debug(f"Cached response for key: {cache_key}")

    def _prune(self, bucket: int) -> None:
        stale = [key for key, (entry_bucket, _) in self._entries.items() if entry_bucket < bucket]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Pruned {len(stale)} expired cache entries")

    def __len__(self) -> int:
        return len(self._entries)
