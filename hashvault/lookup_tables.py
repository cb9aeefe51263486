# hashvault/lookup_tables.py
import logging
import threading
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from hashvault.digests import PLAIN_ALGORITHMS, hash_word

logger = logging.getLogger(__name__)


def build_table(algorithm: str, candidates: Iterable[str]) -> Mapping[str, str]:
    """
    Precompute digest -> plaintext for one algorithm.

    On a digest collision the candidate seen first is kept. A candidate that
    cannot be digested is skipped and the build carries on.
    """
    table = {}
    skipped = 0
    for candidate in candidates:
        try:
            digest = hash_word(candidate, algorithm)
        except (AttributeError, UnicodeEncodeError) as e:
            logger.debug("Skipping candidate %r for %s: %s", candidate, algorithm, e)
            skipped += 1
            continue
        if digest is None:
            skipped += 1
            continue
        table.setdefault(digest.lower(), candidate)
    if skipped:
        logger.warning("%s table: skipped %d candidate(s)", algorithm, skipped)
    logger.info("%s table built with %d entries", algorithm, len(table))
    return MappingProxyType(table)


class LearningCache:
    """
    Runtime digest -> plaintext maps filled by the generation endpoints.

    Entries are never replaced or evicted and live only as long as the
    process. Each algorithm has its own lock so an insert-if-absent is
    atomic with respect to readers and other writers.
    """

    def __init__(self, algorithms=PLAIN_ALGORITHMS) -> None:
        self._tables: Dict[str, Dict[str, str]] = {a: {} for a in algorithms}
        self._locks = {a: threading.Lock() for a in algorithms}

    def learn(self, algorithm: str, digest_hex: str, plaintext: str) -> bool:
        algo = (algorithm or "").lower()
        table = self._tables.get(algo)
        if table is None:
            return False
        key = digest_hex.strip().lower()
        with self._locks[algo]:
            if key in table:
                return False
            table[key] = plaintext
        logger.debug("Learned %s digest %s", algo, key)
        return True

    def get(self, algorithm: str, digest_hex: str) -> Optional[str]:
        table = self._tables.get(algorithm)
        if table is None:
            return None
        with self._locks[algorithm]:
            return table.get(digest_hex)

    def size(self, algorithm: str) -> int:
        table = self._tables.get(algorithm)
        if table is None:
            return 0
        with self._locks[algorithm]:
            return len(table)
