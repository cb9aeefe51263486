# hashvault/lookup_engine.py
"""
Reverse lookup of digests.

The "rainbow table" here is a flat digest -> plaintext dictionary per
algorithm, precomputed from the wordlist at startup, backed by a learning
cache of everything the service has hashed since. There are no reduction
chains.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from hashvault.detector import UNKNOWN, detect
from hashvault.digests import PLAIN_ALGORITHMS
from hashvault.lookup_tables import LearningCache, build_table
from hashvault.wordlist_gen import MAX_CANDIDATES, build_wordlist

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class LookupHit:
    algorithm: str
    plaintext: str


@dataclass(frozen=True)
class BatchLookupResult:
    hash: str
    hash_type: str
    found: bool
    original_value: Optional[str]

    def to_json(self) -> dict:
        return {
            "hash": self.hash,
            "hashType": self.hash_type,
            "found": self.found,
            "originalValue": self.original_value,
        }


class HashLookupEngine:
    def __init__(self, static_tables: Mapping[str, Mapping[str, str]], cache: LearningCache = None):
        # scan order for unknown digests follows PLAIN_ALGORITHMS
        self._order = tuple(a for a in PLAIN_ALGORITHMS if a in static_tables)
        self._static = dict(static_tables)
        self._cache = cache or LearningCache(self._order)
        self.candidate_count = 0

    @classmethod
    def build(cls, max_candidates: int = MAX_CANDIDATES, algorithms=PLAIN_ALGORITHMS):
        """Build every static table up front; blocks until done."""
        started = time.time()
        words = build_wordlist(max_candidates)
        tables = {algo: build_table(algo, words) for algo in algorithms}
        engine = cls(tables)
        engine.candidate_count = len(words)
        logger.info(
            "Lookup tables ready: %d candidates x %d algorithms in %.2fs",
            len(words), len(tables), time.time() - started,
        )
        return engine

    def learn(self, algorithm: str, digest_hex: str, plaintext: str) -> bool:
        return self._cache.learn(algorithm, digest_hex, plaintext)

    def learn_results(self, hash_results: Mapping[str, str], plaintext: str) -> int:
        learned = 0
        for algo, digest in hash_results.items():
            if algo in self._order and self.learn(algo, digest, plaintext):
                learned += 1
        return learned

    def _find(self, algorithm: str, digest: str) -> Optional[str]:
        value = self._cache.get(algorithm, digest)
        if value is not None:
            return value
        return self._static[algorithm].get(digest)

    def lookup_one(self, raw_hash: str, hash_type: str = None) -> Optional[LookupHit]:
        """
        Return the plaintext behind `raw_hash`, or None.

        The algorithm always comes from detection; the only override is an
        explicit `hash_type` of "unknown". For an unknown type every dynamic
        table is tried, then every static table, in md5/sha1/sha256/sha512
        order. An empty-string plaintext is a hit.
        """
        digest = raw_hash.strip().lower()
        algorithm = detect(digest)
        if isinstance(hash_type, str) and hash_type.lower() == UNKNOWN:
            algorithm = UNKNOWN

        if algorithm != UNKNOWN:
            if algorithm not in self._static:
                return None
            value = self._find(algorithm, digest)
            return LookupHit(algorithm, value) if value is not None else None

        for algo in self._order:
            value = self._cache.get(algo, digest)
            if value is not None:
                return LookupHit(algo, value)
        for algo in self._order:
            value = self._static[algo].get(digest)
            if value is not None:
                return LookupHit(algo, value)
        return None

    def lookup_batch(self, raw_hashes) -> List[BatchLookupResult]:
        # Empty and non-string entries are dropped, so the output can be
        # shorter than the input; match results by their `hash` field.
        results = []
        for raw in raw_hashes:
            if not isinstance(raw, str) or not raw.strip():
                continue
            hit = self.lookup_one(raw)
            if hit is not None:
                results.append(BatchLookupResult(raw, hit.algorithm, True, hit.plaintext))
            else:
                results.append(BatchLookupResult(raw, detect(raw.strip().lower()), False, None))
        return results

    def stats(self) -> Dict[str, Dict[str, int]]:
        return {
            algo: {"static": len(self._static[algo]), "dynamic": self._cache.size(algo)}
            for algo in self._order
        }
