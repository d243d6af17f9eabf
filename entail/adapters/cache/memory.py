from typing import Dict, Optional, Sequence

from entail.domain.models import AlignmentResult, CacheEntry, CacheKey
from entail.domain.ports.cache import AlignmentCachePort


class InMemoryAlignmentCache(AlignmentCachePort):
    def __init__(self, entries: Optional[Dict[CacheKey, CacheEntry]] = None):
        self.entries: Dict[CacheKey, CacheEntry] = dict(entries or {})

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        return self.entries.get(key)

    def lookup_batch(
        self, premises: Sequence[str], hypothesis: str
    ) -> Optional[AlignmentResult]:
        if not premises:
            return None
        hits = []
        for premise in premises:
            entry = self.get(CacheKey.of(premise, hypothesis))
            if entry is None:
                return None
            hits.append(entry)
        return AlignmentResult(
            truth=hits[0].truth,
            alignment_index=-1,
            costs=tuple(e.cost for e in hits),
        )

    def record_batch(
        self,
        premises: Sequence[str],
        hypothesis: str,
        truth: bool,
        costs: Sequence[float],
    ) -> None:
        for premise, cost in zip(premises, costs):
            self.entries[CacheKey.of(premise, hypothesis)] = CacheEntry(
                bool(truth), float(cost)
            )

    def __len__(self) -> int:
        return len(self.entries)


class NullAlignmentCache(AlignmentCachePort):
    """Never hits, never stores."""

    def lookup_batch(self, premises, hypothesis):
        return None

    def record_batch(self, premises, hypothesis, truth, costs):
        return None
