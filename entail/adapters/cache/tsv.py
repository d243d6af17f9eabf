import logging
import os
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence, TextIO, Tuple, Union

from entail.adapters.cache.memory import InMemoryAlignmentCache
from entail.domain.models import CacheEntry, CacheKey
from entail.utils.text import single_line

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def parse_truth(s: str) -> bool:
    return s.strip().lower() == 'true'


def format_row(premise: str, hypothesis: str, truth: bool, cost: float) -> str:
    return '\t'.join(
        (
            single_line(premise),
            single_line(hypothesis),
            str(bool(truth)).lower(),
            repr(float(cost)),
        )
    )


Row = Tuple[CacheKey, CacheEntry]


def read_rows(path: PathLike) -> Iterator[Tuple[int, Optional[Row]]]:
    """Yield (line_no, parsed) for every non-empty row; parsed is None if malformed."""
    with open(path, encoding='utf-8') as fh:
        for n, line in enumerate(fh, start=1):
            line = line.rstrip('\r\n')
            if not line.strip():
                continue
            parts = line.split('\t')
            if len(parts) != 4:
                yield n, None
                continue
            premise, hypothesis, truth, cost = parts
            try:
                entry = CacheEntry(parse_truth(truth), float(cost))
            except ValueError:
                yield n, None
                continue
            yield n, (CacheKey.of(premise, hypothesis), entry)


class TsvAlignmentCache(InMemoryAlignmentCache):
    """
    Read snapshot + append-only write log, both as
    `premise<TAB>hypothesis<TAB>truth<TAB>cost` rows.

    The snapshot is loaded once and never modified. New rows go to the write
    log (flushed and fsync'd per batch) and to an in-process map so the same
    run can reuse them. Folding the write log into the snapshot is an
    offline job.
    """

    def __init__(self, read_path: Optional[PathLike], write_path: PathLike):
        super().__init__()
        self.read_path = Path(read_path) if read_path else None
        self.write_path = Path(write_path)
        if (
            self.read_path is not None
            and self.read_path.resolve() == self.write_path.resolve()
        ):
            raise ValueError('cache snapshot and write log must be different files')

        self.snapshot: Dict[CacheKey, CacheEntry] = self._load_snapshot()
        self.write_path.parent.mkdir(parents=True, exist_ok=True)
        self._log: Optional[TextIO] = open(self.write_path, 'a', encoding='utf-8')

    def _load_snapshot(self) -> Dict[CacheKey, CacheEntry]:
        snapshot: Dict[CacheKey, CacheEntry] = {}
        if self.read_path is None or not self.read_path.exists():
            logger.info('[cache] no snapshot at %s; starting empty', self.read_path)
            return snapshot
        skipped = 0
        for n, parsed in read_rows(self.read_path):
            if parsed is None:
                skipped += 1
                logger.warning(
                    '[cache] skipping malformed row %s:%d', self.read_path, n
                )
                continue
            key, entry = parsed
            snapshot[key] = entry
        logger.info(
            '[cache] loaded %d entries from %s (skipped=%d)',
            len(snapshot),
            self.read_path,
            skipped,
        )
        return snapshot

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        entry = self.entries.get(key)
        if entry is not None:
            return entry
        return self.snapshot.get(key)

    def record_batch(
        self,
        premises: Sequence[str],
        hypothesis: str,
        truth: bool,
        costs: Sequence[float],
    ) -> None:
        if self._log is None:
            raise ValueError('alignment cache write log is closed')
        for premise, cost in zip(premises, costs):
            self._log.write(format_row(premise, hypothesis, truth, cost) + '\n')
        self._log.flush()
        os.fsync(self._log.fileno())
        super().record_batch(premises, hypothesis, truth, costs)

    def close(self) -> None:
        if self._log is not None:
            self._log.close()
            self._log = None

    def __len__(self) -> int:
        return len(self.snapshot.keys() | self.entries.keys())
