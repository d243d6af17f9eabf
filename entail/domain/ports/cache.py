import abc
from typing import Optional, Sequence

from entail.domain.models import AlignmentResult


class AlignmentCachePort(abc.ABC):
    @abc.abstractmethod
    def lookup_batch(
        self, premises: Sequence[str], hypothesis: str
    ) -> Optional[AlignmentResult]:
        """
        Hit only when EVERY premise has an entry for the hypothesis.
        A single missing premise makes the whole batch a miss.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def record_batch(
        self,
        premises: Sequence[str],
        hypothesis: str,
        truth: bool,
        costs: Sequence[float],
    ) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return None
