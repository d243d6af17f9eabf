from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from entail.utils.text import normalize_key_text

DecayFn = Callable[[int], float]

# engine truth probabilities at or above this count as "true"
TRUTH_THRESHOLD = 0.5


class CacheKey(NamedTuple):
    premise: str
    hypothesis: str

    @classmethod
    def of(cls, premise: str, hypothesis: str) -> 'CacheKey':
        return cls(normalize_key_text(premise), normalize_key_text(hypothesis))


class CacheEntry(NamedTuple):
    truth: bool
    cost: float


@dataclass(frozen=True)
class AlignmentResult:
    truth: bool
    alignment_index: int  # -1 when served from the cache
    costs: Tuple[float, ...]


@dataclass(frozen=True)
class EngineResponse:
    truth_probability: float
    alignment_index: int
    scores: Tuple[float, ...]
    search_costs: Tuple[float, ...]
    raw: str = ''

    @property
    def truth(self) -> bool:
        return self.truth_probability >= TRUTH_THRESHOLD


@dataclass(frozen=True)
class PremiseScore:
    premise: str
    probability: float
    index: int


@dataclass
class EntailmentQuery:
    premises: List[str]
    hypothesis: str
    focus: Optional[str] = None
    relevance_scores: Optional[Sequence[float]] = None
    decay: Optional[DecayFn] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.premises:
            raise ValueError('at least one premise is required')
        if self.relevance_scores is not None and len(self.relevance_scores) != len(
            self.premises
        ):
            raise ValueError(
                f'expected {len(self.premises)} relevance scores, '
                f'got {len(self.relevance_scores)}'
            )

    def relevance_for(self, i: int) -> Optional[float]:
        if self.relevance_scores is None:
            return None
        return float(self.relevance_scores[i])
