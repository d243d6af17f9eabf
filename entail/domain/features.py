import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Union

FeatureVector = Dict[str, float]

BIAS = 'bias'
RELEVANCE_SCORE = 'relevance_score'
FOCUS_IN_PREMISE = 'focus_in_premise'

COUNT_PREMISE = 'count_premise'
COUNT_CONCLUSION = 'count_conclusion'

COUNT_ALIGNED = 'count_aligned'
COUNT_ALIGNABLE = 'count_alignable'
COUNT_UNALIGNED = 'count_unaligned'

COUNT_UNALIGNABLE_PREMISE = 'count_unalignable_premise'
COUNT_UNALIGNABLE_CONCLUSION = 'count_unalignable_conclusion'
COUNT_UNALIGNABLE_JOINT = 'count_unalignable_joint'

PERCENT_ALIGNABLE_PREMISE = 'percent_alignable_premise'
PERCENT_ALIGNABLE_CONCLUSION = 'percent_alignable_conclusion'
PERCENT_ALIGNABLE_JOINT = 'percent_alignable_joint'

PERCENT_ALIGNED_PREMISE = 'percent_aligned_premise'
PERCENT_ALIGNED_CONCLUSION = 'percent_aligned_conclusion'
PERCENT_ALIGNED_JOINT = 'percent_aligned_joint'

PERCENT_UNALIGNED_PREMISE = 'percent_unaligned_premise'
PERCENT_UNALIGNED_CONCLUSION = 'percent_unaligned_conclusion'
PERCENT_UNALIGNED_JOINT = 'percent_unaligned_joint'

PERCENT_UNALIGNABLE_PREMISE = 'percent_unalignable_premise'
PERCENT_UNALIGNABLE_CONCLUSION = 'percent_unalignable_conclusion'
PERCENT_UNALIGNABLE_JOINT = 'percent_unalignable_joint'

# Features the engine's alignment cost stands in for. COUNT_ALIGNED moves the most.
ALIGNMENT_FEATURES = frozenset(
    {
        COUNT_ALIGNED,
        PERCENT_ALIGNED_PREMISE,
        PERCENT_ALIGNED_CONCLUSION,
        PERCENT_ALIGNED_JOINT,
    }
)

TRUE_LABEL = 'true'


class WeightTable(Mapping[str, float]):
    """
    Read-only feature weights of the TRUE class of a trained linear model.
    Unknown features weigh 0.0.
    """

    def __init__(self, weights: Mapping[str, float]):
        self._weights = MappingProxyType({k: float(v) for k, v in weights.items()})

    def __getitem__(self, name: str) -> float:
        return self._weights[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def weight(self, name: str) -> float:
        return self._weights.get(name, 0.0)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._weights)

    @classmethod
    def from_model(cls, model: Mapping[str, Any]) -> 'WeightTable':
        """
        Accepts either {"labels": {"true": {...}, "false": {...}}}
        or a flat {"weights": {...}}.
        """
        if 'labels' in model:
            labels = model['labels'] or {}
            if TRUE_LABEL not in labels:
                raise ValueError(f"model has no '{TRUE_LABEL}' label weights")
            return cls(labels[TRUE_LABEL])
        if 'weights' in model:
            return cls(model['weights'] or {})
        raise ValueError("model must define 'labels' or 'weights'")

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'WeightTable':
        with open(path, encoding='utf-8') as fh:
            return cls.from_model(json.load(fh))
