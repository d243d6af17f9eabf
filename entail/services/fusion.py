import math
from dataclasses import dataclass
from typing import Optional

from entail.domain.errors import ScoreError
from entail.domain.features import ALIGNMENT_FEATURES, FeatureVector, WeightTable
from entail.utils.text import normalize_focus_text

ALIGNMENT_WEIGHT = 0.10

# Missing a one-word focus is damning; missing a longer phrase much less so.
SHORT_FOCUS_PENALTY = 0.25
LONG_FOCUS_PENALTY = 0.75


def logistic(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def focus_discount(probability: float, premise: str, focus: Optional[str]) -> float:
    if focus is None:
        return probability
    norm_focus = normalize_focus_text(focus)
    if norm_focus in normalize_focus_text(premise):
        return probability
    if ' ' in focus:
        return probability * LONG_FOCUS_PENALTY
    return probability * SHORT_FOCUS_PENALTY


@dataclass(frozen=True)
class ScoreFusion:
    """
    Linear model score with the alignment features swapped out for the
    engine's alignment cost:

        fuse = base_score(features) + cost * alignment_weight

    With use_engine_cost=False the locally computed alignment features are
    scored instead of the engine cost.
    """

    weights: WeightTable
    alignment_weight: float = ALIGNMENT_WEIGHT
    use_engine_cost: bool = True

    def base_score(self, features: FeatureVector) -> float:
        return sum(
            self.weights.weight(name) * value
            for name, value in features.items()
            if name not in ALIGNMENT_FEATURES
        )

    def alignment_feature_score(self, features: FeatureVector) -> float:
        return sum(
            self.weights.weight(name) * value
            for name, value in features.items()
            if name in ALIGNMENT_FEATURES
        )

    def fuse(self, features: FeatureVector, alignment_cost: float) -> float:
        score = self.base_score(features)
        if self.use_engine_cost:
            score += alignment_cost * self.alignment_weight
        else:
            score += self.alignment_feature_score(features)
        if math.isnan(score):
            raise ScoreError(f'fused score is NaN (alignment_cost={alignment_cost})')
        return score

    def probability(self, features: FeatureVector, alignment_cost: float) -> float:
        return logistic(self.fuse(features, alignment_cost))

    def premise_probability(
        self,
        features: FeatureVector,
        alignment_cost: float,
        premise: str,
        focus: Optional[str] = None,
    ) -> float:
        probability = self.probability(features, alignment_cost)
        return focus_discount(probability, premise, focus)
