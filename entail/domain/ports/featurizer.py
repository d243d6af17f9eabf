from typing import Optional, Protocol

from entail.domain.features import FeatureVector


class FeaturizerPort(Protocol):
    name: str

    def featurize(
        self,
        premise: str,
        hypothesis: str,
        focus: Optional[str] = None,
        relevance_score: Optional[float] = None,
    ) -> FeatureVector:
        pass
