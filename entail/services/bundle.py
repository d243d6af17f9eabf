import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Union

from entail.domain.features import WeightTable
from entail.domain.ports.featurizer import FeaturizerPort
from entail.services.featurizer import LexicalFeaturizer

FEATURIZERS: Dict[str, Callable[..., FeaturizerPort]] = {
    LexicalFeaturizer.name: LexicalFeaturizer,
}


def featurizer_from_dict(data: Mapping[str, Any]) -> FeaturizerPort:
    params = dict(data)
    name = params.pop('name', LexicalFeaturizer.name)
    try:
        factory = FEATURIZERS[name]
    except KeyError:
        raise ValueError(f'unknown featurizer {name!r}') from None
    return factory(**params)


@dataclass(frozen=True)
class ClassifierBundle:
    """Everything needed to rebuild a classifier without retraining."""

    engine_path: str
    featurizer: FeaturizerPort
    weights: WeightTable

    def to_dict(self) -> Dict[str, Any]:
        to_dict = getattr(self.featurizer, 'to_dict', None)
        featurizer = to_dict() if to_dict else {'name': self.featurizer.name}
        return {
            'engine_path': self.engine_path,
            'featurizer': featurizer,
            'weights': self.weights.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClassifierBundle':
        try:
            engine_path = str(data['engine_path'])
            weights = WeightTable(data['weights'])
        except KeyError as e:
            raise ValueError(f'classifier bundle is missing {e.args[0]!r}') from e
        return cls(
            engine_path=engine_path,
            featurizer=featurizer_from_dict(data.get('featurizer') or {}),
            weights=weights,
        )

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(self.to_dict(), fh, indent=2, sort_keys=True)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ClassifierBundle':
        with open(path, encoding='utf-8') as fh:
            return cls.from_dict(json.load(fh))
