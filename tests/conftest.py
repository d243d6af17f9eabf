# tests/conftest.py
import os

import pytest
from dotenv import load_dotenv

# Load env first (ENGINE_PATH, MODEL_PATH, ...)
load_dotenv()
os.environ.setdefault('PARSER_BACKEND', 'simple')

from entail.adapters.cache.memory import InMemoryAlignmentCache  # noqa: E402
from entail.adapters.engine.scripted import ScriptedTransport  # noqa: E402
from entail.adapters.parsing.simple import ChainTreeEncoder  # noqa: E402
from entail.domain.features import WeightTable  # noqa: E402
from entail.services.classifier import AlignmentClassifier  # noqa: E402
from entail.services.engine_channel import EngineChannel  # noqa: E402
from entail.services.featurizer import LexicalFeaturizer  # noqa: E402
from entail.services.fusion import ScoreFusion  # noqa: E402

WEIGHTS = {
    'bias': -0.5,
    'count_aligned': 0.8,
    'percent_aligned_premise': 0.6,
    'percent_aligned_conclusion': 1.4,
    'percent_aligned_joint': 0.9,
    'percent_alignable_conclusion': 0.7,
    'count_unaligned': -0.4,
    'percent_unalignable_conclusion': -0.9,
    'relevance_score': 0.2,
}


@pytest.fixture()
def weights():
    return WeightTable(WEIGHTS)


@pytest.fixture()
def featurizer():
    return LexicalFeaturizer()


@pytest.fixture()
def transport():
    return ScriptedTransport()


@pytest.fixture()
def cache():
    return InMemoryAlignmentCache()


@pytest.fixture()
def make_classifier(weights, featurizer, cache):
    """
    Build a classifier around a scripted transport. Each call gets a fresh
    channel (and handshake); the cache is shared per test.
    """

    def _make(transport, *, use_engine_cost=True, cache_override=None, **kw):
        channel = EngineChannel(transport)
        return AlignmentClassifier(
            channel=channel,
            encoder=ChainTreeEncoder(),
            featurizer=featurizer,
            fusion=ScoreFusion(weights=weights, use_engine_cost=use_engine_cost),
            cache=cache_override if cache_override is not None else cache,
            engine_path='fake-engine',
            **kw,
        )

    return _make
