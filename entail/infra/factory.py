import logging
from typing import Optional

from entail.adapters.cache.memory import NullAlignmentCache
from entail.adapters.cache.tsv import TsvAlignmentCache
from entail.adapters.engine.scripted import ScriptedTransport, format_response
from entail.adapters.parsing.simple import ChainTreeEncoder
from entail.adapters.parsing.spacy_encoder import SpacyTreeEncoder
from entail.domain.enums import ParserBackend
from entail.domain.features import WeightTable
from entail.domain.ports.cache import AlignmentCachePort
from entail.domain.ports.parsing import TreeEncoderPort
from entail.services.bundle import ClassifierBundle
from entail.services.classifier import AlignmentClassifier
from entail.services.engine_channel import EngineChannel, handshake_directives
from entail.services.featurizer import LexicalFeaturizer
from entail.services.fusion import ScoreFusion
from entail.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_ENCODER: Optional[TreeEncoderPort] = None


def get_encoder(cfg: Settings) -> TreeEncoderPort:
    """One encoder per process; its pipeline is shared by every classifier."""
    global _ENCODER
    if _ENCODER is None:
        if cfg.PARSER_BACKEND == ParserBackend.SIMPLE:
            _ENCODER = ChainTreeEncoder()
        else:
            _ENCODER = SpacyTreeEncoder(cfg.SPACY_MODEL)
    return _ENCODER


def reset_encoder_cache() -> None:
    global _ENCODER
    _ENCODER = None


def build_cache(cfg: Settings) -> AlignmentCachePort:
    if not cfg.CACHE_ENABLED:
        return NullAlignmentCache()
    return TsvAlignmentCache(cfg.CACHE_READ_PATH, cfg.CACHE_WRITE_PATH)


def _echo_engine(lines):
    # development stand-in: every premise aligns perfectly, hypothesis holds.
    # One root line per tree; the last tree is the hypothesis.
    n_trees = sum(1 for line in lines if '\t0\troot\t' in line)
    n_premises = max(1, n_trees - 1)
    return format_response(1.0, 0, [0.0] * n_premises)


def build_channel(cfg: Settings, engine_path: str) -> EngineChannel:
    options = handshake_directives(
        soft_costs=cfg.ENGINE_SOFT_COSTS,
        max_ticks=cfg.ENGINE_MAX_TICKS,
        extra_options=cfg.ENGINE_OPTIONS,
    )
    if cfg.USE_FAKE_ENGINE:
        logger.warning('[factory] USE_FAKE_ENGINE set; engine answers are canned')
        return EngineChannel(ScriptedTransport(responder=_echo_engine), options=options)
    return EngineChannel.open(
        engine_path,
        soft_costs=cfg.ENGINE_SOFT_COSTS,
        max_ticks=cfg.ENGINE_MAX_TICKS,
        extra_options=cfg.ENGINE_OPTIONS,
    )


def load_bundle(cfg: Settings) -> ClassifierBundle:
    """
    MODEL_PATH may hold a full classifier bundle or just trained model
    weights; in the latter case the engine path comes from settings.
    """
    if not cfg.MODEL_PATH:
        raise ValueError('MODEL_PATH is not configured')
    try:
        bundle = ClassifierBundle.load(cfg.MODEL_PATH)
    except ValueError:
        bundle = ClassifierBundle(
            engine_path=cfg.ENGINE_PATH,
            featurizer=LexicalFeaturizer(),
            weights=WeightTable.load(cfg.MODEL_PATH),
        )
    return bundle


def build_classifier(
    bundle: ClassifierBundle, cfg: Optional[Settings] = None
) -> AlignmentClassifier:
    cfg = cfg or default_settings
    cache = build_cache(cfg)
    try:
        channel = build_channel(cfg, bundle.engine_path)
    except Exception:
        cache.close()
        raise
    fusion = ScoreFusion(
        weights=bundle.weights,
        alignment_weight=cfg.ALIGNMENT_WEIGHT,
        use_engine_cost=cfg.USE_ENGINE_ALIGNMENT_COST,
    )
    return AlignmentClassifier(
        channel=channel,
        encoder=get_encoder(cfg),
        featurizer=bundle.featurizer,
        fusion=fusion,
        cache=cache,
        engine_path=bundle.engine_path,
        max_tree_lines=cfg.MAX_TREE_LINES,
    )


def classifier_from_settings(cfg: Optional[Settings] = None) -> AlignmentClassifier:
    cfg = cfg or default_settings
    return build_classifier(load_bundle(cfg), cfg)
