import logging
import threading
from typing import List, Optional, Sequence

from entail.adapters.parsing.fallback import MAX_TREE_LINES, encode_for_engine
from entail.domain.enums import ClassifierState, Verdict
from entail.domain.errors import (
    ChannelBroken,
    ClassifierUnavailable,
    MalformedResponse,
)
from entail.domain.models import (
    AlignmentResult,
    DecayFn,
    EntailmentQuery,
    PremiseScore,
)
from entail.domain.ports.cache import AlignmentCachePort
from entail.domain.ports.featurizer import FeaturizerPort
from entail.domain.ports.parsing import TreeEncoderPort
from entail.services.bundle import ClassifierBundle
from entail.services.engine_channel import EngineChannel
from entail.services.fusion import ScoreFusion
from entail.services.response_parser import parse_response
from entail.utils.text import trunc

logger = logging.getLogger(__name__)

ENTAILMENT_THRESHOLD = 0.5


def verdict_for(probability: float) -> Verdict:
    return Verdict.TRUE if probability >= ENTAILMENT_THRESHOLD else Verdict.FALSE


def _stream_lost(exc: Exception) -> bool:
    # a broken channel or an end-of-stream response cannot serve another query
    if isinstance(exc, ChannelBroken):
        return True
    return isinstance(exc, MalformedResponse) and exc.raw_line is None


class AlignmentClassifier:
    """
    Scores a batch of premises against one hypothesis with a single engine
    round trip.

    Flow:
      1) Under the instance lock: batch cache lookup; on a miss encode the
         trees, query the engine, parse the line, record the batch.
      2) Batch truth false: short-circuit to (first premise, 0.0).
      3) Otherwise featurize each premise, fuse with its alignment cost,
         discount for a missing focus and keep the first maximum.

    A broken channel or a lost response stream leaves the instance FATAL;
    a garbled response line fails only that query.
    """

    def __init__(
        self,
        channel: EngineChannel,
        encoder: TreeEncoderPort,
        featurizer: FeaturizerPort,
        fusion: ScoreFusion,
        cache: AlignmentCachePort,
        *,
        engine_path: str = '',
        max_tree_lines: int = MAX_TREE_LINES,
    ) -> None:
        self.state = ClassifierState.UNINITIALIZED
        self.channel = channel
        self.encoder = encoder
        self.featurizer = featurizer
        self.fusion = fusion
        self.cache = cache
        self.engine_path = engine_path
        self.max_tree_lines = int(max_tree_lines)
        self._lock = threading.Lock()
        self.state = ClassifierState.OPEN

    # ----------------------------- alignment -----------------------------
    def best_alignment(
        self, premises: Sequence[str], hypothesis: str
    ) -> AlignmentResult:
        with self._lock:
            self._ensure_open()
            cached = self.cache.lookup_batch(premises, hypothesis)
            if cached is not None:
                logger.debug('[select] cache hit for %d premises', len(premises))
                return cached
            logger.debug(
                '[select] cache miss; querying engine with %d premises', len(premises)
            )
            self.state = ClassifierState.QUERYING
            try:
                result = self._query_engine(premises, hypothesis)
            except Exception as e:
                if _stream_lost(e):
                    self.state = ClassifierState.FATAL
                    logger.error('[select] engine stream lost; classifier is now fatal')
                else:
                    self.state = ClassifierState.OPEN
                    logger.error('[select] engine query failed: %s', e)
                raise
            self.state = ClassifierState.OPEN
            return result

    def _query_engine(
        self, premises: Sequence[str], hypothesis: str
    ) -> AlignmentResult:
        premise_trees = [
            encode_for_engine(self.encoder, p, self.max_tree_lines) for p in premises
        ]
        # only premises are swapped for the filler; the hypothesis goes as is
        hypothesis_tree = self.encoder.encode(hypothesis).strip('\n')
        response = parse_response(self.channel.query(premise_trees, hypothesis_tree))

        costs: List[float] = [0.0] * len(premises)
        for i, score in enumerate(response.scores[: len(premises)]):
            costs[i] = score
        if len(response.scores) != len(premises):
            logger.warning(
                '[select] engine returned %d scores for %d premises',
                len(response.scores),
                len(premises),
            )
        self.cache.record_batch(premises, hypothesis, response.truth, costs)
        return AlignmentResult(
            truth=response.truth,
            alignment_index=response.alignment_index,
            costs=tuple(costs),
        )

    # ----------------------------- public API -----------------------------
    def best_score(
        self,
        premises: Sequence[str],
        hypothesis: str,
        focus: Optional[str] = None,
        relevance_scores: Optional[Sequence[float]] = None,
        decay: Optional[DecayFn] = None,
    ) -> PremiseScore:
        query = EntailmentQuery(
            premises=list(premises),
            hypothesis=hypothesis,
            focus=focus,
            relevance_scores=relevance_scores,
            decay=decay,
        )
        return self.score_query(query)

    def score_query(self, query: EntailmentQuery) -> PremiseScore:
        alignment = self.best_alignment(query.premises, query.hypothesis)

        if not alignment.truth:
            logger.debug(
                '[select] engine contradicts %r; short-circuit',
                trunc(query.hypothesis, 80),
            )
            return PremiseScore(premise=query.premises[0], probability=0.0, index=0)

        best = float('-inf')
        argmax = -1
        for i, premise in enumerate(query.premises):
            features = self.featurizer.featurize(
                premise,
                query.hypothesis,
                focus=query.focus,
                relevance_score=query.relevance_for(i),
            )
            prob = self.fusion.premise_probability(
                features, alignment.costs[i], premise, query.focus
            )
            if prob > best:
                best = prob
                argmax = i

        logger.debug(
            '[select] best premise %d/%d p=%.4f', argmax, len(query.premises), best
        )
        return PremiseScore(
            premise=query.premises[argmax], probability=best, index=argmax
        )

    def truth_score(
        self,
        premise: str,
        hypothesis: str,
        focus: Optional[str] = None,
        relevance_score: Optional[float] = None,
    ) -> float:
        relevance = [relevance_score] if relevance_score is not None else None
        return self.best_score(
            [premise], hypothesis, focus, relevance, decay=lambda i: 1.0
        ).probability

    def classify(
        self,
        premise: str,
        hypothesis: str,
        focus: Optional[str] = None,
        relevance_score: Optional[float] = None,
    ) -> Verdict:
        score = self.truth_score(premise, hypothesis, focus, relevance_score)
        return verdict_for(score)

    def serialize(self) -> ClassifierBundle:
        return ClassifierBundle(
            engine_path=self.engine_path,
            featurizer=self.featurizer,
            weights=self.fusion.weights,
        )

    # ----------------------------- lifecycle -----------------------------
    def _ensure_open(self) -> None:
        if self.state in (ClassifierState.FATAL, ClassifierState.CLOSED):
            raise ClassifierUnavailable(f'classifier is {self.state.value}')

    def close(self) -> None:
        with self._lock:
            if self.state == ClassifierState.CLOSED:
                return
            self.state = ClassifierState.CLOSED
            try:
                self.channel.close()
            finally:
                self.cache.close()

    def __enter__(self) -> 'AlignmentClassifier':
        return self

    def __exit__(self, *exc) -> None:
        self.close()
