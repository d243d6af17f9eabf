import logging
import threading
from typing import Any, Callable, Optional

from entail.adapters.parsing.fallback import FALLBACK_TREE
from entail.domain.errors import TreeConstructionFailure
from entail.utils.text import trunc

logger = logging.getLogger(__name__)


def _load_spacy(model_name: str) -> Any:
    import spacy

    return spacy.load(model_name)


class SpacyTreeEncoder:
    """
    Dependency-parse encoder backed by spaCy.

    The pipeline is heavy, so it is loaded on first use, exactly once, and
    shared read-only afterwards.
    """

    def __init__(
        self,
        model_name: str = 'en_core_web_sm',
        *,
        loader: Optional[Callable[[str], Any]] = None,
    ):
        self.model_name = model_name
        self._loader = loader or _load_spacy
        self._nlp = None
        self._lock = threading.Lock()

    @property
    def nlp(self) -> Any:
        if self._nlp is None:
            with self._lock:
                if self._nlp is None:
                    logger.info('[parse] loading spaCy pipeline %s', self.model_name)
                    self._nlp = self._loader(self.model_name)
        return self._nlp

    def encode(self, text: str) -> str:
        try:
            return self._to_conll(text)
        except (TreeConstructionFailure, AssertionError, ValueError, IndexError) as e:
            logger.error(
                '[parse] tree construction failed for %r: %s', trunc(text, 80), e
            )
            return FALLBACK_TREE

    def _to_conll(self, text: str) -> str:
        doc = self.nlp(text)
        # the engine reads one sentence; keep the first
        sents = list(doc.sents) if doc.has_annotation('DEP') else [doc[:]]
        if not sents or len(sents[0]) == 0:
            raise TreeConstructionFailure(f'no tokens in {text!r}')
        sent = sents[0]
        tokens = [t for t in sent if not t.is_punct]
        if not tokens:
            raise TreeConstructionFailure(f'only punctuation in {text!r}')
        index = {t.i: n for n, t in enumerate(tokens, start=1)}
        lines = []
        for tok in tokens:
            if tok.head.i == tok.i or tok.dep_.lower() == 'root':
                gov = 0
                rel = 'root'
            else:
                gov = index.get(tok.head.i)
                if gov is None:
                    raise TreeConstructionFailure(
                        f'governor of {tok.text!r} was dropped from the tree'
                    )
                rel = tok.dep_.lower() or 'dep'
            lines.append(f'{tok.text.lower()}\t{gov}\t{rel}\t0')
        if sum(1 for line in lines if '\t0\troot\t' in line) != 1:
            raise TreeConstructionFailure(f'tree for {text!r} is not single-rooted')
        return '\n'.join(lines)
