import logging

from entail.domain.ports.parsing import TreeEncoderPort
from entail.utils.text import trunc

logger = logging.getLogger(__name__)

# Minimal tree substituted when a sentence cannot be encoded.
FALLBACK_TREE = 'cats\t0\troot\t0'

# Sentence encoded in place of trees the engine is known to crash on.
FILLER_SENTENCE = 'cats have tails'

MAX_TREE_LINES = 30


def encode_for_engine(
    encoder: TreeEncoderPort, text: str, max_lines: int = MAX_TREE_LINES
) -> str:
    tree = encoder.encode(text).strip('\n')
    if len(tree.split('\n')) > max_lines:
        logger.warning(
            '[parse] tree for %r exceeds %d lines; sending filler tree',
            trunc(text, 80),
            max_lines,
        )
        return encoder.encode(FILLER_SENTENCE).strip('\n')
    return tree
