from entail.adapters.parsing.fallback import FALLBACK_TREE
from entail.utils.text import tokenize


class ChainTreeEncoder:
    """
    Model-free encoder: whitespace tokens chained left to right, the last
    token being the root. Good enough for wiring checks and the fake engine.
    """

    def encode(self, text: str) -> str:
        tokens = tokenize(text)
        if not tokens:
            return FALLBACK_TREE
        n = len(tokens)
        lines = []
        for i, tok in enumerate(tokens, start=1):
            if i == n:
                lines.append(f'{tok}\t0\troot\t0')
            else:
                lines.append(f'{tok}\t{i + 1}\tdep\t0')
        return '\n'.join(lines)
