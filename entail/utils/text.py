import re
import string
from typing import List

WHITESPACE_RX = re.compile(r'\s+')
WORD_RX = re.compile(r'\b\w+\b', flags=re.UNICODE)
_PUNCT_TABLE = str.maketrans('', '', string.punctuation + '¿¡“”"…—–')


def trunc(s: str, n: int = 120) -> str:
    return s if len(s) <= n else s[:n] + '…'


def normalize_key_text(s: str) -> str:
    # lowercase, every whitespace character removed
    return WHITESPACE_RX.sub('', (s or '').lower())


def normalize_focus_text(s: str) -> str:
    # lowercase, whitespace runs collapsed (not stripped)
    return WHITESPACE_RX.sub(' ', (s or '').lower())


def single_line(s: str) -> str:
    return WHITESPACE_RX.sub(' ', s.replace('\t', ' ')).strip()


def tokenize(s: str) -> List[str]:
    if not s:
        return []
    return WORD_RX.findall(s.lower().translate(_PUNCT_TABLE))


# English function words; negations are kept
STOP_ALL = frozenset(
    (
        'the a an of to and or in on for with by is are was were be being been '
        'it this that these those as at from but if then so than because its '
        'there here'
    ).split()
)


def content_tokens(s: str) -> List[str]:
    return [t for t in tokenize(s) if t not in STOP_ALL]
