import re
from typing import List, Optional

from entail.domain.errors import MalformedResponse
from entail.domain.models import EngineResponse

# One number in a score array: optional sign, then digits/dots or inf.
_NUM = r'-?(?:[0-9.]+(?:[eE][-+]?[0-9]+)?|inf)'
_ARRAY = rf'\[ *((?:{_NUM} *, *)*{_NUM}) *\]'

TRUTH_RX = re.compile(r'"truth": *([0-9.]+(?:[eE][-+]?[0-9]+)?)')
ALIGNMENT_INDEX_RX = re.compile(r'"closestSoftAlignment": *(-?[0-9]+)')
ALIGNMENT_SCORES_RX = re.compile(rf'"closestSoftAlignmentScores": *{_ARRAY}')
ALIGNMENT_SEARCH_COSTS_RX = re.compile(
    rf'"closestSoftAlignmentSearchCosts": *{_ARRAY}'
)
_LIST_SPLIT_RX = re.compile(r' *, *')


def parse_float_list(body: str) -> List[float]:
    out = []
    for tok in _LIST_SPLIT_RX.split(body.strip()):
        if tok == 'inf':
            out.append(float('inf'))
        elif tok == '-inf':
            out.append(float('-inf'))
        else:
            out.append(float(tok))
    return out


def _search(rx: re.Pattern, line: str, field: str) -> str:
    m = rx.search(line)
    if m is None:
        raise MalformedResponse(line, field)
    return m.group(1)


def parse_response(line: Optional[str]) -> EngineResponse:
    """
    Pull the four fields out of one engine response line by pattern, in any
    order. A None line (end of stream) or any missing field raises
    MalformedResponse carrying the raw line.
    """
    if line is None:
        raise MalformedResponse(None, 'response line')
    try:
        alignment_index = int(
            _search(ALIGNMENT_INDEX_RX, line, 'closestSoftAlignment')
        )
        truth = float(_search(TRUTH_RX, line, 'truth'))
        scores = parse_float_list(
            _search(ALIGNMENT_SCORES_RX, line, 'closestSoftAlignmentScores')
        )
        search_costs = parse_float_list(
            _search(
                ALIGNMENT_SEARCH_COSTS_RX, line, 'closestSoftAlignmentSearchCosts'
            )
        )
    except ValueError as e:
        # e.g. "1.2.3" matches the pattern but is not a float
        raise MalformedResponse(line, str(e)) from e
    return EngineResponse(
        truth_probability=truth,
        alignment_index=alignment_index,
        scores=tuple(scores),
        search_costs=tuple(search_costs),
        raw=line,
    )
