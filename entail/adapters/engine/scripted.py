from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Union

from entail.domain.ports.engine import EngineTransportPort

Responder = Callable[[List[str]], Optional[str]]


def format_response(
    truth: float,
    alignment_index: int,
    scores: Iterable[float],
    search_costs: Optional[Iterable[float]] = None,
) -> str:
    """Render a response line the way the engine prints it."""

    def _num(x: float) -> str:
        if x == float('inf'):
            return 'inf'
        if x == float('-inf'):
            return '-inf'
        return repr(float(x))

    scores = list(scores)
    costs = list(search_costs) if search_costs is not None else [0.0] * len(scores)
    return (
        '{'
        f'"truth": {_num(truth)}, '
        f'"closestSoftAlignment": {int(alignment_index)}, '
        f'"closestSoftAlignmentScores": [{", ".join(_num(s) for s in scores)}], '
        f'"closestSoftAlignmentSearchCosts": [{", ".join(_num(c) for c in costs)}]'
        '}'
    )


class ScriptedTransport(EngineTransportPort):
    """
    In-memory engine stand-in. Records everything written and answers each
    query (a block of lines ended by a blank line) from a queue of canned
    responses or from a responder callable that receives the query lines.
    Directive lines (`%key=value`) are collected separately and never answered.
    """

    def __init__(
        self,
        responses: Iterable[Optional[str]] = (),
        *,
        responder: Optional[Responder] = None,
    ):
        self.responses: Deque[Optional[str]] = deque(responses)
        self.responder = responder
        self.written: List[str] = []
        self.directives: List[str] = []
        self.queries: List[List[str]] = []
        self.flushes = 0
        self.closed = False
        self._buffer = ''
        self._pending: List[str] = []
        self._outbox: Deque[Optional[str]] = deque()

    def queue(self, *responses: Union[str, None]) -> None:
        self.responses.extend(responses)

    def write(self, text: str) -> None:
        if self.closed:
            raise BrokenPipeError('transport is closed')
        self.written.append(text)
        self._buffer += text

    def flush(self) -> None:
        if self.closed:
            raise BrokenPipeError('transport is closed')
        self.flushes += 1
        *lines, self._buffer = self._buffer.split('\n')
        for line in lines:
            if not self._pending and line.startswith('%'):
                self.directives.append(line)
            elif line == '' and self._pending:
                self._answer(self._pending)
                self._pending = []
            elif line != '':
                self._pending.append(line)

    def read_line(self) -> Optional[str]:
        if self.closed:
            raise ValueError('read from closed transport')
        if not self._outbox:
            return None
        return self._outbox.popleft()

    def close(self) -> None:
        self.closed = True

    def _answer(self, lines: List[str]) -> None:
        self.queries.append(list(lines))
        if self.responder is not None:
            self._outbox.append(self.responder(list(lines)))
        elif self.responses:
            self._outbox.append(self.responses.popleft())
        else:
            self._outbox.append(None)
