import logging
import threading
from typing import Dict, Mapping, Optional, Sequence

from entail.adapters.engine.process import SubprocessTransport
from entail.domain.errors import ChannelBroken, ChannelBusy, ChannelStartFailure
from entail.domain.ports.engine import EngineTransportPort

logger = logging.getLogger(__name__)

DEFAULT_MAX_TICKS = 100000


def handshake_directives(
    *,
    soft_costs: bool = True,
    max_ticks: int = DEFAULT_MAX_TICKS,
    extra_options: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    options = {
        'softCosts': 'true' if soft_costs else 'false',
        'maxTicks': str(int(max_ticks)),
    }
    for k, v in (extra_options or {}).items():
        options[k] = str(v)
    return options


class EngineChannel:
    """
    Line protocol on top of a transport:

      handshake   `%option=value` lines, once, before any query
      query       N premise trees, hypothesis tree, blank line
      response    exactly one line

    One query at a time. No timeout, no retry: the first I/O failure breaks
    the channel for good.
    """

    def __init__(
        self,
        transport: EngineTransportPort,
        *,
        options: Optional[Mapping[str, str]] = None,
    ):
        self.transport = transport
        self.broken = False
        self.closed = False
        self._busy = threading.Lock()
        if options is None:
            options = handshake_directives()
        self._send_handshake(options)

    @classmethod
    def open(
        cls,
        path: str,
        *,
        soft_costs: bool = True,
        max_ticks: int = DEFAULT_MAX_TICKS,
        extra_options: Optional[Mapping[str, str]] = None,
    ) -> 'EngineChannel':
        logger.info('[channel] creating connection to engine at %s', path)
        transport = SubprocessTransport(path)
        try:
            return cls(
                transport,
                options=handshake_directives(
                    soft_costs=soft_costs,
                    max_ticks=max_ticks,
                    extra_options=extra_options,
                ),
            )
        except Exception:
            transport.close()
            raise

    def _send_handshake(self, options: Mapping[str, str]) -> None:
        try:
            for key, value in options.items():
                self.transport.write(f'%{key}={value}\n')
            self.transport.flush()
        except (OSError, ValueError) as e:
            self.broken = True
            raise ChannelStartFailure(f'engine handshake failed: {e}') from e
        logger.debug('[channel] handshake sent: %s', dict(options))

    def query(
        self, premise_trees: Sequence[str], hypothesis_tree: str
    ) -> Optional[str]:
        """Send one batch and block for the single response line (None at EOF)."""
        if self.closed:
            raise ChannelBroken('engine channel is closed')
        if self.broken:
            raise ChannelBroken('engine channel is broken')
        if not self._busy.acquire(blocking=False):
            raise ChannelBusy('engine channel already has a query in flight')
        try:
            for tree in premise_trees:
                self.transport.write(tree)
                self.transport.write('\n')
            self.transport.write(hypothesis_tree)
            self.transport.write('\n')
            self.transport.write('\n')
            self.transport.flush()
            return self.transport.read_line()
        except (OSError, ValueError) as e:
            self.broken = True
            logger.error('[channel] engine I/O failed; channel is now broken: %s', e)
            raise ChannelBroken(f'engine I/O failed: {e}') from e
        finally:
            self._busy.release()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.transport.close()
        logger.info('[channel] closed')

    def __enter__(self) -> 'EngineChannel':
        return self

    def __exit__(self, *exc) -> None:
        self.close()
