import logging
import subprocess
from typing import Optional, Sequence

from entail.domain.errors import ChannelStartFailure
from entail.domain.ports.engine import EngineTransportPort

logger = logging.getLogger(__name__)


class SubprocessTransport(EngineTransportPort):
    """
    Owns the engine process. stdin/stdout are line-buffered text pipes;
    stderr goes to DEVNULL so diagnostics never corrupt the framing.
    """

    def __init__(
        self,
        path: str,
        *,
        args: Sequence[str] = (),
        terminate_grace: float = 5.0,
    ):
        self.path = path
        self.terminate_grace = float(terminate_grace)
        try:
            self.process = subprocess.Popen(
                [path, *args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding='utf-8',
                bufsize=1,
            )
        except (OSError, ValueError) as e:
            raise ChannelStartFailure(f'could not start engine {path!r}: {e}') from e
        if self.process.stdin is None or self.process.stdout is None:
            self._kill()
            raise ChannelStartFailure(f'engine {path!r} has no stdio pipes')
        self._closed = False
        logger.info('[engine] spawned %s (pid=%s)', path, self.process.pid)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def alive(self) -> bool:
        return self.process.poll() is None

    def write(self, text: str) -> None:
        self.process.stdin.write(text)

    def flush(self) -> None:
        self.process.stdin.flush()

    def read_line(self) -> Optional[str]:
        line = self.process.stdout.readline()
        if not line:
            return None
        return line.rstrip('\r\n')

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for stream in (self.process.stdin, self.process.stdout):
            try:
                stream.close()
            except OSError:
                # broken pipe on a dead engine; nothing left to flush
                pass
        if self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=self.terminate_grace)
            except subprocess.TimeoutExpired:
                logger.warning('[engine] pid=%s ignored SIGTERM; killing', self.pid)
                self._kill()
        logger.info(
            '[engine] closed pid=%s returncode=%s', self.pid, self.process.returncode
        )

    def _kill(self) -> None:
        self.process.kill()
        self.process.wait()
