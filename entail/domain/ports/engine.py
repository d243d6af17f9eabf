import abc
from typing import Optional


class EngineTransportPort(abc.ABC):
    """Synchronous, line-oriented duplex text transport to the inference engine."""

    @abc.abstractmethod
    def write(self, text: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def flush(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def read_line(self) -> Optional[str]:
        """
        Return the next line without its trailing newline,
        or None once the stream is exhausted.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> None:
        raise NotImplementedError
