from typing import Optional


class EntailError(Exception):
    """Base error. `retryable` tells callers whether a fresh attempt can help."""

    retryable: bool = False


class ChannelStartFailure(EntailError):
    retryable = False


class ChannelBroken(EntailError):
    # retrying means building a new classifier; this channel never recovers
    retryable = True


class ChannelBusy(EntailError):
    retryable = True


class MalformedResponse(EntailError):
    retryable = False

    def __init__(self, raw_line: Optional[str], field: str = ''):
        self.raw_line = raw_line
        self.field = field
        detail = f' (missing {field})' if field else ''
        super().__init__(f'Invalid engine response{detail}: {raw_line!r}')


class TreeConstructionFailure(EntailError):
    retryable = False


class ClassifierUnavailable(EntailError):
    retryable = False


class ScoreError(EntailError):
    retryable = False
