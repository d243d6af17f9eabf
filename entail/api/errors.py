import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from entail.domain.errors import (
    ChannelBroken,
    ChannelBusy,
    ChannelStartFailure,
    ClassifierUnavailable,
    EntailError,
    MalformedResponse,
    ScoreError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (MalformedResponse, 502),
    (ChannelBusy, 409),
    (ChannelBroken, 503),
    (ChannelStartFailure, 503),
    (ClassifierUnavailable, 503),
    (ScoreError, 500),
)


def status_for(exc: EntailError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(EntailError)
    async def entail_error_handler(request: Request, exc: EntailError):
        status = status_for(exc)
        logger.error('[api] %s on %s: %s', type(exc).__name__, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content={
                'error': type(exc).__name__,
                'detail': str(exc),
                'retryable': exc.retryable,
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=422, content={'detail': str(exc)})
