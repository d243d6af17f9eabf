from contextlib import asynccontextmanager

from fastapi import FastAPI

from entail.api.errors import register_exception_handlers
from entail.api.routes import router
from entail.infra.factory import classifier_from_settings
from entail.infra.logging import configure_logging
from entail.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    # tests may install a classifier before startup
    owned = getattr(app.state, 'classifier', None) is None
    if owned:
        app.state.classifier = classifier_from_settings(settings)
    try:
        yield
    finally:
        if owned:
            app.state.classifier.close()
            app.state.classifier = None


app = FastAPI(lifespan=lifespan)

app.include_router(router)

register_exception_handlers(app)


@app.get('/', tags=['health'])
async def healthcheck():
    classifier = getattr(app.state, 'classifier', None)
    state = classifier.state.value if classifier is not None else 'uninitialized'
    return {'status': 'ok', 'classifier': state}
