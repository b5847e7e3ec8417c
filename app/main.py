import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.exception_handlers import register_exception_handlers
from app.api.routes.inventory import router as inventory_router
from app.api.routes.periods import router as periods_router
from app.api.routes.reconciliations import router as reconciliations_router
from app.core.config import settings
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    logger.info("%s starting, currency=%s", settings.app_name, settings.currency_code)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)
app.include_router(inventory_router)
app.include_router(periods_router)
app.include_router(reconciliations_router)


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}
