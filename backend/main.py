from contextlib import asynccontextmanager

from fastapi import FastAPI

from api import content, courses
from core.config import settings
from core.database import engine, Base, get_db_session
from core.logging import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware
from core.errors import Err, Ok, register_error_handlers
from engines.loader import load_store_from_db
import models  # noqa: F401  (registers tables on Base.metadata)

# Initialize logging before anything else
configure_logging(
    level=settings.LOG_LEVEL,
    json_logs=settings.LOG_JSON,
    log_sql=settings.LOG_SQL,
)

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup", message="Scheduler API starting up")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_db_session() as session:
        result = await load_store_from_db(session)
    match result:
        case Ok(store):
            content.set_store(store)
        case Err(error):
            log.error("store_load_failed", error=str(error))

    yield

    log.info("shutdown", message="Scheduler API shutting down")
    await engine.dispose()


app = FastAPI(
    title="Sentence Scheduler API",
    description="Spaced-repetition study days over parallel-language sentence packs",
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(content.router, prefix="/api/content", tags=["content"])
app.include_router(courses.router, prefix="/api/courses", tags=["courses"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    log.info("server_config", host=settings.BACKEND_HOST, port=settings.BACKEND_PORT, debug=settings.APP_DEBUG)
    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.APP_DEBUG,
        log_config=None,
    )
