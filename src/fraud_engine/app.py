import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.fraud_engine.api.analysis_router import analysis_router
from src.fraud_engine.config.settings import (
    RulebookError,
    api_prefix_from_env,
    log_level_from_env,
    settings_from_env,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup with the active rulebook; the engine itself holds no resources."""

    logger.info("🚀 Starting fraud analysis service...")
    try:
        settings = settings_from_env()
        logger.info(
            f"Active rulebook: {settings.rulebook_id} v{settings.rulebook_version} "
            f"({settings.source_path or 'built-in defaults'})"
        )
    except RulebookError as e:
        # Requests that rely on the default rulebook will fail with 400 until fixed.
        logger.error(f"❌ Default rulebook is invalid: {e}")
    yield
    logger.info("👋 Fraud analysis service shutdown complete")


def create_app() -> FastAPI:
    logging.basicConfig(level=log_level_from_env())

    app = FastAPI(title="CSV Fraud Indicator Analysis", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(analysis_router, prefix=api_prefix_from_env())

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
