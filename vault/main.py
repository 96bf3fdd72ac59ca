import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from vault.db.postgres.base import engine
from vault.errors import install_error_handlers
from vault.routers import enrich, links, search
from vault.security import get_api_key
from vault.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Knowledge Vault API starting")
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database connections released")


app = FastAPI(
    title="Knowledge Vault API",
    description="Summaries, embeddings and search for saved prompts and links",
    lifespan=lifespan,
)
install_error_handlers(app)

app.include_router(search.router, dependencies=[Depends(get_api_key)])
app.include_router(enrich.router, dependencies=[Depends(get_api_key)])
app.include_router(links.router, dependencies=[Depends(get_api_key)])


@app.get("/")
async def root():
    return {"ok": True, "message": "Knowledge Vault API is running"}
