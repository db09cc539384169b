# competitor_email/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from competitor_email.core.config import get_settings
from competitor_email.core.llm_client import LLMClient
from competitor_email.db.intelligence_store import IntelligenceStore
from competitor_email.features import email_generation
from competitor_email.features.email_generation.dependencies import get_intelligence_store

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting Competitor Email Service...")

    app.state.intelligence_store = IntelligenceStore.from_settings(settings)
    app.state.llm_client = LLMClient(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.LLM_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        base_url=settings.ANTHROPIC_BASE_URL,
    )
    logger.info(f"Competitor Email Service ready (model={settings.LLM_MODEL})")

    yield

    logger.info("Shutting down Competitor Email Service...")
    await app.state.llm_client.close()
    await app.state.intelligence_store.close()


app = FastAPI(
    title="Competitor Email API",
    description="Generates competitor-aware outreach emails from collected intelligence",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(email_generation.router, prefix="/api")


@app.get("/health")
async def health_check(store: IntelligenceStore = Depends(get_intelligence_store)):
    if await store.ping():
        return {"status": "healthy", "intelligence_store": "reachable"}
    return JSONResponse(
        status_code=503,
        content={"status": "degraded", "intelligence_store": "unreachable"},
    )
