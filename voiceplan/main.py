"""
VoicePlan API - Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from voiceplan.agents.llm_config import get_llm_provider
from voiceplan.pipeline import VoicePlanPipeline
from voiceplan.routes.content import router as content_router
from voiceplan.storage import InMemoryContentStore
from voiceplan.utils.config import settings
from voiceplan.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared model provider, pipeline and store once per process"""
    app.state.pipeline = VoicePlanPipeline(get_llm_provider(settings))
    app.state.store = InMemoryContentStore()
    logger.info("application_started", environment=settings.environment)
    yield
    logger.info("application_stopped")


# Create FastAPI app
app = FastAPI(
    title="VoicePlan API",
    description="Voice-driven plans and travel itineraries",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware - allow frontend to call our API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "service": "VoicePlan API",
        "status": "running",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "api": "ok",
        "pipeline": "ok" if getattr(app.state, "pipeline", None) is not None else "not started",
    }


app.include_router(content_router)
