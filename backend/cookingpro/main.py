"""
FastAPI main application.
Entry point for the CookingPro API.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from cookingpro.core.config import get_settings
from cookingpro.core.exceptions import ConfigurationError
from cookingpro.core.llm_client import GeminiClient
from cookingpro.api import routes_chat
from cookingpro.core.logging import setup_logging
from cookingpro.services.chat_session import SessionStore
from cookingpro.services.model_gateway import ModelGateway

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the session store on startup."""
    logger.info("Starting CookingPro API...")
    settings = get_settings()
    if not settings.has_api_key:
        logger.warning("GEMINI_API_KEY is not set; chat requests will fail until it is configured.")

    client = GeminiClient(settings=settings)
    app.state.session_store = SessionStore(
        lambda: ModelGateway(client=client, settings=settings),
        idle_ttl=settings.session_idle_seconds,
    )
    yield
    logger.info("Shutting down CookingPro API...")


app = FastAPI(
    title="CookingPro API",
    description="AI chef for recipes and budget-aware meal plans",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes_chat.router, prefix="/api", tags=["chat"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "message": "CookingPro API is running",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    settings = get_settings()
    return {
        "status": "healthy",
        "text_model": settings.gemini_text_model,
        "image_model": settings.gemini_image_model,
        "api_key_configured": settings.has_api_key
    }


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
    )


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "cookingpro.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
