"""
FastAPI Application Entry Point

Integrates:
  - Assistant endpoints (/ai/*)
  - Health and diagnostics
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from assistant.api import create_app
from infra import get_config

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

config = get_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("POS AI Assistant starting up...")
    logger.info(f"Environment: {config.environment}")
    logger.info(f"LLM Backend: {config.llm_backend}")
    if config.llm_backend == "gemini":
        logger.info(f"Gemini Model: {config.gemini_model}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("POS AI Assistant shutting down...")


# Create FastAPI app (fails fast if the model backend is misconfigured)
app = create_app(lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "POS AI Assistant API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "market_news": "POST /ai/market-news",
            "price_suggestion": "POST /ai/price-suggestion",
            "ask": "POST /ai/ask",
            "visual_billing": "POST /ai/visual-billing",
            "voice_command": "POST /ai/voice-command",
            "insights": "POST /ai/insights",
            "face_describe": "POST /ai/face/describe",
            "face_identify": "POST /ai/face/identify",
            "upsell": "POST /ai/upsell",
            "health_live": "GET /health/live",
            "fallbacks": "GET /diagnostics/fallbacks",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=config.agent_port,
        reload=config.environment == "development",
    )
