"""
Nejiba Studio Backend - Unified Application Entry Point
Mounts the generation and text generation services under a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.generation import app as generation_module
from services.text_generation import app as text_generation_module
from shared.utils import config, setup_logging

logger = setup_logging("nejiba-studio-backend")

# Get routers from the service apps
generation_app = generation_module.app
text_generation_app = text_generation_module.app

app = FastAPI(
    title="Nejiba Studio Backend API",
    description="""
    Unified API for workshop, poster and video-ad generation.

    All endpoints are documented below. Service routes are organized by tag.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
        {
            "name": "Generation",
            "description": "Image and video generation jobs - mounted at /api/v1/generation",
        },
        {
            "name": "Text Generation",
            "description": "Chat completion service - mounted at /api/v1/text",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes to exclude (internal FastAPI docs routes)
EXCLUDED_PATHS = {"/openapi.json", "/docs", "/docs/oauth2-redirect", "/redoc"}

MOUNTED_SERVICES = (
    (generation_app, "/api/v1/generation", "Generation", "generation"),
    (text_generation_app, "/api/v1/text", "Text Generation", "text"),
)

for service_app, prefix, tag, name_prefix in MOUNTED_SERVICES:
    for route in service_app.routes:
        if hasattr(route, "path") and hasattr(route, "endpoint"):
            # Skip internal documentation routes
            if route.path in EXCLUDED_PATHS:
                continue
            route_kwargs = {
                "path": f"{prefix}{route.path}",
                "endpoint": route.endpoint,
                "methods": route.methods,
                "tags": [tag],
            }
            if hasattr(route, "name"):
                route_kwargs["name"] = f"{name_prefix}_{route.name}"
            if hasattr(route, "response_model"):
                route_kwargs["response_model"] = route.response_model
            app.add_api_route(**route_kwargs)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "Nejiba Studio Backend API",
        "version": "1.0.0",
        "services": {
            "generation": {
                "base_url": "/api/v1/generation",
                "health": "/api/v1/generation/health",
            },
            "text": {
                "base_url": "/api/v1/text",
                "health": "/api/v1/text/health",
            },
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "services": {
            "api_gateway": "operational",
            "generation": generation_module.service.describe_providers(),
            "text": text_generation_module.service.driver.name,
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Nejiba Studio Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=config.get("debug", False), log_level="info")
