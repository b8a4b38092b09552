"""FastAPI app for the text generation service."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from services.text_generation.errors import TextGenerationError
from services.text_generation.service import TextGenerationService
from shared.models import CompletionRequest, CompletionResponse
from shared.response_models import HealthResponse
from shared.utils import config, setup_logging

logger = setup_logging("text-generation-api")

app = FastAPI(
    title="Text Generation Service",
    description="OpenAI-compatible chat completions for workshop and ad content",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

service = TextGenerationService()


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        message="Text generation service is healthy",
        version="1.0.0",
        dependencies={"completion": service.driver.name},
    )


@app.post("/complete", response_model=CompletionResponse)
async def complete(request: CompletionRequest) -> CompletionResponse:
    try:
        return await service.complete(request)
    except TextGenerationError as exc:
        logger.error("Completion failed: %s", exc)
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


if __name__ == "__main__":
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError("uvicorn must be installed to run this service.") from e
    uvicorn.run(app, host="0.0.0.0", port=8011)
