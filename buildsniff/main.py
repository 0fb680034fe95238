from fastapi import FastAPI

from buildsniff.api.artifact_routes import router as artifact_router
from buildsniff.api.type_routes import router as type_router
from buildsniff.core.config import APP_VERSION
from buildsniff.core.logging import setup_logging

setup_logging()

TAGS_METADATA = [
    {
        "name": "artifacts",
        "description": "Detect, validate, extract and normalize CI build artifacts sent as text.",
    },
    {
        "name": "types",
        "description": "The artifact type registry: what each type supports and how to read it.",
    },
    {
        "name": "health",
        "description": "Liveness probe reporting the service version.",
    },
]

app = FastAPI(
    title="buildsniff",
    version=APP_VERSION,
    description="Classify, validate, extract and normalize CI build artifacts.",
    openapi_tags=TAGS_METADATA,
)

app.include_router(type_router)
app.include_router(artifact_router)


@app.get("/health", tags=["health"], summary="Health check")
def health() -> dict:
    return {"status": "healthy", "version": APP_VERSION}
