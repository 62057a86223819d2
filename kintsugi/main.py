import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kintsugi.core.config import settings
from kintsugi.api.v1.endpoints.sentiment import router as sentiment_router
from kintsugi.api.v1.endpoints.bias import router as bias_router
from kintsugi.api.v1.endpoints.insight import router as insight_router
from kintsugi.services.llm_client import get_llm_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    if get_llm_client().is_enabled():
        logger.info("Smart features enabled (provider=%s, model=%s)",
                    settings.llm_provider, settings.llm_model)
    else:
        logger.info("Smart features disabled - serving local analysis only")

    yield

    # Shutdown
    get_llm_client().session.close()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sentiment_router, prefix="/api/v1")
app.include_router(bias_router, prefix="/api/v1")
app.include_router(insight_router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same `success: false` envelope as other failures."""
    errors = exc.errors()
    detail = errors[0].get("msg", "invalid value") if errors else "invalid value"
    logger.warning("Rejected request to %s: %s", request.url.path, detail)

    body = {"success": False, "error": f"Invalid request body: {detail}"}
    if request.url.path.endswith("/detect-bias"):
        body.update({"biasDetected": False, "source": "local"})
    elif request.url.path.endswith("/generate-insight"):
        body["source"] = "local"
    return JSONResponse(status_code=400, content=body)
