import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from kintsugi.schemas.bias import BiasDetectionRequest, BiasDetectionResponse
from kintsugi.services.bias_service import (
    build_bias_prompt,
    detect_local_biases,
    enhance_biases_with_llm,
)
from kintsugi.services.llm_client import (
    KINTSUGI_PROMPTS,
    LLMClient,
    LLMError,
    anonymize_text,
    get_llm_client,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bias"])


def _failure(status_code: int, error: str) -> JSONResponse:
    body = BiasDetectionResponse(success=False, bias_detected=False, error=error, source="local")
    return JSONResponse(status_code=status_code,
                        content=body.model_dump(by_alias=True, exclude_none=True))


@router.post("/smart/detect-bias", response_model=BiasDetectionResponse,
             response_model_exclude_none=True)
def detect_bias(request: BiasDetectionRequest,
                llm: LLMClient = Depends(get_llm_client)):
    if not request.text or not request.text.strip():
        return _failure(400, "Text is required")

    try:
        biases = detect_local_biases(request.text, request.cultural_context)

        if biases and llm.is_enabled():
            try:
                reply = llm.complete_with_system(
                    KINTSUGI_PROMPTS["bias_detection"],
                    build_bias_prompt(anonymize_text(request.text), biases,
                                      request.cultural_context),
                )
                return BiasDetectionResponse(
                    success=True,
                    bias_detected=True,
                    biases=enhance_biases_with_llm(biases, reply.content),
                    source="smart",
                )
            except LLMError as e:
                logger.error("LLM bias detection failed: %s", e)

        if biases:
            return BiasDetectionResponse(success=True, bias_detected=True, biases=biases)
        return BiasDetectionResponse(success=True, bias_detected=False)
    except Exception as e:
        logger.exception("Bias detection error")
        return _failure(500, str(e) or "Unknown error")
