import json
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from kintsugi.schemas.sentiment import SentimentRequest, SentimentResponse
from kintsugi.services.llm_client import (
    KINTSUGI_PROMPTS,
    LLMClient,
    LLMError,
    anonymize_text,
    get_llm_client,
)
from kintsugi.services.sentiment_service import (
    analyze_local_sentiment,
    analyze_with_cultural_context,
    merge_llm_analysis,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sentiment"])


def _failure(status_code: int, error: str) -> JSONResponse:
    body = SentimentResponse(success=False, error=error)
    return JSONResponse(status_code=status_code,
                        content=body.model_dump(by_alias=True, exclude_none=True))


@router.post("/smart/analyze-sentiment", response_model=SentimentResponse,
             response_model_exclude_none=True)
def analyze_sentiment(request: SentimentRequest,
                      llm: LLMClient = Depends(get_llm_client)):
    """
    Local analysis always runs; an LLM pass enriches it when deep analysis is
    requested and smart features are enabled.
    """
    if not request.text or not request.text.strip():
        return _failure(400, "Text is required")

    try:
        if request.cultural_context:
            result = analyze_with_cultural_context(request.text, request.cultural_context)
        else:
            result = analyze_local_sentiment(request.text)

        if request.use_deep_analysis and llm.is_enabled():
            context_info = ""
            if request.cultural_context:
                context_info = "\nUser context: " + json.dumps(
                    request.cultural_context.model_dump(by_alias=True, exclude_none=True))
            try:
                reply = llm.complete_with_system(
                    KINTSUGI_PROMPTS["sentiment_analysis"],
                    f'Analyze this reflection:{context_info}\n\n"{anonymize_text(request.text)}"',
                )
                result = merge_llm_analysis(result, reply.content)
            except LLMError as e:
                # Local result still stands
                logger.error("LLM analysis failed: %s", e)

        return SentimentResponse(success=True, result=result)
    except Exception as e:
        logger.exception("Sentiment analysis error")
        return _failure(500, str(e) or "Unknown error")
