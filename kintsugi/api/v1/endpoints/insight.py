import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from kintsugi.schemas.insight import InsightRequest, InsightResponse
from kintsugi.services.insight_service import (
    build_insight_prompt,
    extract_patterns,
    extract_section,
    generate_local_insight,
)
from kintsugi.services.llm_client import (
    KINTSUGI_PROMPTS,
    LLMClient,
    LLMError,
    anonymize_text,
    get_llm_client,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["insight"])


def _failure(status_code: int, error: str) -> JSONResponse:
    body = InsightResponse(success=False, error=error, source="local")
    return JSONResponse(status_code=status_code,
                        content=body.model_dump(by_alias=True, exclude_none=True))


@router.post("/smart/generate-insight", response_model=InsightResponse,
             response_model_exclude_none=True)
def generate_insight(request: InsightRequest,
                     llm: LLMClient = Depends(get_llm_client)):
    entries = request.journal_entries()
    if not entries:
        return _failure(400, "At least one entry is required")

    try:
        if not llm.is_enabled():
            return generate_local_insight(entries)

        anonymized = [
            e.model_copy(update={
                "accomplishment": anonymize_text(e.accomplishment),
                "reflection": anonymize_text(e.reflection) if e.reflection else None,
            })
            for e in entries
        ]
        prompt = build_insight_prompt(anonymized, request.user_profile, request.insight_type)

        try:
            reply = llm.complete_with_system(KINTSUGI_PROMPTS["insight_generation"], prompt)
        except LLMError as e:
            logger.error("LLM insight generation failed: %s", e)
            return generate_local_insight(entries)

        content = reply.content
        return InsightResponse(
            success=True,
            insight=extract_section(content, "insight") or content.split("\n")[0],
            kintsugi_connection=extract_section(content, "kintsugi") or extract_section(content, "connect"),
            patterns=extract_patterns(content),
            source="smart",
        )
    except Exception as e:
        logger.exception("Insight generation error")
        return _failure(500, str(e) or "Unknown error")
