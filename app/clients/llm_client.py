# app/clients/llm_client.py
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from app.clients.prompts import (
    ANALYSIS_PROMPTS,
    create_analysis_user_prompt,
    create_system_prompt,
    create_user_prompt,
)
from app.core.config import Settings
from app.core.exceptions import LLMServiceException
from app.core.logger import logger
from app.schemas.moderation import ModerationRequest


def _build_client(api_key: str, settings: Settings) -> AsyncOpenAI:
    # Upstream calls are never retried.
    options: Dict[str, Any] = {"api_key": api_key, "max_retries": 0}
    if settings.openai_timeout is not None:
        options["timeout"] = settings.openai_timeout
    return AsyncOpenAI(**options)


def build_moderation_messages(request: ModerationRequest) -> List[Dict[str, Any]]:
    messages: List[Dict[str, Any]] = [
        {"role": "system", "content": create_system_prompt()}
    ]

    if request.image_data:
        messages.append({
            "role": "user",
            "content": [
                {"type": "text", "text": create_user_prompt(request)},
                {"type": "image_url", "image_url": {"url": request.image_data}},
            ],
        })
    else:
        messages.append({"role": "user", "content": create_user_prompt(request)})

    return messages


def _message_text(response) -> str:
    if not response.choices:
        return ""
    return (response.choices[0].message.content or "").strip()


# --- Vision moderation ---
async def request_moderation_judgment(request: ModerationRequest, settings: Settings) -> str:
    """
    Ask the vision model for a moderation verdict.

    Returns the model's raw text; parsing happens downstream.

    Raises:
        LLMServiceException: If the API call fails for any reason
    """
    logger.info(
        "Sending content to vision model",
        extra={
            "upload_filename": request.filename,
            "model": settings.openai_model,
            "has_image": bool(request.image_data),
            "image_data_length": len(request.image_data or ""),
        }
    )

    try:
        async with _build_client(settings.openai_api_key, settings) as client:
            response = await client.chat.completions.create(
                model=settings.openai_model,
                messages=build_moderation_messages(request),
                temperature=settings.openai_temperature,
                max_tokens=settings.openai_max_tokens,
                response_format={"type": "json_object"},
            )
    except openai.OpenAIError as e:
        logger.error(
            f"OpenAI moderation request failed: {str(e)}",
            extra={"upload_filename": request.filename, "error": str(e)},
            exc_info=True
        )
        raise LLMServiceException(
            f"Moderation model request failed: {str(e)}",
            provider="openai",
            details={"model": settings.openai_model}
        )

    text = _message_text(response)
    logger.debug("Raw moderation verdict", extra={"upload_filename": request.filename, "verdict": text})
    return text


# --- Engagement analysis ---
async def request_content_analysis(
    kind: str,
    content: str,
    settings: Settings,
    context: Optional[str] = None,
) -> str:
    try:
        async with _build_client(settings.openai_api_key, settings) as client:
            response = await client.chat.completions.create(
                model=settings.analysis_model,
                messages=[
                    {"role": "system", "content": ANALYSIS_PROMPTS[kind]},
                    {"role": "user", "content": create_analysis_user_prompt(content, context)},
                ],
                temperature=settings.analysis_temperature,
                max_tokens=settings.analysis_max_tokens,
            )
    except openai.OpenAIError as e:
        logger.error(
            f"OpenAI analysis request failed: {str(e)}",
            extra={"analysis_type": kind, "error": str(e)},
            exc_info=True
        )
        raise LLMServiceException(
            f"OpenAI API error: {str(e)}",
            provider="openai",
            details={"model": settings.analysis_model}
        )

    return _message_text(response)
