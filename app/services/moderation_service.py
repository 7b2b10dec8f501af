from typing import Awaitable, Callable, Optional

from fastapi.responses import JSONResponse

from app.clients.llm_client import request_moderation_judgment
from app.core.config import Settings
from app.core.exceptions import ValidationException
from app.core.logger import logger
from app.schemas.moderation import ModerationPayload, ModerationRequest, ModerationResult
from app.services.policy_engine import apply_zero_tolerance_policy
from app.services.response_formatter import (
    create_error_response,
    create_success_response,
    create_system_error_response,
)
from app.services.response_parser import parse_moderation_response

Judge = Callable[[ModerationRequest, Settings], Awaitable[str]]

MISSING_API_KEY_MESSAGE = (
    "OpenAI API key not configured. Upload blocked until content moderation is available."
)


class ModerationGateway:
    """
    Orchestrates a single moderation call.

    Authorization is enforced by the router before the gateway runs. From
    validation onwards every path ends in a ModerationResult-shaped 200
    response, except a malformed request which raises ValidationException.
    """

    def __init__(self, settings: Settings, judge: Optional[Judge] = None):
        self.settings = settings
        self._judge = judge

    def validate(self, payload: ModerationPayload) -> ModerationRequest:
        """
        Build the immutable request from the inbound payload.

        Raises:
            ValidationException: If filename or type is missing or blank
        """
        filename = (payload.filename or "").strip()
        declared_type = (payload.type or "").strip()

        if not filename or not declared_type:
            logger.warning(
                "Missing required moderation fields",
                extra={"has_filename": bool(filename), "has_type": bool(declared_type)}
            )
            raise ValidationException(
                "Missing filename or type",
                field="filename" if not filename else "type"
            )

        return ModerationRequest(
            filename=filename,
            declared_type=declared_type,
            caption=payload.caption or None,
            image_data=payload.image_data or None,
            file_count=payload.file_count,
        )

    async def analyze(self, request: ModerationRequest) -> ModerationResult:
        judge = self._judge or request_moderation_judgment
        raw = await judge(request, self.settings)
        provisional = parse_moderation_response(raw)
        return apply_zero_tolerance_policy(provisional)

    async def moderate(self, payload: ModerationPayload) -> JSONResponse:
        request = self.validate(payload)

        logger.info(
            "Processing zero-tolerance moderation check",
            extra={
                "upload_filename": request.filename,
                "declared_type": request.declared_type,
                "has_caption": bool(request.caption),
                "has_image": bool(request.image_data),
            }
        )

        if not self.settings.openai_api_key:
            logger.error(
                "OpenAI API key not configured, blocking upload",
                extra={"upload_filename": request.filename}
            )
            return create_error_response(MISSING_API_KEY_MESSAGE, "Configuration Error")

        try:
            result = await self.analyze(request)
            response = create_success_response(result)
        except Exception as e:
            logger.error(
                f"Moderation failed, blocking upload: {str(e)}",
                extra={"upload_filename": request.filename, "error": str(e)},
                exc_info=True
            )
            return create_system_error_response()

        logger.info(
            "Moderation completed",
            extra={
                "upload_filename": request.filename,
                "moderation_status": result.status,
                "violation_category": result.violation_category,
                "issue_count": len(result.issues),
            }
        )
        return response
