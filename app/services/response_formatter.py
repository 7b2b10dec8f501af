from fastapi.responses import JSONResponse

from app.core.security import CORS_HEADERS
from app.schemas.moderation import ModerationIssue, ModerationResult
from app.services.response_parser import SYSTEM_ERROR_CATEGORY


def _json(result: ModerationResult) -> JSONResponse:
    # Content decisions are always delivered as 200
    return JSONResponse(status_code=200, content=result.model_dump(), headers=CORS_HEADERS)


def build_error_result(message: str, category: str = "Configuration Error") -> ModerationResult:
    return ModerationResult(
        status="failed",
        confidence=100,
        violation_category=category.strip().lower().replace(" ", "_"),
        issues=[
            ModerationIssue(
                category=category,
                description=message,
                severity="high",
                confidence=100,
                blocking_reason="Content safety could not be verified",
            )
        ],
    )


def build_system_error_result() -> ModerationResult:
    return ModerationResult(
        status="failed",
        confidence=100,
        violation_category=SYSTEM_ERROR_CATEGORY,
        issues=[
            ModerationIssue(
                category="System Error",
                description="Content moderation system error. Upload blocked for safety.",
                severity="high",
                confidence=100,
                blocking_reason="Critical system error during content analysis",
            )
        ],
    )


def create_success_response(result: ModerationResult) -> JSONResponse:
    return _json(result)


def create_error_response(message: str, category: str = "Configuration Error") -> JSONResponse:
    """Blocking response for conditions that prevent analysis from running at all."""
    return _json(build_error_result(message, category))


def create_system_error_response() -> JSONResponse:
    """Catch-all blocking response for unexpected failures."""
    return _json(build_system_error_result())
