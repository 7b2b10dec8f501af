import json
from typing import Optional

from pydantic import ValidationError

from app.core.exceptions import ResponseParseException
from app.core.logger import logger
from app.schemas.moderation import ModerationIssue, ModerationResult

SYSTEM_ERROR_CATEGORY = "system_error"


def analysis_error_result() -> ModerationResult:
    """Blocking result used whenever the model output cannot be interpreted."""
    return ModerationResult(
        status="failed",
        confidence=100,
        violation_category=SYSTEM_ERROR_CATEGORY,
        issues=[
            ModerationIssue(
                category="Analysis Error",
                description="Could not analyze content properly. Upload blocked for safety.",
                severity="high",
                confidence=100,
                blocking_reason="System unable to verify content safety",
            )
        ],
    )


def _reject_constant(name: str):
    raise ResponseParseException(f"Model response contains non-finite number {name}")


def _decode(raw: Optional[str]) -> ModerationResult:
    if raw is None or not raw.strip():
        raise ResponseParseException("Model response is empty")

    data = json.loads(raw, parse_constant=_reject_constant)
    if not isinstance(data, dict):
        raise ResponseParseException(
            "Model response is not a JSON object",
            details={"type": type(data).__name__}
        )

    # Missing fields never default to permissive values
    if not data.get("status"):
        data["status"] = "failed"
    if not isinstance(data.get("issues"), list):
        data["issues"] = []

    return ModerationResult.model_validate(data)


def parse_moderation_response(raw: Optional[str]) -> ModerationResult:
    """
    Turn the model's raw text into a provisional moderation result.

    Never raises: empty input, invalid JSON and schema violations all
    produce the Analysis Error result.

    Args:
        raw: Text returned by the vision model, possibly None

    Returns:
        Provisional ModerationResult, not yet passed through the policy engine
    """
    try:
        return _decode(raw)
    except (ResponseParseException, ValueError, TypeError, ValidationError) as e:
        logger.error(
            f"Could not parse moderation response: {str(e)}",
            extra={
                "error": str(e),
                "raw_response": raw[:500] if isinstance(raw, str) else repr(raw),
            }
        )
        return analysis_error_result()
