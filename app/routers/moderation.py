from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.core.logger import logger
from app.core.security import get_client_ip, require_authorization
from app.schemas.moderation import ModerationPayload, ModerationResult
from app.services.moderation_service import ModerationGateway

router = APIRouter(tags=["moderation"])


def get_moderation_gateway(settings: Settings = Depends(get_settings)) -> ModerationGateway:
    return ModerationGateway(settings)


@router.post(
    "/moderate",
    response_model=ModerationResult,
    status_code=200,
    dependencies=[Depends(require_authorization)],
    responses={
        400: {"description": "Missing filename or type"},
        401: {"description": "Missing authorization header"},
    },
)
async def moderate_content(
    request: Request,
    payload: Optional[ModerationPayload] = None,
    gateway: ModerationGateway = Depends(get_moderation_gateway)
) -> JSONResponse:
    """
    Run an upload through the zero-tolerance moderation gate.

    Content decisions, including blocks caused by configuration or upstream
    failures, are always returned as 200 with a ModerationResult body. Only a
    missing Authorization header (401) or a malformed body (400) produce
    error statuses.

    Args:
        payload: Filename, declared MIME type, and optional caption, inline image and file count
        request: FastAPI request object for logging
        gateway: Moderation gateway built from the current settings

    Returns:
        JSONResponse carrying the final ModerationResult
    """
    payload = payload or ModerationPayload()

    logger.info(
        "Moderation request received",
        extra={
            "upload_filename": payload.filename,
            "image_data_length": len(payload.image_data or ""),
            "client_ip": get_client_ip(request)
        }
    )

    return await gateway.moderate(payload)
