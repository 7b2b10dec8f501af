from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.core.exceptions import ContentModeratorException
from app.core.logger import logger
from app.core.security import CORS_HEADERS
from app.schemas.analysis import AnalysisRequest, AnalysisResponse
from app.services.analysis_service import analyze_engagement

router = APIRouter(tags=["analysis"])

@router.post("/analyze", response_model=AnalysisResponse, status_code=200)
async def analyze_content(payload: AnalysisRequest, settings: Settings = Depends(get_settings)):
    """Advisory sentiment and engagement analysis for comments and stories."""
    try:
        result = await analyze_engagement(payload, settings)
    except ContentModeratorException as e:
        logger.error(
            f"Content analysis failed: {e.message}",
            extra={"analysis_type": payload.type, "error_code": e.error_code}
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": e.message},
            headers=CORS_HEADERS,
        )
    except Exception as e:
        logger.error(
            f"Unexpected error in content analysis",
            extra={"analysis_type": payload.type, "error": str(e)},
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e)},
            headers=CORS_HEADERS,
        )

    return JSONResponse(status_code=200, content=result.model_dump(), headers=CORS_HEADERS)
