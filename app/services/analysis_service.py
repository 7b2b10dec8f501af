from app.clients.llm_client import request_content_analysis
from app.core.config import Settings
from app.core.exceptions import ConfigurationException
from app.core.logger import logger
from app.schemas.analysis import AnalysisRequest, AnalysisResponse


async def analyze_engagement(request: AnalysisRequest, settings: Settings) -> AnalysisResponse:
    """
    Produce advisory engagement insights for a comment or story.

    Raises:
        ConfigurationException: If no OpenAI API key is configured
        LLMServiceException: If the model call fails
    """
    if not settings.openai_api_key:
        raise ConfigurationException(
            "OpenAI API key not configured",
            setting="openai_api_key"
        )

    logger.info(
        f"Analyzing {request.type} content",
        extra={"analysis_type": request.type, "content_length": len(request.content)}
    )

    analysis = await request_content_analysis(
        request.type,
        request.content,
        settings,
        context=request.context,
    )
    return AnalysisResponse(analysis=analysis, type=request.type)
