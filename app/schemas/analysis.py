from pydantic import BaseModel, Field
from typing import Literal, Optional

class AnalysisRequest(BaseModel):
    type: Literal["comment", "story"]
    content: str = Field(min_length=1)
    context: Optional[str] = None

class AnalysisResponse(BaseModel):
    success: bool = True
    analysis: str
    type: Literal["comment", "story"]
