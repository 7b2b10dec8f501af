import enum
from typing import Optional, Literal, List

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator


class CriticalViolation(str, enum.Enum):
    personal_information = "personal_information"
    violence_harassment = "violence_harassment"
    adult_content_nudity = "adult_content_nudity"
    harmful_dangerous_content = "harmful_dangerous_content"


CRITICAL_VIOLATION_IDS = frozenset(v.value for v in CriticalViolation)


def _clamp_confidence(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return min(max(value, 0.0), 100.0)


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


# ---- Requests ----
class ModerationPayload(BaseModel):
    """Inbound body of POST /moderate. Presence checks happen in the gateway."""
    model_config = ConfigDict(populate_by_name=True)

    filename: Optional[str] = None
    type: Optional[str] = None
    caption: Optional[str] = None
    image_data: Optional[str] = Field(default=None, alias="imageData")
    file_count: Optional[int] = Field(default=None, alias="fileCount")


class ModerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str = Field(min_length=1)
    declared_type: str = Field(min_length=1)
    caption: Optional[str] = None
    image_data: Optional[str] = None  # data URI
    file_count: Optional[int] = None


# ---- Results ----
class ModerationIssue(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    category: str
    description: str
    severity: Literal["low", "medium", "high"]
    confidence: Optional[float] = None
    blocking_reason: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("blocking_reason", "blockingReason"),
    )

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value):
        return _lower(value)

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value):
        return _clamp_confidence(value)


class ModerationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    status: Literal["passed", "failed"]
    confidence: float = 0.0
    violation_category: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("violation_category", "violationCategory"),
    )
    issues: List[ModerationIssue] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return _lower(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def default_confidence(cls, value):
        return 0.0 if value is None else value

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value):
        return _clamp_confidence(value)
