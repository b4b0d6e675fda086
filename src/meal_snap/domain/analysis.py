"""Models and failure kinds for meal photo analysis."""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, Field


class FoodDetail(BaseModel):
    """Estimated weight of one identified food."""

    name: str
    grams: float = Field(ge=0.0, allow_inf_nan=False)


class AnalysisNutrition(BaseModel):
    """Nutrition estimate for the whole plate."""

    calories: float = Field(ge=0.0, allow_inf_nan=False)
    carbs: float = Field(ge=0.0, allow_inf_nan=False)
    protein: float = Field(ge=0.0, allow_inf_nan=False)
    fat: float = Field(ge=0.0, allow_inf_nan=False)
    fiber: float = Field(ge=0.0, allow_inf_nan=False)


class MealAnalysis(BaseModel):
    """Validated analysis returned to the app."""

    foods: list[str] = Field(min_length=1)
    food_details: list[FoodDetail] = Field(min_length=1)
    nutrition: AnalysisNutrition
    confidence: float = Field(ge=0.0, le=1.0, allow_inf_nan=False)


class AnalysisErrorKind(StrEnum):
    BAD_REQUEST = "bad_request"
    CONFIGURATION = "configuration"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    UPSTREAM = "upstream"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_RESPONSE = "malformed_response"
    INCOMPLETE_RESPONSE = "incomplete_response"


class AnalysisError(Exception):
    """Base class for every analysis failure surfaced to callers."""

    kind: ClassVar[AnalysisErrorKind] = AnalysisErrorKind.UPSTREAM
    status_code: ClassVar[int] = 500
    retryable: ClassVar[bool] = False
    default_message: ClassVar[str] = "Failed to analyze image"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class BadRequest(AnalysisError):
    kind = AnalysisErrorKind.BAD_REQUEST
    status_code = 400
    default_message = "Missing image"


class ConfigurationError(AnalysisError):
    kind = AnalysisErrorKind.CONFIGURATION
    default_message = "Analysis service is not configured"


class RateLimited(AnalysisError):
    """Upstream returned 429; the caller should back off and retry."""

    kind = AnalysisErrorKind.RATE_LIMITED
    status_code = 429
    retryable = True
    default_message = "Rate limit exceeded. Try again in a few seconds."


class QuotaExceeded(AnalysisError):
    """Upstream returned 402; retrying will not help until credits are added."""

    kind = AnalysisErrorKind.QUOTA_EXCEEDED
    status_code = 402
    default_message = "Insufficient credits for the analysis service"


class UpstreamError(AnalysisError):
    kind = AnalysisErrorKind.UPSTREAM
    default_message = "Failed to analyze image"


class EmptyResponse(AnalysisError):
    kind = AnalysisErrorKind.EMPTY_RESPONSE
    default_message = "Analysis model returned an empty response"


class MalformedResponse(AnalysisError):
    kind = AnalysisErrorKind.MALFORMED_RESPONSE
    default_message = "Could not process the analysis"


class IncompleteResponse(AnalysisError):
    kind = AnalysisErrorKind.INCOMPLETE_RESPONSE
    default_message = "Analysis is missing required fields"
