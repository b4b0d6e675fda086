"""Meal photo analysis through an external vision model."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from meal_snap.domain.analysis import (
    BadRequest,
    ConfigurationError,
    EmptyResponse,
    IncompleteResponse,
    MalformedResponse,
    MealAnalysis,
)

logger = logging.getLogger(__name__)

DEFAULT_FOOD_GRAMS = 100

SYSTEM_PROMPT = """You are a nutrition expert who analyzes photos of meals.
Return ONLY valid JSON (no markdown, no explanations) with this structure:
{
  "foods": ["identified foods, named in Brazilian Portuguese"],
  "food_details": [
    {"name": "food name", "grams": estimated grams as a number}
  ],
  "nutrition": {
    "calories": number in kcal,
    "carbs": number in grams,
    "protein": number in grams,
    "fat": number in grams,
    "fiber": number in grams
  },
  "confidence": number between 0 and 1 for how sure you are of the analysis
}

Rules:
- Estimate the grams of each food from its apparent size in the image.
- Use typical Brazilian portions as the reference.
- If the food cannot be identified clearly, set confidence below 0.8.
- Nutrition values are totals for the whole plate, consistent with the grams."""

USER_PROMPT = (
    "Analyze this meal. Identify each food, estimate the grams of each one, "
    "and give the estimated total nutrition values."
)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", flags=re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


class AnalysisClient(Protocol):
    """Interface for the upstream chat completion call."""

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
    ) -> str | None:
        """Return the model's raw message content.

        Implementations raise RateLimited, QuotaExceeded or UpstreamError for
        failed upstream calls.
        """


@dataclass
class AnalysisService:
    """Runs one analysis call and enforces the response contract."""

    client: AnalysisClient | None
    model: str

    async def analyze(self, image_base64: str | None) -> MealAnalysis:
        """Analyze a base64 image (data URL or bare base64)."""
        if not image_base64 or not image_base64.strip():
            raise BadRequest()
        if image_base64.strip().lower().startswith(("http://", "https://")):
            raise BadRequest("Image must be sent as base64, not as a URL")
        if self.client is None:
            logger.error("Analysis API key is not configured")
            raise ConfigurationError()

        logger.info("Sending image for analysis", extra={"model": self.model})
        content = await self.client.complete(
            model=self.model,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=USER_PROMPT,
            image_url=_to_image_url(image_base64.strip()),
        )
        if not content or not content.strip():
            logger.warning("Analysis model returned no content")
            raise EmptyResponse()
        return parse_analysis_content(content)


def parse_analysis_content(content: str) -> MealAnalysis:
    """Parse raw model output into a validated analysis.

    Structural checks run before any defaulting; a failure at any step raises
    and nothing partially defaulted is returned.
    """
    try:
        payload = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as exc:
        logger.warning("Could not parse analysis content", extra={"content": content})
        raise MalformedResponse() from exc
    if not isinstance(payload, dict):
        raise MalformedResponse()

    foods = payload.get("foods")
    confidence = payload.get("confidence")
    if (
        not foods
        or not payload.get("nutrition")
        or isinstance(confidence, bool)
        or not isinstance(confidence, int | float)
    ):
        logger.warning("Analysis is missing required fields", extra={"payload": payload})
        raise IncompleteResponse()
    if not isinstance(foods, list):
        raise IncompleteResponse("foods must be a list")

    normalized = dict(payload)
    normalized["food_details"] = _food_details(payload.get("food_details"), foods)
    try:
        return MealAnalysis.model_validate(normalized)
    except ValidationError as exc:
        logger.warning("Analysis failed validation", extra={"errors": exc.errors()})
        raise IncompleteResponse() from exc


def strip_code_fence(content: str) -> str:
    """Remove a Markdown code fence wrapped around the whole response."""
    cleaned = content.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _FENCE_OPEN.sub("", cleaned)
    return _FENCE_CLOSE.sub("", cleaned).strip()


def _food_details(raw: object, foods: list[object]) -> list[dict[str, object]]:
    details: list[dict[str, object]] = []
    if isinstance(raw, list):
        for entry in raw:
            if not isinstance(entry, dict) or not entry.get("name"):
                continue
            grams = entry.get("grams")
            if isinstance(grams, bool) or not isinstance(grams, int | float):
                grams = DEFAULT_FOOD_GRAMS
            details.append({"name": str(entry["name"]), "grams": grams})
    if details:
        return details
    return [{"name": food, "grams": DEFAULT_FOOD_GRAMS} for food in foods]


def _to_image_url(image_base64: str) -> str:
    """Accept either a data URL or bare base64 and return a data URL."""
    if image_base64.startswith("data:"):
        return image_base64
    return f"data:{_detect_mime_type(image_base64)};base64,{image_base64}"


def _detect_mime_type(image_base64: str) -> str:
    """Infer a basic image MIME type from the base64 file signature."""
    if image_base64.startswith("/9j/"):
        return "image/jpeg"
    if image_base64.startswith("iVBORw0KGgo"):
        return "image/png"
    if image_base64.startswith("UklGR"):
        return "image/webp"
    return "image/jpeg"
