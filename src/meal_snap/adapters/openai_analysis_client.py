"""OpenAI-compatible chat completions client for meal analysis."""

import logging
from dataclasses import dataclass
from http import HTTPStatus

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from meal_snap.domain.analysis import QuotaExceeded, RateLimited, UpstreamError
from meal_snap.services.analysis import AnalysisClient

logger = logging.getLogger(__name__)


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client for any gateway speaking the chat completions API."""

    client: AsyncOpenAI
    http_client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout: float = 60.0
    ) -> "OpenAIAnalysisClient":
        """Create a client with a managed httpx session and no SDK retries."""
        http_client = httpx.AsyncClient(timeout=timeout)
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                max_retries=0,
                http_client=http_client,
            ),
            http_client=http_client,
        )

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_url: str,
    ) -> str | None:
        """Send one image and return the first choice's message content."""
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": user_prompt},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    },
                ],
            )
        except APIStatusError as exc:
            logger.warning(
                "Analysis upstream returned an error",
                extra={"status_code": exc.status_code},
            )
            if exc.status_code == HTTPStatus.TOO_MANY_REQUESTS:
                raise RateLimited() from exc
            if exc.status_code == HTTPStatus.PAYMENT_REQUIRED:
                raise QuotaExceeded() from exc
            raise UpstreamError() from exc
        except APIConnectionError as exc:
            logger.warning("Analysis upstream is unreachable")
            raise UpstreamError() from exc

        if not response.choices:
            return None
        return response.choices[0].message.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.http_client is not None:
            await self.http_client.aclose()
        else:
            await self.client.close()
