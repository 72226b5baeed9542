"""
Photo Scoping Service - Vision Model Repair Assessment

When a contractor or homeowner texts a photo, the image URL is sent to an
OpenAI vision model that returns a short repair assessment for the SMS
reply.

Degradation:
    - No API key configured: static "needs professional assessment" reply
    - API key configured but the call fails or times out: same static
      reply; the error is logged, never shown to the sender

Usage:
    from openai import AsyncOpenAI

    scoper = PhotoScoper(openai_client=AsyncOpenAI())
    reply = await scoper.reply_for("https://api.twilio.com/.../Media/ME123")
"""

import asyncio
import logging
from typing import Any, Optional

from smsjobs.config import Settings, get_settings
from smsjobs.services.degradation import (
    Degradable,
    DegradationReason,
    log_degradation,
    reason_for,
)

logger = logging.getLogger(__name__)

QUOTE_OFFER = "Reply YES to get quotes from 3 contractors near you."
PHOTO_FALLBACK = f"📸 Photo received! Looks like it needs professional assessment. {QUOTE_OFFER}"
EMPTY_ANALYSIS = "Unable to analyze photo"

PHOTO_SCOPE_PROMPT = """You are an expert home repair estimator. Analyze the photo and provide:
1. Issue identification (what the problem appears to be)
2. Urgency (immediate/48hrs/week/when convenient)
3. Rough scope (estimated hours and trade needed)
4. Confidence level (high/medium/low)

Keep response under 300 characters for SMS. Be direct and helpful."""


class PhotoScoper:
    """
    Vision-model wrapper for photo messages.

    Attributes:
        client: Async OpenAI client, or None when no API key is configured
        model: Vision-capable chat model
        max_tokens: Completion budget, sized for an SMS reply
        timeout: Seconds before the call is abandoned
    """

    def __init__(
        self,
        openai_client: Optional[Any],
        model: str = "gpt-4o",
        max_tokens: int = 150,
        timeout: float = 5.0,
    ):
        self.client = openai_client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def assess(self, photo_url: str) -> Degradable[str]:
        """
        Ask the vision model for a repair assessment of the photo.

        Returns:
            Degradable with the assessment text, or the static fallback
            reply and the reason it was used.
        """
        if self.client is None:
            return Degradable.fallback(PHOTO_FALLBACK, DegradationReason.NOT_CONFIGURED)

        try:
            content = await asyncio.wait_for(self._call_model(photo_url), timeout=self.timeout)
        except Exception as e:
            return Degradable.fallback(PHOTO_FALLBACK, reason_for(e), str(e))

        return Degradable.ok(content or EMPTY_ANALYSIS)

    async def reply_for(self, photo_url: str) -> str:
        result = await self.assess(photo_url)
        if result.degraded:
            log_degradation("vision_model", result)
            return result.value
        return f"📸 {result.value}\n\n{QUOTE_OFFER}"

    async def _call_model(self, photo_url: str) -> Optional[str]:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": PHOTO_SCOPE_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "Analyze this home repair photo:"},
                        {"type": "image_url", "image_url": {"url": photo_url}},
                    ],
                },
            ],
            max_tokens=self.max_tokens,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


def build_photo_scoper(settings: Optional[Settings] = None) -> PhotoScoper:
    settings = settings or get_settings()
    client = None
    if settings.has_vision_model:
        from openai import AsyncOpenAI

        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.upstream_timeout_seconds,
            max_retries=0,
        )
    return PhotoScoper(
        openai_client=client,
        model=settings.vision_model,
        max_tokens=settings.vision_max_tokens,
        timeout=settings.upstream_timeout_seconds,
    )
