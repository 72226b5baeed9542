"""
Typed outcomes for calls to external collaborators.

Every collaborator call (job store, preference store, vision model) returns
a Degradable instead of raising. A result with `reason` set means the value
is a fallback; the caller logs the reason and records it as a metric.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

import httpx
import openai

from smsjobs.middleware.metrics import record_degradation

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DegradationReason(str, Enum):
    NOT_CONFIGURED = "not_configured"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    BAD_PAYLOAD = "bad_payload"
    UPSTREAM_ERROR = "upstream_error"


@dataclass
class Degradable(Generic[T]):
    value: T
    reason: Optional[DegradationReason] = None
    detail: str = ""

    @property
    def degraded(self) -> bool:
        return self.reason is not None

    @classmethod
    def ok(cls, value: T) -> "Degradable[T]":
        return cls(value=value)

    @classmethod
    def fallback(
        cls,
        value: T,
        reason: DegradationReason,
        detail: str = "",
    ) -> "Degradable[T]":
        return cls(value=value, reason=reason, detail=detail)


def reason_for(exc: BaseException) -> DegradationReason:
    """Map an exception raised by an upstream call to a degradation reason."""
    timeouts = (
        httpx.TimeoutException,
        openai.APITimeoutError,
        asyncio.TimeoutError,
        TimeoutError,
    )
    if isinstance(exc, timeouts):
        return DegradationReason.TIMEOUT
    if isinstance(exc, (httpx.HTTPStatusError, openai.APIStatusError)):
        return DegradationReason.HTTP_ERROR
    if isinstance(exc, (httpx.TransportError, openai.APIConnectionError)):
        return DegradationReason.NETWORK_ERROR
    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return DegradationReason.BAD_PAYLOAD
    return DegradationReason.UPSTREAM_ERROR


def log_degradation(collaborator: str, result: Degradable) -> None:
    """Log and count a degraded result. No-op for healthy results."""
    if not result.degraded:
        return
    record_degradation(collaborator, result.reason.value)
    if result.reason is DegradationReason.NOT_CONFIGURED:
        logger.info(f"{collaborator} not configured, using fallback")
    else:
        logger.warning(
            f"{collaborator} degraded ({result.reason.value}): {result.detail}"
        )
