# order_assistant/ordering/gateway.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import anthropic
import httpx

from ..config import Settings

logger = logging.getLogger(__name__)

# Pinned decoding: most deterministic temperature, nucleus narrowed to the top continuation.
TEMPERATURE = 0
TOP_P = 0.1


class GenerationStatus(str, Enum):
    NOT_CONFIGURED = "not_configured"
    TRANSPORT_ERROR = "transport_error"
    SUCCESS = "success"


@dataclass(frozen=True)
class GenerationOutcome:
    status: GenerationStatus
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is GenerationStatus.SUCCESS


def build_payload(system: str, messages: List[Dict[str, str]], settings: Settings) -> Dict[str, Any]:
    return {
        "model": settings.anthropic_model,
        "max_tokens": settings.generation_max_tokens,
        "temperature": TEMPERATURE,
        "top_p": TOP_P,
        "messages": messages,
        "system": system,
    }


def build_client(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> anthropic.AsyncAnthropic:
    """SDK client for one request. Retries are off: a failed call is reported, not repeated."""
    return anthropic.AsyncAnthropic(
        api_key=settings.anthropic_api_key,
        base_url=settings.anthropic_base_url,
        timeout=settings.generation_timeout_seconds,
        max_retries=0,
        default_headers={"anthropic-version": settings.anthropic_version},
        http_client=http_client,
    )


def _extract_text(message: Any) -> Optional[str]:
    content = getattr(message, "content", None)
    if not isinstance(content, list) or not content:
        return None
    text = getattr(content[0], "text", None)
    return text if isinstance(text, str) and text.strip() else None


async def generate(
    system: str,
    messages: List[Dict[str, str]],
    *,
    settings: Settings,
    client: anthropic.AsyncAnthropic,
    request_id: str = "-",
) -> GenerationOutcome:
    """
    One call to the Messages API. Never raises.

    NOT_CONFIGURED without an API key (nothing is sent), TRANSPORT_ERROR for
    any non-2xx status, network failure, timeout or unusable message,
    SUCCESS with the first content block's text otherwise. No retries.
    """
    if not settings.generation_enabled:
        logger.info("request_id=%s stage=generate outcome=not_configured", request_id)
        return GenerationOutcome(GenerationStatus.NOT_CONFIGURED)

    try:
        message = await client.messages.create(**build_payload(system, messages, settings))
    except anthropic.APITimeoutError as e:
        logger.error("request_id=%s stage=generate outcome=timeout error=%r", request_id, e)
        return GenerationOutcome(GenerationStatus.TRANSPORT_ERROR, error="timeout")
    except anthropic.APIStatusError as e:
        logger.error(
            "request_id=%s stage=generate outcome=http_error status=%d body=%s",
            request_id,
            e.status_code,
            e.response.text[:500],
        )
        return GenerationOutcome(GenerationStatus.TRANSPORT_ERROR, error=f"status {e.status_code}")
    except anthropic.APIConnectionError as e:
        logger.error("request_id=%s stage=generate outcome=network_error error=%r", request_id, e)
        return GenerationOutcome(GenerationStatus.TRANSPORT_ERROR, error=str(e) or type(e).__name__)
    except anthropic.AnthropicError as e:
        logger.error("request_id=%s stage=generate outcome=bad_response error=%s", request_id, e)
        return GenerationOutcome(GenerationStatus.TRANSPORT_ERROR, error="unusable response")

    text = _extract_text(message)
    if text is None:
        logger.error("request_id=%s stage=generate outcome=bad_envelope", request_id)
        return GenerationOutcome(GenerationStatus.TRANSPORT_ERROR, error="invalid response envelope")

    logger.info("request_id=%s stage=generate outcome=ok chars=%d", request_id, len(text))
    logger.debug("request_id=%s stage=generate text=%s", request_id, text)
    return GenerationOutcome(GenerationStatus.SUCCESS, text=text.strip())
