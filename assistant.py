"""
AI study assistant: forwards a question to an OpenAI-compatible chat
completion endpoint. Without AI_API_KEY the proxy runs unconfigured and
answers with a labelled simulated response.
"""

from typing import Optional

import httpx

from config import settings
from exceptions import ValidationError, UpstreamError
from logging_config import logger

NO_CONTENT_ANSWER = "No response content from AI."


def is_configured() -> bool:
    return bool(settings.AI_API_KEY)


def build_client() -> httpx.Client:
    timeout = float(settings.AI_REQUEST_TIMEOUT)
    return httpx.Client(timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)))


def simulated_answer(query: str) -> str:
    return (
        "AI Config Missing: Please set AI_API_KEY in the server environment. "
        f"(Simulated Response: The backend received your query '{query}')"
    )


def ask(query: Optional[str]) -> str:
    if not query or not query.strip():
        raise ValidationError("Query is required", field="query")

    if not is_configured():
        logger.warning("[AI] AI_API_KEY not set, returning simulated answer")
        return simulated_answer(query)

    logger.info(f"[AI] Querying {settings.AI_API_ENDPOINT} with model {settings.AI_MODEL}")
    payload = {
        "model": settings.AI_MODEL,
        "messages": [{"role": "user", "content": query}],
        "temperature": settings.AI_TEMPERATURE,
        "max_tokens": settings.AI_MAX_TOKENS,
    }
    headers = {"Authorization": f"Bearer {settings.AI_API_KEY}"}

    try:
        with build_client() as client:
            response = client.post(settings.AI_API_ENDPOINT, json=payload, headers=headers)
    except httpx.TimeoutException:
        logger.error(f"[AI] Upstream timed out after {settings.AI_REQUEST_TIMEOUT}s")
        raise UpstreamError("AI service timed out")
    except httpx.HTTPError as e:
        logger.error(f"[AI] Upstream request failed: {type(e).__name__}: {e}")
        raise UpstreamError("AI service unreachable")

    if response.is_error:
        logger.error(f"[AI] Upstream error ({response.status_code}): {response.text[:500]}")
        raise UpstreamError(
            f"AI Service Error ({response.status_code}): {response.text[:100]}",
            upstream_status=response.status_code,
        )

    try:
        data = response.json()
    except ValueError:
        raise UpstreamError("AI service returned an invalid response")

    if not isinstance(data, dict):
        raise UpstreamError("AI service returned an invalid response")

    choices = data.get("choices") or []
    if not isinstance(choices, list):
        raise UpstreamError("AI service returned an invalid response")
    if not choices:
        return NO_CONTENT_ANSWER

    first = choices[0]
    message = (first.get("message") or {}) if isinstance(first, dict) else None
    if not isinstance(message, dict):
        logger.error(f"[AI] Malformed completion choice: {str(first)[:200]}")
        raise UpstreamError("AI service returned an invalid response")
    return message.get("content") or NO_CONTENT_ANSWER
