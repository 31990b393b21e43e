import logging
from typing import Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.core.config import settings
from app.core.exceptions import AIError, AIKillSwitchError

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=8),
    retry=retry_if_exception_type(requests.exceptions.RequestException),
    reraise=True,
)
def _post(payload: dict, headers: dict) -> requests.Response:
    response = requests.post(OPENROUTER_URL, json=payload, headers=headers, timeout=settings.ai.timeout_seconds)
    response.raise_for_status()
    return response


def call_openrouter(messages: List[Dict[str, str]], temperature: Optional[float] = None) -> str:
    """
    Call OpenRouter API with the specified messages.

    Args:
        messages: List of message dictionaries with 'role' and 'content'
        temperature: Temperature for the model (defaults to settings.ai.temperature)

    Returns:
        str: The AI response content

    Raises:
        AIKillSwitchError: If AI calls are disabled.
        AIError: If the key is missing or the call fails after retries.
    """
    if settings.ai.kill_switch:
        logger.warning("AI Kill-switch is active. Blocking request.")
        raise AIKillSwitchError()

    api_key = settings.ai.openrouter_api_key
    if not api_key:
        raise AIError("OPENROUTER_API_KEY is not configured. Set it in the environment.")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    payload = {
        "model": settings.ai.model_name,
        "messages": messages,
        "temperature": settings.ai.temperature if temperature is None else temperature,
    }

    logger.info(f"Calling AI Model: {settings.ai.model_name}")
    try:
        response = _post(payload, headers)
        return response.json()["choices"][0]["message"]["content"]
    except requests.exceptions.Timeout:
        logger.error("AI service timeout.")
        raise AIError("AI service reached timeout limit.")
    except requests.exceptions.HTTPError as e:
        logger.error(f"AI service HTTP error: {e}")
        status_code = e.response.status_code if e.response is not None else None
        raise AIError(f"AI service returned error: {status_code}")
    except requests.exceptions.RequestException as e:
        logger.error(f"AI service request failed: {e}")
        raise AIError(f"AI service error: {e}")
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Malformed AI response: {e}")
        raise AIError("AI service returned an unexpected payload.")
