# backend/skillcheck/services/llm_service.py
import logging
from typing import Any, Dict, Optional

import requests

from .. import config

logger = logging.getLogger(__name__)

if not config.GEMINI_API_KEY:
    logger.warning("GEMINI_API_KEY not set. LLM calls will fail until set.")

class LLMError(RuntimeError):
    pass

def _build_request(prompt: str):
    """Headers and body for a Gemini ``generateContent`` call.

    The body has the shape ``{"contents": [{"role": "user", "parts": [{"text": prompt}]}]}``
    which is what `_extract_text` expects to find mirrored in the response.
    """
    headers = {
        "Content-Type": "application/json",
        "x-goog-api-key": config.GEMINI_API_KEY or "",
        "User-Agent": "skillcheck-backend/1.0",
    }
    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": 0.0},
    }
    return headers, payload

def _extract_text(response_json: Dict[str, Any]) -> Optional[str]:
    """Pull ``candidates[0].content.parts[0].text`` out of a response, or None."""
    candidates = response_json.get("candidates") or []
    if not candidates:
        return None
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    if not parts:
        return None
    text = parts[0].get("text")
    return text.strip() if isinstance(text, str) else None

def _call_gemini_raw(prompt: str, model: str, timeout: int) -> str:
    if not config.GEMINI_API_KEY:
        raise LLMError("GEMINI_API_KEY not configured in environment")

    url = f"{config.GEMINI_API_BASE}/models/{model}:generateContent"
    headers, payload = _build_request(prompt)

    try:
        r = requests.post(url, headers=headers, json=payload, timeout=timeout)
        if r.status_code >= 400:
            raise LLMError(f"HTTP {r.status_code} from Gemini: {r.text[:1000]}")
        text = _extract_text(r.json())
        if text is None:
            raise LLMError(f"Unexpected Gemini format: {r.text[:500]}")
        return text
    except requests.exceptions.Timeout:
        raise LLMError(f"Timeout ({timeout}s) hitting Gemini")
    except requests.exceptions.ConnectionError as e:
        raise LLMError(f"Connection error reaching Gemini: {e}")
    except LLMError:
        raise
    except Exception as e:
        raise LLMError(f"Error contacting Gemini: {e}")

def generate_with_llm(prompt: str, model: Optional[str] = None, timeout: int = None) -> Dict[str, Any]:
    """
    Standard wrapper for LLM calls.

    - prompt: user prompt (string)
    - model: override model; if None uses GEMINI_MODEL
    - timeout: request timeout in seconds; if None uses LLM_TIMEOUT

    Returns: {"ok": bool, "raw": str, "model": str, "error": str|None}
    """
    chosen_model = model or config.GEMINI_MODEL
    chosen_timeout = timeout or config.LLM_TIMEOUT
    try:
        raw = _call_gemini_raw(prompt, chosen_model, chosen_timeout)
        return {"ok": True, "raw": raw, "model": chosen_model, "error": None}
    except LLMError as e:
        logger.warning("[generate_with_llm] Gemini error: %s", e)
        return {"ok": False, "raw": "", "model": chosen_model, "error": str(e)}
