# backend/skillcheck/llm/llm_engine.py

import json
import logging
import math
from typing import Any, Dict, Optional

from .. import config, models
from ..services import llm_service
from .prompt_builder import build_evaluation_prompt
from .scoring_schema import (
    SCORE_FIELDS,
    REACTIONS,
    DEFAULT_REACTION,
    MAX_SCORE,
    DEFAULT_FEEDBACK,
    DEFAULT_DELIVERY_FEEDBACK,
    FAILED_CONCEPT,
    FAILED_FEEDBACK,
    FAILED_SUGGESTIONS,
    FAILED_DELIVERY_FEEDBACK,
)

logger = logging.getLogger(__name__)


def clamp(value: Any) -> float:
    """Coerce a model-supplied score into [0, MAX_SCORE]; anything non-numeric is 0."""
    if value is None:
        return 0
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(n):
        return 0
    return min(MAX_SCORE, max(0, n))


def parse_model_output(text: Optional[str]) -> Dict[str, Any]:
    if not text:
        return {}
    try:
        parsed = json.loads(text)
    except ValueError:
        first = text.find("{")
        last = text.rfind("}")
        if first == -1 or last <= first:
            logger.warning("[parse_model_output] no JSON object in model output: %s", text[:200])
            return {}
        try:
            parsed = json.loads(text[first:last + 1])
        except ValueError:
            logger.warning("[parse_model_output] failed to parse extracted JSON: %s", text[first:first + 200])
            return {}
    return parsed if isinstance(parsed, dict) else {}


def _pick(data: Dict[str, Any], camel: str, snake: str):
    return data[camel] if camel in data else data.get(snake)


def _string_list(value) -> list:
    if not isinstance(value, list):
        return []
    return [v if isinstance(v, str) else json.dumps(v) for v in value]


def _text(value, default: str) -> str:
    return value if isinstance(value, str) and value.strip() else default


def normalize_evaluation(data: Dict[str, Any]) -> Dict[str, Any]:
    result = {field: clamp(data.get(field)) for field in SCORE_FIELDS}
    reaction = data.get("reaction")
    result["reaction"] = reaction if isinstance(reaction, str) and reaction in REACTIONS else DEFAULT_REACTION
    result["missing_concepts"] = _string_list(_pick(data, "missingConcepts", "missing_concepts"))
    result["improvement_suggestions"] = _string_list(_pick(data, "improvementSuggestions", "improvement_suggestions"))
    result["feedback"] = _text(data.get("feedback"), DEFAULT_FEEDBACK)
    result["delivery_feedback"] = _text(_pick(data, "deliveryFeedback", "delivery_feedback"), DEFAULT_DELIVERY_FEEDBACK)
    return result


def failed_result(error: str, model: Optional[str] = None) -> Dict[str, Any]:
    result = {field: 0 for field in SCORE_FIELDS}
    result.update({
        "missing_concepts": [FAILED_CONCEPT],
        "reaction": DEFAULT_REACTION,
        "feedback": FAILED_FEEDBACK,
        "improvement_suggestions": list(FAILED_SUGGESTIONS),
        "delivery_feedback": FAILED_DELIVERY_FEEDBACK,
        "status": models.STATUS_FAILED,
        "error": error,
        "model_version": model,
    })
    return result


def evaluate_answer(answer_text: str, skill_name: str, voice_metrics: Optional[Dict] = None) -> Dict[str, Any]:
    """
    Score one answer with the LLM.

    Never raises: a provider/transport failure comes back as an all-zero
    result with ``status == "failed"``; unparseable output is scored with
    defaults and ``status == "succeeded"``.
    """
    try:
        prompt = build_evaluation_prompt(answer_text, skill_name or "Unknown Skill", voice_metrics)
        resp = llm_service.generate_with_llm(prompt)
        if not resp.get("ok"):
            raise llm_service.LLMError(resp.get("error") or "LLM call failed")
        result = normalize_evaluation(parse_model_output(resp.get("raw")))
        result.update({"status": models.STATUS_SUCCEEDED, "error": None, "model_version": resp.get("model")})
        logger.info(
            "[evaluate_answer] skill=%s clarity=%s correctness=%s depth=%s delivery=%s",
            skill_name, result["clarity"], result["correctness"], result["depth"], result["delivery"],
        )
        return result
    except Exception as e:
        logger.warning("[evaluate_answer] evaluation failed for skill=%s: %s", skill_name, e)
        return failed_result(str(e), model=config.GEMINI_MODEL)
