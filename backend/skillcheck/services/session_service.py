# backend/skillcheck/services/session_service.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import config, crud, models, schemas, utils
from ..errors import NotFoundError, ValidationError
from ..llm import llm_engine

logger = logging.getLogger(__name__)


def _check_choice(field: str, value: str, allowed) -> None:
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}")


def create_session(db: Session, user_id: int, skill_name: str, mode: str, input_type: str, difficulty: str = "beginner"):
    if not skill_name or not skill_name.strip():
        raise ValidationError("skill_name is required")
    _check_choice("mode", mode, models.SESSION_MODES)
    _check_choice("input_type", input_type, models.INPUT_TYPES)
    _check_choice("difficulty", difficulty, models.DIFFICULTIES)

    session = models.SkillCheckSession(
        user_id=user_id,
        skill_name=skill_name,
        mode=mode,
        input_type=input_type,
        difficulty=difficulty,
    )
    created = crud.save(db, session)
    logger.info("[create_session] user=%s session=%s skill=%s", user_id, created.id, skill_name)
    return created


def get_session(db: Session, session_id: int, user_id: Optional[int] = None):
    session = crud.get_session(db, session_id)
    if not session or (user_id is not None and session.user_id != user_id):
        raise NotFoundError("Session not found")
    return session


def submit_answer(
    db: Session,
    session_id: int,
    raw_text: str,
    transcript: Optional[str] = None,
    duration: Optional[float] = None,
    voice_metrics: Optional[Dict[str, Any]] = None,
    user_id: Optional[int] = None,
):
    """Store one take; voice metrics are only kept for voice sessions."""
    session = get_session(db, session_id, user_id)

    answer = models.UserAnswer(session_id=session.id, raw_text=raw_text, transcript=transcript, duration=duration)
    db.add(answer)

    # {} or all-null metrics carry nothing and must not shadow an earlier row
    if voice_metrics and not any(v is not None for v in voice_metrics.values()):
        voice_metrics = None

    if voice_metrics and session.input_type == "voice":
        db.add(models.VoiceMetrics(
            session_id=session.id,
            wpm=voice_metrics.get("wpm"),
            filler_words=voice_metrics.get("filler_words"),
            long_pauses=voice_metrics.get("long_pauses"),
        ))
    elif voice_metrics:
        logger.info("[submit_answer] session=%s is %s input; ignoring voice metrics", session.id, session.input_type)

    db.commit()
    db.refresh(answer)
    logger.info("[submit_answer] session=%s answer=%s", session.id, answer.id)
    return answer


def _resolve_answer(db: Session, session: models.SkillCheckSession, answer_id: Optional[int]):
    if answer_id is not None:
        answer = crud.get_answer(db, answer_id)
        if not answer or answer.session_id != session.id:
            raise NotFoundError("Answer not found")
        return answer
    answer = crud.get_latest_answer(db, session.id)
    if not answer:
        raise NotFoundError("No answer found for this session")
    return answer


def _claim_judgement(db: Session, session_id: int, answer_id: int):
    """
    Insert a pending judgement for the answer, first writer wins.

    Returns (judgement, claimed). ``claimed`` is False when another request
    already owns the row.
    """
    pending = models.Judgement(session_id=session_id, answer_id=answer_id, status=models.STATUS_PENDING)
    db.add(pending)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = crud.get_judgement_for_answer(db, answer_id)
        if existing is None:
            raise
        logger.info("[evaluate_session] answer=%s already claimed by judgement=%s", answer_id, existing.id)
        return existing, False
    db.refresh(pending)
    return pending, True


def _reclaim_failed(db: Session, judgement: models.Judgement) -> bool:
    """Flip a failed judgement back to pending; False if another request got it first."""
    updated = (
        db.query(models.Judgement)
        .filter(models.Judgement.id == judgement.id, models.Judgement.status == models.STATUS_FAILED)
        .update({"status": models.STATUS_PENDING}, synchronize_session=False)
    )
    db.commit()
    db.refresh(judgement)
    return updated == 1


def evaluate_session(db: Session, session_id: int, answer_id: Optional[int] = None, user_id: Optional[int] = None):
    session = get_session(db, session_id, user_id)
    answer = _resolve_answer(db, session, answer_id)

    judgement = crud.get_judgement_for_answer(db, answer.id)
    if judgement is not None and judgement.status != models.STATUS_FAILED:
        logger.info("[evaluate_session] answer=%s already has judgement=%s (%s)", answer.id, judgement.id, judgement.status)
        return judgement

    if judgement is None:
        judgement, claimed = _claim_judgement(db, session.id, answer.id)
        if not claimed:
            return judgement
    elif not _reclaim_failed(db, judgement):
        return judgement
    else:
        logger.info("[evaluate_session] retrying failed judgement=%s for answer=%s", judgement.id, answer.id)

    judgement_id = judgement.id
    try:
        metrics = crud.get_latest_voice_metrics(db, session.id)
        result = llm_engine.evaluate_answer(
            answer.text,
            session.skill_name,
            metrics.as_prompt_dict() if metrics else None,
        )
        judgement.apply_result(result)
        saved = crud.save(db, judgement)
    except Exception as e:
        # a claimed row must not stay pending, or the answer can never be retried
        db.rollback()
        logger.exception("[evaluate_session] judgement=%s could not be stored; marking failed", judgement_id)
        return _mark_failed(db, judgement_id, str(e) or e.__class__.__name__)
    logger.info("[evaluate_session] session=%s answer=%s judgement=%s status=%s", session.id, answer.id, saved.id, saved.status)
    return saved


def _mark_failed(db: Session, judgement_id: int, error: str):
    judgement = db.get(models.Judgement, judgement_id)
    judgement.apply_result(llm_engine.failed_result(error, model=config.GEMINI_MODEL))
    return crud.save(db, judgement)


def get_session_summary(db: Session, session_id: int, user_id: Optional[int] = None) -> Dict[str, Any]:
    session = get_session(db, session_id, user_id)
    answers = crud.list_session_answers(db, session.id)

    legacy = None
    if len(answers) == 1:
        legacy = crud.get_legacy_judgement(db, session.id)

    attempts = []
    for answer in answers:
        judgement = crud.get_judgement_for_answer(db, answer.id) or legacy
        attempts.append({
            "answer": utils.dump(schemas.AnswerOut, answer),
            "evaluation": utils.dump(schemas.JudgementOut, judgement) if judgement else None,
        })

    metrics = crud.get_latest_voice_metrics(db, session.id)
    return {
        "session": utils.dump(schemas.SessionOut, session),
        "attempts": attempts,
        "voice_metrics": utils.dump(schemas.VoiceMetricsOut, metrics) if metrics else None,
    }


def get_session_evaluation(db: Session, session_id: int, user_id: Optional[int] = None):
    """Judgement of the most recently evaluated answer."""
    session = get_session(db, session_id, user_id)
    judgements = crud.list_session_judgements(db, session.id)
    if not judgements:
        raise NotFoundError("Evaluation not found")
    return judgements[0]
