# backend/skillcheck/routes/session_routes.py
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from .. import models, schemas, utils
from ..auth import get_current_user
from ..database import get_db
from ..errors import SkillcheckError
from ..services import session_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("")
def create_session(
    payload: schemas.SessionCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        # owner always comes from the token, never from the body
        session = session_service.create_session(
            db,
            user_id=current_user.id,
            skill_name=payload.skill_name,
            mode=payload.mode,
            input_type=payload.input_type,
            difficulty=payload.difficulty,
        )
        return utils.success_response({"session": utils.dump(schemas.SessionOut, session)}, "Session created successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[create_session] unexpected error")
        return utils.catch_response(e, "Failed to create session")


@router.get("/{session_id}")
def get_session(session_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        session = session_service.get_session(db, session_id, user_id=current_user.id)
        return utils.success_response({"session": utils.dump(schemas.SessionOut, session)}, "Session retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_session] unexpected error")
        return utils.catch_response(e, "Failed to retrieve session")


@router.post("/{session_id}/answer")
def submit_answer(
    session_id: int,
    payload: schemas.AnswerSubmit,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        answer = session_service.submit_answer(
            db,
            session_id,
            raw_text=payload.raw_text,
            transcript=payload.transcript,
            duration=payload.duration,
            voice_metrics=payload.voice_metrics.model_dump() if payload.voice_metrics else None,
            user_id=current_user.id,
        )
        return utils.success_response({"answer": utils.dump(schemas.AnswerOut, answer)}, "Answer submitted successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[submit_answer] unexpected error")
        return utils.catch_response(e, "Failed to submit answer")


@router.post("/{session_id}/evaluate")
def evaluate_session(
    session_id: int,
    payload: Optional[schemas.EvaluateIn] = Body(default=None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        answer_id = payload.answer_id if payload else None
        evaluation = session_service.evaluate_session(db, session_id, answer_id=answer_id, user_id=current_user.id)
        return utils.success_response({"evaluation": utils.dump(schemas.JudgementOut, evaluation)}, "Session evaluated successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[evaluate_session] unexpected error")
        return utils.catch_response(e, "Failed to evaluate session")


@router.get("/{session_id}/summary")
def get_session_summary(session_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        summary = session_service.get_session_summary(db, session_id, user_id=current_user.id)
        return utils.success_response({"summary": summary}, "Session summary retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_session_summary] unexpected error")
        return utils.catch_response(e, "Failed to retrieve session summary")


@router.get("/{session_id}/evaluation")
def get_session_evaluation(session_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        evaluation = session_service.get_session_evaluation(db, session_id, user_id=current_user.id)
        return utils.success_response({"evaluation": utils.dump(schemas.JudgementOut, evaluation)}, "Evaluation retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_session_evaluation] unexpected error")
        return utils.catch_response(e, "Failed to retrieve evaluation")
