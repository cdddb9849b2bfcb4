# backend/skillcheck/services/user_service.py
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .. import auth, crud, models
from ..errors import AuthError, ConflictError
from . import analytics_service

logger = logging.getLogger(__name__)


def create_user(db: Session, email: str, password: str, name: Optional[str] = None, role: Optional[str] = None):
    if crud.get_user_by_email(db, email):
        raise ConflictError("User with this email already exists")
    user = models.User(
        email=email,
        name=name,
        password=auth.hash_password(password),
        role=role or "student",
    )
    created = crud.save(db, user)
    logger.info("[create_user] user=%s registered", created.id)
    return created


def _issue_tokens(user: models.User) -> Dict[str, str]:
    return {
        "token": auth.create_access_token({"user_id": user.id}),
        "refresh_token": auth.create_refresh_token({"user_id": user.id}),
        "token_type": "bearer",
    }


def login(db: Session, email: str, password: str):
    user = crud.get_user_by_email(db, email)
    if not user or not auth.verify_password(password, user.password):
        raise AuthError("Invalid email or password")
    logger.info("[login] user=%s logged in", user.id)
    return user, _issue_tokens(user)


def refresh(db: Session, refresh_token: str):
    user_id = auth.decode_token(refresh_token, auth.REFRESH)
    user = crud.get_user(db, user_id)
    if not user:
        raise AuthError("Invalid or expired token.")
    return user, _issue_tokens(user)


def update_user(db: Session, user: models.User, name: Optional[str] = None, role: Optional[str] = None):
    return crud.update_user(db, user, {"name": name, "role": role})


def delete_user(db: Session, user: models.User):
    logger.info("[delete_user] user=%s deleting account", user.id)
    crud.delete_user(db, user)


def get_user_overview(db: Session, user_id: int) -> List[Dict]:
    """Average scores and missing concepts per skill over evaluated sessions."""
    stats: Dict[str, Dict] = {}
    for session, judgement in analytics_service.evaluated_sessions(db, user_id):
        s = stats.setdefault(session.skill_name, {
            "clarity": [], "correctness": [], "depth": [], "delivery": [], "concepts": [],
        })
        for field in ("clarity", "correctness", "depth", "delivery"):
            s[field].append(getattr(judgement, field) or 0)
        for concept in judgement.missing_concepts:
            if concept not in s["concepts"]:
                s["concepts"].append(concept)

    def avg(values):
        return sum(values) / len(values) if values else 0

    return [
        {
            "skill": skill,
            "average_clarity": avg(s["clarity"]),
            "average_correctness": avg(s["correctness"]),
            "average_depth": avg(s["depth"]),
            "average_delivery": avg(s["delivery"]),
            "total_missing_concepts": s["concepts"],
            "session_count": len(s["clarity"]),
        }
        for skill, s in stats.items()
    ]


def _activity_status(answer, judgement) -> str:
    if answer is None:
        return "not_answered"
    if judgement is None or judgement.status == models.STATUS_PENDING:
        return "pending"
    if judgement.status == models.STATUS_FAILED:
        return "failed"
    return "evaluated"


def get_user_activity(db: Session, user_id: int) -> List[Dict]:
    activity = []
    for session in crud.list_user_sessions(db, user_id, newest_first=True):
        answers = crud.list_session_answers(db, session.id)
        latest = answers[0] if answers else None
        judgement = None
        if latest is not None:
            judgement = crud.get_judgement_for_answer(db, latest.id)
            if judgement is None and len(answers) == 1:
                judgement = crud.get_legacy_judgement(db, session.id)
        status = _activity_status(latest, judgement)
        activity.append({
            "id": session.id,
            "skill": session.skill_name,
            "mode": session.mode,
            "input_type": session.input_type,
            "difficulty": session.difficulty,
            "created_at": session.created_at,
            "attempts": len(answers),
            "status": status,
            "evaluated": status == "evaluated",
            "score": judgement.base_score if status == "evaluated" else None,
        })
    return activity
