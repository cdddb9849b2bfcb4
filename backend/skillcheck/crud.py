# small helper CRUD functions
from typing import Optional

from sqlalchemy.orm import Session
from . import models

def save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

# -------- users --------
def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email).first()

def get_user(db: Session, user_id: int):
    return db.get(models.User, user_id)

def update_user(db: Session, user: models.User, data: dict):
    for k, v in data.items():
        if hasattr(user, k) and v is not None:
            setattr(user, k, v)
    return save(db, user)

def delete_user(db: Session, user: models.User):
    db.delete(user)
    db.commit()

# -------- skills --------
def list_skills(db: Session):
    return db.query(models.Skill).order_by(models.Skill.name.asc()).all()

def get_skill(db: Session, skill_id: int):
    return db.get(models.Skill, skill_id)

def get_skill_by_name(db: Session, name: str):
    return db.query(models.Skill).filter(models.Skill.name == name).first()

def skill_categories(db: Session) -> dict:
    return {s.name: s.category for s in db.query(models.Skill).all()}

# -------- sessions --------
def get_session(db: Session, session_id: int):
    return db.get(models.SkillCheckSession, session_id)

def list_user_sessions(db: Session, user_id: int, newest_first: bool = True):
    order = (
        (models.SkillCheckSession.created_at.desc(), models.SkillCheckSession.id.desc())
        if newest_first
        else (models.SkillCheckSession.created_at.asc(), models.SkillCheckSession.id.asc())
    )
    return db.query(models.SkillCheckSession).filter(models.SkillCheckSession.user_id == user_id).order_by(*order).all()

# -------- answers --------
def get_answer(db: Session, answer_id: int):
    return db.get(models.UserAnswer, answer_id)

def list_session_answers(db: Session, session_id: int):
    """Newest first."""
    return (
        db.query(models.UserAnswer)
        .filter(models.UserAnswer.session_id == session_id)
        .order_by(models.UserAnswer.created_at.desc(), models.UserAnswer.id.desc())
        .all()
    )

def get_latest_answer(db: Session, session_id: int):
    return (
        db.query(models.UserAnswer)
        .filter(models.UserAnswer.session_id == session_id)
        .order_by(models.UserAnswer.created_at.desc(), models.UserAnswer.id.desc())
        .first()
    )

# -------- voice metrics --------
def get_latest_voice_metrics(db: Session, session_id: int):
    return (
        db.query(models.VoiceMetrics)
        .filter(models.VoiceMetrics.session_id == session_id)
        .order_by(models.VoiceMetrics.created_at.desc(), models.VoiceMetrics.id.desc())
        .first()
    )

# -------- judgements --------
def get_judgement_for_answer(db: Session, answer_id: int) -> Optional[models.Judgement]:
    return db.query(models.Judgement).filter(models.Judgement.answer_id == answer_id).first()

def get_legacy_judgement(db: Session, session_id: int) -> Optional[models.Judgement]:
    """Session-level judgement written before answer ids were recorded."""
    return (
        db.query(models.Judgement)
        .filter(models.Judgement.session_id == session_id, models.Judgement.answer_id.is_(None))
        .first()
    )

def list_session_judgements(db: Session, session_id: int):
    return (
        db.query(models.Judgement)
        .filter(models.Judgement.session_id == session_id)
        .order_by(models.Judgement.created_at.desc(), models.Judgement.id.desc())
        .all()
    )
