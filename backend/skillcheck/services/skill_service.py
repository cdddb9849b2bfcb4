# backend/skillcheck/services/skill_service.py
import logging

from sqlalchemy.orm import Session

from .. import crud, models
from ..errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_SKILLS = [
    ("REST APIs", "backend"),
    ("Databases & Indexing", "backend"),
    ("Redis", "backend"),
    ("Authentication", "backend"),
    ("React", "frontend"),
    ("Browser Rendering", "frontend"),
    ("CSS Layout", "frontend"),
    ("Caching", "system"),
    ("Load Balancing", "system"),
    ("Message Queues", "system"),
    ("Hash Maps", "dsa"),
    ("Graphs", "dsa"),
    ("Dynamic Programming", "dsa"),
]


def list_skills(db: Session):
    return crud.list_skills(db)


def get_skill(db: Session, skill_id: int):
    skill = crud.get_skill(db, skill_id)
    if not skill:
        raise NotFoundError("Skill not found")
    return skill


def create_skill(db: Session, name: str, category: str):
    if crud.get_skill_by_name(db, name):
        raise ConflictError("Skill with this name already exists")
    return crud.save(db, models.Skill(name=name, category=category))


def seed_default_skills(db: Session) -> int:
    """Insert the default catalog, skipping names already present. Returns rows added."""
    existing = {s.name for s in crud.list_skills(db)}
    added = 0
    for name, category in DEFAULT_SKILLS:
        if name in existing:
            continue
        db.add(models.Skill(name=name, category=category))
        added += 1
    db.commit()
    logger.info("[seed_default_skills] added %d skills", added)
    return added
