import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas, utils
from ..auth import get_current_user
from ..database import get_db
from ..errors import SkillcheckError
from ..services import skill_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/skills", tags=["skills"])


@router.get("")
def list_skills(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        skills = [utils.dump(schemas.SkillOut, s) for s in skill_service.list_skills(db)]
        return utils.success_response({"skills": skills}, "Skills retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[list_skills] unexpected error")
        return utils.catch_response(e, "Failed to retrieve skills")


@router.get("/{skill_id}")
def get_skill(skill_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        skill = skill_service.get_skill(db, skill_id)
        return utils.success_response({"skill": utils.dump(schemas.SkillOut, skill)}, "Skill retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_skill] unexpected error")
        return utils.catch_response(e, "Failed to retrieve skill")


@router.post("")
def create_skill(
    payload: schemas.SkillCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        skill = skill_service.create_skill(db, payload.name, payload.category)
        return utils.success_response({"skill": utils.dump(schemas.SkillOut, skill)}, "Skill created successfully", status_code=201)
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[create_skill] unexpected error")
        return utils.catch_response(e, "Failed to create skill")
