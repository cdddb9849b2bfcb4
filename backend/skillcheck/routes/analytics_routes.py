import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, utils
from ..auth import get_current_user
from ..database import get_db
from ..errors import SkillcheckError
from ..services import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/progress")
def get_progress(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        progress = analytics_service.get_user_progress(db, current_user.id)
        return utils.success_response({"progress": progress}, "Progress retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_progress] unexpected error")
        return utils.catch_response(e, "Failed to retrieve progress")


@router.get("/skill-gaps")
def get_skill_gaps(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        gaps = analytics_service.get_user_skill_gaps(db, current_user.id)
        return utils.success_response({"skill_gaps": gaps}, "Skill gaps retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_skill_gaps] unexpected error")
        return utils.catch_response(e, "Failed to retrieve skill gaps")


@router.get("/readiness-score")
def get_readiness_score(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        readiness = analytics_service.get_user_readiness_score(db, current_user.id)
        return utils.success_response({"readiness_score": readiness}, "Readiness score retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_readiness_score] unexpected error")
        return utils.catch_response(e, "Failed to retrieve readiness score")
