import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas, utils
from ..auth import get_current_user
from ..database import get_db
from ..errors import SkillcheckError
from ..services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _user_payload(user: models.User) -> dict:
    return utils.dump(schemas.UserOut, user)


@router.post("")
def create_user(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    try:
        user = user_service.create_user(db, payload.email, payload.password, payload.name, payload.role)
        return utils.success_response({"user": _user_payload(user)}, "User created successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[create_user] unexpected error")
        return utils.catch_response(e, "Failed to create user")


@router.post("/login")
def login(payload: schemas.LoginIn, db: Session = Depends(get_db)):
    try:
        user, tokens = user_service.login(db, payload.email, payload.password)
        return utils.success_response({"user": _user_payload(user), **tokens}, "Login successful")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[login] unexpected error")
        return utils.catch_response(e, "Login failed")


@router.post("/token/refresh")
def refresh_token(payload: schemas.TokenRefreshIn, db: Session = Depends(get_db)):
    try:
        user, tokens = user_service.refresh(db, payload.refresh_token)
        return utils.success_response({"user": _user_payload(user), **tokens}, "Token refreshed successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[refresh_token] unexpected error")
        return utils.catch_response(e, "Token refresh failed")


# -------- ROUTES (authenticated) --------

@router.get("/me")
def read_me(current_user: models.User = Depends(get_current_user)):
    return utils.success_response({"user": _user_payload(current_user)}, "User retrieved successfully")


@router.patch("/me")
def update_me(
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    try:
        updated = user_service.update_user(db, current_user, payload.name, payload.role)
        return utils.success_response({"user": _user_payload(updated)}, "User updated successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[update_me] unexpected error")
        return utils.catch_response(e, "Failed to update user")


@router.delete("/me")
def delete_me(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        user_service.delete_user(db, current_user)
        return utils.success_response({}, "User deleted successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[delete_me] unexpected error")
        return utils.catch_response(e, "Failed to delete user")


@router.get("/me/overview")
def get_overview(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        overview = user_service.get_user_overview(db, current_user.id)
        return utils.success_response({"overview": overview}, "User overview retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_overview] unexpected error")
        return utils.catch_response(e, "Failed to retrieve user overview")


@router.get("/me/activity")
def get_activity(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    try:
        activity = user_service.get_user_activity(db, current_user.id)
        return utils.success_response({"activity": activity}, "User activity retrieved successfully")
    except SkillcheckError:
        raise
    except Exception as e:
        logger.exception("[get_activity] unexpected error")
        return utils.catch_response(e, "Failed to retrieve user activity")
