# python -m skillcheck.seed
import logging

from . import config, models
from .database import SessionLocal, engine
from .services import skill_service


def main():
    logging.basicConfig(level=config.LOG_LEVEL)
    models.Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = skill_service.seed_default_skills(db)
    finally:
        db.close()
    print(f"Seeded {added} skills.")


if __name__ == "__main__":
    main()
