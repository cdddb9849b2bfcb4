# backend/skillcheck/services/analytics_service.py
from collections import Counter
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from .. import crud, models

TREND_MIN_SCORES = 4
TREND_THRESHOLD = 0.5


def _round1(x: float) -> float:
    return round(x * 10) / 10


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0


def session_judgement(db: Session, session: models.SkillCheckSession) -> Optional[models.Judgement]:
    """Most recent successful judgement of a session, if any."""
    for judgement in crud.list_session_judgements(db, session.id):
        if judgement.status == models.STATUS_SUCCEEDED:
            return judgement
    return None


def evaluated_sessions(db: Session, user_id: int, newest_first: bool = False) -> List[Tuple[models.SkillCheckSession, models.Judgement]]:
    pairs = []
    for session in crud.list_user_sessions(db, user_id, newest_first=newest_first):
        judgement = session_judgement(db, session)
        if judgement is not None:
            pairs.append((session, judgement))
    return pairs


def trend(scores: List[float]) -> str:
    """Compare the earlier half of chronologically ordered scores with the later half."""
    if len(scores) < TREND_MIN_SCORES:
        return "stable"
    mid = len(scores) // 2
    earlier, later = _average(scores[:mid]), _average(scores[mid:])
    if later > earlier + TREND_THRESHOLD:
        return "improving"
    if later < earlier - TREND_THRESHOLD:
        return "declining"
    return "stable"


def get_user_progress(db: Session, user_id: int) -> List[Dict]:
    by_skill: Dict[str, List[Tuple[models.SkillCheckSession, models.Judgement]]] = {}
    for session, judgement in evaluated_sessions(db, user_id):
        by_skill.setdefault(session.skill_name, []).append((session, judgement))

    progress = []
    for skill, pairs in by_skill.items():
        scores = [j.base_score for _, j in pairs]
        progress.append({
            "skill": skill,
            "sessions": len(pairs),
            "average_score": _round1(_average(scores)),
            "trend": trend(scores),
            "last_evaluated": pairs[-1][1].updated_at or pairs[-1][1].created_at,
        })
    return progress


def get_user_skill_gaps(db: Session, user_id: int) -> List[Dict]:
    categories = crud.skill_categories(db)
    gaps: Dict[str, Dict] = {}
    for session, judgement in evaluated_sessions(db, user_id):
        gap = gaps.setdefault(session.skill_name, {"concepts": Counter(), "scores": []})
        gap["scores"].append(judgement.base_score)
        gap["concepts"].update(judgement.missing_concepts)

    skill_gaps = [
        {
            "skill": skill,
            "category": categories.get(skill, "unknown"),
            "missing_concepts": [c for c, _ in data["concepts"].most_common()],
            "frequency": len(data["scores"]),
            "average_score": _round1(_average(data["scores"])),
        }
        for skill, data in gaps.items()
    ]
    # biggest gaps first
    skill_gaps.sort(key=lambda g: g["average_score"])
    return skill_gaps


def get_user_readiness_score(db: Session, user_id: int) -> Dict:
    categories = crud.skill_categories(db)
    by_category: Dict[str, Dict[str, List[float]]] = {}
    for session, judgement in evaluated_sessions(db, user_id):
        category = categories.get(session.skill_name, "unknown")
        by_category.setdefault(category, {}).setdefault(session.skill_name, []).append(judgement.base_score)

    result = []
    skill_averages = []
    for category, skills in by_category.items():
        entries = []
        for skill, scores in skills.items():
            avg = _average(scores)
            skill_averages.append(avg)
            entries.append({"skill": skill, "score": _round1(avg)})
        result.append({
            "category": category,
            "score": _round1(_average([e["score"] for e in entries])),
            "skills": entries,
        })

    return {"overall": _round1(_average(skill_averages)), "by_category": result}
