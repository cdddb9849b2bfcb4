# SQLAlchemy models
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Float, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import json

USER_ROLES = ("student", "engineer")
SKILL_CATEGORIES = ("backend", "frontend", "system", "dsa")
SESSION_MODES = ("explain", "drill", "blind")
INPUT_TYPES = ("voice", "text")
DIFFICULTIES = ("beginner", "intermediate", "advanced")
REACTIONS = ("impressed", "neutral", "confused", "skeptical")

STATUS_PENDING = "pending"
STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
JUDGEMENT_STATUSES = (STATUS_PENDING, STATUS_SUCCEEDED, STATUS_FAILED)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="student")
    password = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sessions = relationship("SkillCheckSession", back_populates="user", cascade="all, delete-orphan")


class Skill(Base):
    __tablename__ = "skills"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class SkillCheckSession(Base):
    __tablename__ = "skill_check_sessions"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    skill_name = Column(String, nullable=False)
    mode = Column(String, nullable=False)
    input_type = Column(String, nullable=False)
    difficulty = Column(String, nullable=False, default="beginner")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="sessions")
    answers = relationship("UserAnswer", back_populates="session", cascade="all, delete-orphan")
    voice_metrics = relationship("VoiceMetrics", back_populates="session", cascade="all, delete-orphan")
    judgements = relationship("Judgement", back_populates="session", cascade="all, delete-orphan")


class UserAnswer(Base):
    __tablename__ = "user_answers"
    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("skill_check_sessions.id"), nullable=False, index=True)
    raw_text = Column(Text, nullable=False)
    transcript = Column(Text, nullable=True)
    duration = Column(Float, nullable=True)  # seconds
    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("SkillCheckSession", back_populates="answers")

    @property
    def text(self) -> str:
        return self.raw_text or self.transcript or ""


class VoiceMetrics(Base):
    __tablename__ = "voice_metrics"
    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("skill_check_sessions.id"), nullable=False, index=True)
    wpm = Column(Float, nullable=True)
    filler_words = Column(Integer, nullable=True)
    long_pauses = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("SkillCheckSession", back_populates="voice_metrics")

    def as_prompt_dict(self):
        return {"wpm": self.wpm, "filler_words": self.filler_words, "long_pauses": self.long_pauses}


class Judgement(Base):
    __tablename__ = "judgements"
    # one judgement per answer; NULL answer_id rows are legacy session-level records
    __table_args__ = (UniqueConstraint("answer_id", name="uq_judgements_answer_id"),)

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("skill_check_sessions.id"), nullable=False, index=True)
    answer_id = Column(Integer, ForeignKey("user_answers.id"), nullable=True)
    status = Column(String, nullable=False, default=STATUS_PENDING)
    clarity = Column(Float, default=0)
    correctness = Column(Float, default=0)
    depth = Column(Float, default=0)
    delivery = Column(Float, default=0)
    missing_concepts_json = Column(Text, nullable=True)
    reaction = Column(String, nullable=True)
    feedback = Column(Text, nullable=True)
    improvement_suggestions_json = Column(Text, nullable=True)
    delivery_feedback = Column(Text, nullable=True)
    model_version = Column(String, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    session = relationship("SkillCheckSession", back_populates="judgements")

    @property
    def missing_concepts(self):
        return json.loads(self.missing_concepts_json or "[]")

    @missing_concepts.setter
    def missing_concepts(self, items):
        self.missing_concepts_json = json.dumps(list(items or []))

    @property
    def improvement_suggestions(self):
        return json.loads(self.improvement_suggestions_json or "[]")

    @improvement_suggestions.setter
    def improvement_suggestions(self, items):
        self.improvement_suggestions_json = json.dumps(list(items or []))

    @property
    def base_score(self) -> float:
        """Mean of clarity, correctness and depth."""
        return ((self.clarity or 0) + (self.correctness or 0) + (self.depth or 0)) / 3

    def apply_result(self, result: dict):
        self.clarity = result["clarity"]
        self.correctness = result["correctness"]
        self.depth = result["depth"]
        self.delivery = result["delivery"]
        self.missing_concepts = result["missing_concepts"]
        self.reaction = result["reaction"]
        self.feedback = result["feedback"]
        self.improvement_suggestions = result["improvement_suggestions"]
        self.delivery_feedback = result["delivery_feedback"]
        self.model_version = result.get("model_version")
        self.status = result.get("status", STATUS_SUCCEEDED)
        self.error = result.get("error")
