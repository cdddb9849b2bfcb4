# app/schemas.py
from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import List, Optional, Literal

Role = Literal["student", "engineer"]
Category = Literal["backend", "frontend", "system", "dsa"]
Mode = Literal["explain", "drill", "blind"]
InputType = Literal["voice", "text"]
Difficulty = Literal["beginner", "intermediate", "advanced"]

# -------- requests --------

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[str] = None
    role: Optional[Role] = None

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class TokenRefreshIn(BaseModel):
    refresh_token: str = Field(min_length=1)

class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[Role] = None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.role is None:
            raise ValueError("At least one field must be provided for update")
        return self

class SkillCreate(BaseModel):
    name: str = Field(min_length=1)
    category: Category

class SessionCreate(BaseModel):
    skill_name: str = Field(min_length=1)
    mode: Mode
    input_type: InputType
    difficulty: Difficulty = "beginner"

class VoiceMetricsIn(BaseModel):
    wpm: Optional[float] = Field(default=None, ge=0)
    filler_words: Optional[int] = Field(default=None, ge=0)
    long_pauses: Optional[int] = Field(default=None, ge=0)

class AnswerSubmit(BaseModel):
    raw_text: str = Field(min_length=1)
    transcript: Optional[str] = None
    duration: Optional[float] = Field(default=None, ge=0)
    voice_metrics: Optional[VoiceMetricsIn] = None

class EvaluateIn(BaseModel):
    # older web clients send camelCase
    answer_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("answer_id", "answerId"))

# -------- responses --------

class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

class UserOut(ORMModel):
    id: int
    email: EmailStr
    name: Optional[str]
    role: str
    created_at: Optional[datetime]

class SkillOut(ORMModel):
    id: int
    name: str
    category: str

class SessionOut(ORMModel):
    id: int
    user_id: int
    skill_name: str
    mode: str
    input_type: str
    difficulty: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

class AnswerOut(ORMModel):
    id: int
    session_id: int
    raw_text: str
    transcript: Optional[str]
    duration: Optional[float]
    created_at: Optional[datetime]

class VoiceMetricsOut(ORMModel):
    id: int
    session_id: int
    wpm: Optional[float]
    filler_words: Optional[int]
    long_pauses: Optional[int]
    created_at: Optional[datetime]

class JudgementOut(ORMModel):
    id: int
    session_id: int
    answer_id: Optional[int]
    status: str
    clarity: float
    correctness: float
    depth: float
    delivery: float
    missing_concepts: List[str]
    reaction: Optional[str]
    feedback: Optional[str]
    improvement_suggestions: List[str]
    delivery_feedback: Optional[str]
    model_version: Optional[str]
    error: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
