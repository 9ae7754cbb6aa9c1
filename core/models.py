"""Document shapes shared by the chat and teacher-settings services.

Field aliases match the camelCase keys stored in the document store.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller."""
    uid: str


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UserProfile(_Document):
    uid: Optional[str] = None
    name: Optional[str] = None
    role: UserRole
    school: Optional[str] = None
    # Students
    class_name: Optional[str] = Field(None, alias="class")
    # Teachers
    classes_taught: List[str] = Field(default_factory=list, alias="classesTaught")
    subjects_taught: List[str] = Field(default_factory=list, alias="subjectsTaught")

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT


class TeacherSettings(_Document):
    teacher_id: Optional[str] = Field(None, alias="teacherId")
    subject: Optional[str] = None
    system_prompt: str = Field("", alias="systemPrompt")
    example_answers: List[str] = Field(default_factory=list, alias="exampleAnswers")


class ChatSession(_Document):
    id: str
    user_id: str = Field(..., alias="userId")
    subject: str
    title: str
    model: Optional[str] = None
    start_time: Optional[datetime] = Field(None, alias="startTime")


class ChatMessage(_Document):
    id: Optional[str] = None
    role: Literal["user", "assistant"]
    content: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
