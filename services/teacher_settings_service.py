import re
from typing import List, Optional, Sequence

from core.logging import logger
from core.models import TeacherSettings, UserProfile, UserRole
from core.store import SERVER_TIMESTAMP, DocumentStore, Filter

USERS = "users"
TEACHER_SETTINGS = "teacherSettings"


def settings_key(teacher_id: str, subject: str) -> str:
    """Deterministic document id: ``{teacherId}_{subject with whitespace runs as dashes}``."""
    slug = re.sub(r"\s+", "-", subject)
    return f"{teacher_id}_{slug}"


class TeacherSettingsResolver:
    """Finds the customisation a student's teacher set up for a subject.

    The store cannot combine the class and subject membership filters in one
    query, so teachers are fetched by role, school and class and the subject is
    checked in-process.  That second pass assumes a small result set.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve(self, profile: UserProfile, subject: str) -> Optional[TeacherSettings]:
        if not profile.class_name or not profile.school:
            return None

        try:
            teachers = await self.store.query(USERS, [
                Filter("role", "==", UserRole.TEACHER.value),
                Filter("school", "==", profile.school),
                Filter("classesTaught", "array-contains", profile.class_name),
            ])
            if not teachers:
                logger.debug(f"No teacher for class {profile.class_name} at {profile.school}")
                return None

            teacher = next(
                (t for t in teachers if subject in (t.data.get("subjectsTaught") or [])),
                None,
            )
            if teacher is None:
                logger.debug(f"No teacher of {subject} for class {profile.class_name}")
                return None

            doc = await self.store.get(f"{TEACHER_SETTINGS}/{settings_key(teacher.id, subject)}")
            if doc is None:
                return None
            return TeacherSettings.model_validate(doc.data)
        except Exception as e:
            # Missing customisation is not fatal for the chat
            logger.warning(f"Teacher settings lookup failed, continuing without: {e}", exc_info=True)
            return None


class TeacherSettingsService:
    """Teacher-side read and write of per-subject settings."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def load(self, teacher_id: str, subject: str) -> Optional[TeacherSettings]:
        doc = await self.store.get(f"{TEACHER_SETTINGS}/{settings_key(teacher_id, subject)}")
        if doc is None:
            return None
        return TeacherSettings.model_validate(doc.data)

    async def save(
        self,
        teacher_id: str,
        subject: str,
        system_prompt: str,
        example_answers: Sequence[str],
    ) -> TeacherSettings:
        examples: List[str] = [e for e in example_answers if e.strip()]
        settings = TeacherSettings(
            teacher_id=teacher_id,
            subject=subject,
            system_prompt=system_prompt,
            example_answers=examples,
        )
        key = settings_key(teacher_id, subject)
        await self.store.set(f"{TEACHER_SETTINGS}/{key}", {
            **settings.model_dump(by_alias=True),
            "updatedAt": SERVER_TIMESTAMP,
        })
        logger.info(f"Saved teacher settings {key}")
        return settings
