"""Tests for teacher-settings resolution and the teacher-side settings service."""
import pytest

from core.errors import StoreError
from core.models import UserProfile
from core.store import InMemoryDocumentStore
from services.teacher_settings_service import (
    TeacherSettingsResolver,
    TeacherSettingsService,
    settings_key,
)


class SpyStore(InMemoryDocumentStore):
    """Records reads so tests can check which documents were fetched."""

    def __init__(self):
        super().__init__()
        self.queries = []
        self.gets = []

    async def query(self, collection_path, filters=(), order_by=None, descending=False):
        filters = list(filters)
        self.queries.append((collection_path, filters))
        return await super().query(collection_path, filters, order_by, descending)

    async def get(self, path):
        self.gets.append(path)
        return await super().get(path)


class BrokenStore(InMemoryDocumentStore):
    async def query(self, *args, **kwargs):
        raise StoreError("backend unavailable")


def student(**overrides):
    data = {"role": "student", "school": "S1", "class": "7a"}
    data.update(overrides)
    return UserProfile.model_validate(data)


async def seed_teachers(store):
    await store.set("users/t_physics", {
        "role": "teacher", "school": "S1", "classesTaught": ["7a", "8b"], "subjectsTaught": ["Physics"],
    })
    await store.set("users/t_maths", {
        "role": "teacher", "school": "S1", "classesTaught": ["7a"], "subjectsTaught": ["Maths", "Computer Science"],
    })
    await store.set("users/t_other_school", {
        "role": "teacher", "school": "S2", "classesTaught": ["7a"], "subjectsTaught": ["Maths"],
    })
    await store.set("users/s_classmate", {"role": "student", "school": "S1", "class": "7a"})


def test_settings_key_replaces_whitespace():
    assert settings_key("t1", "Maths") == "t1_Maths"
    assert settings_key("t1", "Computer  Science") == "t1_Computer-Science"
    assert settings_key("t1", "Social Studies\tII") == "t1_Social-Studies-II"


class TestTeacherSettingsResolver:

    @pytest.mark.asyncio
    async def test_selects_teacher_of_subject_and_fetches_key(self):
        store = SpyStore()
        await seed_teachers(store)
        await store.set("teacherSettings/t_maths_Maths", {
            "teacherId": "t_maths", "subject": "Maths",
            "systemPrompt": "Use number lines.", "exampleAnswers": ["What do you notice?"],
        })

        settings = await TeacherSettingsResolver(store).resolve(student(), "Maths")

        assert settings is not None
        assert settings.system_prompt == "Use number lines."
        assert settings.example_answers == ["What do you notice?"]
        assert store.gets == ["teacherSettings/t_maths_Maths"]

        path, filters = store.queries[0]
        assert path == "users"
        assert {(f.field, f.op, f.value) for f in filters} == {
            ("role", "==", "teacher"),
            ("school", "==", "S1"),
            ("classesTaught", "array-contains", "7a"),
        }

    @pytest.mark.asyncio
    async def test_subject_with_spaces(self):
        store = SpyStore()
        await seed_teachers(store)

        await TeacherSettingsResolver(store).resolve(student(), "Computer Science")

        assert store.gets == ["teacherSettings/t_maths_Computer-Science"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [{"class": None}, {"school": None}])
    async def test_incomplete_profile_skips_query(self, overrides):
        store = SpyStore()
        await seed_teachers(store)

        assert await TeacherSettingsResolver(store).resolve(student(**overrides), "Maths") is None
        assert store.queries == []

    @pytest.mark.asyncio
    async def test_no_teacher_for_class(self):
        store = SpyStore()
        await seed_teachers(store)

        assert await TeacherSettingsResolver(store).resolve(student(**{"class": "9c"}), "Maths") is None
        assert store.gets == []

    @pytest.mark.asyncio
    async def test_no_teacher_for_subject(self):
        store = SpyStore()
        await seed_teachers(store)

        assert await TeacherSettingsResolver(store).resolve(student(), "History") is None
        assert store.gets == []

    @pytest.mark.asyncio
    async def test_missing_settings_document(self):
        store = SpyStore()
        await seed_teachers(store)

        assert await TeacherSettingsResolver(store).resolve(student(), "Physics") is None
        assert store.gets == ["teacherSettings/t_physics_Physics"]

    @pytest.mark.asyncio
    async def test_store_failure_is_treated_as_absent(self):
        assert await TeacherSettingsResolver(BrokenStore()).resolve(student(), "Maths") is None


class TestTeacherSettingsService:

    @pytest.mark.asyncio
    async def test_save_then_resolve_for_student(self, store):
        await seed_teachers(store)
        service = TeacherSettingsService(store)

        saved = await service.save("t_maths", "Computer Science", "Think in steps.", ["Try a smaller case.", "  "])

        assert saved.example_answers == ["Try a smaller case."]
        doc = await store.get("teacherSettings/t_maths_Computer-Science")
        assert doc.data["teacherId"] == "t_maths"
        assert doc.data["subject"] == "Computer Science"

        loaded = await service.load("t_maths", "Computer Science")
        assert loaded.system_prompt == "Think in steps."

        resolved = await TeacherSettingsResolver(store).resolve(student(), "Computer Science")
        assert resolved.example_answers == ["Try a smaller case."]

    @pytest.mark.asyncio
    async def test_load_missing(self, store):
        assert await TeacherSettingsService(store).load("t_maths", "Maths") is None
