#!/usr/bin/env python3
"""Demo script: one student conversation against the in-memory store."""
import argparse
import asyncio

from ai.adapters.registry import get_registry
from core.config import get_settings
from core.logging import logger
from core.models import Identity
from core.store import InMemoryDocumentStore
from services.chat_service import ChatService
from services.notification_service import InMemoryNotifier
from services.teacher_settings_service import TeacherSettingsService


class PrintNavigator:
    def push(self, url: str) -> None:
        print(f"   -> navigate {url}")


async def demo(model_id: str, subject: str, message: str):
    """Seeds a student and a teacher, then sends one message."""
    settings = get_settings()
    store = InMemoryDocumentStore(settings.STORE_SNAPSHOT_PATH)

    await store.set("users/demo_student", {
        "uid": "demo_student", "role": "student", "school": "Demo School", "class": "7a",
    })
    await store.set("users/demo_teacher", {
        "uid": "demo_teacher", "role": "teacher", "school": "Demo School",
        "classesTaught": ["7a"], "subjectsTaught": [subject],
    })
    await TeacherSettingsService(store).save(
        "demo_teacher",
        subject,
        "You are Lyra, a patient tutor. Answer with one guiding question at a time.",
        ["Instead of solving it for you, can you tell me what you've tried so far?"],
    )

    notifier = InMemoryNotifier()
    chat = ChatService(
        store,
        Identity("demo_student"),
        notifier=notifier,
        navigator=PrintNavigator(),
        model_id=model_id,
    )

    print("=" * 60)
    print(f"Lyra chat demo · {get_registry().resolve(model_id).label}")
    print("=" * 60)
    print(f"\nStudent: {message}")
    await chat.send_message(message, subject)
    await chat.flush()

    for msg in await chat.get_messages():
        print(f"\n[{msg.role}] {msg.content}")
    for note in notifier.notifications:
        print(f"\n(!) {note.title}: {note.description}")
    logger.info(f"Demo finished, session {chat.chat_id}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--model", default=None, help="Model id, e.g. deepseek:deepseek-chat")
    parser.add_argument("--subject", default="Maths")
    parser.add_argument("message", nargs="?", default="What is a derivative?")
    args = parser.parse_args()
    asyncio.run(demo(args.model, args.subject, args.message))
