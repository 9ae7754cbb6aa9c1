from __future__ import annotations
"""Chat session orchestration for the student chat.

``ChatService.send_message`` drives one exchange::

    Idle → Validating → (SessionReady | SessionCreating → SessionReady)
         → SettingsResolving (students only) → Routing
         → Persisting-Success | Persisting-Error → Idle

Nothing is retried and nothing is raised to the caller: failures end in an
apology message in the transcript plus a notification.  One exchange runs at
a time per service instance; a second call while one is in flight is
rejected.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Protocol, Set

from ai.adapters.prompts import TutorRequest
from ai.adapters.router import ResponseRouter, get_router
from ai.adapters import metrics
from ai.flows import DEFAULT_CHAT_TITLE, generate_chat_title
from core.errors import ChatValidationError
from core.logging import logger
from core.models import ChatMessage, ChatSession, Identity, TeacherSettings, UserProfile
from core.store import SERVER_TIMESTAMP, Document, DocumentStore
from services.notification_service import LoggingNotifier, Notification, Notifier, Variant
from services.teacher_settings_service import USERS, TeacherSettingsResolver

__all__ = ["ChatService", "Navigator", "CONNECTION_ERROR_MESSAGE"]

CHAT_SESSIONS = "chatSessions"
MESSAGES = "messages"

CONNECTION_ERROR_MESSAGE = "I seem to be having trouble connecting. Please try again in a moment."

TitleGenerator = Callable[[str], Awaitable[str]]


class Navigator(Protocol):
    """Receives the location of a newly created conversation."""

    def push(self, url: str) -> None:
        ...


class ChatService:
    def __init__(
        self,
        store: Optional[DocumentStore],
        identity: Optional[Identity],
        router: Optional[ResponseRouter] = None,
        settings_resolver: Optional[TeacherSettingsResolver] = None,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        title_generator: Optional[TitleGenerator] = None,
        chat_id: Optional[str] = None,
        model_id: Optional[str] = None,
    ) -> None:
        self.store = store
        self.identity = identity
        self.router = router or get_router()
        self.settings_resolver = settings_resolver or (TeacherSettingsResolver(store) if store else None)
        self.notifier = notifier or LoggingNotifier()
        self.navigator = navigator
        self.title_generator = title_generator or self._generate_title
        self.chat_id = chat_id
        self.model_id = model_id
        self._loading = False
        self._pending: Set[asyncio.Task] = set()

    @property
    def is_loading(self) -> bool:
        return self._loading

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def _sessions_path(self) -> str:
        return f"{USERS}/{self.identity.uid}/{CHAT_SESSIONS}"

    def _messages_path(self, chat_id: str) -> str:
        return f"{self._sessions_path()}/{chat_id}/{MESSAGES}"

    # ------------------------------------------------------------------
    # Send
    # ------------------------------------------------------------------
    async def send_message(self, content: str, subject: Optional[str]) -> None:
        if self.identity is None or self.store is None:
            self._notify_error("Error", "User not authenticated.")
            return
        if self._loading:
            self._notify_error("Please wait", "Your previous message is still being answered.")
            return
        if not content or not content.strip():
            self._notify_error("Error", "Message is empty.")
            return

        self._loading = True
        chat_id = self.chat_id
        try:
            session = await self._load_session(chat_id) if chat_id else None
            if chat_id and session is None:
                logger.warning(f"Chat session {chat_id} not found, starting a new one")
                chat_id = None
            effective_subject = self._effective_subject(session, subject)

            if not chat_id:
                chat_id = await self._create_session(content, effective_subject)

            self._write_in_background(self._messages_path(chat_id), {
                "role": "user",
                "content": content,
                "createdAt": SERVER_TIMESTAMP,
            })
            # Let the write start before the provider call
            await asyncio.sleep(0)

            settings = await self._resolve_settings(effective_subject)

            result = await self.router.route(TutorRequest(
                problem_statement=content,
                system_prompt=settings.system_prompt if settings else None,
                example_good_answers=settings.example_answers if settings else [],
                model=self.model_id,
            ))

            await self._add_message(chat_id, "assistant", result.tutor_response)
        except ChatValidationError as e:
            logger.info(f"Rejected message: {e}")
            self._notify_error("Error", str(e))
        except Exception as e:
            logger.error(f"Error sending message: {e}", exc_info=True)
            if chat_id:
                try:
                    await self._add_message(chat_id, "assistant", CONNECTION_ERROR_MESSAGE)
                except Exception as write_error:
                    logger.error(f"Failed to record error message in {chat_id}: {write_error}")
            self._notify_error("Oh no! Something went wrong.", "There was a problem with your request.")
        finally:
            self._loading = False

    async def _load_session(self, chat_id: str) -> Optional[Document]:
        return await self.store.get(f"{self._sessions_path()}/{chat_id}")

    def _effective_subject(self, session: Optional[Document], subject: Optional[str]) -> str:
        """The stored subject of an existing session wins over the caller's."""
        if session is not None and session.data.get("subject"):
            return session.data["subject"]
        if not subject:
            raise ChatValidationError("Subject is required for a new chat.")
        return subject

    async def _generate_title(self, first_message: str) -> str:
        return await generate_chat_title(first_message, self.model_id, self.router)

    async def _create_session(self, first_message: str, subject: str) -> str:
        try:
            title = await self.title_generator(first_message) or DEFAULT_CHAT_TITLE
        except Exception as e:
            logger.warning(f"Title generation failed, using default title: {e}")
            title = DEFAULT_CHAT_TITLE

        chat_id = await self.store.add(self._sessions_path(), {
            "userId": self.identity.uid,
            "subject": subject,
            "title": title,
            "model": self.model_id,
            "startTime": SERVER_TIMESTAMP,
        })
        self.chat_id = chat_id
        logger.info(f"Created chat session {chat_id} ({subject})")
        if self.navigator is not None:
            self.navigator.push(f"/?chatId={chat_id}")
        return chat_id

    async def _resolve_settings(self, subject: str) -> Optional[TeacherSettings]:
        profile = await self._load_profile()
        if profile is None or not profile.is_student or self.settings_resolver is None:
            return None
        return await self.settings_resolver.resolve(profile, subject)

    async def _load_profile(self) -> Optional[UserProfile]:
        try:
            doc = await self.store.get(f"{USERS}/{self.identity.uid}")
            if doc is None:
                return None
            return UserProfile.model_validate(doc.data)
        except Exception as e:
            logger.warning(f"Could not load profile for {self.identity.uid}: {e}")
            return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def _add_message(self, chat_id: str, role: str, content: str) -> str:
        message_id = await self.store.add(self._messages_path(chat_id), {
            "role": role,
            "content": content,
            "createdAt": SERVER_TIMESTAMP,
        })
        metrics.chat_messages.labels(role=role).inc()
        return message_id

    def _write_in_background(self, path: str, data: dict) -> None:
        """Issues a write without waiting for it; failures are logged and notified."""
        task = asyncio.create_task(self.store.add(path, data))
        self._pending.add(task)
        task.add_done_callback(self._on_background_write_done)

    def _on_background_write_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background message write failed: {error}")
            self._notify_error("Message not saved", "Your message could not be stored.")
        else:
            metrics.chat_messages.labels(role="user").inc()

    async def flush(self) -> None:
        """Waits for all background writes issued so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _notify_error(self, title: str, description: str) -> None:
        self.notifier.notify(Notification(title=title, description=description, variant=Variant.DESTRUCTIVE))

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def open_session(self, chat_id: Optional[str]) -> None:
        """Switches to an existing conversation, or to a new one with ``None``."""
        self.chat_id = chat_id

    async def get_messages(self) -> List[ChatMessage]:
        if self.identity is None or self.store is None or not self.chat_id:
            return []
        docs = await self.store.query(self._messages_path(self.chat_id), order_by="createdAt")
        return [ChatMessage.model_validate({**d.data, "id": d.id}) for d in docs]

    async def list_sessions(self) -> List[ChatSession]:
        if self.identity is None or self.store is None:
            return []
        docs = await self.store.query(self._sessions_path(), order_by="startTime", descending=True)
        return [ChatSession.model_validate({**d.data, "id": d.id}) for d in docs]
