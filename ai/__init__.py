"""AI module: provider routing and the tutoring flows built on it."""

from ai.flows import (
    customize_teaching_style,
    generate_chat_title,
    generate_guided_response,
    generate_tutor_response,
)

__all__ = [
    "generate_tutor_response",
    "generate_guided_response",
    "generate_chat_title",
    "customize_teaching_style",
]
