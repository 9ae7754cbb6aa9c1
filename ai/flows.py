"""Entry points for the AI flows the application exposes.

Each flow takes a router so callers and tests can swap it; by default the
process-wide router is used.
"""
from typing import Optional, Sequence

from ai.adapters.prompts import TutorRequest, build_customization_prompt, build_guided_prompt, build_title_prompt
from ai.adapters.router import ResponseRouter, TutorResult, get_router
from core.logging import logger

DEFAULT_CHAT_TITLE = "New Chat"
MAX_TITLE_LENGTH = 80


async def generate_tutor_response(
    problem_statement: str,
    system_prompt: Optional[str] = None,
    example_good_answers: Optional[Sequence[str]] = None,
    model: Optional[str] = None,
    router: Optional[ResponseRouter] = None,
) -> TutorResult:
    """Main tutoring flow: Socratic answer to a student's message."""
    request = TutorRequest(
        problem_statement=problem_statement,
        system_prompt=system_prompt,
        example_good_answers=list(example_good_answers or []),
        model=model,
    )
    return await (router or get_router()).route(request)


async def generate_guided_response(
    student_question: str,
    teacher_examples: Sequence[str],
    system_prompt: str,
    model: Optional[str] = None,
    router: Optional[ResponseRouter] = None,
) -> str:
    """Teacher sandbox: answer a test question with the settings being edited."""
    prompt = build_guided_prompt(system_prompt, teacher_examples, student_question)
    return await (router or get_router()).complete(prompt, model)


async def generate_chat_title(
    first_message: str,
    model: Optional[str] = None,
    router: Optional[ResponseRouter] = None,
) -> str:
    """Short conversation title derived from the first message."""
    raw = await (router or get_router()).complete(build_title_prompt(first_message), model)
    title = raw.strip().splitlines()[0].strip().strip('"\'') if raw and raw.strip() else ""
    if not title:
        logger.debug("Title generation returned nothing, using default title")
        return DEFAULT_CHAT_TITLE
    return title[:MAX_TITLE_LENGTH]


async def customize_teaching_style(
    system_prompt: str,
    example_good_answers: Optional[Sequence[str]] = None,
    model: Optional[str] = None,
    router: Optional[ResponseRouter] = None,
) -> str:
    """Teacher settings: let the model refine a system prompt from the teacher's examples."""
    prompt = build_customization_prompt(system_prompt, example_good_answers or [])
    updated = await (router or get_router()).complete(prompt, model)
    logger.info("Generated customized system prompt")
    return updated
