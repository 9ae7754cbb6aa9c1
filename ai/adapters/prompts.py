"""Prompt construction for the tutor, the teacher sandbox and chat titles.

Every builder here is a pure function of its input.
"""
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

DEFAULT_PERSONA = (
    "You are Lyra, an AI tutor. Your goal is to help the student verbalize their problem "
    "and guide them towards the solution by providing hints, analogies, and questions "
    "instead of direct answers. You should never give the direct answer. Emulate the "
    "Socratic method. Be patient and encouraging. You can use Markdown for formatting, "
    "including MermaidJS for diagrams (using ```mermaid code blocks)."
)

EXAMPLES_HEADER = "Here are some examples of good answers:"
GUIDED_EXAMPLES_HEADER = "Here are some examples of good answers to guide your response:"


class TutorRequest(BaseModel):
    """A single tutoring call. Built per message, never persisted."""
    problem_statement: str = Field(..., min_length=1, description="The student's message")
    system_prompt: Optional[str] = Field(None, description="Teacher supplied persona")
    example_good_answers: List[str] = Field(default_factory=list)
    model: Optional[str] = Field(None, description="Model id from the registry")


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def build_tutor_prompt(request: TutorRequest) -> str:
    """Combines persona, few-shot examples and the problem statement, in that order."""
    system_prompt = (request.system_prompt or "").strip()
    sections = [system_prompt or DEFAULT_PERSONA]

    if request.example_good_answers:
        sections.append(f"{EXAMPLES_HEADER}\n{_bullets(request.example_good_answers)}")

    sections.append(f"Problem Statement: {request.problem_statement}")
    return "\n\n".join(sections)


def build_guided_prompt(system_prompt: str, teacher_examples: Sequence[str], student_question: str) -> str:
    """Prompt used by the teacher's "Test AI" sandbox. Blank examples are dropped."""
    examples = [e for e in teacher_examples if e.strip()]
    sections = [system_prompt.strip() or DEFAULT_PERSONA]
    if examples:
        sections.append(f"{GUIDED_EXAMPLES_HEADER}\n{_bullets(examples)}")
    sections.append(f"Student Question: {student_question}\n\nAI Response: ")
    return "\n\n".join(sections)


def build_title_prompt(first_message: str) -> str:
    return (
        "Generate a short, descriptive title (at most six words) for a tutoring conversation "
        "that starts with the message below. Reply with the title only, without quotes or "
        "punctuation at the end.\n\n"
        f"Message: {first_message}"
    )


def build_customization_prompt(system_prompt: str, example_good_answers: Sequence[str] = ()) -> str:
    """Asks the model to rewrite a teacher's system prompt around their examples."""
    examples = [e for e in example_good_answers if e.strip()]
    sections = [
        "You are customizing the system prompt for an AI tutor. "
        f"The current system prompt is:\n{system_prompt.strip()}",
        "Update the system prompt based on the teacher's customizations.",
    ]
    if examples:
        sections.append(f"If applicable, incorporate these examples of good answers:\n{_bullets(examples)}")
    sections.append("Return the updated system prompt only.\n\nUpdated System Prompt:")
    return "\n\n".join(sections)
