"""
Role and level catalog for the mock interview simulator.

Holds the lookup tables used for prompts and UI labels, the opening
greeting, and the hand-written fallback content used whenever the LLM
is unavailable (demo mode, network failure, rate limiting).

Last Grunted: 10/19/2026
"""

from __future__ import annotations

from typing import Final


ROLE_LABELS: Final[dict[str, str]] = {
    "nurse": "Registered Nurse",
    "doctor": "Medical Doctor",
    "pharmacist": "Pharmacist",
    "therapist": "Physical Therapist",
    "technician": "Medical Technician",
}

# Prompt wording ("a mid-level Pharmacist position")
LEVEL_LABELS: Final[dict[str, str]] = {
    "entry": "entry-level",
    "mid": "mid-level",
    "senior": "senior-level",
}

# Select box wording
LEVEL_DISPLAY_LABELS: Final[dict[str, str]] = {
    "entry": "Entry Level",
    "mid": "Mid Level",
    "senior": "Senior Level",
}

DEFAULT_ROLE: Final[str] = "nurse"
DEFAULT_LEVEL: Final[str] = "entry"

FEEDBACK_CATEGORIES: Final[tuple[str, ...]] = (
    "Communication",
    "Technical Knowledge",
    "Problem Solving",
    "Professionalism",
    "Experience",
)

DEFAULT_EXPECTED_ANSWER: Final[str] = (
    "A comprehensive answer demonstrating knowledge and experience"
)
DEFAULT_FEEDBACK_TEXT: Final[str] = "Good response with room for improvement"
DEFAULT_CATEGORY: Final[str] = "Communication"
DEFAULT_RATING: Final[int] = 3
DEFAULT_QUESTION_TEXT: Final[str] = "Interview question"

APOLOGY_RESPONSE: Final[str] = (
    "I apologize, but I'm having trouble processing your response right now. "
    "Could you please try again?"
)
DEMO_OVERALL_FEEDBACK: Final[str] = (
    "Thank you for completing the mock interview! This is a demo version with "
    "sample feedback. To get AI-powered feedback, please set up your OpenAI API key."
)
ERROR_OVERALL_FEEDBACK: Final[str] = (
    "Thank you for completing the mock interview! We encountered an issue "
    "generating feedback, but your practice session has been recorded."
)

SAMPLE_EXPECTED_ANSWERS: Final[tuple[str, ...]] = (
    "I was motivated by a desire to help others and make a positive impact on "
    "people's lives through healthcare.",
    "I handled the situation by remaining calm, following protocols, and "
    "communicating effectively with the team.",
    "I stay updated through continuing education, professional journals, and "
    "attending conferences.",
    "I managed the situation by listening to concerns, finding common ground, "
    "and focusing on patient care.",
    "My long-term goals include advancing my skills, taking on leadership roles, "
    "and contributing to healthcare innovation.",
)

_FALLBACK_QUESTIONS: Final[tuple[str, ...]] = (
    "That's a great start! Can you tell me about a challenging situation you've "
    "faced in your previous healthcare experience and how you handled it?",
    "Excellent. How do you stay updated with the latest developments and best "
    "practices in your field?",
    "Good. Can you describe a time when you had to work with a difficult "
    "colleague or patient? How did you manage the situation?",
    "Thank you for sharing that. What are your long-term career goals in healthcare?",
    "That's very insightful. How do you handle stress and maintain work-life "
    "balance in a demanding healthcare environment?",
    "Great answer. Can you walk me through your approach to patient care and how "
    "you ensure quality outcomes?",
    "Excellent. What do you think are the most important qualities for a "
    "successful {role_label}?",
    "Thank you for your responses. Do you have any questions for me about the "
    "position or the organization?",
)


def available_roles() -> tuple[str, ...]:
    """Return all supported role keys in display order."""
    return tuple(ROLE_LABELS.keys())


def available_levels() -> tuple[str, ...]:
    """Return all supported level keys in display order."""
    return tuple(LEVEL_LABELS.keys())


def role_label(role: str) -> str:
    """Human label for a role key. Unknown keys are passed through."""
    return ROLE_LABELS.get(role, role)


def level_label(level: str) -> str:
    """Prompt label for a level key. Unknown keys are passed through."""
    return LEVEL_LABELS.get(level, level)


def level_display_label(level: str) -> str:
    return LEVEL_DISPLAY_LABELS.get(level, level)


def _normalize(value: str) -> str:
    return (value or "").strip().lower()


def validate_role(role: str) -> str:
    """Normalize a role key, failing fast on unknown values."""
    normalized = _normalize(role)
    if not normalized:
        raise ValueError("Role is empty. Choose one of the supported roles.")
    if normalized not in ROLE_LABELS:
        supported = ", ".join(available_roles())
        raise ValueError(f"Unknown role '{role}'. Supported roles: {supported}.")
    return normalized


def validate_level(level: str) -> str:
    """Normalize a level key, failing fast on unknown values."""
    normalized = _normalize(level)
    if not normalized:
        raise ValueError("Level is empty. Choose one of the supported levels.")
    if normalized not in LEVEL_LABELS:
        supported = ", ".join(available_levels())
        raise ValueError(f"Unknown level '{level}'. Supported levels: {supported}.")
    return normalized


def initial_greeting(role: str, level: str) -> str:
    """
    Build the interviewer's opening message.

    Args:
        role: Role key, e.g. "nurse".
        level: Level key, e.g. "entry".

    Returns:
        Greeting text ending with the first interview question.
    """
    position = f"{level_label(level)} {role_label(role)}"
    return (
        f"Hello! I'm your mock interview interviewer for a {position} position. "
        "I'll be asking you questions to assess your knowledge, experience, "
        "and fit for the role.\n\n"
        "Let's begin with some questions about your background and experience. "
        "Please answer as you would in a real interview setting.\n\n"
        f"What motivated you to pursue a career in healthcare, specifically as a {position}?"
    )


def fallback_questions(role: str) -> tuple[str, ...]:
    """Return the fallback question list with the role label filled in."""
    label = role_label(role)
    return tuple(q.format(role_label=label) for q in _FALLBACK_QUESTIONS)


def fallback_response(message_count: int, role: str) -> str:
    """
    Pick a generic follow-up question when the LLM can't be used.

    The list is indexed by ``message_count - 1`` and sticks to the last
    question once exhausted. A count below 1 also yields the last question.

    Args:
        message_count: Number of candidate answers given so far.
        role: Role key used to personalize one of the questions.

    Returns:
        The fallback interviewer message.
    """
    questions = fallback_questions(role)
    index = min(message_count - 1, len(questions) - 1)
    if index < 0:
        return questions[-1]
    return questions[index]


def fallback_category(index: int) -> str:
    return FEEDBACK_CATEGORIES[index % len(FEEDBACK_CATEGORIES)]


def fallback_expected_answer(index: int) -> str:
    if 0 <= index < len(SAMPLE_EXPECTED_ANSWERS):
        return SAMPLE_EXPECTED_ANSWERS[index]
    return DEFAULT_EXPECTED_ANSWER


def fallback_feedback_text(index: int) -> str:
    category = fallback_category(index).lower()
    return (
        f"Good response showing {category}. "
        "Consider providing more specific examples."
    )
