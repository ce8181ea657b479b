"""
Interviewer Agent using OpenAI Agents SDK.

Plays the interviewer in a mock interview and evaluates the candidate's
answers once the interview ends:
  - generate_interview_response: next interviewer message from the history
  - generate_question_feedback: structured 1-5 rating for one Q/A pair
  - generate_interview_feedback: narrative feedback for the whole interview
  - check_connection: quick readiness probe with a fixed timeout

Supports both OpenAI and Azure OpenAI backends:
  - OpenAI: Set OPENAI_API_KEY
  - Azure OpenAI: Set AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_KEY, AZURE_OPENAI_DEPLOYMENT

Failures surface as InterviewAgentError subclasses; callers decide on
fallback content.

Last Grunted: 10/19/2026
"""

import asyncio
import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from agents import Agent, ModelSettings, OpenAIChatCompletionsModel, Runner
from agents.exceptions import AgentsException, ModelBehaviorError
from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError, RateLimitError

from . import catalog
from .config import LLMSettings, RuntimeConfig
from .models import QuestionFeedback


__all__ = [
    "InterviewAgentError",
    "RateLimitExceededError",
    "LLMResponseError",
    "QuestionFeedbackOutput",
    "InterviewerAgent",
    "create_interviewer_agent",
]


logger = logging.getLogger(__name__)


CONNECTION_TEST_PROMPT = "Hello, this is a test message."


# =============================================================================
# Errors
# =============================================================================

class InterviewAgentError(Exception):
    """Base class for LLM failures the simulator can fall back from."""


class RateLimitExceededError(InterviewAgentError):
    """Raised when the provider rejects a request with HTTP 429."""

    def __init__(self, cause: Optional[Exception] = None) -> None:
        self.cause = cause
        super().__init__("RATE_LIMIT_EXCEEDED")


class LLMResponseError(InterviewAgentError):
    """Raised when the provider fails or returns an unusable response."""


# =============================================================================
# Structured Output Models for Agent
# =============================================================================

class QuestionFeedbackOutput(BaseModel):
    """
    Structured output for a single answer evaluation.

    Every field may come back empty; missing values are replaced with
    catalog defaults when converted to QuestionFeedback.
    """
    question: Optional[str] = Field(
        default=None,
        description="The interview question"
    )
    user_answer: Optional[str] = Field(
        default=None,
        description="The candidate's response"
    )
    expected_answer: Optional[str] = Field(
        default=None,
        description="What an ideal answer should include"
    )
    rating: Optional[int] = Field(
        default=None,
        description="Rating 1-5 (1=Poor, 2=Below Average, 3=Average, 4=Good, 5=Excellent)"
    )
    feedback: Optional[str] = Field(
        default=None,
        description="Specific feedback on the response"
    )
    category: Optional[str] = Field(
        default=None,
        description="One of: Communication, Technical Knowledge, Problem Solving, Professionalism, Experience"
    )


# =============================================================================
# Agent Instructions
# =============================================================================

INTERVIEWER_INSTRUCTIONS = """You are a friendly, professional healthcare interviewer conducting a realistic mock interview. Your goal is to simulate a real human interviewer, not just a chatbot.

- Greet the user and introduce yourself at the start.
- Ask open-ended, relevant interview questions appropriate for the position and experience level.
- After each user answer, respond naturally: acknowledge, encourage, or ask for clarification or follow-up details as a human would.
- Maintain a conversational, context-aware flow. Reference previous answers when appropriate.
- Use a warm, professional, and supportive tone.
- Do not just ask questions; react to the user's answers as a real interviewer would.
- Occasionally provide encouragement or brief feedback, but do not summarize the whole interview until the end.
- Keep responses concise (2-4 sentences) and avoid sounding robotic."""

QUESTION_FEEDBACK_INSTRUCTIONS = """You are an expert healthcare recruiter evaluating a single interview answer.

Rating scale: 1-5 (1=Poor, 2=Below Average, 3=Average, 4=Good, 5=Excellent)

Focus on:
- How well the answer addresses the question
- Specific examples and details provided
- Professional communication skills
- Technical knowledge demonstrated
- Areas for improvement

Pick the category from: Communication, Technical Knowledge, Problem Solving, Professionalism, Experience."""

OVERALL_FEEDBACK_INSTRUCTIONS = """You are an expert healthcare recruiter providing feedback on a mock interview.

Provide constructive feedback including:
1. Strengths demonstrated
2. Areas for improvement
3. Overall assessment
4. Specific recommendations

Keep the feedback professional, constructive, and actionable."""


def _speaker(role: str) -> str:
    return "Candidate" if role == "user" else "Interviewer"


def format_conversation(messages: list[dict[str, str]]) -> str:
    """Render message history as 'Candidate:/Interviewer:' lines."""
    return "\n".join(f"{_speaker(m['role'])}: {m['content']}" for m in messages)


def build_interview_prompt(context: dict[str, Any]) -> str:
    """
    Build the prompt for the interviewer's next message.

    Args:
        context: Session context with role, level and messages.

    Returns:
        Prompt with the interview context, the conversation so far and the
        instruction to continue.
    """
    role = catalog.role_label(context.get("role") or "")
    level = catalog.level_label(context.get("level") or "")
    messages = context.get("messages", [])

    parts = [
        f"You are interviewing a candidate for a {level} {role} position.",
        "",
        "Current interview context:",
        f"- Position: {role}",
        f"- Experience Level: {level}",
        f"- Number of exchanges: {len(messages)}",
        "",
        "Conversation so far:",
    ]
    if messages:
        parts.append(format_conversation(messages))
    parts.append("")
    parts.append(
        "Continue the interview as a real human interviewer. If the candidate just "
        "answered, respond naturally and ask a relevant follow-up or next question. "
        "If the candidate asked a question, answer it professionally. Only end the "
        "interview if the candidate says they are finished or asks to end."
    )
    parts.append("")
    parts.append("Interviewer:")
    return "\n".join(parts)


def build_question_feedback_prompt(
    role: str,
    level: str,
    question: str,
    user_answer: str,
    question_number: int,
) -> str:
    """Build the evaluation prompt for one question/answer pair."""
    return "\n".join([
        f"Evaluate this answer for a {catalog.level_label(level)} "
        f"{catalog.role_label(role)} position.",
        "",
        f"Question {question_number}: {question}",
        "",
        f"Candidate's Answer: {user_answer}",
    ])


def build_overall_feedback_prompt(context: dict[str, Any]) -> str:
    """Build the prompt for the end-of-interview narrative feedback."""
    role = catalog.role_label(context.get("role") or "")
    level = catalog.level_label(context.get("level") or "")
    return "\n".join([
        f"Mock interview for a {level} {role} position.",
        "",
        "Interview conversation:",
        format_conversation(context.get("messages", [])),
        "",
        "Please provide your feedback:",
    ])


def to_question_feedback(
    output: Optional[QuestionFeedbackOutput],
    question: str,
    user_answer: str,
) -> QuestionFeedback:
    """
    Merge model output with defaults into a valid QuestionFeedback.

    Missing question/answer fall back to the inputs, other fields to the
    catalog defaults. Ratings are clamped to 1-5; a missing or zero rating
    becomes the default rating.
    """
    output = output or QuestionFeedbackOutput()
    rating = output.rating or catalog.DEFAULT_RATING
    return QuestionFeedback(
        question=output.question or question,
        user_answer=output.user_answer or user_answer,
        expected_answer=output.expected_answer or catalog.DEFAULT_EXPECTED_ANSWER,
        rating=max(1, min(5, rating)),
        feedback=output.feedback or catalog.DEFAULT_FEEDBACK_TEXT,
        category=output.category or catalog.DEFAULT_CATEGORY,
    )


# =============================================================================
# Interviewer Agent Class
# =============================================================================

class InterviewerAgent:
    """
    LLM-backed interviewer and evaluator using the OpenAI Agents SDK.

    Wraps three SDK Agents that share one model client:
        - the interviewer (free text, temperature 0.7)
        - the per-question evaluator (structured output, temperature 0.3)
        - the overall reviewer (free text, temperature 0.5)

    Example:
        >>> agent = InterviewerAgent(load_runtime_config().llm)
        >>> reply = await agent.generate_interview_response({
        ...     "role": "nurse",
        ...     "level": "entry",
        ...     "messages": [{"role": "assistant", "content": "Hello! ..."}],
        ... })
    """

    def __init__(
        self,
        settings: LLMSettings,
        client: Optional[Union[AsyncOpenAI, AsyncAzureOpenAI]] = None,
    ) -> None:
        """
        Initialize the InterviewerAgent.

        Args:
            settings: Resolved provider settings (must be configured).
            client: Optional explicit OpenAI/Azure client. Built from
                    settings when omitted.

        Raises:
            ValueError: If settings describe no usable provider.
        """
        if not settings.configured:
            raise ValueError(
                "No LLM credentials configured. Set either:\n"
                "  - OPENAI_API_KEY for standard OpenAI, or\n"
                "  - AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_KEY, AZURE_OPENAI_DEPLOYMENT for Azure OpenAI"
            )

        self.settings = settings
        self.model_name = settings.model
        self._client = client or self._build_client(settings)
        model = OpenAIChatCompletionsModel(model=self.model_name, openai_client=self._client)

        self._interviewer = Agent(
            name="Interviewer",
            instructions=INTERVIEWER_INSTRUCTIONS,
            model=model,
            model_settings=ModelSettings(temperature=0.7, top_p=0.95, max_tokens=1024),
        )
        self._evaluator = Agent(
            name="Answer Evaluator",
            instructions=QUESTION_FEEDBACK_INSTRUCTIONS,
            model=model,
            output_type=QuestionFeedbackOutput,
            model_settings=ModelSettings(temperature=0.3, top_p=0.95, max_tokens=1024),
        )
        self._reviewer = Agent(
            name="Interview Reviewer",
            instructions=OVERALL_FEEDBACK_INSTRUCTIONS,
            model=model,
            model_settings=ModelSettings(temperature=0.5, top_p=0.95, max_tokens=1024),
        )
        self._probe = Agent(
            name="Connection Probe",
            instructions="Reply briefly.",
            model=model,
            model_settings=ModelSettings(max_tokens=50),
        )

        logger.info(
            "InterviewerAgent initialized with %s, model: %s",
            "Azure OpenAI" if settings.provider == "azure" else "OpenAI",
            self.model_name,
        )

    @staticmethod
    def _build_client(settings: LLMSettings) -> Union[AsyncOpenAI, AsyncAzureOpenAI]:
        if settings.provider == "azure":
            logger.info(
                "Using Azure OpenAI: %s, deployment: %s",
                settings.azure_endpoint,
                settings.model,
            )
            return AsyncAzureOpenAI(
                azure_endpoint=settings.azure_endpoint,
                api_key=settings.api_key,
                api_version=settings.azure_api_version,
            )
        logger.info("Using OpenAI: model %s", settings.model)
        return AsyncOpenAI(api_key=settings.api_key)

    async def _run(self, agent: Agent, prompt: str) -> Any:
        """Run an SDK agent, translating provider failures."""
        try:
            result = await Runner.run(agent, prompt)
        except RateLimitError as e:
            logger.warning("Rate limit exceeded for %s", agent.name)
            raise RateLimitExceededError(e) from e
        except ModelBehaviorError:
            raise
        except (OpenAIError, AgentsException) as e:
            logger.error("%s call failed: %s", agent.name, e, exc_info=True)
            raise LLMResponseError(f"{agent.name} call failed: {e}") from e
        return result.final_output

    async def _run_text(self, agent: Agent, prompt: str) -> str:
        try:
            output = await self._run(agent, prompt)
        except ModelBehaviorError as e:
            raise LLMResponseError(f"Invalid response format from {agent.name}: {e}") from e
        if not isinstance(output, str) or not output.strip():
            raise LLMResponseError(f"Invalid response format from {agent.name}")
        return output.strip()

    async def generate_interview_response(self, context: dict[str, Any]) -> str:
        """
        Generate the interviewer's next message.

        Args:
            context: Session context (role, level, messages).

        Returns:
            Interviewer message text.

        Raises:
            RateLimitExceededError: On HTTP 429 from the provider.
            LLMResponseError: On any other failure or an empty response.
        """
        prompt = build_interview_prompt(context)
        logger.debug("Requesting interviewer response (%d messages)", len(context.get("messages", [])))
        response = await self._run_text(self._interviewer, prompt)
        logger.info("Interviewer response received (%d chars)", len(response))
        return response

    async def generate_question_feedback(
        self,
        role: str,
        level: str,
        question: str,
        user_answer: str,
        question_number: int,
    ) -> QuestionFeedback:
        """
        Evaluate one candidate answer.

        An unparseable model output yields the default record (rating 3)
        rather than an error.

        Raises:
            RateLimitExceededError: On HTTP 429 from the provider.
            LLMResponseError: On other provider failures.
        """
        prompt = build_question_feedback_prompt(role, level, question, user_answer, question_number)
        try:
            output = await self._run(self._evaluator, prompt)
        except ModelBehaviorError as e:
            logger.error("Error parsing feedback output for question %d: %s", question_number, e)
            return to_question_feedback(None, question, user_answer)

        if not isinstance(output, QuestionFeedbackOutput):
            logger.error(
                "Unexpected feedback output type for question %d: %s",
                question_number,
                type(output).__name__,
            )
            output = None
        return to_question_feedback(output, question, user_answer)

    async def generate_interview_feedback(self, context: dict[str, Any]) -> str:
        """
        Generate narrative feedback for the whole interview.

        Raises:
            RateLimitExceededError: On HTTP 429 from the provider.
            LLMResponseError: On any other failure or an empty response.
        """
        prompt = build_overall_feedback_prompt(context)
        return await self._run_text(self._reviewer, prompt)

    async def check_connection(self, timeout: float = 10.0) -> bool:
        """
        Send a short test prompt and report whether the model answered.

        Gives up after ``timeout`` seconds.
        """
        try:
            output = await asyncio.wait_for(
                self._run_text(self._probe, CONNECTION_TEST_PROMPT),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("API test timed out after %.1fs", timeout)
            return False
        except InterviewAgentError as e:
            logger.error("API test failed: %s", e)
            return False
        return bool(output)


# =============================================================================
# Factory Function
# =============================================================================

def create_interviewer_agent(config: RuntimeConfig) -> Optional[InterviewerAgent]:
    """
    Create an InterviewerAgent when the LLM is usable.

    Returns:
        Configured agent, or None in demo mode / without credentials.
    """
    if config.demo_mode:
        logger.info("Demo mode enabled - using predefined questions and feedback")
        return None
    if not config.llm.configured:
        logger.info("No LLM credentials configured - using predefined questions and feedback")
        return None
    return InterviewerAgent(config.llm)
