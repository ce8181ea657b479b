"""
End-of-interview feedback generation.

Evaluates every candidate answer (concurrently when the LLM is available)
and produces the overall narrative. Any LLM failure swaps the whole report
for the sample feedback tables.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Optional

from . import catalog
from .agent import InterviewAgentError
from .models import FeedbackReport, QuestionFeedback

if TYPE_CHECKING:
    from .agent import InterviewerAgent
    from .session import InterviewSessionManager


__all__ = ["FeedbackGenerator", "fallback_question_feedback"]


logger = logging.getLogger(__name__)


def fallback_question_feedback(
    pairs: list[tuple[str, str]],
    rng: Optional[random.Random] = None,
) -> list[QuestionFeedback]:
    """
    Build sample feedback for each (question, answer) pair.

    Ratings are drawn uniformly from 3-5; categories cycle through the
    catalog and expected answers come from the sample table.
    """
    rng = rng or random.Random()
    items = []
    for index, (question, answer) in enumerate(pairs):
        items.append(
            QuestionFeedback(
                question=question or f"Question {index + 1}",
                user_answer=answer,
                expected_answer=catalog.fallback_expected_answer(index),
                rating=rng.randint(3, 5),
                feedback=catalog.fallback_feedback_text(index),
                category=catalog.fallback_category(index),
            )
        )
    return items


class FeedbackGenerator:
    """
    Produces the FeedbackReport for a finished interview.

    Example:
        >>> generator = FeedbackGenerator(agent=None)  # demo mode
        >>> report = await generator.generate_report(session_manager)
        >>> report.used_fallback
        True
    """

    def __init__(
        self,
        agent: Optional["InterviewerAgent"] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.agent = agent
        self._rng = rng or random.Random()

    async def generate_report(self, session_manager: "InterviewSessionManager") -> FeedbackReport:
        """
        Generate per-question and overall feedback.

        Args:
            session_manager: Manager holding the (ended) session.

        Returns:
            FeedbackReport; ``used_fallback`` tells whether sample content
            was used.

        Raises:
            ValueError: If the manager holds no session.
        """
        session = session_manager.session
        if session is None:
            raise ValueError("No session to generate feedback for.")

        pairs = session_manager.question_answer_pairs()

        if self.agent is None:
            logger.info("Generating demo feedback for %d answers", len(pairs))
            return FeedbackReport(
                overall_feedback=catalog.DEMO_OVERALL_FEEDBACK,
                question_feedback=fallback_question_feedback(pairs, self._rng),
                used_fallback=True,
            )

        try:
            question_feedback = await self._evaluate_answers(session.role, session.level, pairs)
            overall = await self.agent.generate_interview_feedback(
                session_manager.get_session_context()
            )
        except InterviewAgentError as e:
            logger.error("Error generating detailed feedback: %s", e)
            return self._error_report(pairs)
        except Exception as e:
            logger.error("Unexpected error generating feedback: %s", e, exc_info=True)
            return self._error_report(pairs)

        logger.info(
            "Generated feedback for session %s (%d answers)",
            session.session_id,
            len(question_feedback),
        )
        return FeedbackReport(
            overall_feedback=overall,
            question_feedback=question_feedback,
            used_fallback=False,
        )

    async def _evaluate_answers(
        self,
        role: str,
        level: str,
        pairs: list[tuple[str, str]],
    ) -> list[QuestionFeedback]:
        # Every evaluation runs to completion; the first failure is raised afterwards.
        results = await asyncio.gather(
            *(
                self.agent.generate_question_feedback(
                    role=role,
                    level=level,
                    question=question,
                    user_answer=answer,
                    question_number=index + 1,
                )
                for index, (question, answer) in enumerate(pairs)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    def _error_report(self, pairs: list[tuple[str, str]]) -> FeedbackReport:
        return FeedbackReport(
            overall_feedback=catalog.ERROR_OVERALL_FEEDBACK,
            question_feedback=fallback_question_feedback(pairs, self._rng),
            used_fallback=True,
        )
