"""
Answer Grader - OpenAI judgement of a free-text diagnostic answer.

The model must say how sure it is. Anything short of a clear, high-confidence
verdict comes back as "uncertain", which the gate refuses to score.
"""

from typing import Any, Optional

from src.config import Settings, get_settings
from src.engines.prerequisites.collaborators import AnswerGrader, parse_grade_payload
from src.engines.prerequisites.types import Confidence, DiagnosticQuestion, GradeResult
from src.ai.openai_support import chat_json, make_client, usable_api_key
from src.kernel.errors import GradingError

SYSTEM_PROMPT = """You check short math answers against an expected answer.
Accept answers that are mathematically equivalent (different but equal forms, reordered terms, equivalent fractions or decimals).
If you cannot tell whether the student's answer is equivalent, say so: set "confidence" to "uncertain".

Return JSON only: {"isCorrect": true|false, "confidence": "high"|"uncertain"}"""


def build_user_prompt(question: DiagnosticQuestion, answer_text: str) -> str:
    return (
        f"Topic: {question.prerequisite_topic_name}\n"
        f"Question: {question.question}\n"
        f"Expected answer: {question.correct_answer}\n"
        f"Student answer: {answer_text}"
    )


class OpenAIAnswerGrader(AnswerGrader):
    """AnswerGrader backed by an OpenAI chat model."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or get_settings()
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            key = usable_api_key(self.settings)
            if key is None:
                raise GradingError("OpenAI API key is not configured")
            self._client = make_client(key)
        return self._client

    async def grade_answer(self, question: DiagnosticQuestion, answer_text: str) -> GradeResult:
        client = self._get_client()
        try:
            data = await chat_json(
                client,
                model=self.settings.grading_model,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=build_user_prompt(question, answer_text),
                temperature=0.0,
                max_tokens=100,
            )
        except Exception as exc:
            raise GradingError(f"Answer grading failed: {exc}") from exc

        return parse_grade_payload(data, Confidence(self.settings.missing_confidence_default))
