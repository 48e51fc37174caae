"""
Diagnostic Generator - quick prerequisite check questions written by OpenAI.

No fallback questions: if the model cannot produce a usable quiz the gate
goes to its error state instead of quizzing on placeholders.
"""

from typing import Any, List, Optional

from src.config import Settings, get_settings
from src.engines.prerequisites.collaborators import DiagnosticGenerator
from src.engines.prerequisites.types import DiagnosticQuestion, PrerequisiteTopic
from src.ai.openai_support import chat_json, make_client, usable_api_key
from src.kernel.errors import GenerationError
from src.logging_config import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are a math tutor creating quick diagnostic questions to assess prerequisite knowledge.
Generate questions that:
1. Test fundamental concepts, not advanced applications
2. Can be answered in 1-2 lines
3. Have clear, unambiguous correct answers
4. Use proper mathematical notation with LaTeX when needed

Return a JSON object with a "questions" array."""


def question_count(weak_count: int, max_questions: int) -> int:
    """Two questions per weak prerequisite, capped."""
    return min(weak_count * 2, max_questions)


def build_user_prompt(weak: List[PrerequisiteTopic], target_topic_name: str, count: int) -> str:
    prereq_list = ", ".join(p.name for p in weak)
    return f"""Create {count} quick diagnostic questions to test understanding of these prerequisite topics before studying "{target_topic_name}":

Prerequisites: {prereq_list}

For each prerequisite topic, create 1-2 questions testing the most essential concepts needed for {target_topic_name}.

Return JSON in this exact format:
{{
  "questions": [
    {{
      "id": "q1",
      "question": "The question text with $LaTeX$ if needed",
      "correctAnswer": "The expected answer",
      "prerequisiteTopicName": "Topic Name"
    }}
  ]
}}

Make questions that are quick to answer (under 30 seconds), test core concepts rather than edge cases, and have definitive correct answers."""


def match_prerequisite(name: Optional[str], weak: List[PrerequisiteTopic], index: int) -> PrerequisiteTopic:
    """Map a generated question back to a prerequisite by name; round-robin when nothing matches."""
    wanted = (name or "").strip().lower()
    if wanted:
        for p in weak:
            have = p.name.lower()
            if wanted in have or have in wanted:
                return p
    return weak[index % len(weak)]


def to_questions(raw: Any, weak: List[PrerequisiteTopic]) -> List[DiagnosticQuestion]:
    """Validate generated items; items without question text or answer are dropped."""
    if not isinstance(raw, list):
        raise GenerationError("Generated quiz has no questions array")
    questions: List[DiagnosticQuestion] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        text = str(item.get("question") or "").strip()
        answer = str(item.get("correctAnswer") or item.get("correct_answer") or "").strip()
        if not text or not answer:
            continue
        prereq = match_prerequisite(item.get("prerequisiteTopicName"), weak, i)
        questions.append(
            DiagnosticQuestion(
                id=str(item.get("id") or f"q{i + 1}"),
                question=text,
                correct_answer=answer,
                prerequisite_topic_id=prereq.id,
                prerequisite_topic_name=prereq.name,
            )
        )
    return questions


class OpenAIDiagnosticGenerator(DiagnosticGenerator):
    """DiagnosticGenerator backed by an OpenAI chat model."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or get_settings()
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            key = usable_api_key(self.settings)
            if key is None:
                raise GenerationError("OpenAI API key is not configured")
            self._client = make_client(key)
        return self._client

    async def generate_diagnostic(
        self,
        weak_prerequisites: List[PrerequisiteTopic],
        target_topic_name: str,
    ) -> List[DiagnosticQuestion]:
        if not weak_prerequisites:
            raise GenerationError("No weak prerequisites to generate questions for")

        count = question_count(len(weak_prerequisites), self.settings.max_diagnostic_questions)
        client = self._get_client()
        try:
            data = await chat_json(
                client,
                model=self.settings.diagnostic_model,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=build_user_prompt(weak_prerequisites, target_topic_name, count),
            )
        except Exception as exc:
            raise GenerationError(f"Diagnostic generation failed: {exc}") from exc

        questions = to_questions(data.get("questions"), weak_prerequisites)[:count]
        logger.info(
            "Generated diagnostic questions",
            extra={"target_topic": target_topic_name, "question_count": len(questions)},
        )
        return questions
