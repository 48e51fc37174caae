"""
Shared OpenAI plumbing for the tutoring collaborators.
"""

import json
import re
from typing import Any, Dict, Optional

from src.config import Settings

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def usable_api_key(settings: Settings) -> Optional[str]:
    """The configured key, or None when it is empty or a placeholder."""
    key = (settings.openai_api_key or "").strip()
    if not key or key.startswith("sk-your-"):
        return None
    return key


def make_client(api_key: str) -> Any:
    from openai import AsyncOpenAI
    return AsyncOpenAI(api_key=api_key)


def parse_json_object(content: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model reply (code fences and chatter allowed).

    Raises:
        ValueError: no JSON object in the reply
    """
    content = (content or "").strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[-1].rsplit("```", 1)[0]
    match = _JSON_OBJECT.search(content)
    if not match:
        raise ValueError("No JSON object in model reply")
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Model reply is not a JSON object")
    return parsed


async def chat_json(
    client: Any,
    *,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.3,
    max_tokens: int = 1200,
) -> Dict[str, Any]:
    """One chat completion whose reply must be a JSON object."""
    response = await client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=temperature,
        max_tokens=max_tokens,
        response_format={"type": "json_object"},
    )
    content = response.choices[0].message.content if response.choices else ""
    return parse_json_object(content or "")
