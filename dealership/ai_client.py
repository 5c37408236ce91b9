# ai_client.py — OpenAI chat + image calls for the Ben/Brent personas
from __future__ import annotations

from typing import NamedTuple, Optional

import openai

from .config import Config, logger
from .personas import PERSONAS, PersonaId, get_persona

TROUBLE_THINKING = "Well, I'm having a bit of trouble with my thoughts right now. Could you repeat that?"

_client: Optional[openai.OpenAI] = None


class AIClientUnavailable(RuntimeError):
    pass


class GenerationResult(NamedTuple):
    text: str
    fallback: bool


def get_client() -> Optional[openai.OpenAI]:
    """Shared OpenAI client, built on first use. None when no API key is configured."""
    global _client
    if _client is None:
        if not Config.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set; AI calls will return fallbacks.")
            return None
        # No SDK-level retries: one outbound call per turn.
        _client = openai.OpenAI(
            api_key=Config.OPENAI_API_KEY,
            timeout=Config.OPENAI_TIMEOUT_S,
            max_retries=0,
        )
    return _client


def _failure_fallback() -> str:
    # Always Ben's line, whichever persona was speaking.
    return PERSONAS[PersonaId.BEN].fallback_response


def complete_for_persona(persona_id: PersonaId | str, user_input: str) -> GenerationResult:
    persona = get_persona(persona_id)
    client = get_client()
    if client is None:
        return GenerationResult(_failure_fallback(), True)

    try:
        resp = client.chat.completions.create(
            model=Config.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": persona.system_prompt},
                {"role": "user", "content": user_input},
            ],
            temperature=Config.AI_TEMPERATURE,
            max_tokens=Config.AI_MAX_TOKENS,
        )
        choices = resp.choices or []
        msg = choices[0].message.content if choices else None
    except Exception as e:
        logger.error("Chat completion failed (persona=%s): %s", persona.id.value, e, exc_info=True)
        return GenerationResult(_failure_fallback(), True)

    if not msg:
        logger.warning("Empty chat completion for persona=%s", persona.id.value)
        return GenerationResult(TROUBLE_THINKING, True)
    return GenerationResult(msg, False)


def generate_reply(persona_id: PersonaId | str, user_input: str) -> str:
    return complete_for_persona(persona_id, user_input).text


def generate_image_url(prompt: str, size: str, quality: str, style: str) -> Optional[str]:
    """Ask the image model for one picture and return its temporary URL, if any."""
    client = get_client()
    if client is None:
        raise AIClientUnavailable("OpenAI client is not configured")

    resp = client.images.generate(
        model=Config.IMAGE_MODEL,
        prompt=prompt,
        n=1,
        size=size,
        quality=quality,
        style=style,
    )
    data = resp.data or []
    if data and data[0].url:
        return data[0].url
    return None
