# dialogue.py — Ben/Brent speaker switching and turn handling
from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional

from .ai_client import complete_for_persona
from .config import logger
from .personas import BEN_GREETING, DEFAULT_PERSONA, PersonaId

USER = "user"

CONNECTION_TROUBLE = (
    "I apologize, but I'm having trouble connecting right now. Please try again in a moment."
)

_FATHER_WORDS = ("ben", "father", "dad")

# Only the model prompt is capped; switch detection always sees the whole message.
MAX_PROMPT_CHARS = 2000


def detect_speaker_switch(active: PersonaId, message: str | None) -> Optional[PersonaId]:
    """Return the persona the *next* turn should use, or None to stay put.

    Plain case-insensitive substring match, so "benefits" counts as a mention of Ben.
    """
    s = (message or "").lower()
    if active == PersonaId.BEN and "brent" in s:
        return PersonaId.BRENT
    if active == PersonaId.BRENT and any(w in s for w in _FATHER_WORDS):
        return PersonaId.BEN
    return None


@dataclass(frozen=True)
class ChatRequest:
    message: str
    speaker: PersonaId = DEFAULT_PERSONA


@dataclass(frozen=True)
class ChatResponse:
    response: str
    switch_speaker: Optional[PersonaId] = None
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response": self.response,
            "switchSpeaker": self.switch_speaker.value if self.switch_speaker else None,
        }


def handle_turn(req: ChatRequest) -> ChatResponse:
    # Switch is decided now but the reply still comes from the persona that was asked.
    switch_to = detect_speaker_switch(req.speaker, req.message)
    result = complete_for_persona(req.speaker, req.message[:MAX_PROMPT_CHARS])
    return ChatResponse(response=result.text, switch_speaker=switch_to, fallback=result.fallback)


# ---- Client-side transcript ----
@dataclass(frozen=True)
class Message:
    text: str
    sender: str
    id: str = field(default_factory=lambda: secrets.token_hex(8))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "sender": self.sender, "timestamp": self.timestamp.isoformat()}


class Transcript:
    """Append-only message log; lives only as long as the page that owns it."""

    def __init__(self):
        self._messages: List[Message] = []

    def append(self, message: Message) -> Message:
        self._messages.append(message)
        return message

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self._messages]


class ChatSession:
    """What the chat widget does per send: log the user line, ask, log the reply, maybe switch."""

    def __init__(self, transport: Callable[[ChatRequest], ChatResponse] = handle_turn,
                 speaker: PersonaId = DEFAULT_PERSONA, greet: bool = True):
        self.transport = transport
        self.speaker = speaker
        self.transcript = Transcript()
        if greet:
            self.transcript.append(Message(BEN_GREETING, PersonaId.BEN.value))

    def send(self, text: str) -> Optional[Message]:
        if not (text or "").strip():
            return None

        self.transcript.append(Message(text, USER))
        answering = self.speaker
        try:
            resp = self.transport(ChatRequest(message=text, speaker=answering))
        except Exception as e:
            logger.warning("Chat transport failed: %s", e)
            return self.transcript.append(Message(CONNECTION_TROUBLE, answering.value))

        if resp.switch_speaker:
            self.speaker = resp.switch_speaker
        return self.transcript.append(Message(resp.response, answering.value))
