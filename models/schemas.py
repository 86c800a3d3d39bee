"""
Core data models for the DialogStack engine.
These are the wire types shared across all modules: what the host sends in,
what handlers send out, and the plain-dict snapshot of a conversation.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


# ──────────────────────────────────────────────────────────────
#  Inbound messages — what the host passes to the engine
# ──────────────────────────────────────────────────────────────

class MediaAttachment(BaseModel):
    url: str


class IncomingStringMessage(BaseModel):
    type: Literal["string"] = "string"
    text: str
    timestamp: Optional[float] = None


class IncomingMediaMessage(BaseModel):
    type: Literal["media"] = "media"
    attachments: list[MediaAttachment] = []
    timestamp: Optional[float] = None


IncomingMessage = Annotated[
    Union[IncomingStringMessage, IncomingMediaMessage],
    Field(discriminator="type"),
]

_incoming_adapter: TypeAdapter = TypeAdapter(IncomingMessage)


def parse_incoming_message(raw: Any) -> Union[IncomingStringMessage, IncomingMediaMessage]:
    """Validate a raw dict (or pass through a model) into an inbound message."""
    if isinstance(raw, (IncomingStringMessage, IncomingMediaMessage)):
        return raw
    return _incoming_adapter.validate_python(raw)


# ──────────────────────────────────────────────────────────────
#  Outbound messages — what handlers produce
# ──────────────────────────────────────────────────────────────

class OutgoingStringMessage(BaseModel):
    type: Literal["string"] = "string"
    text: str


class OptionMessage(BaseModel):
    """A set of choices the UI should offer the user."""
    type: Literal["option"] = "option"
    values: list[str] = []


OutgoingMessage = Annotated[
    Union[OutgoingStringMessage, OptionMessage],
    Field(discriminator="type"),
]

# A handler may return a bare string, a structured message, a dict in the
# shape of one, or a list of any of these.
HookResult = Any


# ──────────────────────────────────────────────────────────────
#  Regex parse result — produced by pattern hooks
# ──────────────────────────────────────────────────────────────

class RegexParseResult(BaseModel):
    """
    Outcome of a pattern hook's parse step.

    i:       index of the pattern that matched
    matches: whole match first, followed by the capture groups
    """
    message: IncomingStringMessage
    i: int
    matches: list[Optional[str]]


# ──────────────────────────────────────────────────────────────
#  Snapshots — plain-data form of a conversation for the host
# ──────────────────────────────────────────────────────────────

class ContextSnapshot(BaseModel):
    topic: str                                  # topic name, resolved on load
    parent_topic: Optional[str] = None
    data: Any = None                            # whatever the topic's init produced
    active_hooks: list[str] = []
    disabled_hooks: list[str] = []
    resume_callback: Optional[str] = None       # name in parent_topic.callbacks


class ConversationSnapshot(BaseModel):
    contexts: list[ContextSnapshot] = []
    virgin: bool = True
