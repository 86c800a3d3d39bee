"""
Conversation snapshots — plain-data form of a conversation.

The engine does not store anything; the host keeps the conversation between
messages. Topics hold functions, so a conversation is dumped with topics
referenced by name and resume tokens by callback name, and reloaded against
a TopicRegistry.

    raw = dump_conversation(response.conversation)   # → dict, JSON-friendly
    ...
    conversation = load_conversation(raw, registry)
"""
from __future__ import annotations

import structlog
from typing import Any, Union

from context.stack import Context, Conversation, ResumeToken
from models.errors import UnknownCallbackError
from models.schemas import ContextSnapshot, ConversationSnapshot
from topics.registry import TopicRegistry

logger = structlog.get_logger()


def snapshot_conversation(conversation: Conversation) -> ConversationSnapshot:
    contexts = []
    for ctx in conversation.contexts:
        resume_callback = None
        if ctx.resume is not None:
            if ctx.resume.fn is not None:
                raise ValueError(
                    f"Context '{ctx.topic.name}' holds a callable resume token which cannot be "
                    f"serialized; register it in the parent topic's callbacks and resume by name"
                )
            resume_callback = ctx.resume.callback
        contexts.append(ContextSnapshot(
            topic=ctx.topic.name,
            parent_topic=ctx.parent_topic.name if ctx.parent_topic else None,
            data=ctx.data,
            active_hooks=list(ctx.active_hooks),
            disabled_hooks=list(ctx.disabled_hooks),
            resume_callback=resume_callback,
        ))
    return ConversationSnapshot(contexts=contexts, virgin=conversation.virgin)


def dump_conversation(conversation: Conversation) -> dict[str, Any]:
    return snapshot_conversation(conversation).model_dump()


def load_conversation(
    raw: Union[dict[str, Any], ConversationSnapshot],
    registry: TopicRegistry,
) -> Conversation:
    """
    Rebuild a conversation, resolving topic names against the registry.
    Raises UnknownTopicError or UnknownCallbackError when the snapshot refers
    to a topic or resume callback the registry no longer has.
    """
    snapshot = raw if isinstance(raw, ConversationSnapshot) else ConversationSnapshot.model_validate(raw)

    contexts = []
    for snap in snapshot.contexts:
        parent = None
        if snap.parent_topic is not None:
            parent = registry.global_topic if snap.parent_topic == registry.global_topic_name \
                else registry.require(snap.parent_topic)

        resume = None
        if snap.resume_callback:
            resume = ResumeToken(callback=snap.resume_callback)
            try:
                resume.resolve(parent)
            except UnknownCallbackError:
                logger.error("unknown_resume_callback",
                             topic=snap.topic,
                             parent=snap.parent_topic,
                             callback=snap.resume_callback)
                raise

        contexts.append(Context(
            topic=registry.require(snap.topic),
            data=snap.data,
            parent_topic=parent,
            active_hooks=list(snap.active_hooks),
            disabled_hooks=list(snap.disabled_hooks),
            resume=resume,
        ))

    logger.debug("conversation_loaded",
                 depth=len(contexts),
                 virgin=snapshot.virgin)
    return Conversation(contexts=contexts, virgin=snapshot.virgin)
