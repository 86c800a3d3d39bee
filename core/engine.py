"""
Dialogue Engine — The entry point the host application calls per message.

    engine = init([global_topic, main_topic, signup_topic])

    response = await engine({"type": "string", "text": "hi"})
    # response.messages     → [OutgoingStringMessage(text="hello")]
    # response.conversation → pass it back on the next call

    response = await engine(next_message, response.conversation, user_data)

On a conversation's first message the "main" topic is entered. The engine
then dispatches the message (see core.dispatcher) and returns the outbound
messages together with the mutated conversation. It keeps no state of its
own between calls; the host owns the conversation and must serialize calls
for the same conversation.
"""
from __future__ import annotations

import structlog
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from config.settings import EngineConfig, get_settings
from context.snapshot import dump_conversation
from context.stack import Context, Conversation, State, enter_topic
from core.dispatcher import process_message
from models.schemas import OptionMessage, OutgoingStringMessage, parse_incoming_message
from topics.definitions import Topic
from topics.registry import TopicRegistry

logger = structlog.get_logger()


@dataclass(eq=False)
class EngineResponse:
    """What the engine hands back after processing one message."""
    conversation: Conversation
    messages: list[Union[OutgoingStringMessage, OptionMessage]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "conversation": dump_conversation(self.conversation),
            "messages": [m.model_dump() for m in self.messages],
        }


class DialogueEngine:
    """
    Routes messages through a conversation's topic stack.
    One engine serves any number of conversations.
    """

    def __init__(self, registry: TopicRegistry, config: EngineConfig = None):
        self.registry = registry
        self.config = config or EngineConfig()
        self.global_topic: Topic = registry.global_topic

    def _global_context(self) -> Context:
        # Stands in as the acting context when there is nothing on the stack.
        return Context(topic=self.global_topic)

    async def handle(
        self,
        message: Any,
        conversation: Conversation = None,
        user_data: Any = None,
    ) -> EngineResponse:
        message = parse_incoming_message(message)
        if conversation is None:
            conversation = Conversation()

        global_context = self._global_context()

        if conversation.virgin:
            conversation.virgin = False
            main_topic = self.registry.main_topic
            logger.info("conversation_started",
                        main_topic=main_topic.name if main_topic else None)
            if main_topic and self.config.auto_enter_main:
                await enter_topic(
                    State(context=global_context, conversation=conversation, user_data=user_data),
                    main_topic,
                    self.global_topic,
                )

        messages = await process_message(
            message,
            conversation,
            user_data,
            global_context,
            self.global_topic,
            self.registry,
        )
        return EngineResponse(conversation=conversation, messages=messages)

    __call__ = handle

    def __repr__(self):
        return f"<DialogueEngine topics={[t.name for t in self.registry.list_all()]}>"


def init(
    topics: Union[list[Topic], TopicRegistry],
    options: Optional[EngineConfig] = None,
) -> DialogueEngine:
    """
    Build the engine entry point from a list of topics (or a ready registry).
    options defaults to the engine section of the loaded settings.

    A ready registry keeps the reserved topic names it was built with; only
    auto_enter_main is taken from options in that case.
    """
    config = options or get_settings().engine

    if isinstance(topics, TopicRegistry):
        registry = topics
        if (registry.global_topic_name, registry.main_topic_name) != (config.global_topic, config.main_topic):
            logger.warning("reserved_topic_names_ignored",
                           registry_global=registry.global_topic_name,
                           registry_main=registry.main_topic_name,
                           config_global=config.global_topic,
                           config_main=config.main_topic)
    else:
        registry = TopicRegistry(global_topic=config.global_topic, main_topic=config.main_topic)
        registry.register_all(list(topics))

    engine = DialogueEngine(registry, config)
    logger.info("dialogue_engine_ready",
                topics=[t.name for t in registry.list_stack_topics()],
                global_hooks=[h.name for h in engine.global_topic.hooks])
    return engine
