"""
Topic Registry — Validates topics and resolves them by name.

Contexts on a conversation's stack refer to their topic by identity while in
memory, but the dispatcher always re-resolves the active topic by name. That
way a conversation reloaded from a snapshot (or one that outlived a deploy)
runs against the currently registered definition.

Two names are reserved:
  global — hooks that are candidates in every context, never entered itself
  main   — entered automatically when a conversation sees its first message
"""
from __future__ import annotations

import structlog
from typing import Optional

from models.errors import UnknownTopicError
from topics.definitions import Topic

logger = structlog.get_logger()

GLOBAL_TOPIC = "global"
MAIN_TOPIC = "main"


async def _no_data(args=None, user_data=None):
    return None


class TopicRegistry:
    """
    Central registry for all topics of one engine instance.
    """

    def __init__(self, global_topic: str = GLOBAL_TOPIC, main_topic: str = MAIN_TOPIC):
        self.global_topic_name = global_topic
        self.main_topic_name = main_topic
        self._topics: dict[str, Topic] = {}
        self._empty_global: Optional[Topic] = None

    # ── Registration ──────────────────────────────────

    def register(self, topic: Topic):
        """Register a single topic."""
        errors = self._validate(topic)
        if topic.name in self._topics:
            errors.append(f"topic '{topic.name}' is already registered")
        if errors:
            logger.error("invalid_topic", topic=topic.name, errors=errors)
            raise ValueError(f"Invalid topic '{topic.name}': {'; '.join(errors)}")

        self._topics[topic.name] = topic
        logger.info("topic_registered",
                    topic=topic.name,
                    is_root=topic.is_root,
                    hooks=[h.name for h in topic.hooks])

    def register_all(self, topics: list[Topic]):
        for topic in topics:
            self.register(topic)
        logger.info("topics_loaded", count=len(topics))

    # ── Resolution ────────────────────────────────────

    def get(self, name: str) -> Optional[Topic]:
        return self._topics.get(name)

    def require(self, name: str) -> Topic:
        """Get a topic by name, raising if it is not registered."""
        topic = self._topics.get(name)
        if topic is None:
            logger.error("unknown_topic", topic=name)
            raise UnknownTopicError(name)
        return topic

    @property
    def global_topic(self) -> Topic:
        """The global topic, or an empty stand-in when none is registered."""
        topic = self._topics.get(self.global_topic_name)
        if topic is None:
            if self._empty_global is None:
                self._empty_global = Topic(name=self.global_topic_name, init=_no_data)
                logger.debug("global_topic_defaulted", topic=self.global_topic_name)
            topic = self._empty_global
        return topic

    @property
    def main_topic(self) -> Optional[Topic]:
        return self._topics.get(self.main_topic_name)

    def list_all(self) -> list[Topic]:
        return list(self._topics.values())

    def list_stack_topics(self) -> list[Topic]:
        """Every topic that can be entered, i.e. all but the global one."""
        return [t for t in self._topics.values() if t.name != self.global_topic_name]

    def __contains__(self, name: str) -> bool:
        return name in self._topics

    def __len__(self) -> int:
        return len(self._topics)

    # ── Validation ────────────────────────────────────

    def _validate(self, topic: Topic) -> list[str]:
        errors = []

        if not topic.name:
            errors.append("topic name is required")
        if not callable(topic.init):
            errors.append("init must be callable")

        seen = set()
        for hook in topic.hooks:
            if not hook.name:
                errors.append("hook name is required")
            elif hook.name in seen:
                errors.append(f"duplicate hook name '{hook.name}'")
            seen.add(hook.name)

        if topic.name == self.global_topic_name and topic.is_root:
            errors.append("the global topic cannot be a root topic")

        return errors
