"""
Topics and hooks.

A topic is a reusable unit of conversation (a signup form, a checkout, a
menu); hooks are the ways a topic can interpret and answer a message.
"""
from topics.definitions import (
    Hook, Topic,
    define_hook, define_pattern, define_topic,
)
from topics.registry import TopicRegistry, GLOBAL_TOPIC, MAIN_TOPIC

__all__ = [
    "Hook", "Topic",
    "define_hook", "define_pattern", "define_topic",
    "TopicRegistry", "GLOBAL_TOPIC", "MAIN_TOPIC",
]
