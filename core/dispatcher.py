"""
Message Dispatcher — Resolves which hook answers an incoming message.

Resolution order:
  1. Hooks of the active context's topic, in declared order
  2. Hooks of the global topic, in declared order, filtered by the active
     context's active_hooks (whitelist) / disabled_hooks (blacklist)

The first hook whose parse() returns something wins; its handler's result
is normalized into a list of outbound messages. Parse and handler errors
propagate to the caller untouched.
"""
from __future__ import annotations

import structlog
from typing import Any, Optional

from context.stack import Context, Conversation, State, active_context
from models.schemas import HookResult
from topics.definitions import Hook, Topic
from topics.registry import TopicRegistry
from utils.messages import normalize_hook_result

logger = structlog.get_logger()


async def run_hook(hook: Hook, state: State, message: Any) -> tuple[bool, HookResult]:
    """Returns (matched, handler_result). An unmatched hook yields (False, None)."""
    parse_result = await hook.parse(state, message)
    if parse_result is None:
        return False, None
    logger.debug("hook_matched",
                 hook=hook.name,
                 topic=state.context.topic.name if state.context else None)
    return True, await hook.handler(state, parse_result)


def is_global_hook_visible(hook_name: str, context: Optional[Context]) -> bool:
    """
    Whitelist overrides blacklist, the blacklist only applies when there is
    no whitelist, and everything is open when neither is set.
    """
    if context is None:
        return True
    if hook_name in context.active_hooks:
        return True
    return not context.active_hooks and (
        not context.disabled_hooks or hook_name not in context.disabled_hooks
    )


async def _try_hooks(
    hooks: tuple[Hook, ...],
    state: State,
    message: Any,
    visible=None,
) -> tuple[bool, HookResult, Optional[Hook]]:
    for hook in hooks:
        if visible is not None and not visible(hook.name):
            logger.debug("hook_filtered", hook=hook.name)
            continue
        matched, result = await run_hook(hook, state, message)
        if matched:
            return True, result, hook
    return False, None, None


async def process_message(
    message: Any,
    conversation: Conversation,
    user_data: Any,
    global_context: Context,
    global_topic: Topic,
    topics: TopicRegistry,
) -> list:
    context = active_context(conversation)
    handled, result, hook = False, None, None

    if context is not None:
        current_topic = topics.require(context.topic.name)
        handled, result, hook = await _try_hooks(
            current_topic.hooks,
            State(context=context, conversation=conversation, user_data=user_data),
            message,
        )

    if not handled:
        handled, result, hook = await _try_hooks(
            global_topic.hooks,
            State(context=context or global_context, conversation=conversation, user_data=user_data),
            message,
            visible=lambda name: is_global_hook_visible(name, context),
        )

    if not handled:
        logger.info("message_unhandled",
                    topic=context.topic.name if context else None,
                    message_type=getattr(message, "type", None))
        return []

    messages = normalize_hook_result(result)
    logger.info("hook_handled",
                hook=hook.name,
                topic=context.topic.name if context else None,
                messages=len(messages))
    return messages
