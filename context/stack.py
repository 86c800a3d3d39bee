"""
Context Stack — The conversation's stack of active topics.

Every entered topic gets a Context (its private data plus hook filters) pushed
onto the conversation. The topmost Context is the active one: its topic's
hooks are tried first, and only it may change the stack.

Transitions:
  enter_topic   → push a new Context (or replace the whole stack for a root topic)
  exit_topic    → pop the active Context and resume the parent through its token
  clear_all_topics → drop every Context, no callbacks fired

A child topic hands a result back to its parent only through exit_topic:

    await enter_topic(state, signup, main, resume="on_signup_done")
    ...
    # later, inside a signup hook
    return await exit_topic(state, {"name": "Alice"})
    # → main.callbacks["on_signup_done"](parent_state, {"name": "Alice"})
"""
from __future__ import annotations

import structlog
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from models.errors import OutOfSyncContextError, UnknownCallbackError
from topics.definitions import CallbackFunc, Topic

logger = structlog.get_logger()


# ──────────────────────────────────────────────────────────────
#  Resume Token — the parent's continuation for a child topic
# ──────────────────────────────────────────────────────────────

@dataclass(eq=False)
class ResumeToken:
    """
    Captured when a child topic is entered and consumed when it exits.

    callback: name of a callback on the parent topic (survives snapshots)
    fn:       a direct callable, only valid within the current process
    """
    callback: Optional[str] = None
    fn: Optional[CallbackFunc] = None

    def resolve(self, parent_topic: Optional[Topic]) -> CallbackFunc:
        if self.fn is not None:
            return self.fn
        callbacks = parent_topic.callbacks if parent_topic else {}
        if self.callback not in callbacks:
            raise UnknownCallbackError(
                self.callback or "", parent_topic.name if parent_topic else "",
            )
        return callbacks[self.callback]

    def __repr__(self):
        return f"<ResumeToken {self.callback or getattr(self.fn, '__name__', 'fn')}>"


# ──────────────────────────────────────────────────────────────
#  Context / Conversation / State
# ──────────────────────────────────────────────────────────────

@dataclass(eq=False)
class Context:
    """One activation of a topic on the stack."""
    topic: Topic
    data: Any = None
    parent_topic: Optional[Topic] = None
    active_hooks: list[str] = field(default_factory=list)      # global-hook whitelist
    disabled_hooks: list[str] = field(default_factory=list)    # global-hook blacklist
    resume: Optional[ResumeToken] = None

    def __repr__(self):
        return f"<Context {self.topic.name}>"


@dataclass(eq=False)
class Conversation:
    """
    Everything the host must persist between messages.
    The last element of contexts is the active context.
    """
    contexts: list[Context] = field(default_factory=list)
    virgin: bool = True

    def __repr__(self):
        stack = " > ".join(c.topic.name for c in self.contexts) or "empty"
        return f"<Conversation [{stack}] virgin={self.virgin}>"


@dataclass(eq=False)
class State:
    """The view handed to every init/parse/handler/callback invocation."""
    context: Optional[Context]
    conversation: Conversation
    user_data: Any = None


def active_context(conversation: Conversation) -> Optional[Context]:
    return conversation.contexts[-1] if conversation.contexts else None


def _require_active(state: State, operation: str):
    top = active_context(state.conversation)
    if top is None or state.context is not top:
        logger.error("context_out_of_sync",
                     operation=operation,
                     context=state.context.topic.name if state.context else None,
                     active=top.topic.name if top else None)
        raise OutOfSyncContextError(
            operation, state.context.topic.name if state.context else "",
        )


def _make_resume_token(
    resume: Union[str, CallbackFunc, ResumeToken, None],
    parent_topic: Optional[Topic],
) -> Optional[ResumeToken]:
    if resume is None or isinstance(resume, ResumeToken):
        return resume
    if isinstance(resume, str):
        callbacks = parent_topic.callbacks if parent_topic else {}
        if resume not in callbacks:
            raise UnknownCallbackError(resume, parent_topic.name if parent_topic else "")
        return ResumeToken(callback=resume)
    return ResumeToken(fn=resume)


# ──────────────────────────────────────────────────────────────
#  Stack transitions
# ──────────────────────────────────────────────────────────────

async def enter_topic(
    state: State,
    new_topic: Topic,
    parent_topic: Optional[Topic],
    init_args: Any = None,
    resume: Union[str, CallbackFunc, ResumeToken, None] = None,
) -> None:
    """
    Activate new_topic on top of the stack.

    The new context's data comes from new_topic.init(init_args, user_data);
    if init raises, the stack is left untouched. Entering a root topic
    discards the whole stack without running any exit logic.

    resume: callback name on parent_topic, a callable, or a ResumeToken.
    It is invoked when the new topic exits.
    """
    conversation = state.conversation
    top = active_context(conversation)

    if top is not None and state.context is not top:
        logger.error("context_out_of_sync",
                     operation="enter",
                     topic=new_topic.name,
                     context=state.context.topic.name if state.context else None,
                     active=top.topic.name)
        raise OutOfSyncContextError("enter", new_topic.name)

    token = _make_resume_token(resume, parent_topic)

    new_context = Context(
        topic=new_topic,
        data=await new_topic.init(init_args, state.user_data),
        parent_topic=parent_topic,
        resume=token,
    )

    if new_topic.is_root:
        discarded = len(conversation.contexts)
        conversation.contexts = [new_context]
    else:
        discarded = 0
        conversation.contexts.append(new_context)

    logger.info("topic_entered",
                topic=new_topic.name,
                parent=parent_topic.name if parent_topic else None,
                is_root=new_topic.is_root,
                discarded=discarded,
                depth=len(conversation.contexts))

    if new_topic.after_init:
        await new_topic.after_init(
            State(context=new_context, conversation=conversation, user_data=state.user_data)
        )


async def exit_topic(state: State, args: Any = None) -> Any:
    """
    Pop the active context.

    If it was entered with a resume token, the parent's callback runs with a
    state built around the new top context and receives args; its return
    value is returned here. Otherwise returns None. An unresolvable callback
    raises UnknownCallbackError with the stack untouched.
    """
    _require_active(state, "exit")
    conversation = state.conversation
    top = state.context
    callback = top.resume.resolve(top.parent_topic) if top.resume else None

    popped = conversation.contexts.pop()
    token, popped.resume = popped.resume, None
    parent = active_context(conversation)

    logger.info("topic_exited",
                topic=popped.topic.name,
                resumed=parent.topic.name if parent else None,
                has_callback=token is not None,
                depth=len(conversation.contexts))

    if callback is None:
        return None

    return await callback(
        State(context=parent, conversation=conversation, user_data=state.user_data),
        args,
    )


async def clear_all_topics(state: State) -> None:
    """Drop every context on the stack. No callbacks are fired."""
    _require_active(state, "clear")
    conversation = state.conversation
    cleared = len(conversation.contexts)
    conversation.contexts = []
    logger.info("topics_cleared", cleared=cleared)


# ──────────────────────────────────────────────────────────────
#  Global hook visibility
# ──────────────────────────────────────────────────────────────

def disable_hooks_except(state: State, names: list[str]) -> None:
    """Only the named global hooks stay eligible in the active context."""
    state.context.active_hooks = list(names)


def disable_hooks(state: State, names: list[str]) -> None:
    """The named global hooks are skipped in the active context."""
    state.context.disabled_hooks = list(names)
