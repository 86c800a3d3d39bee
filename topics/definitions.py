"""
Topic and Hook definitions.

A Topic is a named unit of conversation state: it knows how to build its
context data (init), which hooks it offers while active, and which named
callbacks a child topic may resume into when it exits.

A Hook is a parse/handler pair. parse() decides whether the hook applies to
the incoming message and returns a parse result (None means "no match");
handler() turns that parse result into outbound messages.

Both are plain immutable data holding async functions:

    greet = define_pattern("greet", [r"^hi$"], say_hello)
    main = define_topic("main", init_main, hooks=[greet])
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from models.schemas import IncomingStringMessage, RegexParseResult

if TYPE_CHECKING:
    from context.stack import State

InitFunc = Callable[[Any, Any], Awaitable[Any]]
ParseFunc = Callable[["State", Any], Awaitable[Any]]
HandlerFunc = Callable[["State", Any], Awaitable[Any]]
CallbackFunc = Callable[["State", Any], Awaitable[Any]]
AfterInitFunc = Callable[["State"], Awaitable[Any]]


@dataclass(frozen=True, eq=False)
class Hook:
    name: str
    parse: ParseFunc
    handler: HandlerFunc

    def __repr__(self):
        return f"<Hook {self.name}>"


@dataclass(frozen=True, eq=False)
class Topic:
    name: str
    init: InitFunc
    is_root: bool = False
    hooks: tuple[Hook, ...] = ()
    callbacks: dict[str, CallbackFunc] = field(default_factory=dict)
    after_init: Optional[AfterInitFunc] = None

    def __repr__(self):
        root = " root" if self.is_root else ""
        return f"<Topic {self.name}{root} [{len(self.hooks)} hooks]>"


# ──────────────────────────────────────────────────────────────
#  Constructors
# ──────────────────────────────────────────────────────────────

def define_topic(
    name: str,
    init: InitFunc,
    is_root: bool = False,
    hooks: list[Hook] = None,
    callbacks: dict[str, CallbackFunc] = None,
    after_init: AfterInitFunc = None,
) -> Topic:
    return Topic(
        name=name,
        init=init,
        is_root=is_root,
        hooks=tuple(hooks or ()),
        callbacks=dict(callbacks or {}),
        after_init=after_init,
    )


def define_hook(name: str, parse: ParseFunc, handler: HandlerFunc) -> Hook:
    return Hook(name=name, parse=parse, handler=handler)


def define_pattern(
    name: str,
    patterns: list[Union[str, re.Pattern]],
    handler: HandlerFunc,
) -> Hook:
    """
    Build a hook that matches string messages against an ordered list of
    regular expressions.

    Patterns are searched (not anchored) in order; the first one that matches
    produces a RegexParseResult with the pattern index and the match groups.
    Media messages never match.
    """
    compiled = [p if isinstance(p, re.Pattern) else re.compile(p) for p in patterns]

    async def parse(state: "State", message: Any) -> Optional[RegexParseResult]:
        if not isinstance(message, IncomingStringMessage):
            return None
        for i, pattern in enumerate(compiled):
            match = pattern.search(message.text)
            if match:
                return RegexParseResult(
                    message=message,
                    i=i,
                    matches=[match.group(0), *match.groups()],
                )
        return None

    return Hook(name=name, parse=parse, handler=handler)
