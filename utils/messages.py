"""
Hook result normalization.

Handlers may answer with a bare string, a structured message, a dict shaped
like one, or a list of any of these. The dispatcher runs every result through
normalize_hook_result() once so the host only ever sees structured messages.
"""
from __future__ import annotations

from typing import Any, Union

from pydantic import TypeAdapter

from models.schemas import HookResult, OptionMessage, OutgoingMessage, OutgoingStringMessage

_outgoing_adapter: TypeAdapter = TypeAdapter(OutgoingMessage)


def to_outgoing_message(item: Any) -> Union[OutgoingStringMessage, OptionMessage]:
    if isinstance(item, (OutgoingStringMessage, OptionMessage)):
        return item
    if isinstance(item, str):
        return OutgoingStringMessage(text=item)
    return _outgoing_adapter.validate_python(item)


def normalize_hook_result(result: HookResult) -> list[Union[OutgoingStringMessage, OptionMessage]]:
    """None/empty → [], a list passes through item by item, anything else is wrapped."""
    if not result:
        return []
    items = result if isinstance(result, (list, tuple)) else [result]
    return [to_outgoing_message(item) for item in items]
