"""Shared test fixtures for DialogStack."""
import pytest

from config.settings import EngineConfig, reset_settings
from context.stack import Context, Conversation, State, enter_topic, exit_topic
from core.engine import DialogueEngine, init
from topics import Topic, TopicRegistry, define_pattern, define_topic


async def no_data(args=None, user_data=None):
    return None


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv("DIALOGSTACK_CONFIG", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def global_topic() -> Topic:
    async def help_handler(state, result):
        return "global help"

    async def x_handler(state, result):
        return "X"

    async def y_handler(state, result):
        return "Y"

    return define_topic(
        "global",
        init=no_data,
        hooks=[
            define_pattern("help", [r"^help$"], help_handler),
            define_pattern("x", [r"^x$"], x_handler),
            define_pattern("y", [r"^y$"], y_handler),
        ],
    )


@pytest.fixture
def child_topic() -> Topic:
    """A nested topic that hands {"total": 5} back to its parent on 'done'."""
    async def init_child(args=None, user_data=None):
        return {"count": (args or {}).get("start", 0)}

    async def add(state, result):
        state.context.data["count"] += int(result.matches[1])
        return f"count is {state.context.data['count']}"

    async def done(state, result):
        return await exit_topic(state, {"total": 5})

    return define_topic(
        "child",
        init=init_child,
        hooks=[
            define_pattern("add", [r"^add (\d+)$"], add),
            define_pattern("done", [r"^done$"], done),
        ],
    )


@pytest.fixture
def main_topic(child_topic) -> Topic:
    async def init_main(args=None, user_data=None):
        return {"greeted": 0, "totals": []}

    async def greet(state, result):
        state.context.data["greeted"] += 1
        return "hello"

    async def start_child(state, result):
        await enter_topic(state, child_topic, state.context.topic, resume="on_child_done")
        return "entered child"

    async def on_child_done(state, args):
        state.context.data["totals"].append(args["total"])
        return f"total was {args['total']}"

    return define_topic(
        "main",
        init=init_main,
        hooks=[
            define_pattern("greet", [r"^hi$"], greet),
            define_pattern("child", [r"^child$"], start_child),
        ],
        callbacks={"on_child_done": on_child_done},
    )


@pytest.fixture
def all_topics(global_topic, main_topic, child_topic) -> list[Topic]:
    return [global_topic, main_topic, child_topic]


@pytest.fixture
def registry(all_topics) -> TopicRegistry:
    reg = TopicRegistry()
    reg.register_all(all_topics)
    return reg


@pytest.fixture
def engine(all_topics) -> DialogueEngine:
    return init(all_topics, EngineConfig())


@pytest.fixture
def conversation() -> Conversation:
    return Conversation(virgin=False)


@pytest.fixture
def global_context(global_topic) -> Context:
    return Context(topic=global_topic)


@pytest.fixture
def root_state(conversation, global_context) -> State:
    """A state acting from outside the stack, as the engine does on first contact."""
    return State(context=global_context, conversation=conversation, user_data={"user": "u1"})
