#!/usr/bin/env python3
"""
Console Chat — Talk to a small demo topic set from the terminal.

Usage:
    python scripts/console_chat.py
    python scripts/console_chat.py --config config/settings.yaml --user alice

Type "help" for commands, "signup" to start a nested topic, "bye" to
clear the conversation, "restart" to start over, Ctrl-D to quit.
"""
import asyncio
import json
import os
import sys
import argparse

# Ensure app root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def build_demo_topics():
    from context.stack import clear_all_topics, enter_topic, exit_topic
    from topics import define_hook, define_pattern, define_topic

    # ── global ────────────────────────────────────────

    async def show_help(state, result):
        return [
            "Commands: hi, signup, restart, bye, help",
            {"type": "option", "values": ["hi", "signup", "restart", "bye"]},
        ]

    async def restart(state, result):
        # main is a root topic, entering it replaces the whole stack
        await enter_topic(state, main_topic, global_topic)
        return "Starting over. Say hi!"

    async def goodbye(state, result):
        if state.conversation.contexts:
            await clear_all_topics(state)
        return "Bye. Type restart to talk again."

    async def no_data(args=None, user_data=None):
        return None

    global_topic = define_topic(
        "global",
        init=no_data,
        hooks=[
            define_pattern("help", [r"^help$"], show_help),
            define_pattern("restart", [r"^restart$"], restart),
            define_pattern("bye", [r"^(bye|quit)$"], goodbye),
        ],
    )

    # ── signup (child topic) ──────────────────────────

    async def init_signup(args=None, user_data=None):
        return {"step": "name", "name": None}

    async def any_text(state, message):
        return getattr(message, "text", None)

    async def answer(state, text):
        data = state.context.data
        if data["step"] == "name":
            data["name"] = text.strip()
            data["step"] = "age"
            return f"Thanks {data['name']}. How old are you?"
        if not text.strip().isdigit():
            return "Please enter your age as a number."
        return await exit_topic(state, {"name": data["name"], "age": int(text)})

    signup_topic = define_topic(
        "signup",
        init=init_signup,
        hooks=[define_hook("answer", any_text, answer)],
    )

    # ── main ──────────────────────────────────────────

    async def init_main(args=None, user_data=None):
        return {"signups": 0}

    async def greet(state, result):
        return "Hello! Type 'signup' to register."

    async def start_signup(state, result):
        await enter_topic(state, signup_topic, state.context.topic, resume="on_signup_done")
        return "What's your name?"

    async def on_signup_done(state, args):
        state.context.data["signups"] += 1
        return f"Registered {args['name']} ({args['age']})."

    main_topic = define_topic(
        "main",
        init=init_main,
        is_root=True,
        hooks=[
            define_pattern("greet", [r"^(hi|hello)$"], greet),
            define_pattern("signup", [r"^signup$"], start_signup),
        ],
        callbacks={"on_signup_done": on_signup_done},
    )

    return [global_topic, main_topic, signup_topic]


async def run_console(config_path: str = None, user: str = "console", show_state: bool = False):
    from config.settings import load_settings
    settings = load_settings(config_path)

    from core.engine import init
    engine = init(build_demo_topics(), settings.engine)

    print(f"{settings.app_name} console. Ctrl-D to quit.")
    conversation = None
    while True:
        try:
            text = input("> ")
        except EOFError:
            print()
            break

        response = await engine({"type": "string", "text": text.strip()}, conversation, {"user": user})
        conversation = response.conversation

        for msg in response.messages:
            if msg.type == "option":
                print("  [" + " | ".join(msg.values) + "]")
            else:
                print(f"  {msg.text}")
        if show_state:
            print(json.dumps(response.to_dict()["conversation"], indent=2))


def main():
    parser = argparse.ArgumentParser(description="Interactive dialogue console")
    parser.add_argument("--config", default=None, help="Path to settings.yaml")
    parser.add_argument("--user", default="console", help="Opaque user id passed as user data")
    parser.add_argument("--show-state", action="store_true", help="Print the conversation snapshot after each turn")
    args = parser.parse_args()

    asyncio.run(run_console(args.config, args.user, args.show_state))


if __name__ == "__main__":
    main()
