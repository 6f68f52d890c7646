# src/taskmaster/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..core.ports import Console
from ..core.state import AppState

logger = logging.getLogger(__name__)

PROMPT = "\n> "
EXIT_WORD = "exit"


class StdConsole:
    """Console port over stdin/stdout."""

    def ask(self, prompt: str) -> str:
        return input(prompt)

    def say(self, text: str) -> None:
        print(text, flush=True)


def run_console_loop(
    state: AppState,
    console: Console | None = None,
    registry: CommandRegistry | None = None,
) -> None:
    """
    Read-dispatch-print until `exit`, EOF or Ctrl+C.

    One command runs at a time, including its nested prompts; `exit` is only
    recognised here, between commands.
    """
    console = console or StdConsole()
    registry = registry or command_registry
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "Taskmaster"))

    logger.info("Console connector started.")
    console.say(f"{app_name} - Task Management System")
    console.say(f'Type "task help" for available commands or "{EXIT_WORD}" to quit.')

    while True:
        try:
            user_input = console.ask(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            console.say("")
            break

        if not user_input:
            continue

        if user_input.lower() == EXIT_WORD:
            logger.info("Console exit command received.")
            break

        try:
            reply = registry.handle(state, user_input, console)
        except (EOFError, KeyboardInterrupt):
            # Input closed in the middle of a prompt: nothing more can be read.
            logger.info("Console input closed during a command, exiting.")
            break
        except Exception:
            logger.exception("Command handler crashed: %s", user_input)
            reply = "Internal error while handling a command."

        if reply is not None:
            console.say(reply)

    logger.info("Console connector finished.")
