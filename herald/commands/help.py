"""Built-in help command.

``help`` lists every visible command; ``help <name>`` shows one command's
description, aliases and usage. Output uses Slack-style markup and goes
out through ``State.reply`` like any other handler's.

The handler runs inside Dispatcher.process_message, which already holds
the registry's read lock, so it reads the registry without locking.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .base import State
    from .registry import CommandRegistry

HELP_COMMAND_NAME = "help"
HELP_DESCRIPTION = "View list of commands and their usage."
HELP_USAGE = ("", "`command name`")

NO_COMMANDS_TEXT = "No commands have been set!"
HELP_HINT_TEXT = "For help with a command, type `help [command name]`."
UNRECOGNIZED_COMMAND_FORMAT = (
    "Unrecognized command _{name}_.  Type *`help`* to view a list of all available commands."
)


def render_command_list(registry: "CommandRegistry") -> str:
    """Render every non-hidden command with its description."""
    if registry.is_empty:
        return NO_COMMANDS_TEXT
    parts: List[str] = ["Available commands:\n", ">>>"]
    for cmd in registry.visible_commands():
        line = f"*{cmd.name}*"
        if cmd.description:
            line += f" - _{cmd.description}_"
        parts.append(line + "\n")
    parts.append("\n" + HELP_HINT_TEXT)
    return "".join(parts)


def render_command_help(registry: "CommandRegistry", name: str) -> str:
    """Render description, aliases and usage for one command.

    The name is looked up as an exact command first, then against the
    regexp commands.
    """
    cmd_name = name.lower()
    cmd = registry.lookup(cmd_name) or registry.find_regexp_command(cmd_name)
    if cmd is None:
        return UNRECOGNIZED_COMMAND_FORMAT.format(name=cmd_name)

    text = f"*{cmd_name}*"
    if cmd.description:
        text += f" - _{cmd.description}_"
    text += "\n\n"
    aliases = cmd.alias_names
    if aliases:
        text += "Alias: _" + ", ".join(aliases) + "_\n"
    if cmd.usage:
        text += ">>>"
        for use in cmd.usage:
            text += f"{cmd_name} {use}\n"
    return text


def help_handler(state: "State", registry: "CommandRegistry") -> None:
    if not state.fields:
        state.reply(render_command_list(registry))
    else:
        state.reply(render_command_help(registry, state.fields[0]))
