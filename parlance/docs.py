"""
Built-in documentation commands.

- help [filter]: lists the enabled, permitted commands that have a help text.
  The optional filter is a case-insensitive regular expression searched in
  the name, the aliases and the help text.
- man <command>: prints the usage and the manual (or, failing that, the help
  text) of every available command with that name.

Both are ordinary consumers of the registry API; install() registers them.
"""
import re

from .arguments import argument
from .commands import Registry


def _search(pattern, command):
    return bool(
        pattern.search(command.command) or
        any(pattern.search(alias) for alias in command.aliases) or
        pattern.search(command.helptext)
    )


def install(registry, /):
    """
    Register help and man on the registry and return both commands.
    """
    if not isinstance(registry, Registry):
        raise TypeError("install() argument must be a registry")
    bold = registry.config.bold

    def helper(client, resolved, reply, event):
        commands = [command for command in registry.available(client) if command.has_help]
        if filter := resolved.get("filter"):
            try:
                pattern = re.compile(filter, re.IGNORECASE)
            except re.error:
                pattern = re.compile(re.escape(filter), re.IGNORECASE)
            commands = [command for command in commands if _search(pattern, command)]
        reply(f"{bold(str(len(commands)))} Commands found:")
        for command in commands:
            reply(f"{bold(f'{registry.prefix}{command.command}')} - {command.helptext}")

    def manual(client, resolved, reply, event):
        commands = registry.available(client, resolved["command"])
        if not commands:
            return reply("No command with valid manual documentation found! Maybe did you misstype the command?")
        for command in commands:
            text = "No manual for this command available!"
            if command.has_manual:
                text = command.manual_text
            elif command.has_help:
                text = command.helptext
            reply(f"\nManual for command: {bold(command.command)}\n{bold('Usage:')} {command.usage}\n\n{text}")

    help = (registry.create("help")
        .help("Displays this text")
        .manual("Displays a list of useable commands")
        .manual("you can search/filter for a specific commands by adding a keyword")
        .argument(argument("string", "filter").min(1).optional())
        .exec(helper))

    man = (registry.create("man")
        .help("Displays detailed help about a command if available")
        .manual("Displays detailed usage help for a specific command")
        .argument(argument("string", "command").min(1))
        .exec(manual))

    return help, man


__all__ = (
    "install",
)
