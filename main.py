import asyncio
import sys

from rich.console import Console

from parlance import *
from parlance import diagnostics, docs

console = Console()


class Terminal:
    """A console stand-in for a chat client (and its only channel)."""

    def chat(self, text):
        console.print(text, markup=False)

    def get_channels(self):
        return [self]


async def main(lines):
    config = Config.load({"NOT_FOUND_MESSAGE": "YES", "DEBUGLEVEL": "INFO"}, bold=lambda text: f"*{text}*")
    diagnostics.configure(config)
    registry = Registry(config)
    docs.install(registry)

    (registry.create("roll")
        .help("Rolls a die")
        .manual("Rolls a die with the given number of sides (6 by default)")
        .argument(argument("number", "sides").integer().positive().optional(6))
        .exec(lambda client, args, reply, event: reply(f"rolled a {args['sides']}-sided die")))

    (registry.create("say")
        .help("Repeats a text, optionally shouting it")
        .argument(argument("string", "tone").whitelist(["loud", "quiet"]).optional("quiet"))
        .argument(argument("rest", "text").min(1))
        .exec(lambda client, args, reply, event: reply(
            args["text"].upper() if args["tone"] == "loud" else args["text"]
        )))

    dispatcher = Dispatcher(registry, backend=Terminal())
    client = Terminal()
    for line in lines:
        await dispatcher.dispatch(Event(line.rstrip("\n"), client, Mode.PRIVATE))


if __name__ == '__main__':
    asyncio.run(main(sys.stdin))
