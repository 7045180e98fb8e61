"""
Command line parsing and dispatch for the breaktime executable.

A command line is ``breaktime [host flags...] <command> [options...]``.
``help`` and ``version`` are answered by the invoking process; every other
command is forwarded to the running instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from breaktime.breaktime import logger as app_logger
from core.duration import parse_duration
from core.until_morning import time_until_morning

_LOGGER = app_logger.get_logger()

PROGRAM_NAME = "breaktime"
HOST_FLAG_PREFIX = "--"
INDEFINITE_PAUSE_MS = 1


@dataclass(frozen=True)
class OptionDescriptor:
    long: str
    short: str
    description: str
    with_value: bool

    @property
    def key(self) -> str:
        return self.long[2:]

    def matches(self, token: str) -> bool:
        return token == self.long or token == self.short


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    description: str
    options: Tuple[OptionDescriptor, ...] = ()


@dataclass(frozen=True)
class Example:
    cmd: str
    description: str


ALL_OPTIONS: Mapping[str, OptionDescriptor] = MappingProxyType(
    {
        "title": OptionDescriptor(
            long="--title",
            short="-T",
            description="Specify title for next break (Long or Mini)",
            with_value=True,
        ),
        "text": OptionDescriptor(
            long="--text",
            short="-t",
            description="Specify text for next break (Long Break only)",
            with_value=True,
        ),
        "noskip": OptionDescriptor(
            long="--noskip",
            short="-n",
            description="Do not skip directly to this break (Long or Mini)",
            with_value=False,
        ),
        "duration": OptionDescriptor(
            long="--duration",
            short="-d",
            description=(
                "Specify duration for pausing breaks (Pause only) "
                "[indefinitely|until-morning|HHhMMm|HHh|MMm|MM]"
            ),
            with_value=True,
        ),
    }
)


def _command(name: str, description: str, *options: str) -> CommandDescriptor:
    return CommandDescriptor(name, description, tuple(ALL_OPTIONS[key] for key in options))


ALL_COMMANDS: Mapping[str, CommandDescriptor] = MappingProxyType(
    {
        cmd.name: cmd
        for cmd in (
            _command("help", "Show this help message"),
            _command("version", "Show current breaktime version"),
            _command("reset", "Reset breaks"),
            _command("pause", "Pause breaks", "duration"),
            _command("resume", "Resume from a pause"),
            _command("toggle", "Toggle breaks between resume/paused"),
            _command("mini", "Skips to and customize next Mini Break", "title", "noskip"),
            _command("long", "Skips to and customize next Long Break", "text", "title", "noskip"),
        )
    }
)

ALL_EXAMPLES: Tuple[Example, ...] = (
    Example(f"{PROGRAM_NAME} pause", "Pause breaks indefinitely"),
    Example(f"{PROGRAM_NAME} pause -d 60", "Pause breaks for one hour"),
    Example(f"{PROGRAM_NAME} pause -d 1h", "Pause breaks for one hour"),
    Example(f"{PROGRAM_NAME} pause -d 1h20m", "Pause breaks for one hour and twenty minutes"),
    Example(f"{PROGRAM_NAME} pause -d until-morning", "Pause breaks until tomorrow morning"),
    Example(f'{PROGRAM_NAME} mini -T "Stretch up !"', 'Skips to next Mini Break with "Stretch up!" title'),
    Example(f'{PROGRAM_NAME} long -T "Stretch up !" --noskip', 'Sets next Break title to "Stretch up!"'),
    Example(
        f'{PROGRAM_NAME} long -T "Stretch up !" -t "Go stretch !"',
        'Skips to next long break, sets title to "Stretch up !" and text to "Go stretch !"',
    ),
)

LOCAL_COMMANDS = frozenset({"help", "version"})


def strip_host_flags(raw_args: Sequence[str]) -> List[str]:
    """Drop the leading run of ``--`` flags added by the host runtime."""
    index = 0
    while index < len(raw_args) and raw_args[index].startswith(HOST_FLAG_PREFIX):
        index += 1
    return list(raw_args[index:])


def has_command_arguments(raw_args: Sequence[str]) -> bool:
    return bool(strip_host_flags(raw_args))


class Command:
    """
    A parsed command line.

    ``command`` is a registry key, or ``None`` when the requested command is
    not supported. ``options`` maps option keys (long form without ``--``)
    to their value, or ``True`` for flags. It is ``None`` for commands that
    take no options.
    """

    def __init__(self, raw_args: Sequence[str], version: str) -> None:
        self.version = version
        self.supported = ALL_COMMANDS
        self.command: Optional[str] = None
        self.requested: Optional[str] = None
        self.options: Optional[Dict[str, Any]] = None

        self.parse(strip_host_flags(raw_args))

    def parse(self, args: Sequence[str]) -> None:
        self.requested = args[0] if args else "help"
        if self.requested not in self.supported:
            self.command = None
            _LOGGER.error("Error: command {} is not supported", self.requested)
            return

        self.command = self.requested
        self.options = self.get_opts(args[1:])

    def get_opts(self, tokens: Sequence[str]) -> Optional[Dict[str, Any]]:
        declared = self.supported[self.command].options
        if not declared:
            return None

        options: Dict[str, Any] = {}
        index = 0
        while index < len(tokens):
            token = tokens[index]
            index += 1
            option = next((opt for opt in declared if opt.matches(token)), None)

            if option is None:
                _LOGGER.error("Error: option {} is not valid for command {}", token, self.command)
                continue

            if not option.with_value:
                options[option.key] = True
                continue

            if index >= len(tokens):
                _LOGGER.error("Error: option {} of command {} requires a value", token, self.command)
                continue

            options[option.key] = tokens[index]
            index += 1

        return options

    @property
    def is_valid(self) -> bool:
        return self.command is not None

    def option(self, key: str, default: Any = None) -> Any:
        if not self.options:
            return default
        return self.options.get(key, default)

    def duration_to_ms(self, settings) -> int:
        """
        Resolve the ``--duration`` option into milliseconds.

        ``1`` means "no timed resume". An unparseable value yields
        ``INVALID_DURATION`` and must be rejected by the caller.
        """
        duration = self.option("duration")
        if not duration:
            return INDEFINITE_PAUSE_MS

        if duration == "indefinitely":
            return INDEFINITE_PAUSE_MS
        if duration == "until-morning":
            return time_until_morning(settings)
        return parse_duration(duration)

    def check_in_main(self) -> bool:
        """Return True when the command has to run in the main instance."""
        if not self.command:
            return False
        return self.command not in LOCAL_COMMANDS

    def run_or_forward(self) -> bool:
        """
        Run ``help`` and ``version`` here. Returns True when the command
        still has to be forwarded to the running instance.
        """
        if self.command == "help":
            self.help()
            return False
        if self.command == "version":
            self.ver()
            return False
        if self.command is None:
            return False

        _LOGGER.info("Forwarding command to main instance")
        return True

    def to_message(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "options": dict(self.options) if self.options is not None else None,
        }

    @classmethod
    def from_message(cls, message: Mapping[str, Any], version: str) -> "Command":
        """Rebuild a command forwarded by another process without re-parsing it."""
        cmd = cls.__new__(cls)
        cmd.version = version
        cmd.supported = ALL_COMMANDS
        cmd.requested = message.get("command")
        cmd.command = cmd.requested if cmd.requested in ALL_COMMANDS else None
        options = message.get("options")
        cmd.options = dict(options) if options is not None and cmd.command else None
        if cmd.command is None:
            _LOGGER.error("Error: forwarded command {} is not supported", cmd.requested)
        return cmd

    def ver(self) -> None:
        print(f"Breaktime version {self.version}")

    def cmd_help(self) -> str:
        suffix = " [options]"
        header = f"Usage: {PROGRAM_NAME} <command> [options]\n\nCommands:"
        cmds = [f"{name}{suffix if desc.options else ''}" for name, desc in self.supported.items()]
        descriptions = [desc.description for desc in self.supported.values()]
        return header + _columns((f"{PROGRAM_NAME} {cmd}" for cmd in cmds), descriptions)

    def options_help(self) -> str:
        opts = list(ALL_OPTIONS.values())
        width = max(len(opt.long) for opt in opts)
        lines = [f"{opt.short}, {opt.long.ljust(width)} {opt.description}" for opt in opts]
        return "\n\nOptions:" + "".join(f"\n\t{line}" for line in lines)

    def examples_help(self) -> str:
        return "\n\nExamples:" + _columns(
            (ex.cmd for ex in ALL_EXAMPLES),
            [ex.description for ex in ALL_EXAMPLES],
        )

    def help(self) -> None:
        print("".join([self.cmd_help(), self.options_help(), self.examples_help()]))


def _columns(left: Iterable[str], right: Sequence[str]) -> str:
    left = list(left)
    width = max((len(item) for item in left), default=0)
    return "".join(f"\n\t{item.ljust(width)} {desc}" for item, desc in zip(left, right))
