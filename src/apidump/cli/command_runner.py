"""Declarative sub-command registry, argv parser and dispatcher.

A :class:`CommandRunner` owns an explicit :class:`CommandRegistry`.
Sub-commands are declared once at startup through a configure callback::

    runner = CommandRunner("apidump", "API description tools", CommandRegistry())

    def configure(c: SubCommandBuilder) -> None:
        c.argument("startupassembly", "path to the application entry module")
        c.option("--output", "where to write the document")
        c.on_run(handle)

    runner.register("tofile", "writes the API description", configure)
    exit_code = runner.run(sys.argv[1:])

Parsing rules
-------------
* Tokens starting with ``--`` select an option; an option that takes a
  value consumes exactly the next token, even when it starts with ``--``.
* Every other token fills the next positional argument.
* Missing positionals, surplus positionals and unknown options are usage
  errors: help is printed, ``USAGE_ERROR`` is returned and the handler
  is never called.
* Exceptions raised by a handler are **not** caught here.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field

from apidump.cli import exit_codes
from apidump.cli.console import console, escape
from apidump.exceptions import (
    CommandConfigurationError,
    DuplicateCommandError,
    UsageError,
)

FLAG_PREFIX: str = "--"
HIDDEN_PREFIX: str = "_"
HELP_FLAGS: frozenset[str] = frozenset({"-h", "--help"})
VERSION_FLAGS: frozenset[str] = frozenset({"-V", "--version"})


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Argument:
    """A required positional argument, bound in declaration order."""

    name: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class Option:
    """An optional ``--flag``; absence means default behaviour."""

    name: str
    description: str = ""
    takes_value: bool = True


class ParsedInvocation(Mapping[str, str]):
    """Read-only mapping of argument/option name to its string value.

    Option keys keep their ``--`` prefix.  :attr:`raw_args` holds the
    tokens that followed the sub-command name, exactly as received.
    """

    __slots__ = ("_values", "raw_args")

    def __init__(self, values: Mapping[str, str], raw_args: Sequence[str] = ()) -> None:
        self._values: dict[str, str] = dict(values)
        self.raw_args: tuple[str, ...] = tuple(raw_args)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParsedInvocation({self._values!r}, raw_args={self.raw_args!r})"


Handler = Callable[[ParsedInvocation], int]


@dataclass(frozen=True, slots=True)
class SubCommand:
    """An immutable, registered sub-command."""

    name: str
    description: str
    arguments: tuple[Argument, ...]
    options: tuple[Option, ...]
    handler: Handler = field(repr=False)

    @property
    def hidden(self) -> bool:
        """Underscore-prefixed commands are left out of the help listing."""
        return self.name.startswith(HIDDEN_PREFIX)

    def find_option(self, token: str) -> Option | None:
        return next((opt for opt in self.options if opt.name == token), None)

    def usage(self, prog: str) -> str:
        parts = [prog, self.name]
        parts.extend(f"<{arg.name}>" for arg in self.arguments)
        for opt in self.options:
            parts.append(f"[{opt.name} <value>]" if opt.takes_value else f"[{opt.name}]")
        return " ".join(parts)


class SubCommandBuilder:
    """Collects declarations inside a ``configure`` callback."""

    def __init__(self) -> None:
        self._arguments: list[Argument] = []
        self._options: list[Option] = []
        self._handler: Handler | None = None

    def argument(self, name: str, description: str = "") -> None:
        if not name or name.startswith("-"):
            raise CommandConfigurationError(f"Invalid argument name: {name!r}")
        self._ensure_unique(name)
        self._arguments.append(Argument(name, description))

    def option(self, name: str, description: str = "", *, takes_value: bool = True) -> None:
        if not name.startswith(FLAG_PREFIX) or len(name) <= len(FLAG_PREFIX):
            raise CommandConfigurationError(
                f"Option names must start with '{FLAG_PREFIX}': {name!r}",
            )
        if name in HELP_FLAGS:
            raise CommandConfigurationError(f"{name!r} is reserved for help.")
        self._ensure_unique(name)
        self._options.append(Option(name, description, takes_value))

    def on_run(self, handler: Handler) -> None:
        self._handler = handler

    def build(self, name: str, description: str) -> SubCommand:
        if self._handler is None:
            raise CommandConfigurationError(
                f"Sub-command '{name}' has no handler.",
                hint="Call on_run(handler) inside the configure callback.",
            )
        return SubCommand(
            name=name,
            description=description,
            arguments=tuple(self._arguments),
            options=tuple(self._options),
            handler=self._handler,
        )

    def _ensure_unique(self, name: str) -> None:
        declared = {a.name for a in self._arguments} | {o.name for o in self._options}
        if name in declared:
            raise CommandConfigurationError(f"'{name}' is declared twice.")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class CommandRegistry:
    """Name → :class:`SubCommand` table.  Duplicate names are rejected."""

    def __init__(self) -> None:
        self._commands: dict[str, SubCommand] = {}

    def register(
        self,
        name: str,
        description: str,
        configure: Callable[[SubCommandBuilder], None],
    ) -> SubCommand:
        if not name or name.startswith("-"):
            raise CommandConfigurationError(f"Invalid sub-command name: {name!r}")
        if name in self._commands:
            raise DuplicateCommandError(f"Sub-command '{name}' is already registered.")
        builder = SubCommandBuilder()
        configure(builder)
        command = builder.build(name, description)
        self._commands[name] = command
        return command

    def get(self, name: str) -> SubCommand | None:
        return self._commands.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[SubCommand]:
        return iter(self._commands.values())

    def visible(self) -> list[SubCommand]:
        return [cmd for cmd in self if not cmd.hidden]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class _HelpRequested(Exception):
    """Internal signal: ``--help`` appeared where a flag was expected."""


def parse_invocation(command: SubCommand, tokens: Sequence[str]) -> ParsedInvocation:
    """Bind *tokens* to *command*'s declarations.

    Raises
    ------
    UsageError
        When the tokens do not match the declared shape.
    """
    values: dict[str, str] = {}
    filled = 0
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in HELP_FLAGS:
            raise _HelpRequested
        if token.startswith(FLAG_PREFIX):
            option = command.find_option(token)
            if option is None:
                raise UsageError(f"Unknown option '{token}'.")
            if not option.takes_value:
                values[option.name] = ""
                i += 1
                continue
            if i + 1 >= len(tokens):
                raise UsageError(f"Option '{token}' expects a value.")
            values[option.name] = tokens[i + 1]
            i += 2
            continue
        if filled >= len(command.arguments):
            raise UsageError(f"Unexpected argument '{token}'.")
        values[command.arguments[filled].name] = token
        filled += 1
        i += 1

    missing = command.arguments[filled:]
    if missing:
        names = ", ".join(f"<{arg.name}>" for arg in missing)
        raise UsageError(f"Missing required argument(s): {names}.")

    return ParsedInvocation(values, tokens)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class CommandRunner:
    """Parses argv against a :class:`CommandRegistry` and dispatches."""

    def __init__(
        self,
        prog: str,
        description: str,
        registry: CommandRegistry,
        *,
        version: str | None = None,
    ) -> None:
        self.prog = prog
        self.description = description
        self.registry = registry
        self.version = version

    def register(
        self,
        name: str,
        description: str,
        configure: Callable[[SubCommandBuilder], None],
    ) -> SubCommand:
        return self.registry.register(name, description, configure)

    def run(self, argv: Sequence[str]) -> int:
        """Dispatch *argv* and return the process exit code."""
        if not argv:
            self.print_usage()
            return exit_codes.USAGE_ERROR

        head, tokens = argv[0], list(argv[1:])
        if head in HELP_FLAGS:
            self.print_usage()
            return exit_codes.SUCCESS
        if head in VERSION_FLAGS and self.version is not None:
            console.print(f"{self.prog} {self.version}")
            return exit_codes.SUCCESS

        command = self.registry.get(head)
        if command is None:
            console.print(f"[bold red]Unknown command:[/bold red] {escape(head)}")
            self.print_usage()
            return exit_codes.USAGE_ERROR

        try:
            invocation = parse_invocation(command, tokens)
        except _HelpRequested:
            self.print_command_usage(command)
            return exit_codes.SUCCESS
        except UsageError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            self.print_command_usage(command)
            return exit_codes.USAGE_ERROR

        return command.handler(invocation)

    # ------------------------------------------------------------------
    # Help text
    # ------------------------------------------------------------------

    def print_usage(self) -> None:
        console.print(f"[bold]{escape(self.description)}[/bold]")
        console.print(f"\nUsage: {escape(self.prog)} [command] [arguments] [options]\n")

        commands = self.registry.visible()
        try:
            from rich.table import Table
        except ModuleNotFoundError:
            console.print("Commands:")
            for cmd in commands:
                console.print(f"  {cmd.name:<12} {cmd.description}")
            return

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Command", style="bold")
        table.add_column("Description")
        for cmd in commands:
            table.add_row(cmd.name, escape(cmd.description))
        console.print(table)

    def print_command_usage(self, command: SubCommand) -> None:
        console.print(f"\nUsage: {escape(command.usage(self.prog))}")
        if command.description:
            console.print(f"\n{escape(command.description)}")

        rows = [(f"<{arg.name}>", arg.description) for arg in command.arguments]
        rows.extend((opt.name, opt.description) for opt in command.options)
        if not rows:
            return
        console.print()
        width = max(len(name) for name, _ in rows)
        for name, description in rows:
            console.print(f"  {escape(name):<{width}}  {escape(description)}".rstrip())
