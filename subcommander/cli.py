"""
Subcommander entry point: dispatcher flags, user modes, dispatch.

    subcommander [dispatcher flags] -- [mode flags] [commands_with_args]...

Mode flags (recognized anywhere among the user tokens)
- --usage                 print the usage line of the resolved command
- --help, -h              print its help
- --commands              list its sub commands (one per line)
- --extension EXT         with --commands: only names ending in “.EXT”
- --completions           print completion candidates (errors stay silent)
- --validate              check usage lines of the whole subtree
- (none)                  invoke: run the script, or print a directory's help

Conflict policy
- --usage together with --help/-h is rejected.
- Any other combination: the last mode flag wins.

Exit codes
- invoke relays the script's code; validate is 0 iff nothing was found;
  every DispatchError exits 1.
"""
import enum
import os
import sys
from typing import NamedTuple

from rich.console import Console

from . import logs
from .commands import resolve, styled
from .config import parse_config
from .faults import *
from .launcher import Launcher
from .utils import pluralize

logger = logs.get_logger(__name__)


class Mode(enum.Enum):
    INVOKE = "invoke"
    USAGE = "usage"
    HELP = "help"
    COMMANDS = "commands"
    COMPLETIONS = "completions"
    VALIDATE = "validate"


_MODES = {
    "--usage": Mode.USAGE,
    "--help": Mode.HELP,
    "-h": Mode.HELP,
    "--commands": Mode.COMMANDS,
    "--completions": Mode.COMPLETIONS,
    "--validate": Mode.VALIDATE,
}


class UserArguments(NamedTuple):
    mode: Mode = Mode.INVOKE
    tokens: tuple = ()
    extension: str | None = None


def parse_user_args(config, tokens, /):
    """
    Pull the mode flags out of the user tokens.

    Returns
    - UserArguments(mode, tokens, extension): tokens keep their order and
      exclude every recognized mode flag.

    Raises
    - ConfigurationError: --usage combined with --help/-h, or --extension
      without a value. The fault carries the mode parsed so far under
      the “mode” option, so completion mode stays silent even then.
    """
    mode = Mode.INVOKE
    seen = set()
    extension = None
    remaining = []
    tokens = list(tokens)
    index = 0

    while index < len(tokens):
        token = tokens[index]
        index += 1
        if token in _MODES:
            mode = _MODES[token]
            seen.add(mode)
        elif token == "--extension":
            if index >= len(tokens):
                raise ConfigurationError(
                    "--extension requires a value",
                    title="missing value",
                    code=FaultCode.FLAG_VALUE_REQUIRED,
                    hint="pass it as '--extension sh' or '--extension=sh'",
                    mode=mode,
                )
            extension = tokens[index]
            index += 1
        elif token.startswith("--extension="):
            extension = token.partition("=")[2]
        else:
            remaining.append(token)

    if {Mode.USAGE, Mode.HELP} <= seen:
        raise ConfigurationError(
            "the argument '--usage' cannot be used with '--help'",
            title="conflicting modes",
            code=FaultCode.CONFLICTING_FLAGS,
            hint="Usage: %s --usage [commands_with_args]..." % config.name,
            mode=mode,
        )

    return UserArguments(mode, tuple(remaining), extension or None)


def _emit(console, text):
    console.print(text, soft_wrap=True, markup=False, highlight=False)


def dispatch(config, arguments, /, launcher=None, *, console=None):
    """
    Resolve the command tokens and act according to the mode.

    Returns
    - int exit code.

    Raises
    - DispatchError: resolution, binding and launch errors (the caller renders
      them; in completion mode they must stay silent).
    """
    launcher = launcher if launcher is not None else Launcher()
    colorful = config.colorful
    if console is None:
        console = Console(force_terminal=True if config.color == "always" else None, no_color=not colorful)

    command = resolve(config, arguments.tokens)
    logger.debug("%s mode on %r", arguments.mode.value, command)

    match arguments.mode:
        case Mode.INVOKE:
            return command.invoke(launcher, console=console)
        case Mode.USAGE:
            _emit(console, styled(command.usage, colorful))
            return 0
        case Mode.HELP:
            _emit(console, styled(command.help, colorful))
            return 0
        case Mode.COMMANDS:
            for subcommand in command.subcommands():
                if arguments.extension is None or os.path.splitext(subcommand.name)[1] == "." + arguments.extension:
                    _emit(console, subcommand.name)
            return 0
        case Mode.COMPLETIONS:
            for candidate in command.completions(launcher):
                _emit(console, candidate)
            return 0
        case Mode.VALIDATE:
            faults = command.validate()
            for fault in faults:
                _emit(console, str(fault))
            if faults:
                logger.debug("validation found %s", pluralize("fault", len(faults)))
            return 1 if faults else 0

    raise AssertionError("unreachable mode %r" % arguments.mode)


def main(argv=None, /, launcher=None):
    """
    Console entry point; returns the process exit code.

    - argv: list[str] without the program name (defaults to sys.argv[1:]).
    - launcher: Launcher override (tests).
    """
    argv = sys.argv[1:] if argv is None else list(argv)

    try:
        config, tokens = parse_config(argv)
    except ConfigurationError as fault:
        return trigger(fault, tool="Error", colorful=False)

    logs.configure(config.log_level, colorful=config.colorful)

    arguments = UserArguments()
    try:
        arguments = parse_user_args(config, tokens)
        return dispatch(config, arguments, launcher)
    except DispatchError as fault:
        logger.debug("dispatch failed: %r", fault)
        return trigger(
            fault,
            tool=config.name,
            colorful=config.colorful,
            silent=fault.options.get("mode", arguments.mode) is Mode.COMPLETIONS,
        )


__all__ = (
    "Mode",
    "UserArguments",
    "parse_user_args",
    "dispatch",
    "main",
)
