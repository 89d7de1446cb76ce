"""
Subcommander faults (errors and validation findings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue,
  grouped by domain so logs and searches stay predictable.
- DispatchError: base type carrying a message + options (title, code, hint, …)
  that knows how to render itself through rich.
- ValidationFault: a (path, message) record produced by --validate; collected,
  never raised.
- trigger(): central entry point that surfaces an error and yields the exit code.

Rendering
- Colour off: a single plain line “<tool>: <message>”, nothing else, so shell
  wrappers can grep the output.
- Colour on: the same line styled, followed by a dim “→ hint” line when the
  fault carries a hint.
- Completion mode passes silent=True: nothing is printed at all, the exit code
  still reports the failure.

Integration
- The core (parser, binder, resolver, launcher) raises; cli.main() catches
  DispatchError once and calls trigger(fault, tool=..., colorful=..., silent=...).
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType
from typing import NamedTuple

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - configuration (100xx): dispatcher flags before “--” and user mode flags
    - resolution (110xx): libexec lookup and sub command walking
    - binding (120xx): usage-declared arguments against the residual tokens
    - launch (130xx): the operating system refused to start the script
    - validation (140xx): findings of --validate (reported, never raised)
    """
    # --- configuration errors (10xxx) ---
    MISSING_FLAG                = 10001
    UNKNOWN_FLAG                = 10002
    FLAG_VALUE_REQUIRED         = 10003
    INVALID_FLAG_VALUE          = 10004
    CONFLICTING_FLAGS           = 10005

    # --- resolution errors (11xxx) ---
    LIBEXEC_NOT_FOUND           = 11001
    UNKNOWN_SUBCOMMAND          = 11002

    # --- binding errors (12xxx) ---
    MISSING_ARGUMENT            = 12001
    EXCLUSIVE_CONFLICT          = 12002

    # --- launch errors (13xxx) ---
    LAUNCH_FAILURE              = 13001

    # --- validation findings (14xxx) ---
    UNMATCHED_BRACKETS          = 14001
    UNMATCHED_ANGLE_BRACKETS    = 14002


class DispatchError(Exception):
    """
    Base type of every fatal dispatcher error.

    Options (all optional, read through self.options)
    - title: short, lowercase headline (“missing argument”).
    - code: FaultCode of the fault.
    - hint: one actionable sentence.
    - tool: the configured tool name (used as the message prefix).
    - colorful: style the rendering.
    - silent: render nothing (completion mode).
    Any other keyword is kept as context for callers (argument, token, path, …).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "error-message": "#FF4DA6",  # friendly pinky message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if colorful else "")

        message = str(self)
        tool = self.options.get("tool")
        # Messages built by the launcher already start with the tool name.
        if tool and not message.startswith(tool + ":"):
            line = Text.assemble(text(tool, "prog-name"), ": ", text(message, "error-message"))
        else:
            line = text(message, "error-message")

        if not colorful or not self.options.get("hint"):
            return line

        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options["hint"], "hint"))
        return Group(line, hint)

    def __trigger__(self):
        if not self.options.get("silent", False):
            console.print(self, soft_wrap=True, highlight=False)
        return 1

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(DispatchError): ...
class LibexecNotFoundError(DispatchError): ...
class UnknownSubcommandError(DispatchError): ...
class MissingArgumentError(DispatchError): ...
class ExclusiveConflictError(DispatchError): ...
class LaunchError(DispatchError): ...


class ValidationFault(NamedTuple):
    """
    One --validate finding, tied to the script that produced it.

    Validation faults are accumulated across the whole tree and reported
    together; only their count influences the exit code.
    """
    path: str
    message: str
    code: FaultCode = FaultCode.UNMATCHED_BRACKETS

    def __str__(self):
        return f"{self.path}: {self.message}"

    def __rich__(self):
        return Text.assemble((self.path, "bold"), ": ", self.message)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options and return the exit code.

    contract
    - fault must provide __trigger__ and __replace__ methods (see DispatchError).
    - options are merged into the fault via copy.replace(fault, **options).

    typical options
    - tool, colorful, silent.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "DispatchError",
    "ConfigurationError",
    "LibexecNotFoundError",
    "UnknownSubcommandError",
    "MissingArgumentError",
    "ExclusiveConflictError",
    "LaunchError",
    "ValidationFault",
    "trigger",
)
