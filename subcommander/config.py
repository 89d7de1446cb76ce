"""
Dispatcher configuration: the flags before “--”.

A wrapper script usually execs the dispatcher as

    subcommander --name tool --executable "$0" --relative .. -- "$@"

Flags
- --name NAME                   tool name (required); names the env variables
- --absolute PATH               absolute root directory, or
- --executable PATH --relative PATH
                                root = dirname(abspath(PATH)) / relative
- --color auto|always|never     default auto (tty and no NO_COLOR)
- --infer-long-arguments        accept unambiguous long-flag prefixes
- --log-level LEVEL             debug, info, warning (default) or error

Value flags accept both spaced (--name tool) and inline (--name=tool) forms.
Errors raise ConfigurationError with a position-first message.
"""
import os
import re
import sys
from collections import deque
from typing import NamedTuple

from .faults import *
from .logs import LEVELS
from .utils import *

COLORS = ("auto", "always", "never")


class Config(NamedTuple):
    """
    Resolved dispatcher settings (immutable).
    """
    name: str
    root: str
    color: str = "auto"
    infer_long_arguments: bool = False
    log_level: str = "warning"

    @property
    def libexec(self):
        """
        The directory whose tree defines the command namespace.
        """
        return os.path.join(self.root, "libexec")

    @property
    def prefix(self):
        """
        Environment variable prefix: “_TOOL_” for a tool named “tool”.

        Characters a shell variable name cannot hold become “_”, so
        “my-tool” exports “_MY_TOOL_ROOT”.
        """
        return "_%s_" % re.sub(r"[^A-Z0-9]", "_", self.name.upper())

    @property
    def cache(self):
        """
        Per-tool cache directory hint handed to scripts: “<cache>/<tool>/cache”.
        """
        base = os.environ.get("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
        return os.path.join(base, self.name, "cache")

    @property
    def colorful(self):
        match self.color:
            case "always":
                return True
            case "never":
                return False
            case _:
                return "NO_COLOR" not in os.environ and sys.stdout.isatty()


def _error(message, code, hint, **context):
    return ConfigurationError(message, title="bad dispatcher flags", code=code, hint=hint, **context)


def parse_config(argv, /):
    """
    Split argv on the first “--” and read the dispatcher flags before it.

    Parameters
    - argv: Sequence[str] without the program name.

    Returns
    - (Config, list[str]): the configuration and the user tokens after “--”
      (empty when no separator was given).

    Raises
    - ConfigurationError: unknown flag, missing value, bad --color/--log-level,
      missing --name, or an invalid root combination.
    """
    argv = list(argv)
    try:
        separator = argv.index("--")
    except ValueError:
        flags, tokens = argv, []
    else:
        flags, tokens = argv[:separator], argv[separator + 1:]

    options = {"color": "auto", "log-level": "warning", "infer-long-arguments": False}
    valued = ("name", "absolute", "executable", "relative", "color", "log-level")
    queue = deque(enumerate(flags, 1))

    while queue:
        position, token = queue.popleft()
        name, equals, inline = token.partition("=")

        if name == "--infer-long-arguments" and not equals:
            options["infer-long-arguments"] = True
            continue

        if not name.startswith("--") or name[2:] not in valued:
            raise _error(
                "unknown argument: %s (%s position)" % (token, ordinal(position)),
                FaultCode.UNKNOWN_FLAG,
                "dispatcher flags are --name, --absolute, --executable, --relative, "
                "--color, --infer-long-arguments and --log-level; user arguments go after '--'",
                token=token,
            )

        if equals:
            value = inline
        elif queue:
            _, value = queue.popleft()
        else:
            raise _error(
                "%s requires a value (%s position)" % (name, ordinal(position)),
                FaultCode.FLAG_VALUE_REQUIRED,
                "pass it as '%s <value>' or '%s=<value>'" % (name, name),
                token=token,
            )
        options[name[2:]] = value

    if not options.get("name"):
        raise _error("--name is required", FaultCode.MISSING_FLAG, "add '--name <tool>' before '--'")

    if options["color"] not in COLORS:
        raise _error(
            "--color must be one of %s, not %r" % (", ".join(COLORS), options["color"]),
            FaultCode.INVALID_FLAG_VALUE,
            "use '--color auto' to colour only terminals",
        )

    if options["log-level"].lower() not in LEVELS:
        raise _error(
            "--log-level must be one of %s, not %r" % (", ".join(LEVELS), options["log-level"]),
            FaultCode.INVALID_FLAG_VALUE,
            "use '--log-level debug' to trace resolution and launches",
        )

    absolute = options.get("absolute")
    executable = options.get("executable")
    relative = options.get("relative")

    if absolute and (executable or relative):
        raise _error(
            "cannot use --absolute with --executable or --relative",
            FaultCode.CONFLICTING_FLAGS,
            "keep either --absolute or the --executable/--relative pair",
        )
    if bool(executable) != bool(relative):
        raise _error(
            "--executable and --relative must be used together",
            FaultCode.CONFLICTING_FLAGS,
            "add the missing one of --executable/--relative",
        )
    if not absolute and not executable:
        raise _error(
            "must provide either --absolute or --executable with --relative",
            FaultCode.MISSING_FLAG,
            "point the dispatcher at the directory holding libexec",
        )

    if absolute:
        if not os.path.isabs(absolute):
            raise _error(
                "--absolute path must be absolute",
                FaultCode.INVALID_FLAG_VALUE,
                "use --executable and --relative for paths relative to the wrapper",
            )
        root = os.path.normpath(absolute)
    else:
        root = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(executable)), relative))

    config = Config(
        name=options["name"],
        root=root,
        color=options["color"],
        infer_long_arguments=options["infer-long-arguments"],
        log_level=options["log-level"].lower(),
    )
    return config, tokens


__all__ = (
    "COLORS",
    "Config",
    "parse_config",
)
