r"""
Subcommander argument specifications: the usage mini-language and its binder.

Overview
- ArgKind / ArgSpec
  • One declared argument slot of a script, recovered from its “Usage:” line.
  • Kinds: positional (<name> / [name]), short flag ([-u]), long flag
    ([--force], [--value=VALUE], --value=VALUE) and rest ([args]...).

- parse_usage(line)
  • Tokenize a usage line on whitespace and classify every token by shape.
  • Permissive: decorative or malformed tokens are dropped, never raised on;
    usage lines are documentation first.

- bind(tokens, specs, *, infer=False)
  • Bind the residual tokens of an invocation against the declared specs.
  • Declared flags are claimed; anything else (unknown flags included) falls
    through to the positionals, then to the rest collection, so scripts keep
    control over their own flag vocabulary.

- BoundArguments
  • Ordered name → value mapping plus the rest tokens; serialize() renders the
    `name "value"` pairs handed to the script through its environment.

Grammar (first matching shape wins)
    {cmd}               placeholder, skipped
    <name>              required positional
    [name]... | [name] ...
    [name...]           rest
    [inner]!            inner classified below, exclusive
    [-x]                short flag
    [--name=VALUE]      optional valued long flag
    [--name]            long flag
    [name]              optional positional
    --name=VALUE        required valued long flag

Quick example:
    >>> specs = parse_usage("{cmd} <name> [--loud] [args]...")
    >>> bound = bind(["Ada", "--loud", "x", "y"], specs)
    >>> bound.serialize()
    'name "Ada" loud "true" args "x y"'
"""
import enum
import re
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .logs import get_logger
from .utils import *

logger = get_logger(__name__)


class ArgKind(enum.Enum):
    POSITIONAL = "positional"
    SHORT = "short"
    LONG = "long"
    REST = "rest"


class ArgSpec(NamedTuple):
    """
    One declared argument slot.

    Fields
    - name: identifier without its sigil ("loud" for [--loud], "u" for [-u]).
    - kind: ArgKind.
    - required: <name> positionals and bare --name=VALUE flags.
    - valued: long flags carrying “=VALUE”.
    - exclusive: tokens carrying a trailing “!” ([--force]!).
    - metavar: the value label after “=”, informational only.
    """
    name: str
    kind: ArgKind
    required: bool = False
    valued: bool = False
    exclusive: bool = False
    metavar: str | None = None

    @property
    def token(self):
        """
        The literal flag spelling on the command line (None for non-flags).
        """
        match self.kind:
            case ArgKind.SHORT:
                return "-" + self.name
            case ArgKind.LONG:
                return "--" + self.name
            case _:
                return None

    @property
    def switch(self):
        """
        True for flags that bind "true"/"false" rather than a value.
        """
        return self.kind in (ArgKind.SHORT, ArgKind.LONG) and not self.valued


def _classify(inner, /, *, exclusive=False):
    """
    Classify the inside of a bracketed token ([inner]) into an optional spec.
    """
    if inner.startswith("--"):
        name, separator, metavar = inner[2:].partition("=")
        if not name:
            return None
        if separator:
            return ArgSpec(name, ArgKind.LONG, valued=True, exclusive=exclusive, metavar=metavar or None)
        return ArgSpec(name, ArgKind.LONG, exclusive=exclusive)
    if inner.startswith("-"):
        if len(inner) < 2:
            return None
        return ArgSpec(inner[1:], ArgKind.SHORT, exclusive=exclusive)
    if not inner:
        return None
    return ArgSpec(inner, ArgKind.POSITIONAL, exclusive=exclusive)


def parse_usage(line, /):
    """
    Parse one usage line into an ordered tuple of ArgSpec.

    Parameters
    - line: str
      The usage template, with or without the “{cmd}” placeholder
      (e.g., "{cmd} <name> [-u] [--value=VAL] [args]...").

    Returns
    - tuple[ArgSpec, ...] in declaration order; at most one REST entry (a
      second rest token is dropped).

    Notes
    - Never raises on content: tokens matching no shape are skipped.
    - Order preserving and idempotent; re-parsing yields an equal tuple.
    """
    if not isinstance(line, str):
        raise TypeError("parse_usage() argument must be a string")

    tokens = line.split()
    specs = []
    index = 0

    def rest(name):
        # Keep the first rest declaration only; it swallows all the overflow anyway.
        if name and not any(spec.kind is ArgKind.REST for spec in specs):
            specs.append(ArgSpec(name, ArgKind.REST))

    while index < len(tokens):
        token = tokens[index]
        index += 1

        if token == "{cmd}":
            continue

        if token.startswith("<") and token.endswith(">") and len(token) > 2:
            specs.append(ArgSpec(token[1:-1], ArgKind.POSITIONAL, required=True))
            continue

        if match := re.fullmatch(r"\[([^\[\]]+)\]\.\.\.", token):
            rest(match[1])
            continue

        if match := re.fullmatch(r"\[([^\[\]]+)\]", token):
            inner = match[1]
            if index < len(tokens) and tokens[index] == "...":
                index += 1  # the separate "..." belongs to this token
                rest(inner)
            elif inner.endswith("..."):
                rest(inner[:-3])
            elif spec := _classify(inner):
                specs.append(spec)
            continue

        if match := re.fullmatch(r"\[([^\[\]]+)\]!", token):
            if spec := _classify(match[1], exclusive=True):
                specs.append(spec)
            continue

        if match := re.fullmatch(r"--([^=\s]+)=(.*)", token):
            specs.append(ArgSpec(match[1], ArgKind.LONG, required=True, valued=True, metavar=match[2] or None))
            continue

        # Decorative or malformed token: dropped on purpose.

    return tuple(specs)


class BoundArguments:
    """
    The outcome of bind(): values by name plus the rest tokens.

    - values: dict[str, str] in binding order; valueless flags hold "true"/"false".
    - rest: list[str] of overflow tokens, in order.
    - specs: the specs the tokens were bound against (declaration order).

    Mapping-style access (bound["name"], "name" in bound, bound.get(...)) reads
    the values.
    """
    values = mirror("values")
    rest = mirror("rest")
    specs = mirror("specs")

    def __init__(self, values, rest, specs):
        self._values = dict(values)
        self._rest = list(rest)
        self._specs = tuple(specs)

    def __getitem__(self, name):
        return self._values[name]

    def __contains__(self, name):
        return name in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if not isinstance(other, BoundArguments):
            return NotImplemented
        return (self._values, self._rest) == (other._values, other._rest)

    def __repr__(self):
        return f"bound-arguments(values={self._values!r}, rest={self._rest!r})"

    def get(self, name, default=None):
        return self._values.get(name, default)

    def serialize(self):
        """
        Render `name "value"` pairs, space-joined, in usage-declaration order.

        Names that were never bound (an absent optional positional, a valued
        flag without value) are skipped. Backslashes and double quotes inside
        values are backslash-escaped so a shell `eval` round-trips them.
        """
        pairs = []
        for spec in self._specs:
            if spec.name not in self._values:
                continue
            value = self._values[spec.name].replace("\\", "\\\\").replace('"', '\\"')
            pairs.append(f'{spec.name} "{value}"')
        return " ".join(pairs)


def _nondefault(value):
    return value not in ("false", "")


def bind(tokens, specs, /, *, infer=False):
    """
    Bind raw tokens against declared specs.

    Parameters
    - tokens: Iterable[str]
      The residual arguments of the invocation (everything after the script).
    - specs: Iterable[ArgSpec]
      The declared slots, usually parse_usage(...) output.
    - infer: bool (keyword-only)
      Accept an unambiguous prefix of a declared long flag (“--lo” for “--loud”).

    Returns
    - BoundArguments

    Raises
    - ExclusiveConflictError: an exclusive flag was combined with another
      exclusive flag or with any other non-default value.
    - MissingArgumentError: a required positional received no value (waived
      when an exclusive flag is in use).

    Behavior
    - Every valueless flag starts as "false" so consumers can tell “declared but
      absent” from “unknown”.
    - Unmatched tokens (unknown flags included) fill positionals in declaration
      order, then overflow into the rest collection. The rest collection is only
      bound (space-joined) when a rest spec was declared.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("bind() first argument must be an iterable of strings")

    tokens = list(tokens)
    specs = tuple(specs)

    values = {spec.name: "false" for spec in specs if spec.switch}
    positionals = [spec for spec in specs if spec.kind is ArgKind.POSITIONAL]
    remainder = next((spec for spec in specs if spec.kind is ArgKind.REST), None)
    longs = {spec.token: spec for spec in specs if spec.kind is ArgKind.LONG}
    shorts = {spec.token: spec for spec in specs if spec.kind is ArgKind.SHORT}

    overflow = []
    exclusive = None
    filled = 0
    index = 0

    def conflict(spec):
        return ExclusiveConflictError(
            "exclusive argument %s cannot be used with other arguments" % (spec.token or spec.name),
            title="exclusive argument conflict",
            code=FaultCode.EXCLUSIVE_CONFLICT,
            argument=spec,
            hint="run it alone (for example: %s)" % (spec.token or spec.name),
        )

    def assign(spec, value):
        nonlocal exclusive
        if spec.exclusive:
            if exclusive is not None:
                raise conflict(exclusive)
            exclusive = spec
        elif exclusive is not None and _nondefault(value):
            raise conflict(exclusive)
        values[spec.name] = value

    while index < len(tokens):
        token = tokens[index]
        index += 1

        spec = None
        inline = None

        if token.startswith("--"):
            name, separator, inline = token.partition("=")
            inline = inline if separator else None
            spec = longs.get(name)
            if spec is None and infer and len(name) > 2:
                candidates = [candidate for flag, candidate in longs.items() if flag.startswith(name)]
                if len(candidates) == 1:
                    spec, = candidates
        elif len(token) == 2 and token.startswith("-"):
            spec = shorts.get(token)

        if spec is not None:
            if not spec.valued:
                assign(spec, "true")
            elif inline is not None:
                assign(spec, inline)
            elif index < len(tokens):
                assign(spec, tokens[index])
                index += 1
            # A valued flag at the very end without value stays unbound.
            continue

        if filled < len(positionals):
            assign(positionals[filled], token)
            filled += 1
        else:
            overflow.append(token)

    if exclusive is not None and sum(map(_nondefault, values.values())) > 1:
        raise conflict(exclusive)

    if remainder is not None and overflow:
        values[remainder.name] = " ".join(overflow)

    # An exclusive flag stands alone, so required positionals are waived.
    for spec in positionals if exclusive is None else ():
        if spec.required and spec.name not in values:
            raise MissingArgumentError(
                "missing required argument: %s" % spec.name,
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                argument=spec,
                hint="pass a value for <%s>" % spec.name,
            )

    logger.debug("bound %r against %d specs: %r", tokens, len(specs), values)
    return BoundArguments(values, overflow, specs)


__all__ = (
    "ArgKind",
    "ArgSpec",
    "BoundArguments",
    "parse_usage",
    "bind",
)
