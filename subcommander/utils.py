"""
Subcommander utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the parser, the binder and the command layer.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None and "".
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value (None included) passes through.

- rename(callable, name)
  • Assign a stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are copied.

- ordinal(number)
  • “first”, “second”, …, “11th”, used by position-first fault messages.

- pluralize(word, count)
  • Tiny English pluralizer for aggregate messages (“1 fault”, “3 faults”).

Stability and contract
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(2), ordinal(12), ordinal(23)
    ('second', '12th', '23rd')
"""
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, "" or () are preserved; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce("", "fallback")     -> ""
    """
    return object if object is not Unset else default


def rename(callable, name, /):
    """
    Set __name__/__qualname__ on a callable and return it (fluent style).
    """
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    callable.__qualname__ = name
    callable.__name__ = name
    return callable


def _snapshot(object):
    # Fresh containers all the way down so callers cannot mutate backing state.
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_snapshot, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_snapshot, object.values())))
    elif isinstance(object, Set):
        return set(map(_snapshot, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Container values are returned as fresh copies, so mutating the result never
    touches the instance.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _snapshot(getattr(self, "_" + name))

    return property(rename(getter, name))


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with the usual English suffixes.
    """
    if not isinstance(number, int) or number < 1:
        raise ValueError("ordinal() argument must be a positive integer")
    words = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")
    if number <= len(words):
        return words[number - 1]
    # 11th, 12th, 13th (and 111th, 112th, …) take "th" regardless of the last digit
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def pluralize(word, count, /):
    """
    Return "<count> <word>" with a naive English plural when count != 1.

    Only the regular suffix rules are covered (s/sh/ch/x/z -> es,
    consonant + y -> ies, otherwise s); the words passed in are our own.
    """
    if count == 1:
        return f"{count} {word}"
    if word.endswith(("s", "sh", "ch", "x", "z")):
        plural = word + "es"
    elif word.endswith("y") and word[-2:-1] not in tuple("aeiou"):
        plural = word[:-1] + "ies"
    else:
        plural = word + "s"
    return f"{count} {plural}"


Unset = UnsetType()
"""
Sentinel for “not provided”.

Use Unset as a default when None (or "") is a meaningful value, then
materialize it with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "pluralize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
