"""
Script metadata: the leading comment block of a script (or a README).

A documented script looks like

    #!/bin/sh
    # Summary: Greets someone
    # Usage: {cmd} <name> [--loud]
    #
    # Prints a greeting. With --loud, in capitals.

- an optional first “#!” line is ignored;
- “Summary:” sets the one-line summary, “Usage:” the usage template (parsed
  into specs by parse_usage);
- every other non-empty comment line belongs to the help body; empty comment
  lines (and blank lines) inside the block separate paragraphs;
- the first line that is neither a comment nor blank ends the block, and
  nothing after it is ever read.
"""
from collections.abc import Iterable
from typing import NamedTuple

from .arguments import parse_usage
from .logs import get_logger

logger = get_logger(__name__)


class UsageInfo(NamedTuple):
    """
    Parsed metadata of one script; immutable once extracted.
    """
    summary: str = ""
    usage: str = ""
    specs: tuple = ()
    help: str = ""


def _tagged(content, tag):
    # "Summary: x" / "Summary:x" -> "x"; None when the tag is absent
    stripped = content.lstrip()
    if stripped.startswith(tag):
        return stripped[len(tag):].strip()
    return None


def extract_usage(lines, /):
    """
    Extract a UsageInfo from the lines of a script.

    Parameters
    - lines: str | Iterable[str]
      Whole file contents, or an iterable of lines (a file object works and is
      consumed lazily: iteration stops at the end of the comment block).

    Returns
    - UsageInfo (all fields empty when the script carries no comment block).
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    elif not isinstance(lines, Iterable):
        raise TypeError("extract_usage() argument must be a string or an iterable of lines")

    summary = ""
    usage = ""
    help = []
    separated = False

    for number, line in enumerate(lines):
        line = line.rstrip("\r\n")

        if number == 0 and line.startswith("#!"):
            continue

        stripped = line.strip()
        if not stripped:
            separated = True
            continue
        if not stripped.startswith("#"):
            break

        content = stripped[1:]
        if content.startswith(" "):
            content = content[1:]
        content = content.rstrip()

        if (value := _tagged(content, "Summary:")) is not None:
            summary = value
        elif (value := _tagged(content, "Usage:")) is not None:
            usage = value
        elif not content.strip():
            separated = True
        else:
            if separated and help:
                help.append("")
            help.append(content)
            separated = False

    return UsageInfo(summary, usage, parse_usage(usage), "\n".join(help))


def read_usage(path, /):
    """
    Read a script from disk and extract its UsageInfo.

    Unreadable files (missing, directories, permission denied) yield an empty
    UsageInfo: metadata is documentation and never blocks dispatching.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as file:
            return extract_usage(file)
    except OSError as error:
        logger.debug("no usage metadata for %s: %s", path, error)
        return UsageInfo()


__all__ = (
    "UsageInfo",
    "extract_usage",
    "read_usage",
)
