"""
Subcommander command layer: the script tree as commands, and its resolver.

What this module provides
- Command: the shared contract of every node (name, summary, usage, help,
  subcommands, completions, invoke, validate).
- DirectoryCommand: a directory under libexec; lists its children, prints its
  help when invoked, validates recursively.
- FileCommand: an executable script; owns the UsageInfo of its comment block,
  binds the residual tokens and hands them to the launcher.
- resolve(config, tokens): walk the tokens down the tree and return the node.

Core ideas
- The filesystem is the source of truth: nodes hold a path and names only,
  children are enumerated on demand, nothing is cached.
- Greedy resolution: directories are descended while tokens remain; the first
  file ends the walk and every remaining token (even one naming a sibling
  script) is passed to that file untouched.
- Hidden entries (“.”-prefixed) are neither listed nor resolvable.

Quick start
    from subcommander import Config, Launcher, resolve

    config = Config(name="tool", root="/opt/tool")
    command = resolve(config, ["greet", "Ada", "--loud"])
    exit(command.invoke(Launcher()))
"""
import os
import stat
from abc import ABC, abstractmethod
from typing import final

from rich.console import Console
from rich.text import Text

from .arguments import ArgKind, bind
from .faults import *
from .logs import get_logger
from .scripts import UsageInfo, read_usage
from .utils import *

logger = get_logger(__name__)


class Command(ABC):
    """
    One node of the script tree.

    Identity
    - names: the tokens from the root to this node (empty only at the root).
    - name: the last of them, or the configured tool name at the root.
    - route: “<tool> <names…>”, the fully-qualified invocation path used to
      render usage lines.
    """
    names = mirror("names")

    def __init__(self, config, names, path):
        self._config = config
        self._names = tuple(names)
        self._path = path

    @property
    def config(self):
        return self._config

    @property
    def path(self):
        return self._path

    @property
    def name(self):
        return self._names[-1] if self._names else self._config.name

    @property
    def route(self):
        return " ".join((self._config.name, *self._names))

    def __repr__(self):
        return f"{type(self).__name__}(names={self._names!r}, path={self._path!r})"

    @property
    @abstractmethod
    def summary(self): ...

    @property
    @abstractmethod
    def usage(self): ...

    @property
    @abstractmethod
    def help(self): ...

    @abstractmethod
    def subcommands(self): ...

    @abstractmethod
    def completions(self, launcher): ...

    @abstractmethod
    def invoke(self, launcher, *, console=None): ...

    @abstractmethod
    def validate(self): ...


@final
class DirectoryCommand(Command):
    """
    A directory of the script tree (the root included).

    Documentation comes from an optional README file inside the directory,
    written with the same comment block as scripts (Summary: and help body).
    """

    def _readme(self):
        readme = os.path.join(self._path, "README")
        return read_usage(readme) if os.path.isfile(readme) else UsageInfo()

    @property
    def summary(self):
        return self._readme().summary

    @property
    def usage(self):
        return f"Usage: {self.route} [args]..."

    @property
    def help(self):
        readme = self._readme()
        sections = [self.usage]
        if readme.summary:
            sections.append(readme.summary)
        if readme.help:
            sections.append(readme.help)

        if subcommands := self.subcommands():
            width = max(len(command.name) for command in subcommands) + 4
            rows = [f"    {command.name:<{width}}{command.summary}".rstrip() for command in subcommands]
            sections.append("\n".join(["Available subcommands:", *rows]))

        return "\n\n".join(sections)

    def subcommands(self):
        """
        Children in filesystem enumeration order (not sorted).

        Dot-prefixed entries are skipped; directories are always listed, files
        only when they carry an execute permission bit.
        """
        commands = []
        try:
            entries = list(os.scandir(self._path))
        except OSError as error:
            logger.debug("cannot list %s: %s", self._path, error)
            return commands

        for entry in entries:
            if entry.name.startswith("."):
                continue
            names = (*self._names, entry.name)
            try:
                if entry.is_dir():
                    commands.append(DirectoryCommand(self._config, names, entry.path))
                elif entry.is_file() and entry.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
                    commands.append(FileCommand(self._config, names, entry.path))
            except OSError as error:
                # dangling symlinks and races with concurrent deletes
                logger.debug("skipping %s: %s", entry.path, error)
        return commands

    def completions(self, launcher):
        return [command.name for command in self.subcommands()]

    def invoke(self, launcher, *, console=None):
        """
        Print the help (styled when colour is on) and succeed.
        """
        console = Console() if console is None else console
        console.print(styled(self.help, self._config.colorful), soft_wrap=True, highlight=False)
        return 0

    def validate(self):
        faults = []
        for command in self.subcommands():
            faults.extend(command.validate())
        return faults


def styled(text, colorful):
    """
    Wrap help or usage text in a rich Text, section labels in bold when colourful.
    """
    rendered = Text(text)
    if colorful:
        rendered.highlight_words(["Usage:"], "bold #00E6FF")
        rendered.highlight_words(["Available subcommands:"], "bold")
    return rendered


def _balanced(text, opening, closing):
    depth = 0
    for char in text:
        if char == opening:
            depth += 1
        elif char == closing:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


@final
class FileCommand(Command):
    """
    An executable script (a leaf of the tree).

    - args: the residual tokens resolution did not consume; they are bound
      against the script's usage specs and passed to it verbatim.
    - info: the UsageInfo read from the script's leading comment block when the
      node is built.
    """
    args = mirror("args")

    def __init__(self, config, names, path, args=()):
        super().__init__(config, names, path)
        self._args = tuple(args)
        self._info = read_usage(path)

    @property
    def info(self):
        return self._info

    @property
    def summary(self):
        return self._info.summary

    @property
    def usage(self):
        if self._info.usage:
            return "Usage: " + self._info.usage.replace("{cmd}", self.route)
        return f"Usage: {self.route} [args]..."

    @property
    def help(self):
        if self._info.help:
            return f"{self.usage}\n\n{self._info.help}"
        return self.usage

    def subcommands(self):
        return []

    def arguments(self):
        """
        Serialize the residual tokens for the script's environment.

        Scripts declaring anything besides a rest slot get their tokens bound
        (binding errors propagate); otherwise the raw tokens are space-joined.
        """
        specs = self._info.specs
        if any(spec.kind is not ArgKind.REST for spec in specs):
            return bind(self._args, specs, infer=self._config.infer_long_arguments).serialize()
        return " ".join(self._args)

    def invoke(self, launcher, *, console=None):
        # the script writes to the inherited stdout; console is not used
        arguments = self.arguments()
        environment = launcher.environment(self._config, arguments)
        return launcher.run(self._config, self._path, self._args, environment)

    def completions(self, launcher):
        """
        Ask the script for its candidates; any failure means no completions.
        """
        environment = launcher.environment(
            self._config,
            " ".join(self._args),
            completion=self._args[0] if self._args else None,
        )
        output = launcher.capture(self._config, self._path, [], environment)
        if not output:
            return []
        return [line for line in output.splitlines() if line.strip()]

    def validate(self):
        usage = self._info.usage
        faults = []
        if not usage:
            return faults
        if not _balanced(usage, "[", "]"):
            faults.append(ValidationFault(
                self._path, "malformed usage string: unmatched brackets", FaultCode.UNMATCHED_BRACKETS
            ))
        if not _balanced(usage, "<", ">"):
            faults.append(ValidationFault(
                self._path, "malformed usage string: unmatched angle brackets", FaultCode.UNMATCHED_ANGLE_BRACKETS
            ))
        return faults


def _unknown(config, token):
    return UnknownSubcommandError(
        "no such sub command '%s'" % token,
        title="unknown sub command",
        code=FaultCode.UNKNOWN_SUBCOMMAND,
        token=token,
        hint="run '%s --commands' to list the available sub commands" % config.name,
    )


def resolve(config, tokens, /):
    """
    Walk command tokens down the libexec tree.

    Parameters
    - config: Config
    - tokens: Sequence[str]
      User tokens, dispatcher mode flags already removed.

    Returns
    - DirectoryCommand when the tokens end on a directory (the root for []).
    - FileCommand for the first file met; every token after it becomes the
      file's residual args.

    Raises
    - LibexecNotFoundError: <root>/libexec is not a directory.
    - UnknownSubcommandError: a token is hidden (“.”-prefixed), not a plain
      entry name, or names nothing in the current directory.
    """
    libexec = config.libexec
    if not os.path.isdir(libexec):
        raise LibexecNotFoundError(
            "%s: libexec directory not found in root" % config.name,
            title="libexec not found",
            code=FaultCode.LIBEXEC_NOT_FOUND,
            path=libexec,
            hint="create %s or point --absolute/--relative at the right root" % libexec,
        )

    tokens = list(tokens)
    path = libexec
    names = []

    while tokens:
        token = tokens.pop(0)
        if not token or token.startswith(".") or os.sep in token or (os.altsep and os.altsep in token):
            raise _unknown(config, token)

        candidate = os.path.join(path, token)
        if not os.path.exists(candidate):
            raise _unknown(config, token)

        names.append(token)
        if not os.path.isdir(candidate):
            logger.debug("resolved %r to script %s with args %r", names, candidate, tokens)
            return FileCommand(config, names, candidate, tokens)
        path = candidate

    logger.debug("resolved %r to directory %s", names, path)
    return DirectoryCommand(config, names, path)


__all__ = (
    "Command",
    "DirectoryCommand",
    "FileCommand",
    "resolve",
)
