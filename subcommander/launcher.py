"""
Process launcher: the only place that starts scripts.

The environment handed to a script is an explicit mapping built once per
invocation (a copy of os.environ plus the dispatcher's variables); the
dispatcher's own process environment is never mutated.

Variables (prefix from Config.prefix, e.g. “_TOOL_”)
- _TOOL_ROOT          the configured root
- _TOOL_CACHE         per-tool cache directory hint
- _TOOL_ARGS          bound arguments (`name "value" …`) or the raw tokens
- _TOOL_COMPLETE      "true" in completion mode
- _TOOL_COMPLETE_ARG  the completion hint (first residual token)
"""
import errno
import os
import subprocess

from .faults import *
from .logs import get_logger
from .utils import Unset

logger = get_logger(__name__)


class Launcher:
    """
    Start scripts with inherited stdio and relay their exit codes.

    Tests substitute a recording double exposing the same three methods.
    """

    def environment(self, config, arguments, *, completion=Unset, base=None):
        """
        Build the environment mapping for one launch.

        Parameters
        - config: Config
        - arguments: str
          The serialized arguments for “ARGS”.
        - completion: Unset | str | None (keyword-only)
          Unset: regular launch. Otherwise completion mode; a string is the
          current argument hint, None means no hint.
        - base: Mapping | None
          Starting environment (defaults to os.environ).
        """
        environment = dict(os.environ if base is None else base)
        environment[config.prefix + "ROOT"] = config.root
        environment[config.prefix + "CACHE"] = config.cache
        environment[config.prefix + "ARGS"] = arguments
        if completion is not Unset:
            environment[config.prefix + "COMPLETE"] = "true"
            if completion is not None:
                environment[config.prefix + "COMPLETE_ARG"] = completion
        return environment

    def run(self, config, path, args, environment):
        """
        Run a script to completion and return its exit code.

        A child killed by a signal reports 128 + signal, like a shell does.

        Raises
        - LaunchError: the operating system could not start the script.
        """
        logger.debug("launching %s with %r", path, list(args))
        try:
            completed = subprocess.run([path, *args], env=environment, check=False)
        except OSError as error:
            raise _launch_error(config, path, error) from None
        code = completed.returncode
        logger.debug("%s exited with %d", path, code)
        return 128 - code if code < 0 else code

    def capture(self, config, path, args, environment):
        """
        Run a script with captured stdout; return the output, or None on failure.
        """
        try:
            completed = subprocess.run(
                [path, *args],
                env=environment,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                check=False,
                text=True,
                errors="replace",
            )
        except OSError as error:
            logger.debug("completion launch of %s failed: %s", path, error)
            return None
        if completed.returncode != 0:
            logger.debug("completion run of %s exited with %d", path, completed.returncode)
            return None
        return completed.stdout


_MESSAGES = {
    errno.ENOEXEC: "Exec format error",
    errno.ENOENT: "No such file or directory",
    errno.EACCES: "Permission denied",
}


def _launch_error(config, path, error):
    reason = _MESSAGES.get(error.errno) or error.strerror or str(error)
    suffix = " (os error %d)" % error.errno if error.errno is not None else ""
    return LaunchError(
        "%s: %s%s" % (config.name, reason, suffix),
        title="launch failure",
        code=FaultCode.LAUNCH_FAILURE,
        path=path,
        hint="check that %s has a valid shebang line and is executable" % path,
    )


__all__ = (
    "Launcher",
)
