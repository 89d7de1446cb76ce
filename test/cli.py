"""
CLI module behavioral tests (user modes and end-to-end dispatching).

Scope
- Validate parse_user_args: mode flags anywhere, --extension forms, the
  --usage/--help conflict and the last-flag-wins policy.
- Validate main() end to end against real /bin/sh scripts: invoke, usage,
  help, commands listing, completions, validate and every failure path.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through redirect_stdout/redirect_stderr; colour is off.
"""

from __future__ import annotations

import contextlib
import errno
import io
import os
import tempfile
import unittest
from unittest import TestCase

from rich.console import Console

from subcommander import Config
from subcommander.cli import Mode, UserArguments, parse_user_args, dispatch, main
from subcommander.faults import ConfigurationError, FaultCode


GREET = """\
#!/bin/sh
# Summary: Greets someone
# Usage: {cmd} <name> [--loud]
#
# Prints a greeting.
printf '%s' "$_TOOL_ARGS" > "$_TOOL_ROOT/out"
exit 5
"""

COMPLETE = """\
#!/bin/sh
# Summary: Completes colours
if [ "$_TOOL_COMPLETE" = "true" ]; then
  echo red
  echo "$_TOOL_COMPLETE_ARG"
fi
"""


class TestParseUserArgs(TestCase):
    """Behavioral tests for parse_user_args."""

    def setUp(self):
        self.config = Config("tool", "/r")

    def testInvokeByDefault(self):
        self.assertEqual(parse_user_args(self.config, ["greet", "Ada"]), UserArguments(Mode.INVOKE, ("greet", "Ada")))

    def testModeFlagsAnywhere(self):
        arguments = parse_user_args(self.config, ["greet", "--help", "Ada"])
        self.assertEqual(arguments.mode, Mode.HELP)
        self.assertEqual(arguments.tokens, ("greet", "Ada"))

    def testShortHelp(self):
        self.assertEqual(parse_user_args(self.config, ["-h"]).mode, Mode.HELP)

    def testUsageWithHelpRejected(self):
        with self.assertRaises(ConfigurationError) as context:
            parse_user_args(self.config, ["--usage", "greet", "-h"])
        self.assertEqual(str(context.exception), "the argument '--usage' cannot be used with '--help'")
        self.assertEqual(context.exception.options["code"], FaultCode.CONFLICTING_FLAGS)

    def testLastModeWins(self):
        self.assertEqual(parse_user_args(self.config, ["--commands", "--completions"]).mode, Mode.COMPLETIONS)
        self.assertEqual(parse_user_args(self.config, ["--validate", "--usage"]).mode, Mode.USAGE)

    def testExtensionForms(self):
        self.assertEqual(parse_user_args(self.config, ["--commands", "--extension", "sh"]).extension, "sh")
        self.assertEqual(parse_user_args(self.config, ["--extension=py", "--commands"]).extension, "py")
        self.assertIsNone(parse_user_args(self.config, ["--commands", "--extension="]).extension)

    def testExtensionNeedsValue(self):
        with self.assertRaises(ConfigurationError):
            parse_user_args(self.config, ["--commands", "--extension"])

    def testFaultsCarryTheModeParsedSoFar(self):
        with self.assertRaises(ConfigurationError) as context:
            parse_user_args(self.config, ["--completions", "--extension"])
        self.assertIs(context.exception.options["mode"], Mode.COMPLETIONS)


class TestMain(TestCase):
    """End-to-end tests for main() against a real libexec tree."""

    def setUp(self):
        self._directory = tempfile.TemporaryDirectory()
        self.root = self._directory.name
        self.libexec = os.path.join(self.root, "libexec")
        os.mkdir(self.libexec)
        self.greet = self.script("greet", GREET)

    def tearDown(self):
        self._directory.cleanup()

    def script(self, relative, text, executable=True):
        path = os.path.join(self.libexec, *relative.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as file:
            file.write(text)
        os.chmod(path, 0o755 if executable else 0o644)
        return path

    def run_main(self, *tokens, flags=()):
        stdout, stderr = io.StringIO(), io.StringIO()
        argv = ["--name", "tool", "--absolute", self.root, "--color", "never", *flags, "--", *tokens]
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def output(self):
        path = os.path.join(self.root, "out")
        if not os.path.exists(path):
            return None
        with open(path, encoding="utf-8") as file:
            return file.read()

    def testInvokeRelaysExitCodeAndArguments(self):
        code, _, stderr = self.run_main("greet", "Ada", "--loud")
        self.assertEqual(code, 5)
        self.assertEqual(stderr, "")
        self.assertEqual(self.output(), 'name "Ada" loud "true"')

    def testBindingFailureReportedWithoutLaunch(self):
        code, _, stderr = self.run_main("greet")
        self.assertEqual(code, 1)
        self.assertEqual(stderr.strip(), "tool: missing required argument: name")
        self.assertIsNone(self.output())

    def testUsage(self):
        code, stdout, _ = self.run_main("--usage", "greet")
        self.assertEqual(code, 0)
        self.assertEqual(stdout, "Usage: tool greet <name> [--loud]\n")

    def testHelp(self):
        code, stdout, _ = self.run_main("greet", "--help")
        self.assertEqual(code, 0)
        self.assertEqual(stdout, "Usage: tool greet <name> [--loud]\n\nPrints a greeting.\n")

    def testRootInvokePrintsHelp(self):
        code, stdout, _ = self.run_main()
        self.assertEqual(code, 0)
        self.assertIn("Available subcommands:", stdout)
        self.assertIn("    greet    Greets someone", stdout)

    def testCommandsListing(self):
        self.script("sub/inner", "#!/bin/sh\n")
        self.script("notes", "text\n", executable=False)
        code, stdout, _ = self.run_main("--commands")
        self.assertEqual(code, 0)
        self.assertEqual(sorted(stdout.split()), ["greet", "sub"])

    def testCommandsExtensionFilter(self):
        self.script("build.sh", "#!/bin/sh\n")
        self.script("build.py", "#!/bin/sh\n")
        _, stdout, _ = self.run_main("--commands", "--extension", "sh")
        self.assertEqual(stdout.split(), ["build.sh"])

    def testCompletionsFromScript(self):
        self.script("paint", COMPLETE)
        code, stdout, _ = self.run_main("--completions", "paint", "gr", "bl")
        self.assertEqual(code, 0)
        self.assertEqual(stdout.split(), ["red", "gr"])

    def testCompletionsOfDirectory(self):
        code, stdout, _ = self.run_main("--completions")
        self.assertEqual(code, 0)
        self.assertEqual(stdout.split(), ["greet"])

    def testCompletionErrorsAreSilent(self):
        code, stdout, stderr = self.run_main("--completions", "nope")
        self.assertEqual(code, 1)
        self.assertEqual((stdout, stderr), ("", ""))

    def testCompletionModeSilentOnUserArgumentErrors(self):
        code, stdout, stderr = self.run_main("--completions", "--extension")
        self.assertEqual(code, 1)
        self.assertEqual((stdout, stderr), ("", ""))

    def testUserArgumentErrorsPrintedOutsideCompletionMode(self):
        code, _, stderr = self.run_main("--commands", "--extension")
        self.assertEqual(code, 1)
        self.assertEqual(stderr.strip(), "tool: --extension requires a value")

    def testDirectoryInvokeHonoursColorAlways(self):
        console = Console(file=io.StringIO(), force_terminal=True, color_system="truecolor", width=200)
        code = dispatch(Config("tool", self.root, color="always"), UserArguments(), console=console)
        self.assertEqual(code, 0)
        self.assertIn("\x1b[", console.file.getvalue())
        self.assertIn("greet", console.file.getvalue())

    def testUnknownSubcommand(self):
        code, _, stderr = self.run_main("nope")
        self.assertEqual(code, 1)
        self.assertEqual(stderr.strip(), "tool: no such sub command 'nope'")

    def testValidate(self):
        self.assertEqual(self.run_main("--validate")[0], 0)
        broken = self.script("broken", "#!/bin/sh\n# Usage: {cmd} <name\n")
        code, stdout, _ = self.run_main("--validate")
        self.assertEqual(code, 1)
        self.assertEqual(stdout.strip(), f"{broken}: malformed usage string: unmatched angle brackets")

    def testLaunchFailure(self):
        self.script("garbage", "\x00\x01garbage\n")
        code, _, stderr = self.run_main("garbage")
        self.assertEqual(code, 1)
        self.assertEqual(stderr.strip(), "tool: Exec format error (os error %d)" % errno.ENOEXEC)

    def testConfigurationError(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            code = main(["--absolute", self.root])
        self.assertEqual(code, 1)
        self.assertEqual(stderr.getvalue().strip(), "Error: --name is required")

    def testMissingLibexec(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            code = main(["--name", "tool", "--absolute", os.path.join(self.root, "libexec"), "--color", "never"])
        self.assertEqual(code, 1)
        self.assertEqual(stderr.getvalue().strip(), "tool: libexec directory not found in root")


if __name__ == "__main__":
    unittest.main()
