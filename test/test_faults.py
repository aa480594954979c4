"""
Fault family tests.

Scope
- Messages and structured fields of every kind.
- Stable fault codes and host overrides (__codes__, __prog__, __docs__).
- copy.replace() rebuilding (command path rewriting).
- Rendering and trigger() in both modes.

Conventions
- Test method names follow CamelCase per project convention.
- Host overrides are installed on __main__ with unittest.mock and always removed.
"""
import copy
import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from commandparser import faults
from commandparser.faults import *


def _render(fault, **options):
    console = Console(file=io.StringIO(), color_system=None, width=200)
    console.print(fault.render(colorful=False, **options))
    return console.file.getvalue()


class TestMessages(TestCase):

    def testInvalidCommandSpecs(self):
        self.assertEqual(InvalidCommandSpecsError().message, "Invalid command specifications")
        self.assertEqual(InvalidCommandSpecsError("bad").message, "Invalid command specifications: bad")

    def testOptionTokenAlreadyDefinedWithAndWithoutCommand(self):
        self.assertEqual(
            str(OptionTokenAlreadyDefinedError("-x", "alpha", "tool")),
            "The option token '-x' is already defined for option 'alpha' in command 'tool'",
        )
        self.assertEqual(
            str(OptionTokenAlreadyDefinedError("-x", "alpha")),
            "The option token '-x' is already defined for option 'alpha'",
        )

    def testCommandAlreadyDefined(self):
        self.assertEqual(str(CommandAlreadyDefinedError("run")), "The command 'run' is already defined")

    def testOperandAlreadyDefined(self):
        self.assertEqual(
            str(OperandAlreadyDefinedError(0, "tool")),
            "The operand '0' is already defined in the command 'tool'",
        )

    def testCodes(self):
        self.assertEqual(OptionNotFoundError("-x", "tool").code, FaultCode.OPTION_NOT_FOUND)
        self.assertEqual(int(FaultCode.MISSING_REQUIRED_OPERAND), 21131)
        self.assertEqual(len({kind.code for kind in CommandLineError.__subclasses__()}), 10)

    def testEveryKindIsCommandLineError(self):
        self.assertIsInstance(MissingRequiredOptionError("tool", "output"), CommandLineError)
        self.assertIsInstance(MissingRequiredOptionError("tool", "output"), Exception)


class TestFamily(TestCase):

    def testClosedFamily(self):
        with self.assertRaises(TypeError):
            type("CustomError", (CommandLineError,), {})

    def testReplaceRewritesCommand(self):
        fault = MissingOptionArgumentError("leaf", "-n")
        moved = copy.replace(fault, command="mid leaf")
        self.assertIsInstance(moved, MissingOptionArgumentError)
        self.assertEqual(moved.option, "-n")
        self.assertEqual(moved.message, "Missing argument for option '-n' of command 'mid leaf'.")
        self.assertEqual(fault.command, "leaf")

    def testReplaceKeepsSuggestions(self):
        fault = OptionNotFoundError("--verbos", "sub", ["--verbose"])
        self.assertEqual(copy.replace(fault, command="root sub").suggestions, ("--verbose",))


class TestRendering(TestCase):

    def testPlainRendering(self):
        output = _render(OptionNotFoundError("--verbos", "tool", ["--verbose"]))
        self.assertIn("[ tool — 21121 | Unknown Option ]", output)
        self.assertIn("Unknown option '--verbos' for command 'tool'", output)
        self.assertIn("→ did you mean '--verbose'?", output)

    def testFancyRendering(self):
        output = _render(OptionRepetitionDeniedError("tool sub", "verbose"), fancy=True)
        self.assertIn("Option 'verbose' cannot be repeated in command 'tool sub'.", output)
        self.assertIn("21123", output)

    def testProgOverride(self):
        with patch("__main__.__prog__", "mytool", create=True):
            self.assertEqual(MissingRequiredOptionError("tool", "output").prog, "mytool")

    def testProgFromCommandPath(self):
        self.assertEqual(MissingRequiredOptionError("root sub", "output").prog, "root")
        self.assertEqual(InvalidCommandSpecsError().prog, "command-parser")

    def testCodesOverride(self):
        with patch("__main__.__codes__", {FaultCode.OPTION_NOT_FOUND: "E-UNKNOWN"}, create=True):
            self.assertEqual(FaultCode.OPTION_NOT_FOUND.normalize(), "E-UNKNOWN")
            self.assertEqual(FaultCode.MISSING_REQUIRED_OPTION.normalize(), "21124")


class TestTrigger(TestCase):

    def testRaisesOutsideShell(self):
        fault = MissingRequiredOperandError("tool", "file")
        with self.assertRaises(MissingRequiredOperandError) as context:
            trigger(fault)
        self.assertIs(context.exception, fault)

    def testShellPrintsAndExits(self):
        buffer = io.StringIO()
        with patch.object(faults, "console", Console(file=buffer, color_system=None, width=200)):
            with self.assertRaises(SystemExit) as context:
                trigger(MissingRequiredOperandError("tool", "file"), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("Missing required operand 'file' for command 'tool'.", buffer.getvalue())

    def testRejectsForeignExceptions(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


class TestGetDoc(TestCase):

    def testMissingDocs(self):
        self.assertIsNone(getdoc(FaultCode.OPTION_NOT_FOUND))

    def testHostDocs(self):
        with patch("__main__.__docs__", {FaultCode.OPTION_NOT_FOUND: "see --help"}, create=True):
            self.assertEqual(getdoc(FaultCode.OPTION_NOT_FOUND), "see --help")

    def testRejectsPlainIntegers(self):
        with self.assertRaises(TypeError):
            getdoc(21121)


if __name__ == '__main__':
    unittest.main()
