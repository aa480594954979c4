"""
Result tree tests.

Scope
- Option / Operand / Command construction and field validation.
- Structural equality and hashing (option order is irrelevant).
- Lookups and read-only exposure.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from rich.console import Console

from commandparser import Option, Operand, Command


class TestOption(TestCase):

    def testFlagHasNoValues(self):
        self.assertEqual(Option("verbose").values, ())

    def testValuesMaterialized(self):
        self.assertEqual(Option("include", iter(["a", "b"])).values, ("a", "b"))

    def testValuesMustBeStrings(self):
        with self.assertRaises(TypeError):
            Option("include", [1])
        with self.assertRaises(TypeError):
            Option("include", "ab")

    def testEquality(self):
        self.assertEqual(Option("x", ["1", "2"]), Option("x", ("1", "2")))
        self.assertNotEqual(Option("x", ["1", "2"]), Option("x", ["2", "1"]))
        self.assertNotEqual(Option("x"), Operand("x", 0))


class TestOperand(TestCase):

    def testScalar(self):
        operand = Operand("a", 0, "source")
        self.assertEqual((operand.value, operand.index, operand.name), ("a", 0, "source"))
        self.assertFalse(operand.variadic)

    def testSequence(self):
        operand = Operand(["a", "b"], 2)
        self.assertEqual(operand.value, ("a", "b"))
        self.assertTrue(operand.variadic)
        self.assertIsNone(operand.name)

    def testScalarDiffersFromSingletonSequence(self):
        self.assertNotEqual(Operand("a", 0), Operand(("a",), 0))

    def testNegativeIndexRejected(self):
        with self.assertRaises(ValueError):
            Operand("a", -1)

    def testHashable(self):
        self.assertEqual(len({Operand("a", 0), Operand("a", 0)}), 1)


class TestCommand(TestCase):

    def setUp(self):
        self.command = Command(
            "tool",
            [Option("verbose"), Option("output", ["out"])],
            [Operand("src", 0, "source"), Operand(("a", "b"), 1, "targets")],
            [Command("run")],
        )

    def testOptionLookup(self):
        self.assertEqual(self.command.getoption("output").values, ("out",))
        self.assertTrue(self.command.hasoption("verbose"))
        self.assertIsNone(self.command.getoption("missing"))

    def testOptionOrderPreserved(self):
        self.assertEqual(list(self.command.options), ["verbose", "output"])

    def testOptionOrderIgnoredByEquality(self):
        other = Command(
            "tool",
            [Option("output", ["out"]), Option("verbose")],
            self.command.operands,
            self.command.subcommands,
        )
        self.assertEqual(self.command, other)
        self.assertEqual(hash(self.command), hash(other))

    def testOperandLookup(self):
        self.assertEqual(self.command.getoperand(0).value, "src")
        self.assertEqual(self.command.getoperand(name="targets").index, 1)
        self.assertIsNone(self.command.getoperand(7))
        self.assertIsNone(self.command.getoperand(name="missing"))

    def testOperandLookupRequiresOneKey(self):
        with self.assertRaises(TypeError):
            self.command.getoperand()

    def testDuplicateOptionRejected(self):
        with self.assertRaises(ValueError):
            Command("tool", [Option("v"), Option("v")])

    def testOperandIndicesMustBeContiguous(self):
        with self.assertRaises(ValueError):
            Command("tool", operands=[Operand("a", 1)])

    def testSubcommandsMustBeCommands(self):
        with self.assertRaises(TypeError):
            Command("tool", subcommands=["run"])

    def testReadOnlyOptions(self):
        with self.assertRaises(TypeError):
            self.command.options["other"] = Option("other")

    def testRichRendering(self):
        console = Console(color_system=None, force_terminal=False, width=200)
        with console.capture() as capture:
            console.print(Command("tool", [Option("verbose")]))
        self.assertIn("Command(", capture.get())
        self.assertIn("verbose", capture.get())


if __name__ == '__main__':
    unittest.main()
