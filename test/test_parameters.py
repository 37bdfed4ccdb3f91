"""
Parameters module tests (Option, Flag, Argument, help/version options).

Scope
- Validate construction rules (names, nargs, text fields, hidden/required).
- Validate help descriptors and metavars.
- Validate conversion, finalization and descriptor binding.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arbor import Argument, Command, Flag, Option, help_option, version_option
from arbor.faults import BadParameter, MissingParameter, PrintHelpMessage, PrintMessage
from arbor.output import ArgumentHelp, OptionHelp


class TestOption(TestCase):
    def testNamesAreValidated(self):
        with self.assertRaises(TypeError):
            Option()
        with self.assertRaises(TypeError):
            Option(42)
        with self.assertRaises(ValueError):
            Option("  ")
        with self.assertRaises(ValueError):
            Option("count")
        with self.assertRaises(ValueError):
            Option("--snake_case")
        with self.assertRaises(ValueError):
            Option("--1st")
        with self.assertRaises(ValueError):
            Option("--count", "--count")

    def testValidNames(self):
        option = Option("-c", "--count", "-long", "--dry-run")
        self.assertEqual(option.names, ("-c", "--count", "-long", "--dry-run"))

    def testNargsMustBePositive(self):
        with self.assertRaises(ValueError):
            Option("--pair", nargs=0)
        with self.assertRaises(ValueError):
            Option("--pair", nargs=True)
        self.assertEqual(Option("--pair", nargs=2).nargs, 2)

    def testTextFieldsAreTrimmedAndNonEmpty(self):
        self.assertEqual(Option("--x", help="  Some help ").help, "Some help")
        with self.assertRaises(ValueError):
            Option("--x", help="   ")
        with self.assertRaises(TypeError):
            Option("--x", metavar=3)

    def testRequiredOptionCannotBeHidden(self):
        with self.assertRaises(TypeError):
            Option("--x", required=True, hidden=True)

    def testTypeAndCallbackMustBeCallable(self):
        with self.assertRaises(TypeError):
            Option("--x", type="int")
        with self.assertRaises(TypeError):
            Option("--x", callback="nope")

    def testParameterHelp(self):
        self.assertEqual(
            Option("--count", "-c", type=int, help="Repetitions").parameter_help,
            OptionHelp(("-c", "--count"), "INT", "Repetitions"),
        )
        self.assertEqual(Option("--name").parameter_help.metavar, "TEXT")
        self.assertEqual(Option("--name", metavar="WHO").parameter_help.metavar, "WHO")
        self.assertIsNone(Option("--secret", hidden=True).parameter_help)

    def testFinalizeLastOccurrenceWins(self):
        option = Option("--name")
        option.record(("a",))
        option.record(("b",))
        option.finalize(None)
        self.assertEqual(option.value, "b")

    def testFinalizeMultipleCollectsTuple(self):
        option = Option("--tag", multiple=True)
        self.assertEqual(option.value, ())
        option.record(("a",))
        option.record(("b",))
        option.finalize(None)
        self.assertEqual(option.value, ("a", "b"))

    def testFinalizeConvertsEveryValue(self):
        option = Option("--point", type=int, nargs=2)
        option.record(("1", "2"))
        option.finalize(None)
        self.assertEqual(option.value, (1, 2))

    def testFinalizeMissingRequired(self):
        option = Option("--name", required=True)
        with self.assertRaises(MissingParameter) as context:
            option.finalize(None)
        self.assertIs(context.exception.parameter, option)

    def testConversionFailureBecomesBadParameter(self):
        option = Option("--count", type=int)
        option.record(("many",))
        with self.assertRaises(BadParameter) as context:
            option.finalize(None)
        self.assertIsInstance(context.exception.__cause__, ValueError)
        self.assertIn("'--count'", context.exception.format_message())

    def testResetForgetsPreviousValues(self):
        option = Option("--name", default="anonymous")
        option.record(("x",))
        option.finalize(None)
        option.reset()
        self.assertEqual(option.value, "anonymous")

    def testCallbackReceivesBoundValue(self):
        seen = []
        option = Option("--name", callback=lambda context, value: seen.append((context, value)))
        option.record(("x",))
        option.finalize("context")
        self.assertEqual(seen, [("context", "x")])


class TestFlag(TestCase):
    def testFlagTakesNoValues(self):
        flag = Flag("-v", "--verbose")
        self.assertEqual(flag.nargs, 0)
        self.assertIsNone(flag.parameter_help.metavar)

    def testFlagBindsPresence(self):
        flag = Flag("-v")
        flag.finalize(None)
        self.assertIs(flag.value, False)
        flag.record(())
        flag.finalize(None)
        self.assertIs(flag.value, True)

    def testFlagDefault(self):
        flag = Flag("--color", default=True)
        flag.finalize(None)
        self.assertIs(flag.value, True)


class TestArgument(TestCase):
    def testNargsRules(self):
        with self.assertRaises(ValueError):
            Argument(nargs=0)
        with self.assertRaises(ValueError):
            Argument(nargs="*")
        self.assertEqual(Argument(nargs=-5).nargs, -1)
        self.assertTrue(Argument(nargs=-1).variable)
        self.assertFalse(Argument(nargs=2).variable)

    def testNameFromAttribute(self):
        class Tool(Command):
            input_file = Argument()
            target = Argument("DEST")

        self.assertEqual(Tool.input_file.name, "INPUT-FILE")
        self.assertEqual(Tool.target.name, "DEST")
        self.assertEqual(Argument().name, "ARGUMENT")

    def testParameterHelp(self):
        self.assertEqual(
            Argument("SRC", nargs=-1, required=False, help="Sources").parameter_help,
            ArgumentHelp("SRC", "Sources", False, True),
        )

    def testFinalize(self):
        single = Argument("X", type=int)
        single.finalize(None, ["3"])
        self.assertEqual(single.value, 3)

        pair = Argument("XY", type=int, nargs=2)
        pair.finalize(None, ["1", "2"])
        self.assertEqual(pair.value, (1, 2))

        rest = Argument("REST", nargs=-1, required=False)
        rest.finalize(None, [])
        self.assertEqual(rest.value, ())

    def testFinalizeMissing(self):
        with self.assertRaises(MissingParameter):
            Argument("X").finalize(None, [])
        with self.assertRaises(MissingParameter):
            Argument("XY", nargs=2).finalize(None, ["1"])
        optional = Argument("X", required=False, default="fallback")
        optional.finalize(None, [])
        self.assertEqual(optional.value, "fallback")


class TestDescriptors(TestCase):
    def testInstanceReadsBoundValues(self):
        class Tool(Command):
            count = Option("--count", type=int, default=1)

            def run(self):
                pass

        first, second = Tool(), Tool()
        self.assertIsInstance(Tool.count, Option)
        self.assertEqual(first.count, 1)
        first.parse(["--count", "3"])
        self.assertEqual(first.count, 3)
        self.assertEqual(second.count, 1)

    def testDescriptorsAreReadOnly(self):
        class Tool(Command):
            count = Option("--count")

        with self.assertRaises(AttributeError):
            Tool().count = "2"


class TestBuiltinOptions(TestCase):
    def testHelpOptionRaisesForContextCommand(self):
        class Tool(Command):
            pass

        tool = Tool()
        tool.create_context()
        option = help_option({"--help", "-h"}, "Show this message and exit")
        self.assertEqual(option.names, ("-h", "--help"))
        self.assertTrue(option.eager)
        with self.assertRaises(PrintHelpMessage) as context:
            option.callback(tool.current_context, True)
        self.assertIs(context.exception.command, tool)

    def testVersionOption(self):
        class Tool(Command):
            pass

        tool = Tool()
        tool.create_context()
        option = version_option("1.2.3")
        self.assertEqual(option.names, ("--version",))
        with self.assertRaises(PrintMessage) as context:
            option.callback(tool.current_context, True)
        self.assertEqual(context.exception.message, "tool version 1.2.3")

    def testVersionMustBeAString(self):
        with self.assertRaises(TypeError):
            version_option(1)


if __name__ == "__main__":
    unittest.main()
