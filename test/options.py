"""
Options behavioral tests (declaration through the class body, end-to-end parsing).

Scope
- Validate short/long/negatable flags, typed conversion and defaulting.
- Validate positional matching (optional, repeated) and its usage errors.
- Validate repeated flags, enumerations, help output and exit statuses.
- Validate immutability and equality of parsed configurations.

Conventions
- Test method names follow CamelCase per project convention.
- Descriptors are declared with colorful=False so captured output is plain text.
"""

from __future__ import annotations

import enum
import io
import unittest
from contextlib import redirect_stdout
from unittest import TestCase

from declopts import (
    Options,
    Field,
    Symbol,
    ParseError,
    NotEnoughArgumentsError,
    TooManyArgumentsError,
    InvalidValueError,
    MissingValueError,
    UnknownSwitchError,
)


def capture(callable, /):
    """Run callable, expecting SystemExit; return (stdout text, exit code)."""
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        try:
            callable()
        except SystemExit as exit:
            return buffer.getvalue(), exit.code
    raise AssertionError("expected the parser to exit")


class SimpleOpt(Options, prog="simple-opt", colorful=False):
    input = Field(str, short="i", long="input", placeholder="QUUX")
    verbose = Field(bool, short="v", long="verbose", factory=lambda: False)


class Positional(Options, prog="positional", colorful=False):
    first = Field(str)
    second = Field(int)
    third = Field(Symbol | None)


class ArrayOptions(Options, prog="array-options", colorful=False):
    x = Field(list[str], short="x")
    y = Field(list[int], short="y")


class ArrayPositional(Options, prog="array-positional", colorful=False):
    first = Field(str)
    second = Field(list[Symbol])


class RichTypes(Options, prog="rich-types", colorful=False):
    my_symbol = Field(Symbol, short="s", long="symbol")
    my_integer = Field(int, short="i", long="integer")
    my_float = Field(float, short="f", long="float")


class Defaults(Options, prog="defaults", colorful=False):
    opt_string = Field(str | None, short="a")
    def_string = Field(str, short="b", factory=lambda: "foo")

    opt_symbol = Field(Symbol | None, short="c")
    def_symbol = Field(Symbol, short="d", factory=lambda: Symbol("bar"))

    opt_integer = Field(int | None, short="e")
    def_integer = Field(int, short="f", factory=lambda: 55)

    def_bool = Field(bool, short="g", factory=lambda: True)


class MyEnum(enum.Enum):
    ONE = "one"
    TWO = "two"


class OptsWithEnum(Options, prog="opts-with-enum", colorful=False):
    value = Field(MyEnum, short="v", long="value")


class TestFlags(TestCase):
    """Short, long and negatable flags."""

    def testShortForm(self):
        opts = SimpleOpt.parse(["-i", "foo"])
        self.assertEqual(opts.input, "foo")
        self.assertIs(opts.verbose, False)

    def testLongForm(self):
        opts = SimpleOpt.parse(["--input=foo"])
        self.assertEqual(opts.input, "foo")

    def testLongFormSpaced(self):
        opts = SimpleOpt.parse(["--input", "foo"])
        self.assertEqual(opts.input, "foo")

    def testShortAttachedValue(self):
        opts = SimpleOpt.parse(["-ifoo"])
        self.assertEqual(opts.input, "foo")

    def testShortAndLongAreEquivalent(self):
        self.assertEqual(SimpleOpt.parse(["-i", "foo"]), SimpleOpt.parse(["--input=foo"]))

    def testBooleanShort(self):
        opts = SimpleOpt.parse(["-v", "--input=foo"])
        self.assertIs(opts.verbose, True)
        self.assertEqual(opts.input, "foo")

    def testBooleanLong(self):
        self.assertIs(SimpleOpt.parse(["--verbose", "--input=foo"]).verbose, True)
        self.assertIs(SimpleOpt.parse(["--input=foo"]).verbose, False)

    def testBooleanNegated(self):
        self.assertIs(SimpleOpt.parse(["--verbose", "--no-verbose", "-i", "x"]).verbose, False)

    def testBundledShortFlags(self):
        opts = SimpleOpt.parse(["-vi", "foo"])
        self.assertIs(opts.verbose, True)
        self.assertEqual(opts.input, "foo")

    def testLastOccurrenceWins(self):
        self.assertEqual(SimpleOpt.parse(["-i", "one", "--input=two"]).input, "two")

    def testStringArgumentIsSplit(self):
        self.assertEqual(SimpleOpt.parse("--input 'a b' -v").input, "a b")

    def testCallerListIsNotMutated(self):
        argv = ["-v", "--input=foo"]
        SimpleOpt.parse(argv)
        self.assertEqual(argv, ["-v", "--input=foo"])

    def testParseIsIdempotent(self):
        argv = ["-v", "--input=foo"]
        self.assertEqual(SimpleOpt.parse(argv), SimpleOpt.parse(argv))

    def testMissingMandatoryFlagExits(self):
        output, code = capture(lambda: SimpleOpt.parse(["-v"]))
        self.assertIn("Expected a value for `input`", output)
        self.assertIn("Usage: simple-opt", output)
        self.assertEqual(code, 0)

    def testUnknownSwitchExits(self):
        output, code = capture(lambda: SimpleOpt.parse(["--inptu=foo"]))
        self.assertIn("invalid option: --inptu", output)
        self.assertIn("did you mean '--input'", output)
        self.assertEqual(code, 0)

    def testMissingOptionValueExits(self):
        output, _ = capture(lambda: SimpleOpt.parse(["-i"]))
        self.assertIn("missing argument: -i", output)

    def testFlagAssignmentExits(self):
        output, _ = capture(lambda: SimpleOpt.parse(["-i", "x", "--verbose=yes"]))
        self.assertIn("does not take a value", output)


class TestHelp(TestCase):
    """Usage text and the -h/--help terminal action."""

    def testUsage(self):
        output, code = capture(lambda: SimpleOpt.parse(["--help"]))
        self.assertEqual(code, 0)
        self.assertIn("Usage: simple-opt --input=QUUX [OPTS...]", output)
        self.assertIn("-i, --input=QUUX", output)
        self.assertIn("-v, --[no-]verbose", output)
        self.assertIn("-h, --help", output)

    def testShortHelp(self):
        output, code = capture(lambda: SimpleOpt.parse(["-h"]))
        self.assertEqual(code, 0)
        self.assertIn("Usage: simple-opt", output)

    def testHelpWinsOverOtherErrors(self):
        output, code = capture(lambda: Positional.parse(["--bogus", "a", "b", "c", "d", "-h"]))
        self.assertEqual(code, 0)
        self.assertIn("Usage: positional", output)
        self.assertNotIn("Too many arguments", output)
        self.assertNotIn("invalid option", output)

    def testHelpAfterTerminatorIsPositional(self):
        opts = Positional.parse(["one", "2", "--", "-h"])
        self.assertEqual(opts.third, Symbol("-h"))

    def testEnumPlaceholder(self):
        output, _ = capture(lambda: OptsWithEnum.parse(["--help"]))
        self.assertIn("--value=<one|two>", output)

    def testDocstringIsDescription(self):
        class Documented(Options, prog="documented", colorful=False):
            """Does documented things."""
            name = Field(str)

        output, _ = capture(lambda: Documented.parse(["--help"]))
        self.assertIn("Usage: documented NAME", output)
        self.assertIn("Does documented things.", output)


class TestPositional(TestCase):
    """Positional matching and its usage errors."""

    def testAllSupplied(self):
        opts = Positional.parse(["one", "2", "three"])
        self.assertEqual(opts.first, "one")
        self.assertEqual(opts.second, 2)
        self.assertEqual(opts.third, Symbol("three"))
        self.assertIsInstance(opts.third, Symbol)

    def testOptionalOmitted(self):
        opts = Positional.parse(["one", "2"])
        self.assertEqual(opts.first, "one")
        self.assertEqual(opts.second, 2)
        self.assertIsNone(opts.third)

    def testNotEnoughArguments(self):
        output, code = capture(lambda: Positional.parse(["one"]))
        self.assertIn("Not enough arguments", output)
        self.assertIn("FIRST SECOND [THIRD]", output)
        self.assertEqual(code, 0)

    def testTooManyArguments(self):
        output, _ = capture(lambda: Positional.parse(["one", "2", "three", "four"]))
        self.assertIn("Too many arguments", output)

    def testMandatoryThenTwoOptionals(self):
        class Slots(Options, shell=False):
            a = Field(str)
            b = Field(str | None)
            c = Field(str | None)

        self.assertEqual((Slots.parse(["1"]).b, Slots.parse(["1"]).c), (None, None))
        self.assertEqual(Slots.parse(["1", "2"]).b, "2")
        self.assertEqual(Slots.parse(["1", "2", "3"]).c, "3")
        with self.assertRaises(NotEnoughArgumentsError):
            Slots.parse([])
        with self.assertRaises(TooManyArgumentsError):
            Slots.parse(["1", "2", "3", "4"])

    def testPositionalFactory(self):
        class WithFactory(Options, shell=False):
            name = Field(str)
            count = Field(int, factory=lambda: 3)

        self.assertEqual(WithFactory.parse(["x"]).count, 3)
        self.assertEqual(WithFactory.parse(["x", "5"]).count, 5)

    def testFlagsAndPositionalsInterleave(self):
        class Mixed(Options, shell=False):
            source = Field(str)
            verbose = Field(bool, short="v")
            target = Field(str)

        opts = Mixed.parse(["a", "-v", "b"])
        self.assertEqual((opts.source, opts.verbose, opts.target), ("a", True, "b"))


class TestRepeated(TestCase):
    """Repeated flags and the repeated positional field."""

    def testArrayOptions(self):
        opts = ArrayOptions.parse(["-x", "one", "-x", "two"])
        self.assertEqual(opts.x, ["one", "two"])
        self.assertEqual(opts.y, [])

        opts = ArrayOptions.parse(["-y", "2", "-y", "7"])
        self.assertEqual(opts.x, [])
        self.assertEqual(opts.y, [2, 7])

        opts = ArrayOptions.parse(["-x", "this", "-y", "22", "-y", "33", "-x", "that"])
        self.assertEqual(opts.x, ["this", "that"])
        self.assertEqual(opts.y, [22, 33])

    def testArrayPositional(self):
        opts = ArrayPositional.parse(["one"])
        self.assertEqual(opts.first, "one")
        self.assertEqual(opts.second, [])

        opts = ArrayPositional.parse(["one", "two"])
        self.assertEqual(opts.second, [Symbol("two")])

        opts = ArrayPositional.parse(["one", "two", "three", "four", "five"])
        self.assertEqual(opts.first, "one")
        self.assertEqual(opts.second, ["two", "three", "four", "five"])

    def testArrayPositionalNotEnough(self):
        output, _ = capture(lambda: ArrayPositional.parse([]))
        self.assertIn("Not enough arguments", output)
        self.assertIn("FIRST [SECOND...]", output)

    def testSetField(self):
        class Tags(Options, shell=False):
            tags = Field(set[str], short="t", long="tag")

        self.assertEqual(Tags.parse(["-t", "a", "--tag=b", "-t", "a"]).tags, {"a", "b"})
        self.assertEqual(Tags.parse([]).tags, set())

    def testRepeatedValueIsACopy(self):
        opts = ArrayOptions.parse(["-x", "one"])
        opts.x.append("two")
        self.assertEqual(opts.x, ["one"])


class TestTypes(TestCase):
    """Conversion and defaulting of typed fields."""

    def testRichTypes(self):
        opts = RichTypes.parse(["-s", "foo", "-i", "52", "-f", "2.3"])
        self.assertEqual(opts.my_symbol, Symbol("foo"))
        self.assertEqual(opts.my_integer, 52)
        self.assertEqual(opts.my_float, 2.3)

    def testDefaultsWithNothing(self):
        opts = Defaults.parse([])
        self.assertIsNone(opts.opt_string)
        self.assertEqual(opts.def_string, "foo")
        self.assertIsNone(opts.opt_symbol)
        self.assertEqual(opts.def_symbol, Symbol("bar"))
        self.assertIsNone(opts.opt_integer)
        self.assertEqual(opts.def_integer, 55)
        self.assertIs(opts.def_bool, True)

    def testDefaultsWithValues(self):
        opts = Defaults.parse(["-a", "one", "-b", "two", "-c", "three", "-d", "four", "-e", "99", "-f", "100"])
        self.assertEqual(opts.opt_string, "one")
        self.assertEqual(opts.def_string, "two")
        self.assertEqual(opts.opt_symbol, Symbol("three"))
        self.assertEqual(opts.def_symbol, Symbol("four"))
        self.assertEqual(opts.opt_integer, 99)
        self.assertEqual(opts.def_integer, 100)

    def testEnumValues(self):
        self.assertIs(OptsWithEnum.parse(["-v", "one"]).value, MyEnum.ONE)
        self.assertIs(OptsWithEnum.parse(["--value=one"]).value, MyEnum.ONE)
        self.assertIs(OptsWithEnum.parse(["-v", "two"]).value, MyEnum.TWO)
        self.assertIs(OptsWithEnum.parse(["--value=two"]).value, MyEnum.TWO)

    def testBadEnumValue(self):
        output, code = capture(lambda: OptsWithEnum.parse(["--value=seventeen"]))
        self.assertIn('key not found: "seventeen"', output)
        self.assertIn("Usage: opts-with-enum", output)
        self.assertEqual(code, 0)

    def testStrictNumbers(self):
        class Strict(Options, shell=False):
            count = Field(int, short="n")

        with self.assertRaises(InvalidValueError) as context:
            Strict.parse(["-n", "12abc"])
        self.assertIn("`count`", str(context.exception))

    def testLenientNumbers(self):
        class Lenient(Options, shell=False, lenient=True):
            count = Field(int, short="n")
            ratio = Field(float, short="r", factory=lambda: 1.0)

        self.assertEqual(Lenient.parse(["-n", "12abc"]).count, 12)
        self.assertEqual(Lenient.parse(["-n", "abc"]).count, 0)
        self.assertEqual(Lenient.parse(["-n", "1", "-r", "2.5x"]).ratio, 2.5)


class TestExitPolicy(TestCase):
    """shell/status class options."""

    def testShellFalseRaises(self):
        class Quiet(Options, shell=False):
            name = Field(str)

        with self.assertRaises(MissingValueError):
            Quiet.parse([])
        with self.assertRaises(UnknownSwitchError):
            Quiet.parse(["--nope", "x"])
        with self.assertRaises(ParseError):
            Quiet.parse(["a", "b"])

    def testCustomStatus(self):
        class Strict(Options, prog="strict", colorful=False, status=2):
            name = Field(str)

        _, code = capture(lambda: Strict.parse([]))
        self.assertEqual(code, 2)
        _, code = capture(lambda: Strict.parse(["--help"]))
        self.assertEqual(code, 0)

    def testStatusIsInherited(self):
        class Base(Options, prog="base", colorful=False, status=3):
            pass

        class Child(Base):
            name = Field(str)

        _, code = capture(lambda: Child.parse([]))
        self.assertEqual(code, 3)

    def testUnknownClassOption(self):
        with self.assertRaises(TypeError):
            class Broken(Options, colour=False):
                pass


class TestConfiguration(TestCase):
    """Parsed configurations are immutable value objects."""

    def testReadOnly(self):
        opts = SimpleOpt.parse(["-i", "foo"])
        with self.assertRaises(AttributeError):
            opts.input = "bar"
        with self.assertRaises(AttributeError):
            del opts.input

    def testEquality(self):
        self.assertEqual(SimpleOpt.parse(["-i", "foo"]), SimpleOpt.parse(["--input", "foo"]))
        self.assertNotEqual(SimpleOpt.parse(["-i", "foo"]), SimpleOpt.parse(["-i", "bar"]))

    def testRepr(self):
        self.assertEqual(repr(SimpleOpt.parse(["-i", "foo"])), "SimpleOpt(input='foo', verbose=False)")

    def testDirectConstructionRefused(self):
        with self.assertRaises(TypeError):
            SimpleOpt()

    def testFieldOnClass(self):
        self.assertIsInstance(SimpleOpt.input, Field)
        self.assertEqual(SimpleOpt.input.spec.long, "input")

    def testInheritedFields(self):
        class Base(Options, shell=False):
            verbose = Field(bool, short="v")

        class Child(Base):
            name = Field(str)

        opts = Child.parse(["-v", "x"])
        self.assertEqual((opts.verbose, opts.name), (True, "x"))
        self.assertEqual([spec.name for spec in Base.__fields__], ["verbose"])

    def testDynamicDeclaration(self):
        class Dynamic(Options, shell=False):
            pass

        Dynamic.declare("input", str, short="i", long="input")
        Dynamic.declare("verbose", bool, short="v", long="verbose")
        self.assertEqual(Dynamic.parse(["-i", "foo"]).input, "foo")
        self.assertIs(Dynamic.parse(["-v", "--input=foo"]).verbose, True)

    def testLateDeclarationOnParent(self):
        class Parent(Options, shell=False):
            pass

        class Earlier(Parent):
            pass

        Parent.declare("extra", str, long="extra", factory=lambda: "d")
        self.assertEqual(Parent.parse([]).extra, "d")
        opts = Earlier.parse([])
        with self.assertRaises(AttributeError):
            opts.extra
        self.assertFalse(hasattr(opts, "extra"))


if __name__ == "__main__":
    unittest.main()
