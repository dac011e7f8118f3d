"""
Arguments module behavioral tests (declaration syntax, validation, display).

Scope
- Argument: "<x>"/"[x]"/"type:x"/"x..." syntax, display forms, validation chain.
- Flag: form parsing, naming, display pair.
- Option: form parsing, embedded or explicit argument.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Argument, Flag, Option).
"""

import unittest
from unittest import TestCase

from commandant import Argument, Flag, Option


class TestArgument(TestCase):
    """Behavioral tests for Argument specifications."""

    def testAngleBracketsAreRequired(self):
        a = Argument("<file>")
        self.assertEqual(a.name, "file")
        self.assertTrue(a.required)
        self.assertFalse(a.variadic)
        self.assertEqual(a.display, "<file>")

    def testSquareBracketsAreOptional(self):
        a = Argument("[file]")
        self.assertFalse(a.required)
        self.assertEqual(a.display, "[file]")

    def testBareNameIsOptional(self):
        self.assertFalse(Argument("file").required)

    def testExplicitRequiredWins(self):
        self.assertTrue(Argument("[file]", required=True).required)

    def testEllipsisMakesVariadic(self):
        a = Argument("<text...>")
        self.assertTrue(a.variadic)
        self.assertEqual(a.name, "text")
        self.assertEqual(a.display, "<text...>")

    def testTypeTagPrefix(self):
        a = Argument("<int:count>")
        self.assertEqual(a.type, "int")
        self.assertEqual(a.name, "count")
        self.assertEqual(a.display, "<count>")

    def testDefaultTypeIsString(self):
        self.assertEqual(Argument("<name>").type, "str")

    def testUnknownTypeTagRejected(self):
        with self.assertRaises(ValueError):
            Argument("<complex:value>")

    def testMalformedNameRejected(self):
        with self.assertRaises(ValueError):
            Argument("<>")
        with self.assertRaises(ValueError):
            Argument("<9lives>")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Argument(42)

    def testDisplayUsesHyphens(self):
        a = Argument("<image_name>")
        self.assertEqual(a.display, "<image-name>")
        self.assertTrue(a.answers("image_name"))
        self.assertTrue(a.answers("image-name"))
        self.assertTrue(a.answers("<image-name>"))
        self.assertFalse(a.answers("image"))

    def testDescrValidation(self):
        with self.assertRaises(ValueError):
            Argument("<file>", "   ")
        with self.assertRaises(TypeError):
            Argument("<file>", 5)
        self.assertIsNone(Argument("<file>").descr)

    def testInvalidDefaultRejectedAtDeclaration(self):
        with self.assertRaises(ValueError):
            Argument("<int:port>", default="abc")
        with self.assertRaises(ValueError):
            Argument("<uint:workers>", default="-1")

    def testNonStringDefaultRejected(self):
        with self.assertRaises(TypeError):
            Argument("<int:port>", default=8080)

    def testValidDefaultAccepted(self):
        a = Argument("<int:port>", default="8080")
        self.assertTrue(a.defaulted)
        self.assertEqual(a.default, "8080")

    def testIntegerValidatorNamesConversionFailure(self):
        with self.assertRaises(ValueError) as caught:
            Argument("<int:port>").validate("hello")
        self.assertIn("not a valid integer", str(caught.exception))
        self.assertIn("invalid literal for int()", str(caught.exception))

    def testFloatAndBoolValidators(self):
        Argument("<float:ratio>").validate("0.5")
        Argument("<bool:enabled>").validate("TRUE")
        with self.assertRaises(ValueError):
            Argument("<float:ratio>").validate("half")
        with self.assertRaises(ValueError):
            Argument("<bool:enabled>").validate("yes")

    def testFileValidatorChecksExistence(self):
        Argument("<file:path>").validate(__file__)
        with self.assertRaises(ValueError):
            Argument("<file:path>").validate("/definitely/not/here.txt")

    def testChoicesAreCaseInsensitive(self):
        a = Argument("<mode>", choices=["fast", "safe"])
        a.validate("FAST")
        with self.assertRaises(ValueError) as caught:
            a.validate("slow")
        self.assertIn("fast, safe", str(caught.exception))

    def testChoicesDuplicatesRejected(self):
        with self.assertRaises(ValueError):
            Argument("<mode>", choices=["fast", "FAST"])

    def testChoicesMustBeStrings(self):
        with self.assertRaises(TypeError):
            Argument("<level>", choices=[1, 2])
        with self.assertRaises(TypeError):
            Argument("<level>", choices="abc")

    def testValidatorReasonIsKept(self):
        def even(value):
            if int(value) % 2:
                raise ValueError(f"`{value}` is not even")

        a = Argument("<int:count>", validators=[even])
        a.validate("4")
        with self.assertRaises(ValueError) as caught:
            a.validate("3")
        self.assertEqual(str(caught.exception), "`3` is not even")

    def testTypeValidatorRunsBeforeCustomValidators(self):
        calls = []
        a = Argument("<int:count>", validators=[calls.append])
        with self.assertRaises(ValueError):
            a.validate("three")
        self.assertEqual(calls, [])

    def testValidatorReturningFalseRejects(self):
        def short(value):
            return len(value) < 4

        a = Argument("<tag>", validators=[short])
        a.validate("abc")
        with self.assertRaises(ValueError) as caught:
            a.validate("abcdef")
        self.assertIn("short", str(caught.exception))

    def testValidatorsMustBeCallable(self):
        with self.assertRaises(TypeError):
            Argument("<tag>", validators=["nope"])

    def testPatternUsesSearch(self):
        a = Argument("<tag>", pattern=r"\d")
        a.validate("v1")
        with self.assertRaises(ValueError) as caught:
            a.validate("vx")
        self.assertIn(r"\d", str(caught.exception))

    def testChoicesCheckedBeforePattern(self):
        a = Argument("<tag>", choices=["alpha"], pattern=r"^\d+$")
        with self.assertRaises(ValueError) as caught:
            a.validate("beta")
        self.assertIn("expected one of", str(caught.exception))

    def testDisplayPair(self):
        self.assertEqual(Argument("<file>", "file to read").__display__(), ("<file>", "file to read"))
        self.assertEqual(Argument("[file]").__display__(), ("[file]", ""))

    def testRepr(self):
        text = repr(Argument("<file>"))
        self.assertTrue(text.startswith("argument("))
        self.assertIn("name='file'", text)


class TestFlag(TestCase):
    """Behavioral tests for Flag (presence-only) specifications."""

    def testSingleStringDeclaration(self):
        f = Flag("-v --verbose")
        self.assertEqual(f.short, "-v")
        self.assertEqual(f.long, "--verbose")
        self.assertEqual(f.name, "verbose")
        self.assertEqual(f.forms, ("-v", "--verbose"))

    def testSeparateFormsDeclaration(self):
        f = Flag("-v", "--verbose")
        self.assertEqual(f.forms, ("-v", "--verbose"))

    def testNameFallsBackToShortForm(self):
        self.assertEqual(Flag("-v").name, "v")

    def testExplicitName(self):
        self.assertEqual(Flag("-q --quiet", name="silent").name, "silent")

    def testLongOnly(self):
        f = Flag("--all")
        self.assertIsNone(f.short)
        self.assertEqual(f.__display__(), ("    --all", ""))

    def testFlagTakesNoValue(self):
        with self.assertRaises(ValueError):
            Flag("-v --verbose <level>")

    def testMalformedFormsRejected(self):
        with self.assertRaises(ValueError):
            Flag("--bad_name")
        with self.assertRaises(ValueError):
            Flag("-vv")

    def testAtMostOneFormOfEachKind(self):
        with self.assertRaises(ValueError):
            Flag("-a -b")
        with self.assertRaises(ValueError):
            Flag("--all --every")

    def testNamesRequired(self):
        with self.assertRaises(TypeError):
            Flag()

    def testAnswers(self):
        f = Flag("-v --verbose")
        self.assertTrue(f.answers("verbose"))
        self.assertTrue(f.answers("-v"))
        self.assertTrue(f.answers("--verbose"))
        self.assertFalse(f.answers("--quiet"))

    def testPropagateDefaultsFalse(self):
        self.assertFalse(Flag("-v").propagate)
        self.assertTrue(Flag("-v", propagate=True).propagate)

    def testDisplayPair(self):
        self.assertEqual(Flag("-v --verbose", descr="be loud").__display__(), ("-v, --verbose", "be loud"))


class TestOption(TestCase):
    """Behavioral tests for Option (value-bearing) specifications."""

    def testEmbeddedArgument(self):
        o = Option("-p --port <port-number>")
        self.assertEqual(o.name, "port")
        self.assertEqual(o.argument.display, "<port-number>")
        self.assertTrue(o.argument.required)
        self.assertEqual(o.arguments, (o.argument,))

    def testExplicitArgument(self):
        o = Option("--port", argument=Argument("<int:port>"))
        self.assertEqual(o.argument.type, "int")

    def testArgumentDeclaredTwiceRejected(self):
        with self.assertRaises(TypeError):
            Option("--port <port>", argument=Argument("<port>"))

    def testAtMostOneArgument(self):
        with self.assertRaises(ValueError):
            Option("-p --port <host> <port>")

    def testOptionWithoutArgument(self):
        o = Option("-o")
        self.assertIsNone(o.argument)
        self.assertEqual(o.arguments, ())

    def testRequiredDefaultsFalse(self):
        self.assertFalse(Option("-p --port <n>").required)
        self.assertTrue(Option("-p --port <n>", required=True).required)

    def testDisplayPair(self):
        o = Option("-p --port <int:port-number>", descr="port to bind")
        self.assertEqual(o.__display__(), ("-p, --port <port-number>", "port to bind"))


if __name__ == "__main__":
    unittest.main()
