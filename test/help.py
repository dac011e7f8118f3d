"""
Help module behavioral tests (help and version layouts).

Conventions
- Test method names follow CamelCase per project convention.
- Renderables are printed through a recording rich Console and compared as
  plain text.
"""

import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from commandant import Command, render_help, render_version


def noop(matches):
    return matches


def text(renderable):
    console = Console(file=io.StringIO(), record=True, width=100, color_system=None)
    console.print(renderable)
    return console.export_text()


def docker(**settings):
    app = Command(
        noop,
        name="docker",
        descr="container tooling",
        version="1.2.0",
        author="Eiko Reishin",
        flags=["-z --zeta", "-a --alpha"],
        options=["-p --port <int:port-number>"],
        discussion="see the manual for more",
        **settings,
    )
    Command(noop, app, "image", "manage images", aliases=["i"], arguments=["<image-name>"])
    Command(noop, app, "volume", "manage volumes")
    return app


class TestRenderHelp(TestCase):
    def testSections(self):
        output = text(render_help(docker()))
        self.assertIn("container tooling", output)
        self.assertIn("USAGE", output)
        self.assertIn("docker [FLAGS] [OPTIONS] <SUBCOMMAND>", output)
        self.assertIn("FLAGS", output)
        self.assertIn("OPTIONS", output)
        self.assertIn("SUBCOMMANDS", output)
        self.assertIn("DISCUSSION", output)
        self.assertIn("see the manual for more", output)
        self.assertLess(output.index("USAGE"), output.index("FLAGS"))
        self.assertLess(output.index("FLAGS"), output.index("OPTIONS"))
        self.assertLess(output.index("OPTIONS"), output.index("SUBCOMMANDS"))

    def testRows(self):
        output = text(render_help(docker()))
        self.assertIn("-z, --zeta", output)
        self.assertIn("-h, --help", output)
        self.assertIn("-V, --version", output)
        self.assertIn("-p, --port <port-number>", output)
        self.assertIn("manage images", output)

    def testDeclarationOrderByDefault(self):
        output = text(render_help(docker()))
        self.assertLess(output.index("--zeta"), output.index("--alpha"))

    def testAlphabeticalOrder(self):
        output = text(render_help(docker(alphabetical=True)))
        self.assertLess(output.index("--alpha"), output.index("--help"))
        self.assertLess(output.index("--help"), output.index("--zeta"))

    def testSubcommandUsageAndArguments(self):
        image = docker().find_command("image")
        output = text(render_help(image))
        self.assertIn("docker image [FLAGS] <ARGS>", output)
        self.assertIn("ARGS", output)
        self.assertIn("<image-name>", output)
        self.assertNotIn("--version", output)
        self.assertNotIn("ALIASES", output)

    def testAliasesShownWhenAliased(self):
        app = docker(aliased=True)
        self.assertIn("image, i", text(render_help(app)))
        output = text(render_help(app.find_command("i")))
        self.assertIn("ALIASES", output)
        self.assertIn("[i]", output)

    def testCustomUsage(self):
        app = Command(noop, name="tool", usage="tool <anything>")
        output = text(render_help(app))
        self.assertIn("tool <anything>", output)
        self.assertNotIn("[FLAGS]", output)

    def testGroupedSubcommands(self):
        app = Command(name="kit")
        Command(noop, app, "build", "build things", group="Building")
        Command(noop, app, "clean", "clean things", group="Building")
        Command(noop, app, "doctor", "check things")
        output = text(render_help(app))
        self.assertIn("Building", output)
        self.assertIn("Other Commands", output)
        self.assertNotIn("SUBCOMMANDS", output)
        self.assertLess(output.index("Building"), output.index("Other Commands"))
        self.assertLess(output.index("Other Commands"), output.index("doctor"))

    def testHostStylesAreAccepted(self):
        main = __import__("__main__")
        with mock.patch.object(main, "__styles__", {"section": "bold red"}, create=True):
            output = text(render_help(docker(colorful=True)))
        self.assertIn("USAGE", output)


class TestRenderVersion(TestCase):
    def testNameVersionAndAuthor(self):
        output = text(render_version(docker()))
        self.assertIn("docker 1.2.0", output)
        self.assertIn("Eiko Reishin", output)

    def testUsesTheRoot(self):
        output = text(render_version(docker().find_command("volume")))
        self.assertIn("docker 1.2.0", output)

    def testWithoutAuthor(self):
        output = text(render_version(Command(noop, name="tool", version="0.1")))
        self.assertEqual(output.strip(), "tool 0.1")


if __name__ == "__main__":
    unittest.main()
