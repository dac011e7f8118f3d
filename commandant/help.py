"""
Commandant help and version rendering (rich).

Both renderers return rich renderables; printing them (and choosing stdout or
stderr) is left to the caller.

Help layout
- description
- USAGE      path [FLAGS] [OPTIONS] <ARGS> <SUBCOMMAND>, or the custom usage
- ALIASES    when the command is aliased and has aliases
- ARGS / FLAGS / OPTIONS
- SUBCOMMANDS, or one section per subcommand group plus "Other Commands"
- DISCUSSION

Palette keys
- description, section, usage, aliases, leading, floating, discussion,
  program-name, program-version, author
Define a mapping named __styles__ in __main__ to override any entry; when the
command is not colorful styling is dropped.
"""
from collections import defaultdict

from rich.console import Group
from rich.padding import Padding
from rich.table import Table
from rich.text import Text


def _palette(command):
    styles = defaultdict(str, {
        "description": "italic #A3A3A3",
        "section": "bold #FFFFFF",
        "usage": "bold #36C5F0",
        "aliases": "#9CA3AF",
        "leading": "bold #00E6FF",
        "floating": "#9CA3AF",
        "discussion": "#D1D5DB",
        "program-name": "bold #FF4D94",
        "program-version": "bold #00E6FF",
        "author": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment if command.colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if command.colorful else "")

    return text


def _rows(text, items, alphabetical):
    pairs = [item.__display__() for item in items]
    if alphabetical:
        pairs.sort(key=lambda pair: pair[0].strip().lstrip("-<[").lower())
    table = Table.grid(padding=(0, 4))
    table.add_column(no_wrap=True)
    table.add_column()
    for leading, floating in pairs:
        table.add_row(text(leading, "leading"), text(floating, "floating"))
    return Padding(table, (0, 0, 0, 4))


class _Child:
    """display adapter listing a subcommand with its aliases."""

    def __init__(self, command, aliased):
        self.command = command
        self.aliased = aliased

    def __display__(self):
        leading, floating = self.command.__display__()
        if self.aliased and self.command.aliases:
            leading = ", ".join((leading, *self.command.aliases))
        return leading, floating


def render_help(command, /):
    text = _palette(command)
    renders = []

    if command.descr:
        renders.append(text(command.descr, "description"))
        renders.append(Text(""))

    usage = command.usage
    if not usage:
        usage = " ".join(node.name for node in command.path)
        if command.flags:
            usage += " [FLAGS]"
        if command.options:
            usage += " [OPTIONS]"
        if command.arguments:
            usage += " <ARGS>"
        if command.children:
            usage += " <SUBCOMMAND>"
    renders.append(text("USAGE", "section"))
    renders.append(Padding(text(usage, "usage"), (0, 0, 0, 4)))

    def section(title, items):
        if items:
            renders.append(Text(""))
            renders.append(text(title, "section"))
            renders.append(_rows(text, items, command.alphabetical))

    if command.aliased and command.aliases:
        renders.append(Text(""))
        renders.append(text("ALIASES", "section"))
        renders.append(Padding(text(f"[{', '.join(command.aliases)}]", "aliases"), (0, 0, 0, 4)))

    section("ARGS", command.arguments)
    section("FLAGS", command.flags)
    section("OPTIONS", command.options)

    children = [_Child(child, command.aliased) for child in command.children.values()]
    groups = {}
    for child in children:
        if child.command.group:
            groups.setdefault(child.command.group, []).append(child)

    if not groups:
        section("SUBCOMMANDS", children)
    else:
        for title, members in groups.items():
            section(title, members)
        section("Other Commands", [child for child in children if not child.command.group])

    if command.discussion:
        renders.append(Text(""))
        renders.append(text("DISCUSSION", "section"))
        renders.append(Padding(text(command.discussion, "discussion"), (0, 0, 0, 4)))

    return Group(*renders)


def render_version(command, /):
    root = command.root
    text = _palette(root)
    line = Text.assemble(text(root.name, "program-name"), " ", text(root.version or "", "program-version"))
    if root.author:
        return Group(line, text(root.author, "author"))
    return Group(line)


__all__ = (
    "render_help",
    "render_version",
)
