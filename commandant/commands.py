"""
Commandant commands: the declared interface and its dispatcher.

Overview
- Command: a node of the declared tree. Owns flags, options, positional
  arguments and child commands; carries help/version metadata, settings and
  an optional callback receiving the ParserMatches.
- command(): factory/decorator building a Command from a callback.

Settings (inherited from the parent when left Unset)
- shell: render faults and exit with their exit code instead of raising.
- fancy / colorful: fault and help rendering switches.
- negatives: tokens like "-5" are values, not flags.
- permissive: leftover positional tokens are collected instead of rejected.
- aliased / alphabetical: help shows aliases / sorts its rows.
- helpful: adds a "help [command]" subcommand.
- versioned: adds "-V --version" on the root when it declares a version.
- verbose: print help after every fault (shell mode).

Dispatch (Command.run)
- tokens come from sys.argv[1:], a shell-like string, or an iterable of strings.
- the parser either returns matches or raises a fault; faults and help/version
  requests are emitted as events (see events.py) on the root command.
- in shell mode a fault exits the process with its exit code; otherwise it
  propagates to the caller.
"""
import builtins
import copy
import inspect
import logging
import os
import re
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .arguments import Argument, Flag, Option, SpecType
from .events import *
from .events import DEFAULT
from .faults import *
from .faults import console as stderr
from .help import render_help, render_version
from .parser import Parser
from .utils import *

logger = logging.getLogger(__name__)

stdout = Console()

_NAME = re.compile(r"[^\W\d](\w|-)*")

_SETTINGS = {
    "shell": False,
    "fancy": False,
    "colorful": True,
    "negatives": False,
    "permissive": False,
    "aliased": False,
    "alphabetical": False,
    "helpful": False,
    "versioned": True,
    "verbose": False,
}


def _sanitize_specs(cls, specs, kind, label, /):
    if isinstance(specs, str) or not isinstance(specs, Iterable):
        raise TypeError(f"{cls.__typename__} '{label}' must be an iterable")
    sanitized = []
    for spec in specs:
        if isinstance(spec, str):
            spec = kind(spec)
        elif not isinstance(spec, kind):
            raise TypeError(f"{cls.__typename__} '{label}' must contain {kind.__typename__}s or strings")
        sanitized.append(spec)
    return tuple(sanitized)


def _sanitize_strings(cls, metadata, /):
    for label in ("descr", "usage", "discussion", "version", "author", "group"):
        if not isinstance(value := metadata[label], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} '{label}' must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} '{label}' cannot be empty")
        metadata[label] = coalesce(value)


def _sanitize_surface(cls, metadata, /):
    """
    Validate the declared switches and arguments of one command.

    - switch forms and names are unique across flags and options.
    - argument names are unique and only the last argument may be variadic.
    """
    forms, names = set(), set()
    for spec in (*metadata["flags"], *metadata["options"]):
        for form in spec.forms:
            if form in forms:
                raise ValueError(f"{cls.__typename__} switch {form!r} is declared twice")
            forms.add(form)
        if spec.name in names:
            raise ValueError(f"{cls.__typename__} switch name {spec.name!r} is declared twice")
        names.add(spec.name)

    names.clear()
    for index, argument in enumerate(arguments := metadata["arguments"]):
        if argument.name in names:
            raise ValueError(f"{cls.__typename__} argument name {argument.name!r} is declared twice")
        names.add(argument.name)
        if argument.variadic and index != len(arguments) - 1:
            raise ValueError(f"{cls.__typename__} variadic argument {argument.display} must be the last one")


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names and aliases
    among siblings. A helpful parent also receives its "help" subcommand.
    """
    if parent is Unset:
        return

    taken = {}
    for sibling in parent._children.values():
        for name in (sibling.name, *sibling.aliases):
            taken[name] = sibling
    for name in (self.name, *self.aliases):
        if name in taken:
            typeof = "subcommand" if parent.parent else "command"
            raise ValueError(f"{type(self).__typename__} {typeof} name {name!r} is already in use")

    parent._children[self.name] = self

    if parent.helpful and self.name != "help" and "help" not in taken:
        Command(_explain, parent, "help", "print help for a subcommand", arguments=("[command]",))


def _explain(matches):
    parent = matches.command.parent
    name = matches.get_argument("command")
    if (target := parent.find_command(name)) is None:
        trigger(
            UnknownCommandError(
                f"no such subcommand found: `{name}`",
                context=f"`{' '.join(node.name for node in parent.path)}` does not have a subcommand named `{name}`",
                tokens=(name,),
            ),
            prog=parent.root.name,
            shell=parent.shell,
            fancy=parent.fancy,
            colorful=parent.colorful,
        )
    stdout.print(render_help(target))


def _progname():
    stem = os.path.splitext(os.path.basename(sys.argv[0]))[0]
    stem = re.sub(r"[^\w-]+", "-", stem).strip("-")
    return stem if _NAME.fullmatch(stem) else "program"


def _tokenize(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    elif isinstance(prompt, str):
        return shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = []
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("run() argument must be a string or an iterable of strings")
            tokens.append(item)
        return tokens
    raise TypeError("run() argument must be a string or an iterable of strings")


def _output_help(context):
    stdout.print(render_help(context.command))


def _output_version(context):
    stdout.print(render_version(context.command))


def _report(context):
    command = context.command
    if not command.shell:
        return
    stderr.print(context.fault)
    if command.verbose:
        stderr.print(render_help(command))


class Command(metaclass=SpecType):
    """
    Node of the declared interface.

    Construction
    - Command(callback, parent, name, descr, *, ...) or through command() /
      @parent.command(...). The name defaults to the callback's __name__ (or
      the running script), the description to its docstring.
    - flags/options/arguments accept spec instances or declaration strings:
      Command(flags=["-v --verbose"], options=["-p --port <int:port>"],
      arguments=["<image-name>"]).
    - A command with positional arguments cannot have subcommands.

    The callback, when present, receives the ParserMatches of a successful run.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "usage",
        "discussion",
        "version",
        "author",
        "group",
        "options",
        "arguments",
        "parent",
        "children",
        *_SETTINGS,
    )

    __displayable__ = (
        "name",
        "aliases",
        "descr",
        "version",
        "shell",
        "fancy",
        "colorful",
    )

    @property
    def root(self):
        """
        Topmost command of the tree this command belongs to.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Ancestry from the root to this command, both included.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def callback(self):
        return self._callback

    @property
    def flags(self):
        """
        Flags recognised on this command: its own, the automatic help flag,
        the root's version flag, then propagated flags of its ancestors.
        A form already taken hides the later flag entirely.
        """
        flags = list(self._flags)
        forms = {form for spec in (*self._flags, *self._options) for form in spec.forms}

        def admit(flag):
            if not forms.intersection(flag.forms):
                flags.append(flag)
                forms.update(flag.forms)

        admit(self._helper)
        if self.parent is None and self._versioner is not None:
            admit(self._versioner)
        for ancestor in reversed(self.path[:-1]):
            for flag in ancestor._flags:
                if flag.propagate:
                    admit(flag)
        return tuple(flags)

    def __init__(
            self,
            source=Unset,
            /,
            parent=Unset,
            name=Unset,
            descr=Unset,
            *,
            aliases=(),
            flags=(),
            options=(),
            arguments=(),
            usage=Unset,
            discussion=Unset,
            version=Unset,
            author=Unset,
            group=Unset,
            **settings
    ):
        cls = builtins.type(self)

        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        elif getattr(parent, "arguments", ()):
            raise ValueError(f"{cls.__typename__} 'parent' command cannot have any arguments")
        if not callable(source) and source is not Unset:
            raise TypeError(f"{cls.__typename__} 'source' must be callable")

        if unknown := settings.keys() - _SETTINGS.keys():
            raise TypeError(f"{cls.__typename__} got unexpected setting(s): {', '.join(sorted(unknown))}")

        name = coalesce(name, getattr(source, "__name__", Unset))
        name = coalesce(name, _progname())
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not _NAME.fullmatch(name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' must be a valid command name, got {name!r}")

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        aliases = tuple(aliases)
        if not all(isinstance(alias, str) and _NAME.fullmatch(alias) for alias in aliases):
            raise ValueError(f"{cls.__typename__} 'aliases' must be valid command names")
        if len(set(aliases) | {name}) != len(aliases) + 1:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot repeat the name or each other")

        metadata = {
            "name": name,
            "aliases": aliases,
            "descr": coalesce(descr, source is not Unset and inspect.getdoc(source) or Unset),
            "usage": usage,
            "discussion": discussion,
            "version": version,
            "author": author,
            "group": group,
            "flags": _sanitize_specs(cls, flags, Flag, "flags"),
            "options": _sanitize_specs(cls, options, Option, "options"),
            "arguments": _sanitize_specs(cls, arguments, Argument, "arguments"),
            "parent": parent,
            "children": {},
        }
        for setting, default in _SETTINGS.items():
            metadata[setting] = bool(coalesce(settings.get(setting, Unset), getattr(parent, setting, default)))

        _sanitize_strings(cls, metadata)
        _sanitize_surface(cls, metadata)

        self._callback = coalesce(source)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))

        self._helper = Flag("-h --help", descr="show this help message and exit")
        self._versioner = None
        if self._version is not None and self._versioned:
            self._versioner = Flag("-V --version", descr="show the version and exit")

        self._emitter = EventEmitter()
        if self._parent is None:
            self._emitter.on(Event.OUTPUT_HELP, _output_help, DEFAULT, default=True)
            self._emitter.on(Event.OUTPUT_VERSION, _output_version, DEFAULT, default=True)
            for event in Event:
                if event.failure:
                    self._emitter.on(event, _report, DEFAULT, default=True)

        _attach_to_parent(self, parent)

    def __call__(self, *args, **kwargs):
        if self._callback is None:
            raise TypeError(f"{type(self).__typename__} {self.name!r} has no callback")
        return self._callback(*args, **kwargs)

    def __display__(self):
        return self.name, self._descr or ""

    def find_flag(self, token, /):
        for flag in self.flags:
            if token in flag.forms:
                return flag
        return None

    def find_option(self, token, /):
        for option in self._options:
            if token in option.forms:
                return option
        return None

    def find_command(self, token, /):
        for child in self._children.values():
            if token == child.name or token in child.aliases:
                return child
        return None

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a subcommand of this command; decorator form when source is
        omitted (@app.command(name="serve", ...)).
        """
        return command(source, self, *args, **kwargs)

    def on(self, event, callback=Unset, /, priority=0):
        """
        Register a listener on the root's emitter; decorator form when
        callback is omitted.
        """
        if callback is Unset:
            return lambda callback: self.root._emitter.on(event, callback, priority)
        return self.root._emitter.on(event, callback, priority)

    def override(self, event, /):
        self.root._emitter.override(event)

    def before_all(self, callback, /):
        return self.root._emitter.before_all(callback)

    def after_all(self, callback, /):
        return self.root._emitter.after_all(callback)

    def before_help(self, callback, /):
        return self.root._emitter.before_help(callback)

    def after_help(self, callback, /):
        return self.root._emitter.after_help(callback)

    def parse(self, tokens, /):
        """
        Parse tokens against this command.

        Returns ParserMatches or raises a CommandException subclass; never
        exits and never runs callbacks.
        """
        return Parser(self, _tokenize(tokens)).parse()

    def run(self, prompt=Unset, /):
        """
        Parse prompt and dispatch the outcome.

        Parameters
        - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable
          of strings.

        Returns
        - the matched command's callback result, or None when help or the
          version was shown instead. A command left without any token of its
          own shows help when it has subcommands or arguments lacking defaults.
        """
        tokens = _tokenize(prompt)
        parser = Parser(self, tokens)
        try:
            matches = parser.parse()
        except CommandException as fault:
            return self._fail(parser.command, tokens, fault)

        command = matches.command
        if matches.contains_flag("help"):
            return self._emit(Event.OUTPUT_HELP, command, tokens, matches)
        if (versioner := self.root._versioner) is not None and matches.contains_flag(versioner.long):
            if command.find_flag(versioner.long) is versioner:
                return self._emit(Event.OUTPUT_VERSION, command, tokens, matches)
        expected = bool(command.children) or any(not argument.defaulted for argument in command.arguments)
        if command.callback is None or (expected and len(tokens) == matches.index + 1):
            return self._emit(Event.OUTPUT_HELP, command, tokens, matches)

        logger.info("dispatching to %r", " ".join(node.name for node in command.path))
        return command.callback(matches)

    def _emit(self, event, command, tokens, matches):
        logger.info("emitting %s for %r", event.value, command.name)
        self.root._emitter.emit(EventContext(event, command, tuple(tokens), matches))

    def _fail(self, command, tokens, fault):
        original = fault
        fault = copy.replace(
            fault,
            prog=self.root.name,
            shell=command.shell,
            fancy=command.fancy,
            colorful=command.colorful,
        )
        event = Event.of(fault)
        logger.info("emitting %s for %r", event.value, command.name)
        self.root._emitter.emit(EventContext(event, command, tuple(tokens), None, fault, fault.exit_code))
        if command.shell:
            sys.exit(fault.exit_code)
        raise fault from original.__cause__


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct: command(func, parent, name="x", ...) -> Command
    - Decorator:
        @command(name="x", ...)
        def func(matches): ...
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "command",
)
