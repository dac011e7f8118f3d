"""
Commandant faults (parse errors) and rendering.

Scope
- FaultCode: the closed set of parse failures, valued by their process exit code.
- CommandException: base type carrying message + options (context, offending
  tokens, suggestions, rendering switches) that knows how to render itself.
- One subclass per fault kind, pinned to its code and title.
- trigger(): central entry point to surface a fault (raise, or render and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Short lowercased titles, a one-sentence message, a context paragraph that
  names what was found instead, and a single fixed hint.
- Styling configurable via __styles__ in __main__, program name via __prog__.

Integration
- The parser raises these faults directly and never exits the process.
- The dispatcher (Command.run) decides: shell mode renders through rich and
  exits with the fault's exit code, otherwise the fault propagates.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)

HINT = "run a COMMAND with --help for detailed usage information"


class FaultCode(IntEnum):
    """
    canonical fault codes, valued by the exit code of the failing process.

    spacing leaves room for future additions without reshuffling existing codes.
    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    INVALID_ARGUMENT_VALUE    = 10
    MISSING_REQUIRED_ARGUMENT = 20
    MISSING_REQUIRED_OPTION   = 30
    UNKNOWN_COMMAND           = 40
    UNKNOWN_OPTION            = 50
    UNRESOLVED_ARGUMENT       = 60

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base of every parse failure.

    options
    - context: str, human-readable paragraph explaining the failure.
    - tokens: the offending raw token(s).
    - suggestions: close matches offered to the user (unknown commands).
    - shell/fancy/colorful/prog: rendering switches merged in by trigger().
    """
    __code__ = Unset
    __title__ = "command error"

    def __init_subclass__(cls, /, code=Unset, title=Unset, **options):
        super().__init_subclass__(**options)
        if code is not Unset:
            cls.__code__ = FaultCode(code)
        if title is not Unset:
            cls.__title__ = title

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return type(self).__code__

    @property
    def title(self):
        return type(self).__title__

    @property
    def context(self):
        return self.options.get("context", "")

    @property
    def tokens(self):
        return tuple(self.options.get("tokens", ()))

    @property
    def suggestions(self):
        return tuple(self.options.get("suggestions", ()))

    @property
    def exit_code(self):
        return int(coalesce(self.code, 1))

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",
            "error-context": "#9A9AA6",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "underline #00E5FF dim",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), styles[style] if colorful else "")

        prog = text(getattr(main, "__prog__", self.options.get("prog", "error")), "prog-name")
        code = self.code.normalize() if self.code is not Unset else "?"

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        renders = [text(self.message, "error-message")]
        if self.context:
            renders.append(text(self.context, "error-context"))
        if self.code is not Unset and (docs := getdoc(self.code)):
            renders.append(text(docs, "docs"))
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(HINT, "hint")))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.exit_code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidArgumentValueError(
    CommandException, code=FaultCode.INVALID_ARGUMENT_VALUE, title="invalid argument value"
): ...
class MissingRequiredArgumentError(
    CommandException, code=FaultCode.MISSING_REQUIRED_ARGUMENT, title="missing required argument"
): ...
class MissingRequiredOptionError(
    CommandException, code=FaultCode.MISSING_REQUIRED_OPTION, title="missing required option"
): ...
class UnknownCommandError(CommandException, code=FaultCode.UNKNOWN_COMMAND, title="unknown command"): ...
class UnknownOptionError(CommandException, code=FaultCode.UNKNOWN_OPTION, title="unknown option"): ...
class UnresolvedArgumentError(
    CommandException, code=FaultCode.UNRESOLVED_ARGUMENT, title="unresolved argument"
): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is rendered on stderr and the process exits with
      its exit code; otherwise the (replaced) fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "InvalidArgumentValueError",
    "MissingRequiredArgumentError",
    "MissingRequiredOptionError",
    "UnknownCommandError",
    "UnknownOptionError",
    "UnresolvedArgumentError",
    "FaultCode",
    "trigger",
    "getdoc",
    "HINT",
)
