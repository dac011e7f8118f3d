"""
Commandant parse results.

Scope
- FlagMatch / OptionMatch / ArgumentMatch: immutable match records produced
  by the parser (never declared by users).
- ParserMatches: the queryable outcome of one successful parse.

Lookup conventions
- Flags and options are looked up by name, short form or long form
  ("verbose", "-v", "--verbose").
- Arguments are looked up by name or display form ("image_name",
  "image-name", "<image-name>").
- Missing lookups raise KeyError; predicates never raise.

Records keep their own copies of the matched specs, so a result stays valid
whatever happens to the declared command tree afterwards.
"""
import collections

from .utils import *

ROOT = -1
"""matched-command index meaning no subcommand token was consumed."""

FlagMatch = collections.namedtuple("FlagMatch", ("flag",))

OptionMatch = collections.namedtuple("OptionMatch", ("option", "count", "arguments"))

ArgumentMatch = collections.namedtuple("ArgumentMatch", ("value", "argument", "values"), defaults=((),))


class ParserMatches:
    """
    Outcome of a single parse: the matched command, every matched switch and
    argument, positional leftovers, and the raw tokens.

    Built privately by the parser and only handed out once auditing is over.
    """

    command = mirror("command")
    index = mirror("index")
    tokens = mirror("tokens")
    flags = mirror("flags")
    options = mirror("options")
    arguments = mirror("arguments")
    positionals = mirror("positionals")

    def __init__(self, command, index, tokens, flags=(), options=(), arguments=(), positionals=()):
        self._command = command
        self._index = index
        self._tokens = tuple(tokens)
        self._flags = tuple(flags)
        self._options = tuple(options)
        self._arguments = tuple(arguments)
        self._positionals = tuple(positionals)

    @property
    def root(self):
        """whether the root command was matched (no subcommand token consumed)."""
        return self._index == ROOT

    @property
    def count(self):
        """raw token count."""
        return len(self._tokens)

    def contains_flag(self, name, /):
        return any(match.flag.answers(name) for match in self._flags)

    def contains_option(self, name, /):
        return any(match.option.answers(name) for match in self._options)

    def get_argument(self, name, /):
        """bound value of a positional argument, variadic ones space-joined."""
        return self._find_argument(name).value

    def get_argument_values(self, name, /):
        """individual tokens bound to an argument (one item unless variadic)."""
        return self._find_argument(name).values

    def get_option(self, name, /):
        """first value bound to an option."""
        values = self.get_option_values(name)
        if not values:
            raise KeyError(f"option {name!r} has no value")
        return values[0]

    def get_option_values(self, name, /):
        """every value bound to an option, across all its repetitions."""
        match = self._find_option(name)
        return tuple(argument.value for argument in match.arguments)

    def count_option(self, name, /):
        """how many times an option appeared (0 when absent)."""
        try:
            return self._find_option(name).count
        except KeyError:
            return 0

    def _find_argument(self, name):
        for match in self._arguments:
            if match.argument.answers(name):
                return match
        raise KeyError(f"no value found for argument {name!r}")

    def _find_option(self, name):
        for match in self._options:
            if match.option.answers(name):
                return match
        raise KeyError(f"no value found for option {name!r}")

    def __repr__(self):
        return (
            f"parser-matches(command={self._command.name!r}, index={self._index!r}, "
            f"flags={[match.flag.name for match in self._flags]!r}, "
            f"options={[match.option.name for match in self._options]!r}, "
            f"positionals={list(self._positionals)!r})"
        )


__all__ = (
    "ParserMatches",
    "FlagMatch",
    "OptionMatch",
    "ArgumentMatch",
    "ROOT",
)
