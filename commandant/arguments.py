r"""
Commandant argument specifications.

Overview
- Specs
  • Argument: positional or option-bound value (required/optional, fixed/variadic).
  • Flag: named, presence-only switch (no payload), e.g. -v/--verbose.
  • Option: named, value-bearing switch with at most one Argument, e.g. -p/--port <port>.

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.
  • Every spec implements __display__() -> (leading, floating), the pair used by
    the help renderer (canonical token, help string).

Declaration syntax
- Argument("<file>")        required, single value
- Argument("[file]")        optional, single value
- Argument("int:count")     type tag (str, int, uint, float, bool, file)
- Argument("<text...>")     variadic (absorbs every remaining plain token)
- Flag("-v --verbose")      short and long forms, whitespace separated or as
                            separate positional parameters
- Option("-p --port <port-number>")
                            forms plus the option's argument

Validation (run by the parser, in this order)
- choices: allowed values, compared case-insensitively.
- validators: the type tag validator first, then user callables. A validator
  rejects a value by raising ValueError/TypeError (the message is the reason)
  or by returning False.
- pattern: regular expression, searched in the value.

Defaults are validated on construction, so a bad default fails at declaration
time rather than at parse time.

Quick example:
    >>> from commandant.arguments import Argument, Flag, Option
    >>> Argument("<uint:count>", default="1").display
    '<count>'
    >>> Option("-p --port <int:port-number>").argument.type
    'int'
"""
import builtins
import functools
import operator
import os
import re
from collections.abc import Iterable

from rich.text import Text

from .utils import *

_SHORT = re.compile(r"-[^\W_]")
_LONG = re.compile(r"--[^\W\d_](-?[^\W_]+)*")
_NAME = re.compile(r"[^\W\d](\w|-)*")
_SYNTAX = re.compile(r"<(?P<required>.+)>|\[(?P<optional>.+)]|(?P<bare>[^<>\[\]]+)")


def _validate_int(value):
    try:
        int(value)
    except ValueError as error:
        raise ValueError(f"`{value}` is not a valid integer ({error})") from error


def _validate_uint(value):
    try:
        number = int(value)
    except ValueError as error:
        raise ValueError(f"`{value}` is not a valid unsigned integer ({error})") from error
    if number < 0:
        raise ValueError(f"`{value}` is not a valid unsigned integer (negative values are not allowed)")


def _validate_float(value):
    try:
        float(value)
    except ValueError as error:
        raise ValueError(f"`{value}` is not a valid number ({error})") from error


def _validate_bool(value):
    if value.lower() not in ("true", "false"):
        raise ValueError(f"`{value}` is not a valid boolean (expected `true` or `false`)")


def _validate_file(value):
    # blocking filesystem check, the only i/o the parser ever performs
    if not os.path.exists(value):
        raise ValueError(f"`{value}` is not a valid path (no such file or directory)")


TYPES = {
    "str": None,
    "int": _validate_int,
    "uint": _validate_uint,
    "float": _validate_float,
    "bool": _validate_bool,
    "file": _validate_file,
}


class SpecType(type):
    """
    Metaclass shared by every declared spec (arguments, flags, options, commands).

    Responsibilities
    - Derive __typename__ from the class name (camel case split with hyphens),
      used in declaration errors and reprs.
    - Expose the names listed in __introspectable__ as read-only properties
      backed by "_{name}" fields (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations; __displayable__
      narrows which properties are shown, defaulting to __introspectable__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(name='verbose', short='-v', long='--verbose', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


def _sanitize_forms(cls, names, /):
    """
    Internal: split and validate the switch forms of a Flag or Option.

    Each positional parameter may hold several whitespace-separated words
    ("-p --port <port>"). Dash-prefixed words are forms, at most one short
    ("-x") and one long ("--xxx"); every other word is returned untouched
    as a leftover for the caller to interpret.

    Returns
    - (short, long, leftovers) with Unset for an absent form.
    """
    short = long = Unset
    leftovers = []

    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        for word in name.split():
            if not word.startswith("-"):
                leftovers.append(word)
            elif _SHORT.fullmatch(word):
                if short is not Unset:
                    raise ValueError(f"{cls.__typename__} cannot have more than one short form")
                short = word
            elif _LONG.fullmatch(word):
                if long is not Unset:
                    raise ValueError(f"{cls.__typename__} cannot have more than one long form")
                long = word
            else:
                raise ValueError(f"{cls.__typename__} names must be valid shell-style forms, got {word!r}")

    if short is Unset and long is Unset:
        raise TypeError(f"{cls.__typename__} must specify at least one name")
    return short, long, leftovers


class Argument(metaclass=SpecType):
    """
    Value slot bound from raw tokens, either positionally on a command or as
    the payload of an option.

    A required argument with a default is tolerated: the default wins only when
    no token is available. Variadic arguments should be declared last; they
    absorb every remaining plain token.
    """

    __introspectable__ = (
        "name",
        "descr",
        "required",
        "variadic",
        "type",
        "choices",
        "validators",
        "pattern",
        "default",
    )
    __displayable__ = (
        "name",
        "required",
        "variadic",
        "type",
        "default",
    )

    def __init__(
            self,
            name,
            /,
            descr=Unset,
            *,
            required=Unset,
            variadic=Unset,
            type=Unset,
            choices=(),
            validators=(),
            pattern=Unset,
            default=Unset
    ):
        cls = builtins.type(self)

        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (match := _SYNTAX.fullmatch(name.strip())):
            raise ValueError(f"{cls.__typename__} 'name' is malformed: {name!r}")

        body = match["required"] or match["optional"] or match["bare"]
        if body.endswith("..."):
            body = body.removesuffix("...")
            variadic = coalesce(variadic, True)
        if ":" in body:
            tag, _, body = body.partition(":")
            type = coalesce(type, tag)

        if not _NAME.fullmatch(body := body.strip()):
            raise ValueError(f"{cls.__typename__} 'name' must be a valid identifier, got {body!r}")

        self._name = body
        self._descr = _sanitize_descr(cls, descr)
        self._required = bool(coalesce(required, match["required"] is not None))
        self._variadic = bool(coalesce(variadic, False))

        if (type := coalesce(type, "str")) not in TYPES:
            raise ValueError(f"{cls.__typename__} 'type' must be one of {', '.join(TYPES)}")
        self._type = type

        if isinstance(choices, str) or not isinstance(choices, Iterable):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
            if choice.lower() in map(str.lower, sanitized):
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        self._choices = tuple(sanitized)

        if not isinstance(validators, Iterable) or not all(map(callable, validators := tuple(validators))):
            raise TypeError(f"{cls.__typename__} 'validators' must be an iterable of callables")
        self._validators = validators

        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        elif not isinstance(pattern, re.Pattern | Unset):
            raise TypeError(f"{cls.__typename__} 'pattern' must be a string or a compiled pattern")
        self._pattern = coalesce(pattern)

        if not isinstance(default, str | Unset):
            raise TypeError(f"{cls.__typename__} 'default' must be a string")
        self._default = default
        if default is not Unset:
            try:
                self.validate(default)
            except ValueError as error:
                raise ValueError(f"{cls.__typename__} 'default' is invalid: {error}") from error

    @property
    def display(self):
        """canonical display form, e.g. <image-name> or [files...]"""
        label = self._name.replace("_", "-") + ("..." if self._variadic else "")
        return f"<{label}>" if self._required else f"[{label}]"

    @property
    def defaulted(self):
        return self._default is not Unset

    def answers(self, name, /):
        """whether name designates this argument (plain name or display form)."""
        return name in (self._name, self._name.replace("_", "-"), self.display)

    def validate(self, value, /):
        """
        Run the declared validation chain against a raw value.

        Raises ValueError carrying the failure reason; returns None when the
        value is accepted.
        """
        if self._choices and value.lower() not in map(str.lower, self._choices):
            raise ValueError(f"expected one of: {', '.join(self._choices)}")

        validators = self._validators
        if (validator := TYPES[self._type]) is not None:
            validators = (validator, *validators)
        for validator in validators:
            try:
                accepted = validator(value)
            except (TypeError, ValueError) as error:
                raise ValueError(str(error)) from error
            if accepted is False:
                raise ValueError(f"`{value}` was rejected by {getattr(validator, '__name__', 'a validator')}")

        if self._pattern is not None and not self._pattern.search(value):
            raise ValueError(f"`{value}` does not match the pattern `{self._pattern.pattern}`")

    def __display__(self):
        return self.display, self._descr or ""


class Flag(metaclass=SpecType):
    """
    Presence-only switch. Repeating a flag never produces more than one match.

    A flag declared with propagate=True is global: it is also recognised on
    every descendant of the command that declares it.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "descr",
        "propagate",
    )

    def __init__(self, *names, descr=Unset, name=Unset, propagate=False):
        cls = builtins.type(self)
        short, long, leftovers = _sanitize_forms(cls, names)
        if leftovers:
            raise ValueError(f"{cls.__typename__} does not take a value, got {' '.join(leftovers)!r}")

        self._short = coalesce(short)
        self._long = coalesce(long)
        self._name = _sanitize_name(cls, name, short, long)
        self._descr = _sanitize_descr(cls, descr)
        self._propagate = bool(propagate)

    @property
    def forms(self):
        return tuple(form for form in (self._short, self._long) if form is not None)

    def answers(self, name, /):
        """whether name designates this switch (name, short or long form)."""
        return name == self._name or name in self.forms

    def __display__(self):
        return _leading(self._short, self._long), self._descr or ""


class Option(metaclass=SpecType):
    """
    Named switch carrying at most one Argument.

    The argument may be written in the declaration string
    ("-p --port <port-number>") or passed as argument=Argument(...).
    Repeating an option accumulates its values into one match.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "descr",
        "required",
        "argument",
    )

    def __init__(self, *names, descr=Unset, required=False, argument=Unset, name=Unset):
        cls = builtins.type(self)
        short, long, leftovers = _sanitize_forms(cls, names)

        if len(leftovers) > 1:
            raise ValueError(f"{cls.__typename__} accepts at most one argument, got {' '.join(leftovers)!r}")
        if leftovers and argument is not Unset:
            raise TypeError(f"{cls.__typename__} cannot declare its argument twice")
        if leftovers:
            argument = Argument(leftovers[0])
        if not isinstance(argument, Argument | Unset):
            raise TypeError(f"{cls.__typename__} 'argument' must be an argument")

        self._short = coalesce(short)
        self._long = coalesce(long)
        self._name = _sanitize_name(cls, name, short, long)
        self._descr = _sanitize_descr(cls, descr)
        self._required = bool(required)
        self._argument = coalesce(argument)

    @property
    def forms(self):
        return tuple(form for form in (self._short, self._long) if form is not None)

    @property
    def arguments(self):
        return () if self._argument is None else (self._argument,)

    def answers(self, name, /):
        return name == self._name or name in self.forms

    def __display__(self):
        leading = _leading(self._short, self._long)
        if self._argument is not None:
            leading += " " + self._argument.display
        return leading, self._descr or ""


def _sanitize_name(cls, name, short, long, /):
    if name is Unset:
        return (long if long is not Unset else short).lstrip("-")
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not _NAME.fullmatch(name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid identifier")
    return name


def _leading(short, long, /):
    if not short:
        return "    " + long
    if not long:
        return short
    return f"{short}, {long}"




__all__ = (
    "Argument",
    "Flag",
    "Option",
    "TYPES",
)
