"""
Commandant parser: the single forward pass over raw tokens.

Overview
- Parser walks the tokens once, left to right, keeping a per-index consumed
  array so no token is ever matched twice (identical literals included).
- Each unconsumed token is classified against the active command, in order:
  positional-only mode, flag, option, "--", "--name=value", flag-like token
  (bundled short flags "-abc" or an unknown option), child command, positional.
- Option payloads and positional arguments go through the binder, which
  applies arity, defaults and validation.
- After the walk the auditor checks required options of the matched command.
- The first failure raises a CommandException subclass; nothing is retried
  and the process is never exited from here.

Helpers
- suggest(token, names): close subcommand names for an unresolved token.
- parse(command, tokens): convenience wrapper around Parser.
"""
import copy
import logging

from .faults import *
from .matches import *
from .utils import *

logger = logging.getLogger(__name__)

SEPARATOR = "--"


def suggest(token, names, /):
    """
    Score each name by positional character overlap with token.

    A name earns one point for every position i where the token's character
    equals the name's character at i or i + 1. Names scoring 3 or more are
    returned, in the order given.
    """
    suggestions = []
    for name in names:
        score = 0
        for index, char in enumerate(token):
            if char in name[index:index + 2]:
                score += 1
        if score >= 3:
            suggestions.append(name)
    return suggestions


def _phrase(command):
    return " ".join(command.name for command in command.path)


class Parser:
    """
    Single-use parse state for one token list against one command tree.

    The declared tree is only read; every call to parse() on a command builds
    a fresh Parser, so a tree can be shared between threads.
    """

    def __init__(self, command, tokens, /):
        self.tokens = tuple(tokens)
        self.command = command
        self.index = ROOT
        self.consumed = [False] * len(self.tokens)
        self.flags = {}
        self.options = {}
        self.arguments = []
        self.positionals = []
        self.bound = False
        self.separated = False
        self.helped = False

    def parse(self):
        for index, token in enumerate(self.tokens):
            if not self.consumed[index]:
                self._classify(index, token)

        if not self.helped:
            if not self.bound:
                self._bind_positionals([])
            self._audit()

        return ParserMatches(
            self.command,
            self.index,
            self.tokens,
            flags=self.flags.values(),
            options=self.options.values(),
            arguments=self.arguments,
            positionals=self.positionals,
        )

    def flaglike(self, token, /):
        if not token.startswith("-") or token == "-":
            return False
        return not (self.command.negatives and negative(token))

    def _classify(self, index, token):
        self.consumed[index] = True

        if self.separated:
            self.positionals.append(token)
            return

        if (flag := self.command.find_flag(token)) is not None:
            self._record_flag(flag)
            return

        if (option := self.command.find_option(token)) is not None:
            logger.debug("binding option %s from the %s token", option.name, ordinal(index))
            self._record_option(option, self._pool(index + 1))
            return

        if token == SEPARATOR:
            logger.debug("entering positional-only mode at the %s token", ordinal(index))
            self.separated = True
            return

        if token.startswith("--") and "=" in token:
            name, _, value = token.partition("=")
            if (option := self.command.find_option(name)) is not None:
                if option.argument is None:
                    raise UnresolvedArgumentError(
                        f"option `{name}` does not take a value",
                        context=f"`{token}` assigns a value to an option of `{_phrase(self.command)}` that takes none",
                        tokens=(token,),
                    )
                self._record_option(option, [(None, value), *self._pool(index + 1)])
                return
            if self.command.find_flag(name) is not None:
                raise UnresolvedArgumentError(
                    f"flag `{name}` does not take a value",
                    context=f"`{token}` assigns a value to a flag of `{_phrase(self.command)}`, flags are presence-only",
                    tokens=(token,),
                )
            raise UnknownOptionError(
                f"unknown option `{name}`",
                context=f"`{name}` is not a flag or option known to `{_phrase(self.command)}`",
                tokens=(token,),
            )

        if self.flaglike(token):
            if len(token) > 2 and token[1] != "-":
                self._expand_bundle(token)
                return
            raise UnknownOptionError(
                f"unknown option `{token}`",
                context=f"`{token}` is not a flag or option known to `{_phrase(self.command)}`",
                tokens=(token,),
            )

        if not self.bound and (child := self.command.find_command(token)) is not None:
            logger.debug("switching to command %r at the %s token", child.name, ordinal(index))
            self.command = child
            self.index = index
            return

        if self.command.children:
            names = [child.name for child in self.command.children.values()]
            suggestions = suggest(token, names)
            context = f"`{_phrase(self.command)}` does not have a subcommand named `{token}`"
            if suggestions:
                context += f", did you mean {' or '.join(f'`{name}`' for name in suggestions)} ?"
            raise UnknownCommandError(
                f"no such subcommand found: `{token}`",
                context=context,
                tokens=(token,),
                suggestions=tuple(suggestions),
            )

        if not self.bound:
            self.consumed[index] = False
            self._bind_positionals(self._pool(index))
            if self.consumed[index]:
                return
            self.consumed[index] = True

        if self.command.permissive:
            self.positionals.append(token)
            return

        raise UnresolvedArgumentError(
            f"unresolved argument `{token}`",
            context=f"`{_phrase(self.command)}` did not expect `{token}` as its {ordinal(index)} token",
            tokens=(token,),
        )

    def _expand_bundle(self, token):
        flags = []
        for char in token[1:]:
            if (flag := self.command.find_flag("-" + char)) is None:
                raise UnknownOptionError(
                    f"unknown option `-{char}`",
                    context=f"`-{char}` in `{token}` is not a flag known to `{_phrase(self.command)}`",
                    tokens=(token,),
                )
            flags.append(flag)
        logger.debug("expanded bundle %r into %d flags", token, len(flags))
        for flag in flags:
            self._record_flag(flag)

    def _record_flag(self, flag):
        if flag.name == "help":
            self.helped = True
        self.flags.setdefault(flag, FlagMatch(copy.copy(flag)))

    def _record_option(self, option, pool):
        arguments = self._bind(option.arguments, pool, option)
        if (match := self.options.get(option)) is None:
            match = OptionMatch(copy.copy(option), 0, ())
        self.options[option] = match._replace(count=match.count + 1, arguments=match.arguments + tuple(arguments))

    def _bind_positionals(self, pool):
        self.bound = True
        self.arguments.extend(self._bind(self.command.arguments, pool, self.command))

    def _pool(self, start):
        """
        unconsumed (index, token) pairs from start, up to the first "--".
        """
        pool = []
        for index in range(start, len(self.tokens)):
            if self.consumed[index]:
                continue
            if self.tokens[index] == SEPARATOR and not self.separated:
                break
            pool.append((index, self.tokens[index]))
        return pool

    def _bind(self, arguments, pool, owner):
        """
        Bind declared arguments from a pool of candidate tokens.

        An index of None marks an explicitly assigned value ("--name=value"),
        which is never mistaken for a flag.
        """
        matches = []
        position = 0

        for argument in arguments:
            if argument.variadic:
                taken = [
                    (index, token) for index, token in pool[position:]
                    if index is None or not self.flaglike(token)
                ]
                position = len(pool)
                if taken:
                    for index, _ in taken:
                        self._consume(index)
                    values = tuple(token for _, token in taken)
                    matches.append(self._match(argument, " ".join(values), values, owner))
                    continue
                candidate = None
            else:
                candidate = pool[position] if position < len(pool) else None

                if candidate is not None and candidate[0] is not None and self._helps(candidate[1]):
                    break

                if candidate is not None and (candidate[0] is None or not self.flaglike(candidate[1])):
                    self._consume(candidate[0])
                    position += 1
                    matches.append(self._match(argument, candidate[1], (candidate[1],), owner))
                    continue

            if argument.defaulted:
                matches.append(self._match(argument, argument.default, (argument.default,), owner))
            elif argument.required:
                context = f"{argument.display} is required by {_describe(owner)}"
                if candidate is not None:
                    context += f", but `{candidate[1]}` was found instead"
                raise MissingRequiredArgumentError(
                    f"missing required argument {argument.display}",
                    context=context,
                    tokens=(argument.display,) if candidate is None else (argument.display, candidate[1]),
                )

        return matches

    def _match(self, argument, value, values, owner):
        """
        validate every bound token on its own (a variadic value is checked
        token by token, never as the joined string).
        """
        for token in values:
            try:
                argument.validate(token)
            except ValueError as error:
                raise InvalidArgumentValueError(
                    f"invalid value `{token}` for argument {argument.display} of {_describe(owner)}",
                    context=str(error),
                    tokens=(token,),
                ) from error
        return ArgumentMatch(value, copy.copy(argument), values)

    def _helps(self, token):
        flag = self.command.find_flag(token)
        return flag is not None and flag.name == "help"

    def _consume(self, index):
        if index is not None:
            self.consumed[index] = True

    def _audit(self):
        for option in self.command.options:
            if not option.required or option in self.options:
                continue
            argument = option.argument
            if argument is not None and argument.defaulted:
                logger.debug("required option %s falls back to its default", option.name)
                self.options[option] = OptionMatch(
                    copy.copy(option), 1, (self._match(argument, argument.default, (argument.default,), option),)
                )
                continue
            form = option.long or option.short
            raise MissingRequiredOptionError(
                f"missing required option `{form}`",
                context=f"`{_phrase(self.command)}` requires the option `{form}` and it was not provided",
                tokens=(form,),
            )


def _describe(owner):
    if hasattr(owner, "forms"):
        return f"option `{owner.long or owner.short}`"
    return f"command `{_phrase(owner)}`"


def parse(command, tokens, /):
    """parse tokens against command, returning ParserMatches or raising a fault."""
    return Parser(command, tokens).parse()


__all__ = (
    "Parser",
    "parse",
    "suggest",
)
