"""
Sextant parser: turn argument tokens into one matched command.

What this module provides
- Parser: holds the command namespace, the global flag namespace and a cursor over
  the input tokens, and runs a single fail-fast descent over them.

Grammar (one level only)
    [global-flag ...] command [value] [flag [value] ...] [token [value] [flag ...] ...]

- Tokens starting with "-" are flags. Each is resolved against the global flags
  first and then against the active command's local flags; anything else is an
  InvalidFlagError. A flag whose recipe takes a positional consumes the next token.
- The first bare token selects the command. A positional command consumes the
  next token as its value.
- Once a command is active, a later bare token does not switch commands; it is
  consumed as a continuation of the same command (and a positional command takes
  the following token as its new value).
- After every run of flags, the active command's required local flags are checked.

Quick start
    from sextant import Parser, CommandRecipe, FlagRecipe

    command = (
        Parser(["serve", "./site", "--port", "8080", "--verbose"])
        .global_flag(FlagRecipe("verbose"))
        .command(CommandRecipe("serve").positional().flag(FlagRecipe("port").positional()))
        .parse()
    )
    command.name, command.value, command.flag("port").value  # ('serve', './site', '8080')

Faults
- The first violated contract aborts the parse. In library mode the fault is raised,
  in shell mode it is rendered with rich and the process exits, and when a fallback
  is registered the fault is handed to it instead.
"""
import copy
import difflib
import logging
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .faults import *
from .recipes import CommandRecipe, FlagRecipe
from .results import ParsedCommand, ParsedFlag
from .utils import *

logger = logging.getLogger(__name__)


class _Level:
    """Working state of the active command while its tokens are consumed."""

    __slots__ = ("recipe", "value", "flags")

    def __init__(self, recipe, flags):
        self.recipe = recipe
        self.value = None
        self.flags = dict(flags)


class Parser:
    """
    Single-use parser over one token sequence.

    Parameters
    - prompt:
      • Unset: read tokens from sys.argv[1:] (the program name is discarded).
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized sequence, used verbatim.
    - prog: label used in rendered faults; defaults to the basename of sys.argv[0].
    - shell: render faults with rich and exit(1) instead of raising.
    - fancy: render faults inside a rich Panel.
    - colorful: render faults with colors.
    """

    commands = mirror("commands")
    global_flags = mirror("global_flags")
    parsed_flags = mirror("parsed_flags")
    prog = mirror("prog")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, prompt=Unset, /, *, prog=Unset, shell=False, fancy=False, colorful=True):
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("Parser() argument must be a string or an iterable of strings")
        else:
            raise TypeError("Parser() argument must be a string or an iterable of strings")

        if not isinstance(prog, str | Unset):
            raise TypeError("Parser() 'prog' must be a string")

        self._tokens = deque(tokens)
        self._index = 1
        self._commands = {}
        self._global_flags = {}
        self._parsed_flags = {}
        self._fallback = Unset
        self._consumed = False

        self._prog = coalesce(prog, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "")
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    @classmethod
    def from_args(cls, tokens, /, **options):
        """Build a parser over an explicit sequence of argument tokens."""
        if isinstance(tokens, str):
            raise TypeError("from_args() argument must be an iterable of strings")
        return cls(tokens, **options)

    def command(self, recipe, /):
        """Register a command recipe (last write wins); returns the parser."""
        if not isinstance(recipe, CommandRecipe):
            raise TypeError("command() argument must be a command recipe")
        self._commands[recipe.name] = recipe
        return self

    def global_flag(self, recipe, /):
        """Register a flag recipe valid under every command (last write wins); returns the parser."""
        if not isinstance(recipe, FlagRecipe):
            raise TypeError("global_flag() argument must be a flag recipe")
        self._global_flags[recipe.name] = recipe
        return self

    def fallback(self, fallback, /):
        """
        Register a one-time handler for the fault that aborts the parse.

        When set, parse() calls it with the fault (options already merged) and
        returns None instead of raising or exiting. Can be set only once.

        Returns
        - The same callable, enabling decorator-style usage: @parser.fallback
        """
        if not callable(fallback):
            raise TypeError("parser fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("parser fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def parse(self):
        """
        Consume every token and return the matched ParsedCommand.

        Raises
        - ParseError subclass: the first violated contract (library mode, no fallback).
        - RuntimeError: when the parser was already used.
        """
        if self._consumed:
            raise RuntimeError("parser tokens were already consumed")
        self._consumed = True

        try:
            return self._parseargs()
        except ParseError as fault:
            logger.debug("parse aborted: %s", fault.message)
            fault = copy.replace(
                fault,
                prog=self.prog,
                shell=self.shell,
                fancy=self.fancy,
                colorful=self.colorful,
            )
            if self._fallback:
                self._fallback(fault)
                return None
            trigger(fault)

    def _next(self):
        token = self._tokens.popleft()
        self._index += 1
        return token

    def _parseargs(self):
        """
        drive the descent level by level until the cursor is exhausted.

        phases per level
        - drain consecutive flag tokens (_parse_flags).
        - validate the active command's required local flags (_validate).
        - stop when no token remains, otherwise consume the next command token
          (_parse_command) and start the next level with it active.
        """
        level = None
        while True:
            self._parse_flags(level)
            if level is not None:
                self._validate(level)
            if not self._tokens:
                break
            level = self._parse_command(level)

        if level is None:
            raise NoCommandsError(
                "no command was given",
                title="no command",
                code=FaultCode.NO_COMMANDS,
                index=self._index,
                hint="pass one of: %s" % ", ".join(self._commands) if self._commands else "no commands are available",
                docs=getdoc(FaultCode.NO_COMMANDS),
            )

        logger.debug("parsed command %r with %d flag(s)", level.recipe.name, len(level.flags))
        return ParsedCommand(level.recipe.name, level.value, level.flags)

    def _parse_flags(self, level):
        # a lone "" is never a flag, it can only be a command or a value
        while self._tokens and self._tokens[0].startswith("-"):
            self._parse_next_flag(level)

    def _parse_next_flag(self, level):
        """
        resolve one flag token against the visible namespaces.

        lookup order
        - the global namespace wins; a local flag with the same name is unreachable.
        - then the active command's local namespace, when a command is active.
        - otherwise the token is an InvalidFlagError ("did you mean" hints only).

        matched flags go to the active command, or to the top-level scope
        (self._parsed_flags) while no command has been selected.
        """
        if not self._tokens:
            raise ExpectedFlagError(
                "expected a flag at %s position" % ordinal(self._index),
                title="expected flag",
                code=FaultCode.EXPECTED_FLAG,
                index=self._index,
                hint="pass a flag such as --name",
                docs=getdoc(FaultCode.EXPECTED_FLAG),
            )

        index = self._index
        token = self._next()

        if (recipe := self._global_flags.get(token)) is not None:
            scope = "global"
        elif level is not None and (recipe := level.recipe.lookup(token)) is not None:
            scope = "local"
        else:
            candidates = list(self._global_flags)
            if level is not None:
                candidates += list(level.recipe.flags)
            suggestions = difflib.get_close_matches(token, candidates, 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                if level is None:
                    hint = "only global flags are accepted before the command"
                else:
                    hint = "command %r accepts no such flag" % level.recipe.name
            raise InvalidFlagError(
                "unknown flag %r at %s position" % (token, ordinal(index)),
                title="invalid flag",
                code=FaultCode.INVALID_FLAG,
                input=token,
                index=index,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.INVALID_FLAG),
            )

        flag = self._parse_flag(token, recipe, index)
        logger.debug("matched %s flag %r (value=%r)", scope, flag.name, flag.value)
        (self._parsed_flags if level is None else level.flags)[token] = flag

    def _parse_flag(self, token, recipe, index):
        """build the ParsedFlag for token, consuming its value when the recipe takes one."""
        if not recipe.takes_positional:
            return ParsedFlag(token)
        if not self._tokens:
            raise MissingPositionalError(
                "flag %r at %s position is missing its value" % (token, ordinal(index)),
                title="missing value",
                code=FaultCode.MISSING_POSITIONAL,
                input=token,
                index=self._index,
                hint="add a value after the flag (for example: %s <value>)" % token,
                docs=getdoc(FaultCode.MISSING_POSITIONAL),
            )
        return ParsedFlag(token, self._next())

    def _validate(self, level):
        """every required local flag of the active command must have been matched."""
        for name, recipe in level.recipe.flags.items():
            if recipe.is_required and name not in level.flags:
                raise MissingRequiredFlagError(
                    "command %r requires flag %r" % (level.recipe.name, name),
                    title="missing required flag",
                    code=FaultCode.MISSING_REQUIRED_FLAG,
                    input=name,
                    index=self._index,
                    hint="add %s%s" % (name, " <value>" if recipe.takes_positional else ""),
                    docs=getdoc(FaultCode.MISSING_REQUIRED_FLAG),
                )

    def _parse_command(self, level):
        """
        consume a command token and its positional value, returning the active level.

        while no command is active the token is looked up in the command namespace.
        once one is active the token keeps the same command (single-level grammar).
        """
        if not self._tokens:
            raise ExpectedCommandError(
                "expected a command at %s position" % ordinal(self._index),
                title="expected command",
                code=FaultCode.EXPECTED_COMMAND,
                index=self._index,
                hint="pass one of: %s" % ", ".join(self._commands),
                docs=getdoc(FaultCode.EXPECTED_COMMAND),
            )

        index = self._index
        token = self._next()

        if level is None:
            try:
                recipe = self._commands[token]
            except KeyError:
                suggestions = difflib.get_close_matches(token, self._commands.keys(), 5)
                try:
                    hint = "did you mean %r?" % suggestions[0]
                except IndexError:
                    if self._commands:
                        hint = "pass one of: %s" % ", ".join(self._commands)
                    else:
                        hint = "no commands are available"
                raise InvalidCommandError(
                    "unknown command %r at %s position" % (token, ordinal(index)),
                    title="invalid command",
                    code=FaultCode.INVALID_COMMAND,
                    input=token,
                    index=index,
                    suggestions=suggestions,
                    hint=hint,
                    docs=getdoc(FaultCode.INVALID_COMMAND),
                ) from None
            level = _Level(recipe, self._parsed_flags)
            logger.debug("selected command %r at %s position", token, ordinal(index))
        else:
            logger.debug("token %r continues command %r", token, level.recipe.name)

        if level.recipe.takes_positional:
            if not self._tokens:
                raise ExpectedPositionalError(
                    "command %r at %s position is missing its value" % (level.recipe.name, ordinal(index)),
                    title="expected positional",
                    code=FaultCode.EXPECTED_POSITIONAL,
                    input=token,
                    index=self._index,
                    hint="add a value after the command (for example: %s <value>)" % level.recipe.name,
                    docs=getdoc(FaultCode.EXPECTED_POSITIONAL),
                )
            level.value = self._next()

        return level


__all__ = (
    "Parser",
)
