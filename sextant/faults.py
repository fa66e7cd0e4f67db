"""
Sextant faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every way a parse can fail.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- ParseError: base type carrying message + options; knows how to render itself
  with rich in a short, lowercased, actionable way.
- One subclass per broken contract (see __all__). Every failure is terminal: the
  parser never recovers, the first fault aborts the parse.
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Options carried by a fault
- title, code, hint, docs: presentation (title-cased header, code, one-line hint).
- index: 1-based position of the offending token (or of the end of input).
- input: the offending token or flag name, when one is involved.
- prog, shell, fancy, colorful: injected by the parser before the fault is surfaced.

Integration
- The parser raises faults internally and hands the first one to trigger().
- In library mode the fault is raised to the caller; in shell mode it is rendered
  on stderr via rich and the process exits with status 1.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the parser (stable identifiers).

    grouping (by high-level domain)
    - routing (111xx)
      • NO_COMMANDS, INVALID_COMMAND, EXPECTED_COMMAND
    - flags (112xx)
      • INVALID_FLAG, EXPECTED_FLAG, MISSING_REQUIRED_FLAG
    - positionals (113xx)
      • MISSING_POSITIONAL (after a flag), EXPECTED_POSITIONAL (after a command)

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- routing errors (111xx) ---
    NO_COMMANDS                 = 11101
    INVALID_COMMAND             = 11102
    EXPECTED_COMMAND            = 11103

    # --- flag errors (112xx) ---
    INVALID_FLAG                = 11201
    EXPECTED_FLAG               = 11202
    MISSING_REQUIRED_FLAG       = 11203

    # --- positional errors (113xx) ---
    MISSING_POSITIONAL          = 11301
    EXPECTED_POSITIONAL         = 11302

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseError(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

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
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else code, styler("code")),
            " | ",
            text(self.options.get("title", "parse error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingPositionalError(ParseError): ...
class NoCommandsError(ParseError): ...
class InvalidCommandError(ParseError): ...
class InvalidFlagError(ParseError): ...
class ExpectedCommandError(ParseError): ...
class ExpectedPositionalError(ParseError): ...
class ExpectedFlagError(ParseError): ...
class MissingRequiredFlagError(ParseError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseError).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.
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
    are FaultCode members and values are short documentation strings. when no
    entry is found, None is returned.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ParseError",
    "MissingPositionalError",
    "NoCommandsError",
    "InvalidCommandError",
    "InvalidFlagError",
    "ExpectedCommandError",
    "ExpectedPositionalError",
    "ExpectedFlagError",
    "MissingRequiredFlagError",
    "FaultCode",
    "trigger",
    "getdoc",
)
