"""
Declopts faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse-time issue.
- DeclarationError: programming errors in a descriptor (bad type, reserved or
  malformed flag names, positional ordering). Raised while the class is built,
  never rendered, never turned into an exit.
- ParseError and subclasses: user-input errors. They carry a message plus an
  options mapping and know how to render themselves with rich.
- InternalError: the parser was asked for usage text before its scanner existed.
- trigger(): central entry point to surface a parse fault.

Exit policy
- In shell mode (the default) a fault prints itself, then the usage text, to
  standard output and exits with the descriptor's failure status (0 unless the
  descriptor says otherwise, the same status `--help` uses).
- With shell=False the fault is raised so callers can handle it as a value.
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


def console():
    """
    Build the console every renderer prints through.

    The console is created per print so it always writes to the current
    sys.stdout (tests and callers may redirect it).
    """
    return Console(highlight=False, soft_wrap=True)


class FaultCode(IntEnum):
    """
    canonical fault codes for parse-time errors (stable identifiers).

    grouping
    - switches (1111x): UNKNOWN_SWITCH, FLAG_ASSIGNMENT, MISSING_OPTION_VALUE
    - positionals (1112x): TOO_MANY_ARGUMENTS, NOT_ENOUGH_ARGUMENTS
    - values (1113x): INVALID_VALUE, MISSING_VALUE

    normalize() lets the host application remap codes to its own labels.
    """
    # --- switch errors ---
    UNKNOWN_SWITCH              = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_OPTION_VALUE        = 11117

    # --- positional errors ---
    TOO_MANY_ARGUMENTS          = 11121
    NOT_ENOUGH_ARGUMENTS        = 11125

    # --- value errors ---
    INVALID_VALUE               = 11131
    MISSING_VALUE               = 11132

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ overrides the numeric id; otherwise the
        number itself is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class DeclarationError(Exception):
    """
    A descriptor declared a field the parser cannot support.
    """


class InternalError(RuntimeError):
    """
    The parser reached a state that only a bug in declopts can produce.
    """


class ParseError(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(self.options.get("prog", ""), "prog-name"),
            " - ",
            text(self.options["code"].normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", True):
            raise self from None
        output = console()
        output.print(self)
        if (usage := self.options.get("usage")) is not None:
            output.print(usage())
        sys.stdout.flush()
        sys.exit(self.options.get("status", 0))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownSwitchError(ParseError): ...
class FlagAssignmentError(ParseError): ...
class MissingOptionValueError(ParseError): ...
class TooManyArgumentsError(ParseError): ...
class NotEnoughArgumentsError(ParseError): ...
class InvalidValueError(ParseError): ...
class MissingValueError(ParseError): ...


def trigger(fault, /, **options):
    """
    surface a parse fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see ParseError).
    - options are merged into the fault before triggering.

    typical options
    - prog, usage (zero-argument callable returning the usage renderable),
      shell, status, colorful, fancy, title, code, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "DeclarationError",
    "InternalError",
    "ParseError",
    "UnknownSwitchError",
    "FlagAssignmentError",
    "MissingOptionValueError",
    "TooManyArgumentsError",
    "NotEnoughArgumentsError",
    "InvalidValueError",
    "MissingValueError",
    "trigger",
)
