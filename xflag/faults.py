"""
xflag faults (errors and warnings), rendering, and error-handling dispositions.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue.
- FlagException / FlagWarning: base types carrying a message plus options
  (code, title, hint and any context) that render themselves with rich.
- ErrorHandling: what a FlagSet does with a fault once parsing failed
  (raise it, exit the process, or abort).

Taxonomy
- FlagParseError and subclasses: produced by the host flag parser
  (malformed token, unknown flag, missing value, bad conversion).
- MissingRequiredError: a required positional slot received no value.
- HelpRequested: -h/-help was given and no such flag is registered.

Integration
- FlagSet.parse catches FlagException and hands it to its ErrorHandling.
- The host application may relabel codes through a __codes__ mapping and
  restyle the output through a __styles__ mapping in __main__.
"""
import copy
import sys
from enum import Enum, IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce, hostattr, palette, program

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    numeric ranges encode domains
    - 111xx: flag syntax and values (host parser)
    - 1112x: positional slots
    - 1115x: informational exits (help)
    - 121xx: warnings
    """
    # --- flag errors (111xx) ---
    MALFORMED_FLAG   = 11111
    UNKNOWN_FLAG     = 11112
    MISSING_VALUE    = 11117
    INVALID_VALUE    = 11124

    # --- positional errors (1112x) ---
    MISSING_REQUIRED = 11125

    # --- informational (1115x) ---
    HELP_REQUESTED   = 11151

    # --- warnings (12xxx) ---
    LATE_ORDER       = 12121

    def normalize(self):
        """
        return the host label for this code (__main__.__codes__) or the numeric value.
        """
        return str(hostattr("__codes__", {}).get(self, self.value))


def _render(fault, kind, /):
    styles = palette({
        "prog-name": "bold #E6E6F0",
        "error-code": "bold #00E5FF",
        "error-title": "bold #FF4DA6",
        "error-message": "#C8C8D0",
        "warning-code": "bold #FFB400",
        "warning-title": "bold #FFC2E0",
        "warning-message": "#D6D6DE",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    })

    header = Text.assemble(
        "[ ",
        (coalesce(fault.options.get("prog", Unset), program()), styles["prog-name"]),
        " — ",
        (fault.code.normalize() if isinstance(fault.code, FaultCode) else "-", styles[kind + "-code"]),
        " | ",
        (fault.title.title(), styles[kind + "-title"]),
        " ]"
    )
    renders = [header, Text(fault.message, styles[kind + "-message"])]
    if fault.hint:
        renders.append(Text.assemble((" → ", styles["hint-arrow"]), (fault.hint, styles["hint"])))
    return Group(*renders)


class FlagException(Exception):
    """
    Base class of every fault raised while parsing flags and positionals.

    Subclasses declare their default code and title through __code__ and
    __title__; callers may override both, and attach any context, as options.
    """
    __code__ = Unset
    __title__ = "flag error"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": None,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def title(self):
        return self.options["title"]

    @property
    def hint(self):
        return self.options["hint"]

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "error")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class FlagParseError(FlagException):
    """Fault produced by the host flag parser itself."""


class MalformedFlagError(FlagParseError):
    __code__ = FaultCode.MALFORMED_FLAG
    __title__ = "malformed flag"


class UnknownFlagError(FlagParseError):
    __code__ = FaultCode.UNKNOWN_FLAG
    __title__ = "unknown flag"

    @property
    def flag(self):
        return self.options.get("flag")


class MissingValueError(FlagParseError):
    __code__ = FaultCode.MISSING_VALUE
    __title__ = "missing flag value"

    @property
    def flag(self):
        return self.options.get("flag")


class InvalidValueError(FlagParseError):
    __code__ = FaultCode.INVALID_VALUE
    __title__ = "invalid flag value"

    @property
    def flag(self):
        return self.options.get("flag")

    @property
    def value(self):
        return self.options.get("value")


class MissingRequiredError(FlagException):
    """
    A required positional slot received no value.

    The slot name is available as .slot; the message reads
    "required but not set: <slot>".
    """
    __code__ = FaultCode.MISSING_REQUIRED
    __title__ = "missing required argument"

    @property
    def slot(self):
        return self.options["slot"]


class HelpRequested(FlagException):
    __code__ = FaultCode.HELP_REQUESTED
    __title__ = "help requested"


class FlagWarning(Warning):
    """
    Base class of non-fatal conditions, emitted through the warnings module.
    """
    __code__ = Unset
    __title__ = "flag warning"

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": None,
        } | options)

    code = FlagException.code
    title = FlagException.title
    hint = FlagException.hint

    def __str__(self):
        return self.message

    def __rich__(self):
        return _render(self, "warning")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class LateOrderWarning(FlagWarning):
    __code__ = FaultCode.LATE_ORDER
    __title__ = "late positional order"


class ParseAbort(RuntimeError):
    """
    Raised by ErrorHandling.ABORT; chained from the fault that caused it.
    """

    def __init__(self, fault, /):
        super().__init__(str(fault))
        self.fault = fault


class ErrorHandling(Enum):
    """
    Disposition applied by FlagSet.parse to a fault.

    - RAISE: raise the fault to the caller; nothing is rendered.
    - EXIT: render the fault and the usage, then exit with status 2
      (status 0 when help was requested).
    - ABORT: render like EXIT, then raise ParseAbort from the fault.

    Help always renders the usage first, whatever the disposition.
    """
    RAISE = "raise"
    EXIT = "exit"
    ABORT = "abort"

    def handle(self, fault, /, *, prog=Unset, output=console, usage=None):
        """
        apply this disposition to fault.

        parameters
        - prog: program name shown in the rendered header.
        - output: rich console receiving the rendering.
        - usage: zero-argument callable that renders the usage summary.
        """
        help = isinstance(fault, HelpRequested)
        if help and usage is not None:
            usage()

        if self is ErrorHandling.RAISE:
            raise fault

        if not help:
            output.print(copy.replace(fault, prog=prog) if prog is not Unset else fault)
            if usage is not None:
                usage()

        if self is ErrorHandling.EXIT:
            sys.exit(0 if help else 2)
        raise ParseAbort(fault) from fault


__all__ = (
    "FaultCode",
    "FlagException",
    "FlagParseError",
    "MalformedFlagError",
    "UnknownFlagError",
    "MissingValueError",
    "InvalidValueError",
    "MissingRequiredError",
    "HelpRequested",
    "FlagWarning",
    "LateOrderWarning",
    "ParseAbort",
    "ErrorHandling",
)
