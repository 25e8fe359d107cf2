"""
xflag flag sets: the host flag parser, its positional sub-parser, and the
process-wide default instance.

What this module provides
- FlagSet: registers named flags backed by Value objects, parses single-dash
  (or double-dash) flag tokens, reports which flags were set, renders usage
  with rich, and applies an ErrorHandling disposition to faults.
- Positional: a FlagSet owned by another FlagSet that maps bare tokens onto
  named slots declared by an order template ("src [dst...]").
- command_line() and module-level helpers mirroring the FlagSet registration
  methods on the default instance.

Token syntax
- -name, --name, -name=value, --name=value.
- Boolean flags never take a separate argument ("-v" means "-v=true").
- Other flags take the next token verbatim when no inline value is present.
- Parsing stops at the first non-flag token, at a lone "-", or after "--".
- -h and -help request help unless flags with those names are registered.

Quick start
    from xflag import FlagSet, ErrorHandling

    flags = FlagSet("copy", ErrorHandling.EXIT)
    verbose = flags.boolean("v", usage="print every copied file")
    pos = flags.pos()
    source = pos.infile("src", usage="file to `read`")
    targets = pos.outfiles("dst", usage="copies to write")
    pos.order("src [dst...]")
    flags.parse(["-v", "a.txt", "b.txt", "c.txt"])
"""
import difflib
import functools
import io
import shlex
import sys
import warnings
from collections import deque, namedtuple
from collections.abc import Iterable

from rich.text import Text

from .faults import *
from .faults import console
from .order import OrderSpecification, build, interleave, validate
from .utils import Unset, coalesce, palette, program
from .values import *


class Flag(namedtuple("Flag", ("name", "usage", "value", "default"))):
    """
    Registration record of one flag: name, usage text, Value, and the display
    form of the value at registration time (its default).
    """
    __slots__ = ()


def unquote_usage(flag, /):
    """
    Extract the type label and the usage text of a flag.

    A back-quoted word in the usage names the value ("a `file` to read" gives
    ("file", "a file to read")); otherwise the label is the value kind's
    __typename__.
    """
    usage = flag.usage
    if (start := usage.find("`")) >= 0 and (end := usage.find("`", start + 1)) >= 0:
        name = usage[start + 1:end]
        return name, usage[:start] + name + usage[end + 1:]
    return type(flag.value).__typename__, usage


def _tokenize(arguments, owner, /):
    # a single string is split like a shell would; an iterable is taken verbatim
    if isinstance(arguments, str):
        return shlex.split(arguments)
    if not isinstance(arguments, Iterable):
        raise TypeError(f"{owner}() argument must be a string or an iterable of strings")
    tokens = list(arguments)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"{owner}() argument must be a string or an iterable of strings")
    return tokens


class FlagSet:
    """
    Named set of flags and the parser over them.

    Parameters
    - name: program name shown in usage; defaults to the host program name.
    - error_handling: ErrorHandling applied by parse() to faults.
    - output: rich Console receiving usage and fault renderings
      (defaults to a stderr console).
    - usage: zero-argument callable replacing default_usage().

    State
    - Flags are kept in registration order. parse() resets the visited flags
      and the leftover arguments on every call; values keep accumulating.
    """
    __prefix__ = "-"

    def __init__(self, name=Unset, error_handling=ErrorHandling.RAISE, *, output=Unset, usage=Unset):
        if name is Unset:
            name = program()
        if not isinstance(name, str):
            raise TypeError("FlagSet() name must be a string")
        if not isinstance(error_handling, ErrorHandling):
            raise TypeError("FlagSet() error_handling must be an ErrorHandling member")
        if usage is not Unset and not callable(usage):
            raise TypeError("FlagSet() usage must be callable")

        self.name = name
        self.error_handling = error_handling
        self.output = coalesce(output, console)
        self.usage = coalesce(usage, self.default_usage)

        self._flags = {}
        self._visited = {}
        self._args = []
        self._parsed = False
        self._positional = None

    @property
    def args(self):
        """Arguments left over after the flags of the last parse."""
        return list(self._args)

    @property
    def parsed(self):
        return self._parsed

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, flags={list(self._flags)!r})"

    # --- registration ---

    def var(self, value, name, /, usage=""):
        """
        register value under name and return value.

        raises
        - TypeError: value is not a Value, name or usage is not a string.
        - ValueError: name is empty, starts with "-", contains "=", or is
          already registered.
        """
        if not isinstance(value, Value):
            raise TypeError("var() value must be a flag value")
        if not isinstance(name, str):
            raise TypeError("var() name must be a string")
        if not name or name.startswith("-") or "=" in name:
            raise ValueError(f"flag name {name!r} is not valid")
        if not isinstance(usage, str):
            raise TypeError("var() usage must be a string")
        if name in self._flags:
            raise ValueError(f"{self.name} flag redefined: {name}")

        self._flags[name] = Flag(name, usage, value, value.describe())
        return value

    def string(self, name, /, default="", usage=""):
        return self.var(StringFlag(default), name, usage)

    def integer(self, name, /, default=0, usage=""):
        return self.var(IntegerFlag(default), name, usage)

    def number(self, name, /, default=0.0, usage=""):
        return self.var(FloatFlag(default), name, usage)

    def boolean(self, name, /, default=False, usage=""):
        return self.var(BooleanFlag(default), name, usage)

    def buffer(self, name, /, usage=""):
        """
        define a buffer flag and return its io.StringIO.

        every value is written to the buffer followed by a newline.
        """
        return self.buffer_var(io.StringIO(), name, usage)

    def buffer_var(self, buffer, name, /, usage=""):
        self.var(BufferFlag(buffer), name, usage)
        return buffer

    def strings(self, name, /, usage=""):
        """define a repeated string flag and return the list it appends to."""
        return self.strings_var([], name, usage)

    def strings_var(self, values, name, /, usage=""):
        self.var(RepeatedStringFlag(values), name, usage)
        return values

    def writer_var(self, stream, name, /, usage=""):
        """define a flag writing every value to stream; returns stream."""
        self.var(WriterFlag(stream), name, usage)
        return stream

    def infile(self, name, /, usage="", *, mode="r", encoding="utf-8"):
        """define an input file flag and return it (a readable file object)."""
        return self.infile_var(InputFileFlag(mode, encoding), name, usage)

    def infile_var(self, value, name, /, usage=""):
        if not isinstance(value, InputFileFlag):
            raise TypeError("infile_var() value must be an input file")
        return self.var(value, name, usage)

    def infiles(self, name, /, usage="", *, mode="r", encoding="utf-8"):
        """define an input file list flag and return the list of opened files."""
        return self.infiles_var([], name, usage, mode=mode, encoding=encoding)

    def infiles_var(self, files, name, /, usage="", *, mode="r", encoding="utf-8"):
        self.var(InputFileListFlag(files, mode=mode, encoding=encoding), name, usage)
        return files

    def outfiles(self, name, /, usage="", *, mode="w", encoding="utf-8"):
        """define an output file list flag and return the list of opened files."""
        return self.outfiles_var([], name, usage, mode=mode, encoding=encoding)

    def outfiles_var(self, files, name, /, usage="", *, mode="w", encoding="utf-8"):
        self.var(OutputFileListFlag(files, mode=mode, encoding=encoding), name, usage)
        return files

    def pos(self):
        """
        return the positional parser of this set, creating it on first call.
        """
        if self._positional is None:
            self._positional = Positional(self)
        return self._positional

    # --- introspection ---

    def lookup(self, name, /):
        return self._flags.get(name)

    def visit(self):
        """iterate over the flags set by the last parse, in the order they were set."""
        return iter(tuple(self._visited.values()))

    def visit_all(self):
        """iterate over every registered flag, in registration order."""
        return iter(tuple(self._flags.values()))

    def set(self, name, value, /):
        """
        set a flag programmatically; it then counts as visited.

        raises UnknownFlagError or InvalidValueError (never subject to the
        error handling disposition).
        """
        try:
            flag = self._flags[name]
        except KeyError:
            raise UnknownFlagError("no such flag -%s" % name, flag=name) from None
        self._store(flag, value)

    # --- parsing ---

    def parse(self, arguments, /):
        """
        parse arguments (a shell-like string or an iterable of strings).

        flags are consumed first; the leftovers go to the positional parser
        when one exists. faults are handed to self.error_handling.
        """
        tokens = _tokenize(arguments, "parse")
        try:
            self._parse(tokens)
            if self._positional is not None:
                self._positional.parse(self._args)
        except FlagException as fault:
            self.error_handling.handle(fault, prog=self.name, output=self.output, usage=self.usage)

    def _parse(self, tokens):
        self._parsed = True
        self._visited.clear()
        self._args = []

        tokens = deque(tokens)
        while tokens:
            token = tokens[0]
            if len(token) < 2 or not token.startswith("-"):
                break
            tokens.popleft()
            if token == "--":
                break

            name = token[2:] if token.startswith("--") else token[1:]
            if not name or name.startswith(("-", "=")):
                raise MalformedFlagError(
                    "bad flag syntax: %s" % token,
                    token=token,
                    hint="flags are written -name or -name=value",
                )
            name, separator, value = name.partition("=")

            try:
                flag = self._flags[name]
            except KeyError:
                if name in ("h", "help"):
                    raise HelpRequested("help requested", flag=name) from None
                suggestions = difflib.get_close_matches(name, self._flags.keys(), 3)
                if suggestions:
                    hint = "did you mean -%s? run '%s -help' to see all flags" % (suggestions[0], self.name)
                else:
                    hint = "run '%s -help' to see all flags" % self.name
                raise UnknownFlagError(
                    "flag provided but not defined: -%s" % name,
                    flag=name,
                    suggestions=tuple(suggestions),
                    hint=hint,
                ) from None

            if not separator:
                if flag.value.boolean:
                    value = "true"
                elif tokens:
                    value = tokens.popleft()
                else:
                    raise MissingValueError(
                        "flag needs an argument: -%s" % name,
                        flag=name,
                        hint="pass a value after a space or inline (-%s=<value>)" % name,
                    )
            self._store(flag, value)

        self._args = list(tokens)

    def _store(self, flag, value):
        try:
            flag.value.set(value)
        except (ValueError, OSError) as error:
            raise InvalidValueError(
                "invalid value %r for flag -%s: %s" % (value, flag.name, error),
                flag=flag.name,
                value=value,
                hint="check the value given to -%s" % flag.name,
            ) from error
        self._visited[flag.name] = flag

    # --- usage ---

    def default_usage(self):
        """
        render "Usage: <name> [options] <positional template>", the positional
        slots, then the options.

        palette keys (overridable through __main__.__styles__)
        - usage-label, program-name, options-label, positionals, section-label
        """
        styles = palette({
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "options-label": "#9CA3AF",
            "positionals": "bold #FFD600",
            "section-label": "bold #FFFFFF",
        })

        line = Text.assemble(("Usage:", styles["usage-label"]), " ", (self.name, styles["program-name"]))
        if self._flags:
            line.append(" [options]", styles["options-label"])
        if self._positional is not None and (command := self._positional.command()):
            line.append(" ")
            line.append(command, styles["positionals"])
        self.output.print(line)

        if self._positional is not None:
            self._positional.print_defaults(self.output)
        if self._flags:
            self.output.print(Text("Options:", styles["section-label"]))
        self.print_defaults()

    def print_defaults(self, output=Unset, /):
        """
        render one entry per registered flag: name, type label, usage and
        default (when it differs from the zero value of its kind).
        """
        output = coalesce(output, self.output)
        styles = palette({
            "flag-name": "bold #22C55E",
            "typename": "bold #FFD600",
            "flag-usage": "#9CA3AF",
            "default": "italic #737373",
        })

        for flag in self._flags.values():
            typename, usage = unquote_usage(flag)

            head = Text("  ")
            head.append(type(self).__prefix__ + flag.name, styles["flag-name"])
            if typename:
                head.append(" ")
                head.append(typename, styles["typename"])
            output.print(head)

            body = Text("    ")
            body.append(usage.replace("\n", "\n    "), styles["flag-usage"])
            if flag.default != type(flag.value).__zero__:
                default = repr(flag.default) if isinstance(flag.value, StringFlag) else flag.default
                body.append(" (default %s)" % default, styles["default"])
            if body.plain.strip():
                output.print(body)


class Positional(FlagSet):
    """
    Positional parser: maps bare tokens onto the slots of an order template.

    Slot values are registered with the ordinary FlagSet methods, using the slot
    names as flag names. Without an explicit order(), every registered flag
    becomes a required, non-repeating slot in registration order; that fallback
    is frozen by the first parse.

    Boolean kinds are rejected: they never take a separate argument, so a slot
    could not receive its token.

    parse() always raises its faults; the owning FlagSet applies its own
    error handling disposition.
    """
    __prefix__ = ""

    def __init__(self, parent=None, /):
        if parent is not None and not isinstance(parent, FlagSet):
            raise TypeError("Positional() argument must be a flag set")
        super().__init__(
            parent.name if parent is not None else Unset,
            output=parent.output if parent is not None else Unset,
        )
        self.parent = parent
        self._order = Unset
        self._frozen = False

    @property
    def specification(self):
        """
        the order specification in effect: the explicit one, the frozen
        fallback, or (before the first parse) the fallback derived from the
        flags registered so far.
        """
        if self._order is Unset:
            return OrderSpecification.from_flags(self._flags.values())
        return self._order

    def order(self, template, /):
        """
        declare the positional order from a template ("src [dst...]") or an
        OrderSpecification, and return the specification.

        Declaring an order after a parse froze the previous one still applies
        it, but emits a LateOrderWarning.
        """
        specification = template if isinstance(template, OrderSpecification) else build(template)
        if self._frozen:
            warnings.warn(LateOrderWarning(
                "positional order changed after parsing started",
                prog=self.name,
                hint="declare the order before the first parse",
            ), stacklevel=2)
        self._order = specification
        return specification

    def command(self):
        """the positional part of the usage line."""
        return str(self.specification)

    def var(self, value, name, /, usage=""):
        if getattr(value, "boolean", False):
            raise TypeError(f"positional slot {name!r} cannot hold a boolean value")
        return super().var(value, name, usage)

    def pos(self):
        raise TypeError("positional parsers cannot own positional parsers")

    def parse(self, arguments, /):
        """
        interleave arguments with the slot names, parse the synthetic stream,
        then check that every required slot was set.

        raises
        - FlagParseError subclasses from the host parse, unchanged.
        - MissingRequiredError for the first required slot left unset.
        """
        tokens = _tokenize(arguments, "parse")
        self._order = order = self.specification
        self._frozen = True
        self._parse(interleave(tokens, order))
        validate(self._visited.keys(), order)


@functools.cache
def command_line():
    """
    Return the process-wide default FlagSet.

    It is named after the running program, exits on faults, and is created on
    first access. The module-level helpers register on it.
    """
    return FlagSet(program(), ErrorHandling.EXIT)


def var(value, name, /, usage=""):
    return command_line().var(value, name, usage)


def string(name, /, default="", usage=""):
    return command_line().string(name, default, usage)


def integer(name, /, default=0, usage=""):
    return command_line().integer(name, default, usage)


def number(name, /, default=0.0, usage=""):
    return command_line().number(name, default, usage)


def boolean(name, /, default=False, usage=""):
    return command_line().boolean(name, default, usage)


def buffer(name, /, usage=""):
    return command_line().buffer(name, usage)


def buffer_var(buffer, name, /, usage=""):
    return command_line().buffer_var(buffer, name, usage)


def strings(name, /, usage=""):
    return command_line().strings(name, usage)


def strings_var(values, name, /, usage=""):
    return command_line().strings_var(values, name, usage)


def writer_var(stream, name, /, usage=""):
    return command_line().writer_var(stream, name, usage)


def infile(name, /, usage="", *, mode="r", encoding="utf-8"):
    return command_line().infile(name, usage, mode=mode, encoding=encoding)


def infile_var(value, name, /, usage=""):
    return command_line().infile_var(value, name, usage)


def infiles(name, /, usage="", *, mode="r", encoding="utf-8"):
    return command_line().infiles(name, usage, mode=mode, encoding=encoding)


def infiles_var(files, name, /, usage="", *, mode="r", encoding="utf-8"):
    return command_line().infiles_var(files, name, usage, mode=mode, encoding=encoding)


def outfiles(name, /, usage="", *, mode="w", encoding="utf-8"):
    return command_line().outfiles(name, usage, mode=mode, encoding=encoding)


def outfiles_var(files, name, /, usage="", *, mode="w", encoding="utf-8"):
    return command_line().outfiles_var(files, name, usage, mode=mode, encoding=encoding)


def pos():
    return command_line().pos()


def parse(arguments=Unset, /):
    """
    Parse the default FlagSet; without arguments, sys.argv[1:] is used.
    """
    command_line().parse(sys.argv[1:] if arguments is Unset else arguments)


__all__ = (
    # Classes
    "Flag",
    "FlagSet",
    "Positional",

    # Functions
    "unquote_usage",
    "command_line",

    # Default instance helpers
    "var",
    "string",
    "integer",
    "number",
    "boolean",
    "buffer",
    "buffer_var",
    "strings",
    "strings_var",
    "writer_var",
    "infile",
    "infile_var",
    "infiles",
    "infiles_var",
    "outfiles",
    "outfiles_var",
    "pos",
    "parse",
)
