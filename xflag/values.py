"""
xflag value kinds: the objects a FlagSet stores parsed strings into.

Contract
- Value.set(raw): consume one raw command-line string. Conversion problems raise
  ValueError, file problems raise OSError; the FlagSet turns both into an
  InvalidValueError fault.
- Value.describe(): display form of the current value (also str(value)).
- __typename__: label used in usage lines ("-n int"); empty for booleans.
- __zero__: display form of a pristine value; defaults equal to it are not
  shown in usage.
- boolean: True when the flag takes no separate argument ("-v" means "-v=true").

Kinds
- Scalars: StringFlag, IntegerFlag, FloatFlag, BooleanFlag.
- Accumulators and streams: BufferFlag, RepeatedStringFlag, WriterFlag.
- Files: InputFileFlag, InputFileListFlag, OutputFileListFlag. The name "-"
  stands for stdin (inputs) or stdout (outputs); those standard streams are
  borrowed and never closed by the returned handle.

Ownership
- Every file opened by a value belongs to the caller, including files opened
  before a later parse failure. Nothing here closes them implicitly, except
  InputFileFlag, which closes the handle it replaces.
"""
import io
import sys
from abc import ABC, abstractmethod

from .utils import Unset


class Value(ABC):
    """
    Abstract flag value: stores raw strings and describes itself.
    """
    __typename__ = "value"
    __zero__ = ""
    boolean = False

    @abstractmethod
    def set(self, raw, /):
        ...

    @abstractmethod
    def describe(self):
        ...

    def __str__(self):
        return self.describe()

    def __repr__(self):
        return f"{type(self).__name__}({self.describe()!r})"


class StringFlag(Value):
    __typename__ = "string"

    def __init__(self, default="", /):
        if not isinstance(default, str):
            raise TypeError("StringFlag() default must be a string")
        self.value = default

    def set(self, raw, /):
        self.value = raw

    def describe(self):
        return self.value


class IntegerFlag(Value):
    """
    Integer value; accepts Python integer literals ("42", "0x2a", "0o52", "1_000").
    """
    __typename__ = "int"
    __zero__ = "0"

    def __init__(self, default=0, /):
        if not isinstance(default, int) or isinstance(default, bool):
            raise TypeError("IntegerFlag() default must be an integer")
        self.value = default

    def set(self, raw, /):
        try:
            self.value = int(raw.strip(), 0)
        except ValueError:
            raise ValueError(f"invalid integer {raw!r}") from None

    def describe(self):
        return str(self.value)


class FloatFlag(Value):
    __typename__ = "float"
    __zero__ = "0.0"

    def __init__(self, default=0.0, /):
        if not isinstance(default, int | float) or isinstance(default, bool):
            raise TypeError("FloatFlag() default must be a number")
        self.value = float(default)

    def set(self, raw, /):
        try:
            self.value = float(raw)
        except ValueError:
            raise ValueError(f"invalid number {raw!r}") from None

    def describe(self):
        return str(self.value)


class BooleanFlag(Value):
    """
    Presence value: "-v" stores True, "-v=false" stores False.
    """
    __typename__ = ""
    __zero__ = "false"
    boolean = True

    _literals = {
        "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
        "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
    }

    def __init__(self, default=False, /):
        if not isinstance(default, bool):
            raise TypeError("BooleanFlag() default must be a boolean")
        self.value = default

    def set(self, raw, /):
        try:
            self.value = self._literals[raw]
        except KeyError:
            raise ValueError(f"invalid boolean {raw!r}") from None

    def describe(self):
        return "true" if self.value else "false"


class BufferFlag(Value):
    """
    Accumulating text buffer: every value is written followed by a newline.

    describe() returns the whole buffer content.
    """

    def __init__(self, buffer=Unset, /):
        if buffer is Unset:
            buffer = io.StringIO()
        elif not callable(getattr(buffer, "getvalue", None)):
            raise TypeError("BufferFlag() argument must be a text buffer")
        self.buffer = buffer

    def set(self, raw, /):
        self.buffer.write(raw + "\n")

    def describe(self):
        return self.buffer.getvalue()


class RepeatedStringFlag(Value):
    """
    Repeated string value: every occurrence appends to the same list.

    The list passed in (or created) is mutated in place, so callers may keep a
    reference to it.
    """
    __zero__ = "[]"

    def __init__(self, values=Unset, /):
        if values is Unset:
            values = []
        if not isinstance(values, list):
            raise TypeError("RepeatedStringFlag() argument must be a list")
        self.values = values

    def set(self, raw, /):
        self.values.append(raw)

    def describe(self):
        return "[" + " ".join(self.values) + "]"


class WriterFlag(Value):
    """Writes every value, as given, to a text stream."""
    __zero__ = "writer"

    def __init__(self, stream, /):
        if not callable(getattr(stream, "write", None)):
            raise TypeError("WriterFlag() argument must be a writable stream")
        self.stream = stream

    def set(self, raw, /):
        self.stream.write(raw)

    def describe(self):
        return "writer"


class _Borrowed:
    """
    Proxy over a standard stream whose close() leaves the stream open.
    """

    def __init__(self, stream, /):
        self._stream = stream

    def __getattr__(self, name):
        return getattr(self._stream, name)

    def __iter__(self):
        return iter(self._stream)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def closed(self):
        return False

    def close(self):
        pass


def _check_mode(mode, allowed, owner, /):
    if mode not in allowed:
        raise ValueError(f"{owner}() mode must be one of {', '.join(map(repr, allowed))}")
    return mode


def _open(raw, mode, encoding, /):
    # "-" borrows the standard stream matching the direction of the mode
    if raw == "-":
        stream = sys.stdin if mode.startswith("r") else sys.stdout
        return _Borrowed(stream.buffer if "b" in mode else stream)
    if "b" in mode:
        return open(raw, mode)
    return open(raw, mode, encoding=encoding)


class InputFileFlag(Value):
    """
    Single input file, usable directly as a readable file object.

    Until a value is set, reads return an empty string (end of file) and
    close() does nothing. Setting a new value closes the previous handle.
    """
    __zero__ = "input file"

    def __init__(self, mode="r", encoding="utf-8"):
        self._mode = _check_mode(mode, ("r", "rb"), "InputFileFlag")
        self._encoding = encoding
        self.file = None
        self.name = None

    def set(self, raw, /):
        file = _open(raw, self._mode, self._encoding)
        if self.file is not None:
            self.file.close()
        self.file, self.name = file, raw

    def describe(self):
        return "input file"

    def _empty(self):
        return b"" if "b" in self._mode else ""

    def read(self, size=-1, /):
        if self.file is None:
            return self._empty()
        return self.file.read(size)

    def readline(self, size=-1, /):
        if self.file is None:
            return self._empty()
        return self.file.readline(size)

    def __iter__(self):
        return iter(()) if self.file is None else iter(self.file)

    def close(self):
        if self.file is not None:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class InputFileListFlag(Value):
    """Every occurrence opens one more input file."""
    __zero__ = "input files"

    def __init__(self, files=Unset, /, mode="r", encoding="utf-8"):
        if files is Unset:
            files = []
        if not isinstance(files, list):
            raise TypeError("InputFileListFlag() argument must be a list")
        self._mode = _check_mode(mode, ("r", "rb"), "InputFileListFlag")
        self._encoding = encoding
        self.files = files

    def set(self, raw, /):
        self.files.append(_open(raw, self._mode, self._encoding))

    def describe(self):
        return "input files"


class OutputFileListFlag(Value):
    """Every occurrence creates (or truncates) one more output file."""
    __zero__ = "output files"

    def __init__(self, files=Unset, /, mode="w", encoding="utf-8"):
        if files is Unset:
            files = []
        if not isinstance(files, list):
            raise TypeError("OutputFileListFlag() argument must be a list")
        self._mode = _check_mode(mode, ("w", "wb", "a", "ab", "x", "xb"), "OutputFileListFlag")
        self._encoding = encoding
        self.files = files

    def set(self, raw, /):
        self.files.append(_open(raw, self._mode, self._encoding))

    def describe(self):
        return "output files"


__all__ = (
    "Value",
    "StringFlag",
    "IntegerFlag",
    "FloatFlag",
    "BooleanFlag",
    "BufferFlag",
    "RepeatedStringFlag",
    "WriterFlag",
    "InputFileFlag",
    "InputFileListFlag",
    "OutputFileListFlag",
)
