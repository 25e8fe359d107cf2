"""
Values module behavioral tests (scalar kinds, accumulators, streams, files).

Scope
- Validate the accumulating kinds through a FlagSet (buffer, repeated strings, writer).
- Validate scalar conversions and their InvalidValueError surfacing.
- Validate file kinds: opening, "-" as a borrowed standard stream, ownership.

Conventions
- Test method names follow CamelCase per project convention.
- Files live in a temporary directory created per test.
"""

from __future__ import annotations

import io
import os
import sys
import tempfile
import unittest
from unittest import TestCase, mock

from xflag import (
    FlagSet,
    Value,
    StringFlag,
    IntegerFlag,
    FloatFlag,
    BooleanFlag,
    BufferFlag,
    RepeatedStringFlag,
    WriterFlag,
    InputFileFlag,
    InputFileListFlag,
    OutputFileListFlag,
    InvalidValueError,
)


class TestAccumulators(TestCase):
    """Buffer, repeated strings and writer values."""

    def testBuffer(self):
        cases = [
            ([], ""),
            (["-b", ""], "\n"),
            (["-b", "foo", "-b", "baz"], "foo\nbaz\n"),
        ]
        for arguments, expected in cases:
            flags = FlagSet("test")
            buffer = flags.buffer("b")
            flags.parse(arguments)
            self.assertEqual(buffer.getvalue(), expected)

    def testBufferVarUsesGivenBuffer(self):
        flags = FlagSet("test")
        buffer = io.StringIO("seed\n")
        buffer.seek(0, io.SEEK_END)
        self.assertIs(flags.buffer_var(buffer, "b"), buffer)
        flags.parse(["-b", "more"])
        self.assertEqual(buffer.getvalue(), "seed\nmore\n")

    def testStrings(self):
        cases = [
            ([], []),
            (["-s", ""], [""]),
            (["-s", "foo", "-s", "baz"], ["foo", "baz"]),
        ]
        for arguments, expected in cases:
            flags = FlagSet("test")
            values = flags.strings("s")
            flags.parse(arguments)
            self.assertEqual(values, expected)

    def testStringsDescribe(self):
        value = RepeatedStringFlag()
        self.assertEqual(value.describe(), "[]")
        value.set("foo")
        value.set("baz")
        self.assertEqual(str(value), "[foo baz]")

    def testWriterWritesRawValues(self):
        flags = FlagSet("test")
        stream = flags.writer_var(io.StringIO(), "w")
        flags.parse(["-w", "foo", "-w=bar"])
        self.assertEqual(stream.getvalue(), "foobar")
        self.assertEqual(flags.lookup("w").value.describe(), "writer")

    def testWriterRequiresStream(self):
        with self.assertRaises(TypeError):
            WriterFlag(object())


class TestScalars(TestCase):
    """String, integer, float and boolean values."""

    def testValueIsAbstract(self):
        with self.assertRaises(TypeError):
            Value()

    def testString(self):
        flags = FlagSet("test")
        name = flags.string("name", "anonymous")
        self.assertEqual(name.value, "anonymous")
        flags.parse(["-name", "eiko"])
        self.assertEqual(name.value, "eiko")

    def testIntegerLiterals(self):
        value = IntegerFlag()
        for raw, expected in (("42", 42), ("-7", -7), ("0x10", 16), ("0o10", 8), ("1_000", 1000)):
            value.set(raw)
            self.assertEqual(value.value, expected)

    def testIntegerInvalidSurfacesAsFault(self):
        flags = FlagSet("test")
        flags.integer("n")
        with self.assertRaises(InvalidValueError) as context:
            flags.parse(["-n", "many"])
        self.assertEqual(context.exception.flag, "n")
        self.assertEqual(context.exception.value, "many")
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testFloat(self):
        value = FloatFlag()
        value.set("2.5")
        self.assertEqual(value.value, 2.5)
        with self.assertRaises(ValueError):
            value.set("two")

    def testBooleanPresence(self):
        flags = FlagSet("test")
        verbose = flags.boolean("v")
        flags.parse(["-v", "rest"])
        self.assertIs(verbose.value, True)
        self.assertEqual(flags.args, ["rest"])

    def testBooleanInline(self):
        flags = FlagSet("test")
        verbose = flags.boolean("v", True)
        flags.parse(["-v=false"])
        self.assertIs(verbose.value, False)

    def testBooleanInvalid(self):
        with self.assertRaises(ValueError):
            BooleanFlag().set("maybe")

    def testDefaultsTypeChecked(self):
        with self.assertRaises(TypeError):
            StringFlag(1)
        with self.assertRaises(TypeError):
            IntegerFlag(True)
        with self.assertRaises(TypeError):
            BooleanFlag("yes")

    def testBufferRequiresTextBuffer(self):
        with self.assertRaises(TypeError):
            BufferFlag(object())


class TestFiles(TestCase):
    """Input and output file values."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def path(self, name, content=None):
        path = os.path.join(self.directory.name, name)
        if content is not None:
            with open(path, "w", encoding="utf-8") as file:
                file.write(content)
        return path

    def testInputFile(self):
        flags = FlagSet("test")
        source = flags.infile("in")
        flags.parse(["-in", self.path("a.txt", "alpha\nbeta\n")])
        with source:
            self.assertEqual(source.readline(), "alpha\n")
            self.assertEqual(source.read(), "beta\n")
        self.assertTrue(source.file.closed)

    def testInputFileVar(self):
        flags = FlagSet("test")
        source = InputFileFlag("rb")
        self.assertIs(flags.infile_var(source, "in"), source)
        flags.parse(["-in", self.path("a.bin", "raw")])
        with source:
            self.assertEqual(source.read(), b"raw")
        with self.assertRaises(TypeError):
            flags.infile_var(InputFileListFlag(), "other")

    def testInputFileUnsetReadsEmpty(self):
        source = InputFileFlag()
        self.assertEqual(source.read(), "")
        self.assertEqual(list(source), [])
        source.close()

    def testInputFileReplacementClosesPrevious(self):
        source = InputFileFlag()
        source.set(self.path("a.txt", "a"))
        first = source.file
        source.set(self.path("b.txt", "b"))
        self.assertTrue(first.closed)
        self.assertEqual(source.read(), "b")
        source.close()

    def testInputFileDashBorrowsStdin(self):
        with mock.patch.object(sys, "stdin", io.StringIO("from stdin")) as stdin:
            source = InputFileFlag()
            source.set("-")
            self.assertEqual(source.read(), "from stdin")
            source.close()
            self.assertFalse(stdin.closed)

    def testInputFileMissingSurfacesAsFault(self):
        flags = FlagSet("test")
        flags.infile("in")
        with self.assertRaises(InvalidValueError) as context:
            flags.parse(["-in", self.path("missing.txt")])
        self.assertIsInstance(context.exception.__cause__, FileNotFoundError)

    def testInputFileList(self):
        flags = FlagSet("test")
        files = flags.infiles("in")
        flags.parse(["-in", self.path("a.txt", "a"), "-in", self.path("b.txt", "b")])
        try:
            self.assertEqual([file.read() for file in files], ["a", "b"])
        finally:
            for file in files:
                file.close()

    def testInputFileListKeepsFilesOpenedBeforeFailure(self):
        flags = FlagSet("test")
        files = flags.infiles("in")
        with self.assertRaises(InvalidValueError):
            flags.parse(["-in", self.path("a.txt", "a"), "-in", self.path("missing.txt")])
        self.assertEqual(len(files), 1)
        self.assertFalse(files[0].closed)
        files[0].close()

    def testOutputFileList(self):
        flags = FlagSet("test")
        files = flags.outfiles("out")
        target = self.path("out.txt", "stale")
        flags.parse(["-out", target])
        with files[0] as file:
            file.write("fresh")
        with open(target, encoding="utf-8") as file:
            self.assertEqual(file.read(), "fresh")

    def testOutputFileDashBorrowsStdout(self):
        with mock.patch.object(sys, "stdout", io.StringIO()) as stdout:
            value = OutputFileListFlag()
            value.set("-")
            value.files[0].write("hello")
            value.files[0].close()
            self.assertFalse(stdout.closed)
            self.assertEqual(stdout.getvalue(), "hello")

    def testBinaryModes(self):
        source = InputFileListFlag(mode="rb")
        source.set(self.path("a.bin", "bytes"))
        try:
            self.assertEqual(source.files[0].read(), b"bytes")
        finally:
            source.files[0].close()

    def testModesValidated(self):
        with self.assertRaises(ValueError):
            InputFileFlag("w")
        with self.assertRaises(ValueError):
            OutputFileListFlag(mode="r")

    def testDescriptions(self):
        self.assertEqual(InputFileFlag().describe(), "input file")
        self.assertEqual(InputFileListFlag().describe(), "input files")
        self.assertEqual(OutputFileListFlag().describe(), "output files")


if __name__ == "__main__":
    unittest.main()
