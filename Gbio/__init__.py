# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Gbio: reading and writing GenBank flat files.

The actual parsing and writing code lives in the Gbio.GenBank package; this
module only holds the version string and the warnings and exceptions shared
by the whole distribution.

Warnings:
 - GbioWarning               General warning for Gbio users.
 - GbioParserWarning         The input file was not quite as expected.
 - SequenceLengthMismatch    LOCUS length and ORIGIN data disagree.
 - UnknownFeatureKey         Feature key outside the INSDC vocabulary.

Exceptions:
 - ParserFailureError        Layout or syntax problem in a record, with
   MalformedLine, MissingField and UnexpectedEof subclasses.
 - LocationParserError       Problem with a feature location, with the
   InvalidLocation subclass.
 - EndOfInput                The byte source is exhausted (not an error).

"""

__version__ = "0.7.1"


class GbioWarning(Warning):
    """Gbio warning.

    Gbio should use this warning (or subclasses of it), making it easy to
    silence all our warning messages should you wish to:

    >>> import warnings
    >>> from Gbio import GbioWarning
    >>> warnings.simplefilter('ignore', GbioWarning)

    Consult the warnings module documentation for more details.
    """

    pass


class GbioParserWarning(GbioWarning):
    """Gbio parser warning.

    Some in-valid data files cannot be parsed and will trigger an exception.
    Where a reasonable interpretation is possible, Gbio will issue this
    warning to indicate a potential problem.
    """

    pass


class SequenceLengthMismatch(GbioParserWarning):
    """The LOCUS line declares a length other than the number of bases read.

    Many real world files have this discrepancy, so the record is still
    returned.
    """

    pass


class UnknownFeatureKey(GbioParserWarning):
    """A feature key that is not part of the INSDC feature table vocabulary."""

    pass


class ParserFailureError(ValueError):
    """Failure caused by some kind of problem in the parser.

    The line number, the byte offset of the start of the offending line and
    the line itself are kept as attributes (any of them may be None), so a
    caller can report the problem or skip ahead to the next record.
    """

    def __init__(self, message, lineno=None, offset=None, line=None):
        """Initialize the exception with its position information."""
        self.message = message
        self.lineno = lineno
        self.offset = offset
        self.line = line
        if lineno is not None:
            message = "%s (line %i, byte %i)" % (message, lineno, offset or 0)
        if line is not None:
            message = "%s:\n%s" % (message, line)
        ValueError.__init__(self, message)


class MalformedLine(ParserFailureError):
    """A line whose column layout does not match the expected field type."""

    pass


class MissingField(ParserFailureError):
    """A mandatory field (the LOCUS line) is absent."""

    pass


class UnexpectedEof(ParserFailureError):
    """The input ended in the middle of a record."""

    pass


class LocationParserError(ValueError):
    """Could not properly parse out a location from a GenBank file."""

    pass


class InvalidLocation(LocationParserError):
    """A malformed location expression.

    Attributes:
     - text - the full location string
     - span - (start, end) indices of the offending part of text
     - lineno, offset - position of the feature line in the file, filled
       in by the scanner (None otherwise)

    """

    def __init__(self, message, text, span):
        """Initialize the exception, pointing at the offending text."""
        self.text = text
        self.span = span
        self.lineno = None
        self.offset = None
        start, end = span
        LocationParserError.__init__(
            self, "%s at position %i in %r" % (message, start + 1, text)
        )

    @property
    def fragment(self):
        """Return the offending part of the location text."""
        start, end = self.span
        return self.text[start:end]


class EndOfInput(EOFError):
    """The underlying byte source has no more data.

    This is the normal signal at the end of a stream, raised by the buffer
    when more bytes are requested than the source can still provide.
    """

    pass
