# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Split the lines of a GenBank file into syntactic units (PRIVATE).

GenBank is a fixed column format.  Header lines have their keyword in
columns 1-12, feature lines have the feature key in columns 6-21 and the
location from column 22, and qualifiers start with a slash in column 22.
The Tokenizer reads lines from a StreamBuffer and classifies them using
those columns, gathering multi-line locations and qualifier values into a
single token:

>>> from Gbio.File import StreamBuffer
>>> data = (b'FEATURES             Location/Qualifiers\\n'
...         b'     gene            join(1..5,\\n'
...         b'                     8..10)\\n'
...         b'                     /note="two\\n'
...         b'                     lines"\\n')
>>> tokenizer = Tokenizer(StreamBuffer(data))
>>> for token in tokenizer:
...     print(token.kind, token.key, repr(token.value))
FEATURES FEATURES 'Location/Qualifiers'
FEATURE gene 'join(1..5,8..10)'
QUALIFIER note '"two\\nlines"'

"""

import collections
import logging
import warnings

from Gbio import GbioParserWarning, MalformedLine, UnexpectedEof


LOCUS = "LOCUS"
HEADER = "HEADER"
CONTINUATION = "CONTINUATION"
FEATURES = "FEATURES"
FEATURE = "FEATURE"
QUALIFIER = "QUALIFIER"
ORIGIN = "ORIGIN"
CONTIG = "CONTIG"
SEQUENCE = "SEQUENCE"
END = "END"
BLANK = "BLANK"

Token = collections.namedtuple("Token", ["kind", "key", "value", "lineno", "offset"])
Token.__doc__ = """One syntactic unit of a GenBank file.

 - kind - one of the token kinds defined in this module.
 - key - header keyword (indentation kept), feature or qualifier key, or
   the start number of a sequence line.
 - value - text after the key; bytes of residues for SEQUENCE tokens.
 - lineno - line number (starting at 1) of the first line of the token.
 - offset - byte offset of the first line of the token.
"""

_Line = collections.namedtuple("_Line", ["text", "raw", "lineno", "offset"])


def _quote_closed(value):
    """Check if a quoted qualifier value has its closing quote (PRIVATE).

    Inside a value a literal quote is doubled, so the value is closed when
    it ends with an odd number of quotes after the opening one.

    >>> _quote_closed('"abc"'), _quote_closed('"say ""hi""'), _quote_closed('"')
    (True, False, False)

    """
    inner = value[1:]
    count = len(inner) - len(inner.rstrip('"'))
    return count % 2 == 1


class Tokenizer:
    """Turn the lines of a StreamBuffer into Token objects.

    The tokenizer has three modes, header, features and sequence, which
    decide how an indented line is understood.  The mode changes on the
    FEATURES and ORIGIN lines, on any other keyword in column 1, and on the
    // line ending a record.
    """

    HEADER_WIDTH = 12
    FEATURE_KEY_INDENT = 5
    FEATURE_QUALIFIER_INDENT = 21
    FEATURE_QUALIFIER_SPACER = " " * FEATURE_QUALIFIER_INDENT
    SEQUENCE_INDENT = 9

    def __init__(self, buffer):
        """Initialize the tokenizer over a StreamBuffer."""
        self.buffer = buffer
        self.lineno = 0
        self.mode = "header"
        self._pending = None

    def __iter__(self):
        """Iterate over the tokens until the end of the input."""
        return iter(self.next_token, None)

    def _next_line(self):
        """Return the next line of input, or None at the end (PRIVATE)."""
        if self._pending is not None:
            line = self._pending
            self._pending = None
            return line
        offset = self.buffer.offset
        raw = self.buffer.readline()
        if not raw:
            return None
        self.lineno += 1
        text = raw.decode("utf-8", "surrogateescape").rstrip()
        return _Line(text, raw, self.lineno, offset)

    def _peek_line(self):
        """Return the next line without consuming it (PRIVATE)."""
        if self._pending is None:
            self._pending = self._next_line()
        return self._pending

    def _is_continuation(self, line):
        """Check if a line continues a feature location or qualifier (PRIVATE)."""
        return (
            line is not None
            and len(line.text) > self.FEATURE_QUALIFIER_INDENT
            and line.text.startswith(self.FEATURE_QUALIFIER_SPACER)
        )

    def next_token(self):
        """Return the next Token, or None at the end of the input."""
        line = self._next_line()
        if line is None:
            return None
        text = line.text
        if not text:
            return Token(BLANK, None, None, line.lineno, line.offset)
        if text == "//":
            self.mode = "header"
            return Token(END, None, text, line.lineno, line.offset)
        if text[0] != " ":
            if self.mode == "sequence" and text[0].isdigit():
                return self._sequence_token(line)
            return self._keyword_token(line)
        if self.mode == "features":
            return self._feature_token(line)
        if self.mode == "sequence":
            return self._sequence_token(line)
        return self._header_token(line)

    def _keyword_token(self, line):
        """Handle a line with a keyword in column 1 (PRIVATE)."""
        text = line.text
        if text.startswith("LOCUS"):
            self.mode = "header"
            return Token(LOCUS, "LOCUS", text, line.lineno, line.offset)
        if text.startswith("FEATURES"):
            logging.debug("Found feature table")
            self.mode = "features"
            return Token(
                FEATURES, "FEATURES", text[8:].strip(), line.lineno, line.offset
            )
        if text.startswith("ORIGIN"):
            logging.debug("Found start of sequence")
            self.mode = "sequence"
            return Token(ORIGIN, "ORIGIN", text[6:].strip(), line.lineno, line.offset)
        self.mode = "header"
        if text.startswith("CONTIG"):
            value = text[self.HEADER_WIDTH :].strip()
            return Token(CONTIG, "CONTIG", value, line.lineno, line.offset)
        return self._header_token(line)

    def _header_token(self, line):
        """Handle a header keyword or continuation line (PRIVATE)."""
        text = line.text
        keyword = text[: self.HEADER_WIDTH].rstrip()
        if not keyword.strip():
            return Token(
                CONTINUATION, None, text[self.HEADER_WIDTH :], line.lineno, line.offset
            )
        if len(text) > self.HEADER_WIDTH and text[self.HEADER_WIDTH - 1] != " ":
            raise MalformedLine(
                "Header keyword overflows column %i" % self.HEADER_WIDTH,
                line.lineno,
                line.offset,
                text,
            )
        return Token(
            HEADER, keyword, text[self.HEADER_WIDTH :], line.lineno, line.offset
        )

    def _feature_token(self, line):
        """Handle an indented line in the feature table (PRIVATE)."""
        text = line.text
        indent = len(text) - len(text.lstrip(" "))
        if indent < self.FEATURE_KEY_INDENT:
            raise MalformedLine(
                "Feature key should start in column %i" % (self.FEATURE_KEY_INDENT + 1),
                line.lineno,
                line.offset,
                text,
            )
        if indent >= self.FEATURE_QUALIFIER_INDENT:
            if text[self.FEATURE_QUALIFIER_INDENT] == "/":
                return self._qualifier_token(line)
            raise MalformedLine(
                "Continuation line outside of a feature or qualifier",
                line.lineno,
                line.offset,
                text,
            )
        if (
            len(text) > self.FEATURE_QUALIFIER_INDENT
            and text[self.FEATURE_QUALIFIER_INDENT - 1] != " "
        ):
            raise MalformedLine(
                "Feature key overflows column %i" % self.FEATURE_QUALIFIER_INDENT,
                line.lineno,
                line.offset,
                text,
            )
        key = text[: self.FEATURE_QUALIFIER_INDENT].strip()
        location = text[self.FEATURE_QUALIFIER_INDENT :].strip()
        if not location:
            raise MalformedLine(
                "Feature %s without a location" % key, line.lineno, line.offset, text
            )
        while location.endswith(",") or location.count("(") > location.count(")"):
            following = self._peek_line()
            if not self._is_continuation(following):
                break
            if following.text[self.FEATURE_QUALIFIER_INDENT] == "/":
                break
            if not location.endswith(","):
                warnings.warn(
                    "Non-standard feature line wrapping (didn't break on comma)?",
                    GbioParserWarning,
                )
            location += following.text[self.FEATURE_QUALIFIER_INDENT :].strip()
            self._pending = None
        return Token(FEATURE, key, "".join(location.split()), line.lineno, line.offset)

    def _qualifier_token(self, line):
        """Handle a qualifier and its continuation lines (PRIVATE).

        The raw value is returned with its quotes, lines joined by newlines.
        """
        text = line.text
        key, sep, value = text[self.FEATURE_QUALIFIER_INDENT + 1 :].partition("=")
        if not sep:
            value = None
        elif value.startswith('"'):
            while not _quote_closed(value):
                following = self._next_line()
                if following is None:
                    raise UnexpectedEof(
                        "Unterminated quoted value of qualifier /%s" % key,
                        line.lineno,
                        line.offset,
                        text,
                    )
                if following.text and not following.text.startswith(
                    self.FEATURE_QUALIFIER_SPACER
                ):
                    # Left for skip_record, it may be the // line
                    self._pending = following
                    raise MalformedLine(
                        "Unterminated quoted value of qualifier /%s" % key,
                        following.lineno,
                        following.offset,
                        following.text,
                    )
                value += "\n" + following.text[self.FEATURE_QUALIFIER_INDENT :]
        else:
            following = self._peek_line()
            while (
                self._is_continuation(following)
                and following.text[self.FEATURE_QUALIFIER_INDENT] != "/"
            ):
                value += "\n" + following.text[self.FEATURE_QUALIFIER_INDENT :]
                self._pending = None
                following = self._peek_line()
        return Token(QUALIFIER, key, value, line.lineno, line.offset)

    def _sequence_token(self, line):
        """Handle a numbered line of sequence data (PRIVATE)."""
        text, raw = line.text, line.raw
        if (
            len(text) > self.SEQUENCE_INDENT
            and text[self.SEQUENCE_INDENT] != " "
            and text[0] == " "
        ):
            # Some broken programs indent the sequence by one space too many
            warnings.warn("Invalid indentation for sequence line", GbioParserWarning)
            text, raw = text[1:], raw[1:]
        number = text[: self.SEQUENCE_INDENT + 1].strip()
        if not number.isdigit():
            raise MalformedLine(
                "Sequence line without a base number",
                line.lineno,
                line.offset,
                line.text,
            )
        residues = raw[self.SEQUENCE_INDENT + 1 :].translate(None, b" \t\r\n")
        return Token(SEQUENCE, int(number), residues, line.lineno, line.offset)

    def skip_record(self):
        """Discard lines up to and including the next // line.

        Returns the number of lines skipped.  Used to carry on with the
        next record after a syntax error.
        """
        skipped = 0
        while True:
            line = self._next_line()
            if line is None:
                break
            skipped += 1
            if line.text == "//":
                break
        logging.debug("Skipped %i lines to the end of the record", skipped)
        self.mode = "header"
        return skipped
