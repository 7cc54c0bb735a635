# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Code to work with GenBank formatted files.

There are three helper functions:

    - read                  Parse a source containing a single GenBank record
      as a Gbio.GenBank.Record.Seq object.
    - parse                 Iterate over a source containing multiple GenBank
      records as Seq objects, one record at a time.
    - write                 Write Seq objects in GenBank format.

A source is a path, a handle (binary or text mode), or a bytes object. The
file is read through a fixed size buffer, so parse can go through files of
any size:

>>> from Gbio import GenBank
>>> for record in GenBank.parse("tests/data/sequence.gb"):
...     print(record.name, len(record), len(record.features))
SCU49845 5028 3

Classes:
 - Iterator              Iterate through a file of GenBank entries
 - RecordParser          Parse GenBank data into Seq objects.

"""

import os

from Gbio.File import StreamBuffer, DEFAULT_CHUNK_SIZE

from .Consumer import Interner, _RecordConsumer
from .Location import (
    Location,
    Point,
    Range,
    Between,
    Complement,
    Join,
    Order,
    Bond,
    OneOf,
    External,
    Gap,
    parse_location,
    format_location,
)
from .Record import Seq, Source, Reference, Feature, Qualifier, Topology
from .Scanner import GenBankScanner
from .Writer import GenBankWriter


class Iterator:
    """Iterator interface to move over a file of GenBank entries one at a time.

    Records are only read from the source when asked for, so a caller can
    stop at any point without reading the rest of the file.
    """

    def __init__(self, handle, parser=None):
        """Initialize the iterator.

        Arguments:
         - handle - A handle (or StreamBuffer) with GenBank entries to
           iterate through.
         - parser - An optional RecordParser, e.g. to share its Interner
           with another iterator. If None, a new one is used.

        """
        self.handle = handle
        if parser is None:
            parser = RecordParser()
        self._parser = parser

    def __next__(self):
        """Return the next GenBank record from the handle.

        Will return None if we ran out of records.
        """
        return self._parser.parse(self.handle)

    def __iter__(self):
        """Iterate over the records."""
        return iter(self.__next__, None)


class RecordParser:
    """Parse GenBank files into Seq objects.

    All the records read by one parser share the same Interner, so that a
    feature or qualifier key is the same string object everywhere in the
    session.
    """

    def __init__(self, chunk_size=DEFAULT_CHUNK_SIZE, interner=None):
        """Initialize the parser.

        Arguments:
         - chunk_size - Number of bytes read from the source at a time.
         - interner - An optional Interner to use instead of a new one.

        """
        self.chunk_size = chunk_size
        self.interner = interner if interner is not None else Interner()
        self._scanner = GenBankScanner(self.interner)
        self._handle = None

    def parse(self, handle):
        """Parse the next record of the handle into a Seq object.

        Returns None once there are no records left.  Consecutive calls
        with the same handle carry on where the previous record ended.
        """
        if handle is not self._handle:
            self._scanner.set_source(handle, self.chunk_size)
            self._handle = handle
        _consumer = _RecordConsumer()
        self._scanner.feed(_consumer)
        return _consumer.data

    def skip_record(self):
        """Discard the rest of the record that failed to parse.

        The next call to parse will then start with the following record.
        """
        self._scanner.skip_record()


def _parse_path(path, chunk_size):
    """Iterate over the records of the file at path (PRIVATE)."""
    with open(path, "rb") as handle:
        yield from Iterator(StreamBuffer(handle, chunk_size), RecordParser(chunk_size))


def parse(source, chunk_size=DEFAULT_CHUNK_SIZE):
    """Iterate over GenBank formatted entries as Seq objects.

    >>> from Gbio import GenBank
    >>> with open("tests/data/sequence.gb", "rb") as handle:
    ...     for record in GenBank.parse(handle):
    ...         print(record.accession)
    U49845

    Arguments:
     - source - A path, a handle opened in binary (preferred) or text mode,
       or a bytes object.
     - chunk_size - Number of bytes read from the source at a time.

    """
    if isinstance(source, (str, os.PathLike)):
        return _parse_path(source, chunk_size)
    return iter(Iterator(StreamBuffer(source, chunk_size), RecordParser(chunk_size)))


def read(source):
    """Read a source containing a single GenBank entry as a Seq object.

    >>> from Gbio import GenBank
    >>> record = GenBank.read("tests/data/sequence.gb")
    >>> print(record.source.organism)
    Saccharomyces cerevisiae

    """
    iterator = parse(source)
    try:
        record = next(iterator)
    except StopIteration:
        raise ValueError("No records found in handle") from None
    try:
        next(iterator)
        raise ValueError("More than one record found in handle")
    except StopIteration:
        pass
    return record


def write(records, target):
    """Write Seq objects in GenBank format, and return the number written.

    Arguments:
     - records - A Seq object, or an iterable of them.
     - target - A path, or a handle opened for writing in text or binary
       mode.

    """
    if isinstance(records, Seq):
        records = [records]
    if isinstance(target, (str, os.PathLike)):
        with open(target, "wb") as handle:
            return GenBankWriter(handle).write_file(records)
    return GenBankWriter(target).write_file(records)
