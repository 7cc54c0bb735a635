# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Build Seq objects from the events of the GenBank scanner (PRIVATE).

The GenBankScanner calls one method of a consumer for each piece of
information it finds (the locus name, the definition, a feature key, a
qualifier and so on), and the _RecordConsumer assembles those pieces into
a Gbio.GenBank.Record.Seq object.
"""

import datetime
import logging
import warnings

from Gbio import GbioParserWarning, ParserFailureError, SequenceLengthMismatch

from . import Record


_MONTHS = [
    "JAN",
    "FEB",
    "MAR",
    "APR",
    "MAY",
    "JUN",
    "JUL",
    "AUG",
    "SEP",
    "OCT",
    "NOV",
    "DEC",
]


class Interner:
    """Table sharing one string object between equal keys.

    Feature tables reuse a small vocabulary (gene, CDS, /db_xref, ...)
    thousands of times, so every key goes through the table of its parse
    session and equal keys end up as the very same object:

    >>> interner = Interner()
    >>> a = interner.intern("".join(["C", "DS"]))
    >>> b = interner.intern("".join(["CD", "S"]))
    >>> a is b
    True
    >>> len(interner)
    1

    """

    def __init__(self):
        """Initialize an empty table."""
        self._table = {}

    def __len__(self):
        return len(self._table)

    def __contains__(self, text):
        return text in self._table

    def intern(self, text):
        """Return the shared copy of text, adding it to the table if needed."""
        return self._table.setdefault(text, text)


class _BaseGenBankConsumer:
    """Abstract GenBank consumer providing useful general functions (PRIVATE).

    This just helps to eliminate some duplication in things that most
    GenBank consumers want to do.
    """

    # Special keys in GenBank records that we should remove spaces from
    # For instance, /translation keys have values which are proteins and
    # should have spaces and newlines removed from them.
    remove_space_keys = ("translation",)

    @staticmethod
    def _split_keywords(keyword_string):
        """Split a string of keywords into a nice clean list (PRIVATE).

        >>> _BaseGenBankConsumer._split_keywords("alpha; beta.")
        ['alpha', 'beta']
        >>> _BaseGenBankConsumer._split_keywords(".")
        []

        """
        if keyword_string.endswith("."):
            keyword_string = keyword_string[:-1]
        return [x.strip() for x in keyword_string.split(";") if x.strip()]

    @staticmethod
    def _split_accessions(accession_string):
        """Split a string of accession numbers into a list (PRIVATE)."""
        return accession_string.replace(";", " ").split()

    @staticmethod
    def _split_taxonomy(taxonomy_string):
        """Split a string with taxonomy info into a list (PRIVATE)."""
        if not taxonomy_string or taxonomy_string == ".":
            # Missing data, no taxonomy
            return []
        if taxonomy_string[-1] == ".":
            taxonomy_string = taxonomy_string[:-1]
        return [x.strip() for x in taxonomy_string.split(";") if x.strip()]

    @staticmethod
    def _normalize_spaces(text):
        """Replace runs of whitespace in the passed text with single spaces (PRIVATE)."""
        return " ".join(text.split())

    @classmethod
    def _clean_qualifier_value(cls, key, value):
        """Turn the raw value of a qualifier into its text (PRIVATE).

        Enclosing quotes are removed and doubled quotes unescaped. The
        lines of a quoted value are joined with single spaces, unless the
        key is one where spaces are meaningless:

        >>> _BaseGenBankConsumer._clean_qualifier_value("note", '"a ""b""\\nc"')
        'a "b" c'
        >>> _BaseGenBankConsumer._clean_qualifier_value("translation", '"MKV\\nLLA"')
        'MKVLLA'

        """
        if value is None:
            return None
        if value.startswith('"'):
            value = value[1:-1].replace('""', '"')
            separator = "" if key in cls.remove_space_keys else " "
        else:
            separator = ""
        return separator.join(value.split("\n"))


class _RecordConsumer(_BaseGenBankConsumer):
    """Create a GenBank Seq object from scanner generated information (PRIVATE)."""

    def __init__(self):
        self.data = Record.Seq()
        self._seq_data = []
        self._cur_reference = None
        self._cur_feature = None

    def locus(self, content):
        self.data.name = content

    def size(self, content):
        self.data.length = int(content)

    def molecule_type(self, mol_type):
        """Validate and record the molecule type (for round-trip etc)."""
        if mol_type:
            if "circular" in mol_type or "linear" in mol_type:
                raise ParserFailureError(
                    "Molecule type %r should not include topology" % mol_type
                )
            if mol_type[-3:].upper() in ("DNA", "RNA") and not mol_type[-3:].isupper():
                warnings.warn(
                    "Non-upper case molecule type in LOCUS line: %s" % mol_type,
                    GbioParserWarning,
                )
            self.data.molecule_type = mol_type

    def topology(self, topology):  # noqa: D402
        """Validate and record sequence topology (linear or circular as strings)."""
        if topology:
            if topology not in (Record.Topology.LINEAR, Record.Topology.CIRCULAR):
                raise ParserFailureError(
                    "Unexpected topology %r should be linear or circular" % topology
                )
            self.data.topology = topology

    def data_file_division(self, content):
        self.data.division = content

    def date(self, content):
        """Record the LOCUS date, given as DD-MON-YYYY."""
        try:
            self.data.date = datetime.date(
                int(content[7:11]), _MONTHS.index(content[3:6]) + 1, int(content[0:2])
            )
        except ValueError:
            warnings.warn("Invalid date in LOCUS line: %s" % content, GbioParserWarning)
            self.data.date = None

    def definition(self, content):
        self.data.definition = content

    def accession(self, content):
        accessions = self._split_accessions(content)
        if accessions:
            self.data.accession = accessions[0]
            self.data.secondary_accessions = accessions[1:]

    def version(self, content):
        self.data.version = content

    def gi(self, content):
        self.data.gi = content

    def dblink(self, content):
        self.data.dblink.append(content)

    def keywords(self, content):
        self.data.keywords = self._split_keywords(content)

    def segment(self, content):
        logging.debug("Ignoring SEGMENT line %s", content)

    def source(self, content):
        if self.data.source is None:
            self.data.source = Record.Source()
        self.data.source.name = content

    def organism(self, content):
        if self.data.source is None:
            self.data.source = Record.Source()
        self.data.source.organism = None if content == "." else content

    def taxonomy(self, content):
        if self.data.source is None:
            self.data.source = Record.Source()
        self.data.source.taxonomy = self._split_taxonomy(content)

    def reference(self, content):
        """Grab the reference description and signal the start of a new reference."""
        self._cur_reference = Record.Reference(content)
        self.data.references.append(self._cur_reference)

    def _reference_field(self, name, content):
        """Set a field on the current reference (PRIVATE)."""
        if self._cur_reference is None:
            warnings.warn(
                "GenBank %s line without REFERENCE line." % name.upper(),
                GbioParserWarning,
            )
            return
        setattr(self._cur_reference, name, content)

    def authors(self, content):
        self._reference_field("authors", content)

    def consrtm(self, content):
        self._reference_field("consortium", content)

    def title(self, content):
        self._reference_field("title", content)

    def journal(self, content):
        self._reference_field("journal", content)

    def medline_id(self, content):
        self._reference_field("medline", content)

    def pubmed_id(self, content):
        self._reference_field("pubmed", content)

    def remark(self, content):
        self._reference_field("remark", content)

    def comment(self, content):
        self.data.comments.append("\n".join(content))

    def start_feature_table(self):
        """Signal the start of the feature table."""
        self._cur_reference = None

    def feature_key(self, content):
        """Grab the key of the feature and signal the start of a new feature."""
        self._cur_feature = Record.Feature(content)
        self.data.features.append(self._cur_feature)

    def location(self, content):
        self._cur_feature.location = content

    def feature_qualifier(self, key, value):
        value = self._clean_qualifier_value(key, value)
        self._cur_feature.qualifiers.append(Record.Qualifier(key, value))

    def base_count(self, content):
        logging.debug("Ignoring BASE COUNT line %s", content)

    def origin_name(self, content):
        logging.debug("Ignoring ORIGIN name %s", content)

    def contig_location(self, content):
        """Record the location given on the CONTIG lines."""
        self.data.contig = content

    def sequence(self, content):
        """Add sequence information to a list of sequence chunks.

        Later on we'll join this list together to make the final sequence.
        This is faster than adding on the new bytes every time.
        """
        self._seq_data.append(content)

    def record_end(self, content):
        """Signal the end of the record and do any necessary clean-up."""
        self.data.sequence = b"".join(self._seq_data)
        self._seq_data = []
        declared = self.data.length
        if self.data.sequence and declared is not None:
            if declared != len(self.data.sequence):
                warnings.warn(
                    "Expected sequence length %i, found %i (%s)."
                    % (declared, len(self.data.sequence), self.data.name),
                    SequenceLengthMismatch,
                )
        elif declared is None:
            self.data.length = len(self.data.sequence)
