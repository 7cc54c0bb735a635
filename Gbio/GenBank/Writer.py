# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Writer for the GenBank flat file format.

The GenBankWriter lays Gbio.GenBank.Record.Seq objects out in the fixed
columns of GenBank: keywords in columns 1-12, feature keys from column 6,
locations and qualifiers from column 22, and nothing past column 79.
"""

import warnings

from Gbio import GbioWarning

from .Location import format_location


class GenBankWriter:
    """GenBank writer.

    The handle may be opened in text or in binary mode, in which case the
    output is encoded as UTF-8.
    """

    MAX_WIDTH = 79
    HEADER_WIDTH = 12
    QUALIFIER_INDENT = 21
    QUALIFIER_INDENT_STR = " " * QUALIFIER_INDENT
    QUALIFIER_INDENT_TMP = "     %s                "
    LETTERS_PER_LINE = 60
    SEQUENCE_INDENT = 9
    FTQUAL_NO_QUOTE = (
        "anticodon",
        "citation",
        "codon_start",
        "compare",
        "direction",
        "estimated_length",
        "mod_base",
        "number",
        "rpt_type",
        "rpt_unit_range",
        "tag_peptide",
        "transl_except",
        "transl_table",
    )
    # Values of these qualifiers are joined without spaces when read back
    NO_SPACE_QUALIFIERS = ("translation",)

    def __init__(self, target):
        """Initialize the writer on a handle opened for writing."""
        self.handle = target
        try:
            target.write("")
        except TypeError:
            self._binary = True
        else:
            self._binary = False

    def _write(self, text):
        if self._binary:
            self.handle.write(text.encode("utf-8", "surrogateescape"))
        else:
            self.handle.write(text)

    @staticmethod
    def _split_multi_line(text, max_len):
        """Return a list of strings (PRIVATE).

        Any single words which are too long get returned as a whole line
        (e.g. URLs) without an exception or warning.

        >>> GenBankWriter._split_multi_line("one two three", 8)
        ['one two', 'three']

        """
        text = text.strip()
        if len(text) <= max_len:
            return [text]
        answer = []
        line = ""
        for word in text.split():
            if line and len(line) + 1 + len(word) > max_len:
                answer.append(line)
                line = word
            elif line:
                line += " " + word
            else:
                line = word
        answer.append(line)
        return answer

    def _header_line(self, tag, text):
        """Return a single header line (PRIVATE)."""
        assert len(tag) < self.HEADER_WIDTH
        return "%s%s\n" % (tag.ljust(self.HEADER_WIDTH), text.replace("\n", " "))

    def _write_single_line(self, tag, text):
        """Write single line in each GenBank record (PRIVATE).

        Used in the 'header' of each GenBank record.
        """
        if len(text) > self.MAX_WIDTH - self.HEADER_WIDTH:
            if tag:
                warnings.warn(
                    "Annotation %r too long for %r line" % (text, tag), GbioWarning
                )
            else:
                # Can't give such a precise warning
                warnings.warn("Annotation %r too long" % text, GbioWarning)
        self._write(self._header_line(tag, text))

    def _write_multi_line(self, tag, text):
        """Write multiple lines in each GenBank record (PRIVATE).

        Used in the 'header' of each GenBank record.
        """
        max_len = self.MAX_WIDTH - self.HEADER_WIDTH
        lines = self._split_multi_line(text, max_len)
        self._write(self._header_line(tag, lines[0]))
        for line in lines[1:]:
            self._write(self._header_line("", line))

    def _write_multi_entries(self, tag, text_list):
        # used for DBLINK and any similar later line types.
        # If the list of strings is empty, nothing is written.
        for i, text in enumerate(text_list):
            if i == 0:
                self._write_single_line(tag, text)
            else:
                self._write_single_line("", text)

    @staticmethod
    def _get_date(record):
        default = "01-JAN-1980"
        if record.date is None:
            return default
        months = [
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
        return "%02i-%s-%04i" % (
            record.date.day,
            months[record.date.month - 1],
            record.date.year,
        )

    @staticmethod
    def _get_data_division(record):
        division = record.division or "UNK"
        if len(division) != 3:
            warnings.warn("Invalid data file division %r" % division, GbioWarning)
            division = "UNK"
        return division

    def _write_the_first_line(self, record):
        """Write the LOCUS line (PRIVATE)."""
        locus = record.name or record.accession or "."
        if len(locus.split()) != 1:
            raise ValueError("Invalid whitespace in %r for LOCUS line" % locus)
        length = str(len(record))
        if len(locus) > 16 and len(locus) + 1 + len(length) > 28:
            # Per updated GenBank standard (Dec 15, 2018) 229.0 the Locus
            # identifier can be any length, and a space is added after the
            # identifier to keep the identifier and length fields separated
            warnings.warn(
                "Increasing length of locus line to allow "
                "long name. This will result in fields that "
                "are not in usual positions.",
                GbioWarning,
            )
            name_length = locus + " " + length
        else:
            name_length = length.rjust(28)
            name_length = locus + name_length[len(locus) :]
            if " " not in name_length:
                name_length = locus + " " + length

        mol_type = record.molecule_type or ""
        strand = ""
        if mol_type[:3] in ("ss-", "ds-", "ms-"):
            strand, mol_type = mol_type[:3], mol_type[3:]
        if len(mol_type) > 7:
            warnings.warn("Molecule type %r too long" % mol_type, GbioWarning)

        topology = record.topology or ""
        line = "LOCUS       %s bp %s%s %s %s %s\n" % (
            name_length,
            strand.ljust(3),
            mol_type.ljust(7),
            topology.ljust(len("circular")),
            self._get_data_division(record),
            self._get_date(record),
        )
        self._write(line)

    def _write_references(self, record):
        for ref in record.references:
            self._write_single_line("REFERENCE", ref.description)
            if ref.authors:
                self._write_multi_line("  AUTHORS", ref.authors)
            if ref.consortium:
                self._write_multi_line("  CONSRTM", ref.consortium)
            if ref.title:
                self._write_multi_line("  TITLE", ref.title)
            if ref.journal:
                # holds the journal name, volume, year, and page numbers
                self._write_multi_line("  JOURNAL", ref.journal)
            if ref.medline:
                self._write_multi_line("  MEDLINE", ref.medline)
            if ref.pubmed:
                # Note this has a THREE space indent:
                self._write_multi_line("   PUBMED", ref.pubmed)
            if ref.remark:
                self._write_multi_line("  REMARK", ref.remark)

    def _write_comment(self, comment):
        tag = "COMMENT"
        for line in comment.split("\n"):
            if len(line) > self.MAX_WIDTH - self.HEADER_WIDTH:
                self._write_multi_line(tag, line)
            else:
                self._write(self._header_line(tag, line))
            tag = ""

    def _split_contig(self, contig, max_len):
        """Return a list of strings, splits on commas (PRIVATE)."""
        answer = []
        while contig:
            if len(contig) > max_len:
                pos = contig[: max_len - 1].rfind(",")
                if pos == -1:
                    raise ValueError("Could not break up CONTIG")
                text, contig = contig[: pos + 1], contig[pos + 1 :]
            else:
                text, contig = contig, ""
            answer.append(text)
        return answer

    def _write_contig(self, record):
        max_len = self.MAX_WIDTH - self.HEADER_WIDTH
        lines = self._split_contig(format_location(record.contig), max_len)
        self._write_single_line("CONTIG", lines[0])
        for text in lines[1:]:
            self._write_single_line("", text)

    def _write_sequence(self, record):
        data = record.sequence.decode("ascii", "surrogateescape")
        seq_len = len(data)
        lines = ["ORIGIN\n"]
        for line_number in range(0, seq_len, self.LETTERS_PER_LINE):
            words = [
                data[i : i + 10]
                for i in range(
                    line_number, min(line_number + self.LETTERS_PER_LINE, seq_len), 10
                )
            ]
            lines.append(
                "%s %s\n"
                % (str(line_number + 1).rjust(self.SEQUENCE_INDENT), " ".join(words))
            )
        self._write("".join(lines))

    def _wrap_location(self, location):
        """Break a location string after commas to fit the columns (PRIVATE)."""
        length = self.MAX_WIDTH - self.QUALIFIER_INDENT
        lines = []
        while len(location) > length:
            index = location[:length].rfind(",")
            if index == -1:
                warnings.warn("Couldn't split location:\n%s" % location, GbioWarning)
                break
            lines.append(location[: index + 1])
            location = location[index + 1 :]
        lines.append(location)
        return ("\n" + self.QUALIFIER_INDENT_STR).join(lines)

    def _qualifier_lines(self, key, value=None):
        """Return the lines of one qualifier (PRIVATE).

        Quoted values are broken at single spaces, since the parser joins
        their lines with one space.  Values read back without separators
        are broken anywhere, except between the two quotes of an escaped "".
        """
        if value is None:
            return ["%s/%s" % (self.QUALIFIER_INDENT_STR, key)]
        if not isinstance(value, str):
            value = str(value)
        quote = (
            key not in self.FTQUAL_NO_QUOTE
            or not value
            or '"' in value
            or len(value.split()) != 1
            or value.strip() != value
        )
        if quote:
            value = value.replace('"', '""')
            line = '%s/%s="%s"' % (self.QUALIFIER_INDENT_STR, key, value)
        else:
            line = "%s/%s=%s" % (self.QUALIFIER_INDENT_STR, key, value)
        hard_break = not quote or key in self.NO_SPACE_QUALIFIERS
        lines = []
        while len(line) > self.MAX_WIDTH:
            if hard_break:
                index = self.MAX_WIDTH
                if quote:
                    # Both quotes of an escaped "" stay on the same line
                    head = line[self.QUALIFIER_INDENT : index]
                    if not lines:
                        head = head.partition('="')[2]
                    if (len(head) - len(head.rstrip('"'))) % 2:
                        index -= 1
            else:
                for index in range(self.MAX_WIDTH, self.QUALIFIER_INDENT + 1, -1):
                    if (
                        line[index] == " "
                        and line[index - 1] != " "
                        and line[index + 1] != " "
                    ):
                        break
                else:
                    index = None
                    for start in range(self.MAX_WIDTH + 1, len(line) - 1):
                        if (
                            line[start] == " "
                            and line[start - 1] != " "
                            and line[start + 1] != " "
                        ):
                            index = start
                            break
                    if index is None:
                        break
            lines.append(line[:index])
            if hard_break:
                line = self.QUALIFIER_INDENT_STR + line[index:]
            else:
                line = self.QUALIFIER_INDENT_STR + line[index + 1 :]
        lines.append(line)
        return lines

    def _feature_lines(self, feature):
        """Return the lines of one feature, ready to be written (PRIVATE)."""
        if not feature.key or len(feature.key.split()) != 1:
            raise ValueError("Invalid feature key %r" % feature.key)
        if len(feature.key) > self.QUALIFIER_INDENT - 6:
            raise ValueError("Feature key %r is too long" % feature.key)
        location = self._wrap_location(format_location(feature.location))
        key = (self.QUALIFIER_INDENT_TMP % feature.key)[: self.QUALIFIER_INDENT]
        lines = [key + location]
        for qualifier in feature.qualifiers:
            lines.extend(self._qualifier_lines(qualifier.key, qualifier.value))
        return lines

    def write_header(self):
        """Write anything needed before the records (nothing for GenBank)."""
        pass

    def write_record(self, record):
        """Write a single record to the output file."""
        self._write_the_first_line(record)
        if record.definition is not None:
            # The DEFINITION field must end with a period
            # see ftp://ftp.ncbi.nih.gov/genbank/gbrel.txt [3.4.5]
            self._write_multi_line("DEFINITION", record.definition + ".")
        if record.accession is not None:
            self._write_multi_line(
                "ACCESSION", " ".join([record.accession] + record.secondary_accessions)
            )
        if record.version is not None:
            if record.gi is not None:
                version = "%s  GI:%s" % (record.version, record.gi)
                self._write_single_line("VERSION", version)
            else:
                self._write_single_line("VERSION", record.version)
        self._write_multi_entries("DBLINK", record.dblink)

        # Keywords should be given separated with semi colons,
        # with a trailing period, or just a period if there are none
        keywords = "; ".join(record.keywords)
        if not keywords.endswith("."):
            keywords += "."
        self._write_multi_line("KEYWORDS", keywords)

        source = record.source
        if source is not None:
            if source.name is not None:
                self._write_multi_line("SOURCE", source.name)
            # Long organism names wrap before the taxonomy, which is always last
            self._write_multi_line("  ORGANISM", source.organism or ".")
            taxonomy = "; ".join(source.taxonomy)
            if not taxonomy.endswith("."):
                taxonomy += "."
            self._write_multi_line("", taxonomy)

        self._write_references(record)
        for comment in record.comments:
            self._write_comment(comment)

        # Each feature is built in full before any of it is written
        self._write("FEATURES             Location/Qualifiers\n")
        for feature in record.features:
            self._write("\n".join(self._feature_lines(feature)) + "\n")

        if record.contig is not None:
            self._write_contig(record)
        if record.sequence or record.contig is None:
            self._write_sequence(record)
        self._write("//\n")

    def write_file(self, records):
        """Write a complete file with the records, and return the number of records."""
        self.write_header()
        count = 0
        for record in records:
            self.write_record(record)
            count += 1
        return count
