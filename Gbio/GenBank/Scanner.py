# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Scanner breaking a GenBank file up into records and their sections.

See Also:
International Nucleotide Sequence Database Collaboration
http://www.insdc.org/

GenBank
http://www.ncbi.nlm.nih.gov/Genbank/

The INSDC feature table definition
http://www.insdc.org/documents/feature-table

"""

import logging
import re
import warnings

from Gbio import (
    GbioParserWarning,
    InvalidLocation,
    MalformedLine,
    MissingField,
    UnexpectedEof,
    UnknownFeatureKey,
)
from Gbio.File import StreamBuffer, DEFAULT_CHUNK_SIZE

from . import Tokenizer as T
from .Consumer import Interner
from .Location import parse_location


_re_locus = re.compile(
    r"LOCUS"
    r" +([^\s]+)"
    r" *([0-9]+)?"
    r" *(bp|aa|rc)?"
    r" *(.*DNA|.*RNA|.*dna|.*rna)?"
    r" *(linear|circular)?"
    r" *(?!.*DNA|.*RNA)([A-Z]{3})?"
    r" *([0-9]{2}-[A-Z]{3}-[0-9]{4})?"
)


class GenBankScanner:
    """For extracting chunks of information in GenBank files.

    The scanner reads one record at a time from its tokenizer and passes
    the information found to a consumer object (see feed).  It keeps the
    token it has looked ahead at in the token attribute, so a record can
    be resumed exactly where the previous one stopped.
    """

    CONSUMER_DICT = {
        "DEFINITION": "definition",
        "ACCESSION": "accession",
        "KEYWORDS": "keywords",
        "SEGMENT": "segment",
        "SOURCE": "source",
        "AUTHORS": "authors",
        "CONSRTM": "consrtm",
        "TITLE": "title",
        "JOURNAL": "journal",
        "MEDLINE": "medline_id",
        "PUBMED": "pubmed_id",
        "REMARK": "remark",
    }
    SEQUENCE_HEADERS = ["CONTIG", "ORIGIN", "BASE COUNT", "WGS", "TSA", "TLS"]

    # Feature keys of the INSDC feature table definition
    FEATURE_KEYS = frozenset(
        [
            "assembly_gap",
            "C_region",
            "CDS",
            "centromere",
            "D-loop",
            "D_segment",
            "exon",
            "gap",
            "gene",
            "iDNA",
            "intron",
            "J_segment",
            "mat_peptide",
            "misc_binding",
            "misc_difference",
            "misc_feature",
            "misc_recomb",
            "misc_RNA",
            "misc_structure",
            "mobile_element",
            "modified_base",
            "mRNA",
            "ncRNA",
            "N_region",
            "old_sequence",
            "operon",
            "oriT",
            "polyA_site",
            "precursor_RNA",
            "prim_transcript",
            "primer_bind",
            "propeptide",
            "protein_bind",
            "regulatory",
            "repeat_region",
            "rep_origin",
            "rRNA",
            "S_region",
            "sig_peptide",
            "source",
            "stem_loop",
            "STS",
            "telomere",
            "tmRNA",
            "transit_peptide",
            "tRNA",
            "unsure",
            "V_region",
            "V_segment",
            "variation",
            "3'UTR",
            "5'UTR",
            # Retired keys still found in older files
            "-10_signal",
            "-35_signal",
            "3'clip",
            "5'clip",
            "attenuator",
            "CAAT_signal",
            "conflict",
            "enhancer",
            "GC_signal",
            "LTR",
            "misc_signal",
            "mutation",
            "polyA_signal",
            "promoter",
            "RBS",
            "repeat_unit",
            "satellite",
            "terminator",
            "TATA_signal",
        ]
    )

    def __init__(self, interner=None):
        """Initialize.

        Arguments:
         - interner - the Interner of the parse session, shared by all the
           records read by this scanner (a new one by default).

        """
        self.interner = interner if interner is not None else Interner()
        self.tokenizer = None
        self.token = None

    def set_source(self, source, chunk_size=DEFAULT_CHUNK_SIZE):
        """Start reading from a StreamBuffer, a handle or bytes."""
        if not isinstance(source, StreamBuffer):
            source = StreamBuffer(source, chunk_size)
        self.tokenizer = T.Tokenizer(source)
        self.token = None

    def _next(self):
        """Return the pending token, or the next one from the tokenizer (PRIVATE)."""
        if self.token is not None:
            token, self.token = self.token, None
            return token
        return self.tokenizer.next_token()

    def _next_in_record(self):
        """Return the next token, failing if the input ends (PRIVATE)."""
        token = self._next()
        if token is None:
            raise UnexpectedEof(
                "Premature end of file in record",
                self.tokenizer.lineno,
                self.tokenizer.buffer.offset,
            )
        return token

    def find_start(self):
        """Read in tokens until the LOCUS line, which is returned.

        Blank lines and stray // lines are skipped; anything else before
        the LOCUS line is an error.  Returns None at the end of the input.
        """
        while True:
            token = self._next()
            if token is None:
                logging.debug("End of file")
                return None
            if token.kind == T.LOCUS:
                logging.debug("Found the start of a record:\n%s", token.value)
                break
            if token.kind == T.END:
                logging.debug("Skipping // marking end of last record")
            elif token.kind == T.BLANK:
                logging.debug("Skipping blank line before record")
            else:
                raise MissingField(
                    "Expected a LOCUS line, found %s" % token.kind,
                    token.lineno,
                    token.offset,
                )
        self.token = token
        return token

    def parse_header(self):
        """Return list of (keyword, lines) tuples making up the header.

        Assumes you have just read in the LOCUS line.
        """
        assert self.token.kind == T.LOCUS, "Not at start of record"
        self.token = None
        header = []
        while True:
            token = self._next_in_record()
            if token.kind == T.CONTINUATION:
                if not header:
                    raise MalformedLine(
                        "Continuation line without header keyword",
                        token.lineno,
                        token.offset,
                    )
                header[-1][1].append(token.value)
            elif token.kind == T.HEADER:
                if token.key in self.SEQUENCE_HEADERS:
                    logging.debug("Found start of sequence")
                    break
                header.append((token.key.strip(), [token.value]))
            elif token.kind == T.BLANK:
                if header and header[-1][0] == "COMMENT":
                    # paragraph break inside a comment
                    header[-1][1].append("")
                else:
                    logging.debug("Skipping blank line in header")
            elif token.kind in (T.FEATURES, T.ORIGIN, T.CONTIG, T.END):
                break
            else:
                raise MalformedLine(
                    "Unexpected %s line in header" % token.kind,
                    token.lineno,
                    token.offset,
                )
        self.token = token
        return header

    def parse_features(self):
        """Return list of tuples for the features (if present).

        Each feature is returned as a tuple (key, location, qualifiers)
        where key is an interned string, location a Location object, and
        qualifiers a list of (key, raw value) tuples.

        Assumes you have already read to the start of the features table.
        """
        if self.token.kind != T.FEATURES:
            logging.debug("Didn't find any feature table")
            return []
        self.token = None
        intern = self.interner.intern
        features = []
        while True:
            token = self._next_in_record()
            if token.kind == T.FEATURE:
                key = intern(token.key)
                if key not in self.FEATURE_KEYS:
                    warnings.warn(
                        "Unknown feature key %r on line %i" % (key, token.lineno),
                        UnknownFeatureKey,
                    )
                try:
                    location = parse_location(token.value)
                except InvalidLocation as err:
                    err.lineno = token.lineno
                    err.offset = token.offset
                    raise
                features.append((key, location, []))
            elif token.kind == T.QUALIFIER:
                if not features:
                    raise MalformedLine(
                        "Qualifier /%s before any feature" % token.key,
                        token.lineno,
                        token.offset,
                    )
                features[-1][2].append((intern(token.key), token.value))
            elif token.kind == T.BLANK:
                logging.debug("Skipping blank line in feature table")
            else:
                break
        self.token = token
        return features

    def parse_footer(self):
        """Return a tuple of the misc lines, the CONTIG location, and the sequence.

        The misc lines are (keyword, text) tuples, the CONTIG location is
        parsed from its joined lines (None if there was no CONTIG line), and
        the sequence is the bytes found below ORIGIN.
        """
        misc_lines = []
        contig = None
        seq_chunks = []
        token = self._next_in_record()
        while token.kind != T.END:
            if token.kind == T.SEQUENCE:
                seq_chunks.append(token.value)
            elif token.kind == T.ORIGIN:
                misc_lines.append(("ORIGIN", token.value))
            elif token.kind == T.CONTIG:
                start = token
                contig = token.value
                token = self._next_in_record()
                while token.kind == T.CONTINUATION:
                    contig += token.value
                    token = self._next_in_record()
                contig = "".join(contig.split())
                try:
                    contig = parse_location(contig) if contig else None
                except InvalidLocation as err:
                    err.lineno = start.lineno
                    err.offset = start.offset
                    # keep the following line for skip_record
                    self.token = token
                    raise
                continue
            elif token.kind == T.HEADER:
                misc_lines.append((token.key, token.value.strip()))
            elif token.kind == T.BLANK:
                warnings.warn("Blank line in sequence data", GbioParserWarning)
            else:
                raise MalformedLine(
                    "Unexpected %s line at end of record" % token.kind,
                    token.lineno,
                    token.offset,
                )
            token = self._next_in_record()
        return misc_lines, contig, b"".join(seq_chunks)

    def _feed_first_line(self, consumer, line):
        """Handle the LOCUS line, passing data to the consumer (PRIVATE)."""
        matches = _re_locus.match(line)
        if matches is None:
            raise MalformedLine(
                "LOCUS line does not start correctly",
                self.token.lineno,
                self.token.offset,
                line,
            )
        res = dict(
            zip(
                [
                    "locus_name",
                    "size",
                    "unit",
                    "mol_type",
                    "topology",
                    "division",
                    "date",
                ],
                matches.groups(),
            )
        )
        if len(res["locus_name"]) > 16:
            warnings.warn(
                "GenBank LOCUS line identifier over 16 characters", GbioParserWarning
            )
        consumer.locus(res["locus_name"])
        if res["size"]:
            consumer.size(res["size"])
        if res["mol_type"]:
            consumer.molecule_type(res["mol_type"].strip())
        if res["topology"]:
            consumer.topology(res["topology"])
        if res["division"]:
            consumer.data_file_division(res["division"])
        if res["date"]:
            consumer.date(res["date"])

    @staticmethod
    def _feed_header_organism(consumer, data):
        lines = [line.strip() for line in data]
        split = len(lines)
        for index, line in enumerate(lines):
            if ";" in line:
                split = index
                break
        else:
            # A lineage with a single entry has no semicolon, e.g. "Viruses."
            if len(lines) > 1 and lines[-1].endswith("."):
                split = len(lines) - 1
        organism_data = " ".join(line for line in lines[:split] if line != ".")
        lineage_data = " ".join(lines[split:])
        if organism_data == "":
            organism_data = "."
        consumer.organism(consumer._normalize_spaces(organism_data))
        if lineage_data.strip() == "":
            logging.debug("Taxonomy line(s) missing or blank")
        consumer.taxonomy(lineage_data.strip())

    @staticmethod
    def _feed_header_version(consumer, data):
        data = consumer._normalize_spaces(data)
        if " GI:" not in data:
            consumer.version(data)
        else:
            version, gi = data.split(" GI:", 1)
            logging.debug("Version [%s], gi [%s]", version, gi)
            consumer.version(version)
            consumer.gi(gi)

    def _feed_header_lines(self, consumer, header):
        """Pass the (keyword, lines) tuples of the header to the consumer (PRIVATE)."""
        for line_type, data in header:
            if line_type == "VERSION":
                self._feed_header_version(consumer, " ".join(data))
            elif line_type == "DBLINK":
                for line in data:
                    consumer.dblink(line.strip())
            elif line_type == "REFERENCE":
                logging.debug("Found reference [%s]", data[0])
                consumer.reference(" ".join(line.strip() for line in data))
            elif line_type == "ORGANISM":
                self._feed_header_organism(consumer, data)
            elif line_type == "COMMENT":
                logging.debug("Found comment")
                lines = [line.rstrip() for line in data]
                while len(lines) > 1 and not lines[-1]:
                    lines.pop()
                consumer.comment(lines)
            elif line_type in self.CONSUMER_DICT:
                text = consumer._normalize_spaces(" ".join(data))
                if line_type == "DEFINITION" and text.endswith("."):
                    text = text[:-1]
                getattr(consumer, self.CONSUMER_DICT[line_type])(text)
            else:
                logging.debug("Ignoring GenBank header line %s", line_type)

    @staticmethod
    def _feed_feature_table(consumer, feature_tuples):
        """Handle the feature table (list of tuples), passing data to the consumer (PRIVATE)."""
        consumer.start_feature_table()
        for feature_key, location, qualifiers in feature_tuples:
            consumer.feature_key(feature_key)
            consumer.location(location)
            for q_key, q_value in qualifiers:
                consumer.feature_qualifier(q_key, q_value)

    def _feed_misc_lines(self, consumer, misc_lines, contig):
        consumer_dict = {"BASE COUNT": "base_count", "ORIGIN": "origin_name"}
        for key, line in misc_lines:
            if line and key in consumer_dict:
                getattr(consumer, consumer_dict[key])(line)
            elif line:
                logging.debug("Ignoring %s line %s", key, line)
        if contig is not None:
            consumer.contig_location(contig)

    def feed(self, consumer):
        """Feed the next record into the consumer.

        Arguments:
         - consumer - The consumer that should be informed of events.

        Return values:
         - true  - Passed a record
         - false - Did not find a record

        """
        if not self.find_start():
            consumer.data = None
            return False
        self._feed_first_line(consumer, self.token.value)
        self._feed_header_lines(consumer, self.parse_header())
        self._feed_feature_table(consumer, self.parse_features())
        misc_lines, contig, sequence = self.parse_footer()
        self._feed_misc_lines(consumer, misc_lines, contig)
        consumer.sequence(sequence)
        consumer.record_end("//")
        return True

    def skip_record(self):
        """Discard the rest of the current record, up to its // line.

        After a ParserFailureError or LocationParserError, calling this lets
        the next call to feed start with the following record.
        """
        token, self.token = self.token, None
        if token is not None and token.kind in (T.END, T.LOCUS):
            if token.kind == T.LOCUS:
                self.token = token
            return
        self.tokenizer.skip_record()
