import datetime
import io
import os
import shutil
import tempfile
import unittest
import warnings

from Gbio import GenBank
from Gbio.GenBank import (
    Complement,
    Feature,
    Join,
    Qualifier,
    Range,
    Reference,
    Seq,
    Source,
)
from Gbio.GenBank.Writer import GenBankWriter


DATA_FOLDER = os.path.realpath(os.path.join(__file__, os.path.pardir, "data"))


def to_text(records):
    handle = io.StringIO()
    GenBank.write(records, handle)
    return handle.getvalue()


def round_trip(record):
    return GenBank.read(to_text(record).encode("utf-8"))


class TestRoundTrip(unittest.TestCase):

    def test_sequence_gb(self):
        path = os.path.join(DATA_FOLDER, "sequence.gb")
        record = GenBank.read(path)
        with open(path) as handle:
            lines = handle.read().splitlines()
        written = to_text(record).splitlines()
        # the LOCUS line of the file does not give the topology
        self.assertEqual(written[1:], lines[1:])
        self.assertEqual(round_trip(record), record)

    def test_multi_gb(self):
        path = os.path.join(DATA_FOLDER, "multi.gb")
        records = list(GenBank.parse(path))
        with open(path) as handle:
            lines = [line.rstrip() for line in handle]
        self.assertEqual(to_text(records).splitlines(), lines)
        self.assertEqual(list(GenBank.parse(to_text(records).encode())), records)

    def test_line_width(self):
        for name in ("sequence.gb", "multi.gb"):
            records = GenBank.parse(os.path.join(DATA_FOLDER, name))
            for line in to_text(records).splitlines():
                self.assertLessEqual(len(line), 79, line)


class TestLocusLine(unittest.TestCase):

    def test_columns(self):
        record = Seq(
            "NC_000001",
            b"acgt" * 25,
            molecule_type="DNA",
            topology="circular",
            division="BCT",
            date=datetime.date(2020, 12, 1),
        )
        line = to_text(record).splitlines()[0]
        self.assertEqual(len(line), 79)
        self.assertEqual(line[:12], "LOCUS       ")
        self.assertEqual(line[12:21], "NC_000001")
        self.assertEqual(line[29:40], "        100")
        self.assertEqual(line[40:44], " bp ")
        self.assertEqual(line[47:54], "DNA    ")
        self.assertEqual(line[55:63], "circular")
        self.assertEqual(line[64:67], "BCT")
        self.assertEqual(line[68:79], "01-DEC-2020")

    def test_strandedness(self):
        record = Seq("x", b"acgu", molecule_type="ss-RNA")
        line = to_text(record).splitlines()[0]
        self.assertEqual(line[44:54], "ss-RNA    ")
        self.assertEqual(round_trip(record).molecule_type, "ss-RNA")

    def test_long_name(self):
        record = Seq("A" * 30, b"acgt")
        with warnings.catch_warnings(record=True):
            warnings.simplefilter("always")
            line = to_text(record).splitlines()[0]
        self.assertTrue(line.startswith("LOCUS       " + "A" * 30 + " 4 bp"))

    def test_whitespace_in_name(self):
        self.assertRaises(ValueError, to_text, Seq("two words", b"acgt"))


class TestFeatures(unittest.TestCase):

    def test_empty_join(self):
        record = Seq("x", b"acgt", features=[Feature("CDS", Join([]))])
        self.assertRaises(ValueError, to_text, record)

    def test_bad_key(self):
        feature = Feature("a very long feature", Range(1, 2))
        record = Seq("x", b"acgt", features=[feature])
        self.assertRaises(ValueError, to_text, record)
        record = Seq("x", b"acgt", features=[Feature("", Range(1, 2))])
        self.assertRaises(ValueError, to_text, record)

    def test_nothing_written_for_a_bad_feature(self):
        record = Seq(
            "x",
            b"acgt",
            features=[Feature("gene", Range(1, 2)), Feature("CDS", Join([]))],
        )
        handle = io.StringIO()
        self.assertRaises(ValueError, GenBank.write, record, handle)
        self.assertTrue(handle.getvalue().endswith("     gene            1..2\n"))

    def test_long_location(self):
        location = Join([Range(i * 100 + 1, i * 100 + 50) for i in range(30)])
        record = Seq("x", b"", length=3000, features=[Feature("CDS", location)])
        lines = to_text(record).splitlines()
        start = lines.index("FEATURES             Location/Qualifiers") + 1
        feature_lines = lines[start : lines.index("ORIGIN")]
        self.assertGreater(len(feature_lines), 1)
        for line in feature_lines:
            self.assertLessEqual(len(line), 79)
        for line in feature_lines[:-1]:
            self.assertTrue(line.endswith(","), line)
        self.assertEqual(round_trip(record).features[0].location, location)

    def test_long_note(self):
        note = " ".join(["word%i" % i for i in range(60)])
        record = Seq(
            "x",
            b"acgt",
            features=[Feature("gene", Range(1, 4), [Qualifier("note", note)])],
        )
        lines = to_text(record).splitlines()
        for line in lines:
            self.assertLessEqual(len(line), 79)
        self.assertEqual(
            list(round_trip(record).features[0].qualifier_values("note")), [note]
        )

    def test_long_word(self):
        url = "http://www.example.org/" + "a" * 100
        note = "see " + url + " for details"
        record = Seq(
            "x",
            b"acgt",
            features=[Feature("gene", Range(1, 4), [Qualifier("note", note)])],
        )
        self.assertEqual(
            list(round_trip(record).features[0].qualifier_values("note")), [note]
        )

    def test_long_translation(self):
        protein = "MKV" * 70
        record = Seq(
            "x",
            b"atg",
            features=[
                Feature("CDS", Range(1, 3), [Qualifier("translation", protein)])
            ],
        )
        lines = to_text(record).splitlines()
        self.assertTrue(
            lines[4].startswith('                     /translation="MKVMKV')
        )
        self.assertEqual(len(lines[4]), 79)
        with warnings.catch_warnings(record=True):
            warnings.simplefilter("always")
            parsed = round_trip(record)
        self.assertEqual(
            list(parsed.features[0].qualifier_values("translation")), [protein]
        )

    def test_quoting(self):
        writer = GenBankWriter(io.StringIO())
        self.assertEqual(
            writer._qualifier_lines("codon_start", "1"),
            ["                     /codon_start=1"],
        )
        self.assertEqual(
            writer._qualifier_lines("gene", "1"), ['                     /gene="1"']
        )
        self.assertEqual(
            writer._qualifier_lines("transl_table", "eleven or so"),
            ['                     /transl_table="eleven or so"'],
        )
        self.assertEqual(
            writer._qualifier_lines("note", 'a "b"'),
            ['                     /note="a ""b"""'],
        )
        self.assertEqual(
            writer._qualifier_lines("pseudo"), ["                     /pseudo"]
        )
        self.assertEqual(
            writer._qualifier_lines("note", ""), ['                     /note=""']
        )

    def test_translation_escaped_quote(self):
        # the escaped "" falls on the last two columns of the first line
        value = "A" * 43 + '"' + "B" * 60
        writer = GenBankWriter(io.StringIO())
        self.assertEqual(
            writer._qualifier_lines("translation", value),
            [
                '                     /translation="' + "A" * 43,
                '                     ""' + "B" * 56,
                '                     BBBB"',
            ],
        )
        record = Seq(
            "x",
            b"atg",
            features=[Feature("CDS", Range(1, 3), [Qualifier("translation", value)])],
        )
        with warnings.catch_warnings(record=True):
            warnings.simplefilter("always")
            parsed = round_trip(record)
        self.assertEqual(
            list(parsed.features[0].qualifier_values("translation")), [value]
        )

    def test_qualifiers_survive(self):
        qualifiers = [
            Qualifier("gene", "abc"),
            Qualifier("note", "first"),
            Qualifier("note", 'with "quotes" inside'),
            Qualifier("pseudo"),
            Qualifier("codon_start", "2"),
            Qualifier("transl_except", "(pos:1..3,aa:Met)"),
        ]
        record = Seq(
            "x",
            b"acgtacgtac",
            features=[Feature("CDS", Complement(Range(1, 10)), qualifiers)],
        )
        self.assertEqual(round_trip(record).features[0].qualifiers, qualifiers)


class TestHeader(unittest.TestCase):

    def test_fields(self):
        record = Seq(
            "x",
            b"acgt",
            length=4,
            molecule_type="DNA",
            date=datetime.date(2001, 2, 3),
            definition="A test record",
            accession="AB000001",
            secondary_accessions=["AB000002", "AB000003"],
            version="AB000001.2",
            gi="12345",
            dblink=["BioProject: PRJNA1"],
            keywords=["one", "two"],
            source=Source("test organism", "Testus organismus", ["Bacteria", "Testia"]),
            references=[
                Reference(
                    "1  (bases 1 to 4)",
                    authors="Smith,J.",
                    title="A title",
                    journal="Unpublished",
                    medline="123",
                    pubmed="456",
                )
            ],
            comments=["Line one.\nLine two."],
        )
        text = to_text(record)
        self.assertIn("DEFINITION  A test record.\n", text)
        self.assertIn("ACCESSION   AB000001 AB000002 AB000003\n", text)
        self.assertIn("VERSION     AB000001.2  GI:12345\n", text)
        self.assertIn("KEYWORDS    one; two.\n", text)
        self.assertIn(
            "  ORGANISM  Testus organismus\n            Bacteria; Testia.\n", text
        )
        self.assertIn("  MEDLINE   123\n   PUBMED   456\n", text)
        self.assertIn("COMMENT     Line one.\n            Line two.\n", text)
        self.assertEqual(round_trip(record), record)

    def test_missing_fields_not_written(self):
        text = to_text(Seq("x", b"acgt"))
        self.assertNotIn("DEFINITION", text)
        self.assertNotIn("ACCESSION", text)
        self.assertNotIn("SOURCE", text)
        self.assertIn("KEYWORDS    .\n", text)

    def test_long_definition(self):
        definition = " ".join(["word"] * 40)
        record = Seq("x", b"acgt", definition=definition)
        lines = to_text(record).splitlines()
        self.assertTrue(lines[1].startswith("DEFINITION  word"))
        self.assertTrue(lines[2].startswith("            word"))
        self.assertEqual(round_trip(record).definition, definition)

    def test_long_organism(self):
        organism = (
            "Influenza A virus "
            "(A/duck/Guangdong/E-HeNan-Dan-Ji-Zhong-Jian-9/2015 (H5N6))"
        )
        source = Source(
            "Influenza A virus",
            organism,
            ["Viruses", "Riboviria", "Orthornavirae", "Negarnaviricota"],
        )
        record = Seq("x", b"acgt", source=source)
        text = to_text(record)
        self.assertIn(
            "  ORGANISM  Influenza A virus\n"
            "            (A/duck/Guangdong/E-HeNan-Dan-Ji-Zhong-Jian-9/2015 (H5N6))\n"
            "            Viruses; Riboviria; Orthornavirae; Negarnaviricota.\n",
            text,
        )
        self.assertNotIn("...", text)
        first = round_trip(record)
        self.assertEqual(first.source, source)
        self.assertEqual(GenBank.read(bytes(first)), first)

    def test_single_entry_lineage(self):
        source = Source("Foo", "Foo virus", ["Viruses"])
        record = Seq("x", b"acgt", source=source)
        self.assertIn("  ORGANISM  Foo virus\n            Viruses.\n", to_text(record))
        self.assertEqual(round_trip(record).source, source)
        source = Source("Foo", "Foo virus", [])
        self.assertEqual(round_trip(Seq("x", b"acgt", source=source)).source, source)

    def test_comment_paragraphs(self):
        comment = "First paragraph.\n\nSecond paragraph.\n\n##Data-START##"
        record = Seq("x", b"acgt", comments=[comment, "Another comment."])
        self.assertEqual(round_trip(record).comments, [comment, "Another comment."])


class TestSequence(unittest.TestCase):

    def test_sequence_lines(self):
        record = Seq("x", b"a" * 65)
        lines = to_text(record).splitlines()
        index = lines.index("ORIGIN")
        self.assertEqual(lines[index + 1], "        1 " + " ".join(["aaaaaaaaaa"] * 6))
        self.assertEqual(lines[index + 2], "       61 aaaaa")
        self.assertEqual(lines[index + 3], "//")

    def test_contig_stub(self):
        record = GenBank.parse(os.path.join(DATA_FOLDER, "multi.gb"))
        next(record)
        stub = next(record)
        lines = to_text(stub).splitlines()
        self.assertNotIn("ORIGIN", lines)
        self.assertEqual(
            lines[-3:],
            [
                "CONTIG      join(AADE01000001.1:1..100,gap(100),AADE01000002.1:1..100,",
                "            gap(unk100))",
                "//",
            ],
        )

    def test_bytes_and_str(self):
        record = Seq("x", b"acgt")
        self.assertEqual(bytes(record), str(record).encode("ascii"))
        self.assertTrue(bytes(record).endswith(b"//\n"))


class TestTargets(unittest.TestCase):

    def setUp(self):
        self.records = list(GenBank.parse(os.path.join(DATA_FOLDER, "multi.gb")))

    def test_text_and_binary(self):
        text = io.StringIO()
        binary = io.BytesIO()
        self.assertEqual(GenBank.write(self.records, text), 2)
        self.assertEqual(GenBank.write(self.records, binary), 2)
        self.assertEqual(binary.getvalue(), text.getvalue().encode("utf-8"))

    def test_single_record(self):
        handle = io.StringIO()
        self.assertEqual(GenBank.write(self.records[0], handle), 1)

    def test_generator(self):
        handle = io.StringIO()
        self.assertEqual(GenBank.write(iter(self.records), handle), 2)
        self.assertEqual(GenBank.write([], handle), 0)

    def test_path(self):
        folder = tempfile.mkdtemp()
        try:
            path = os.path.join(folder, "out.gb")
            self.assertEqual(GenBank.write(self.records, path), 2)
            self.assertEqual(list(GenBank.parse(path)), self.records)
        finally:
            shutil.rmtree(folder)


if __name__ == "__main__":
    unittest.main()
