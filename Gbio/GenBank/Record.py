# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Hold GenBank data in a straightforward format.

Classes:
 - Seq - All of the information in a GenBank record.
 - Source - The SOURCE and ORGANISM lines of a record.
 - Reference - hold reference data for a record.
 - Feature - Hold the information in a Feature Table.
 - Qualifier - Qualifiers on a Feature.

The objects mirror the flat file closely: coordinates stay one based,
header text is kept as strings, and the sequence is kept as the raw bytes
found under ORIGIN.
"""


class Topology:
    """Allowed values of Seq.topology."""

    LINEAR = "linear"
    CIRCULAR = "circular"


class _Entry:
    """Base class giving structural equality and a readable repr (PRIVATE)."""

    _fields = ()

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        args = (
            "%s=%r" % (f, getattr(self, f))
            for f in self._fields
            if getattr(self, f) not in (None, [], b"")
        )
        return "%s(%s)" % (type(self).__name__, ", ".join(args))


class Seq(_Entry):
    """Hold GenBank information in a format similar to the original record.

    Attributes:
     - name - The name of the record, from the LOCUS line.
     - length - The length declared on the LOCUS line (or None).
     - molecule_type - e.g. "DNA", "mRNA" or "ss-RNA".
     - topology - Topology.LINEAR or Topology.CIRCULAR.
     - division - The three letter data file division, e.g. "PLN".
     - date - The date on the LOCUS line, as a datetime.date object.
     - definition - The DEFINITION line, without its final period.
     - accession - The primary accession number.
     - secondary_accessions - Any other accessions on the ACCESSION line.
     - version - The accession and version, e.g. "U49845.1".
     - gi - The GI number from the VERSION line, if any.
     - dblink - The DBLINK lines, as a list of strings.
     - keywords - A list of keywords.
     - source - A Source object (or None).
     - references - A list of Reference objects.
     - comments - A list of comments, one string per COMMENT block with
       the original lines separated by newlines.
     - features - A list of Feature objects.
     - sequence - The bases (or residues) as bytes, empty for records
       without sequence data.
     - contig - The CONTIG line of the record, as a Location (or None).

    """

    _fields = (
        "name",
        "length",
        "molecule_type",
        "topology",
        "division",
        "date",
        "definition",
        "accession",
        "secondary_accessions",
        "version",
        "gi",
        "dblink",
        "keywords",
        "source",
        "references",
        "comments",
        "features",
        "sequence",
        "contig",
    )

    def __init__(
        self,
        name=None,
        sequence=b"",
        length=None,
        molecule_type=None,
        topology=Topology.LINEAR,
        division="UNK",
        date=None,
        definition=None,
        accession=None,
        secondary_accessions=None,
        version=None,
        gi=None,
        dblink=None,
        keywords=None,
        source=None,
        references=None,
        comments=None,
        features=None,
        contig=None,
    ):
        """Initialize the record, empty lists are created where needed."""
        self.name = name
        self.sequence = sequence
        self.length = length
        self.molecule_type = molecule_type
        self.topology = topology
        self.division = division
        self.date = date
        self.definition = definition
        self.accession = accession
        self.secondary_accessions = secondary_accessions or []
        self.version = version
        self.gi = gi
        self.dblink = dblink or []
        self.keywords = keywords or []
        self.source = source
        self.references = references or []
        self.comments = comments or []
        self.features = features or []
        self.contig = contig

    def __len__(self):
        """Return the declared length, or the number of bases held."""
        if self.length is not None:
            return self.length
        return len(self.sequence)

    def __bytes__(self):
        return self.format().encode("utf-8", "surrogateescape")

    def __str__(self):
        return self.format()

    def is_circular(self):
        """Return True for circular records."""
        return self.topology == Topology.CIRCULAR

    def format(self):
        """Return the record as a string in GenBank format.

        >>> from Gbio.GenBank.Record import Seq
        >>> print(Seq("test", b"acgt", molecule_type="DNA").format())
        LOCUS       test                       4 bp    DNA     linear   UNK 01-JAN-1980
        KEYWORDS    .
        FEATURES             Location/Qualifiers
        ORIGIN
                1 acgt
        //
        <BLANKLINE>

        """
        from io import StringIO

        from .Writer import GenBankWriter

        handle = StringIO()
        GenBankWriter(handle).write_record(self)
        return handle.getvalue()


class Source(_Entry):
    """Hold the SOURCE and ORGANISM information of a record.

    Attributes:
     - name - The free text of the SOURCE line.
     - organism - The scientific name of the organism.
     - taxonomy - The taxonomic lineage, as a list of strings.

    """

    _fields = ("name", "organism", "taxonomy")

    def __init__(self, name=None, organism=None, taxonomy=None):
        """Initialize the class."""
        self.name = name
        self.organism = organism
        self.taxonomy = taxonomy or []


class Reference(_Entry):
    """Hold information from a GenBank reference.

    Attributes:
     - description - The text following the REFERENCE keyword, e.g.
       "1  (bases 1 to 5028)".
     - authors - The authors of the reference.
     - consortium - The consortium (CONSRTM line).
     - title - The title of the reference.
     - journal - Information about the journal where the reference appeared.
     - medline - The medline id for the reference.
     - pubmed - The pubmed id for the reference.
     - remark - Free-form remarks about the reference.

    """

    _fields = (
        "description",
        "authors",
        "consortium",
        "title",
        "journal",
        "medline",
        "pubmed",
        "remark",
    )

    def __init__(
        self,
        description="",
        authors=None,
        consortium=None,
        title=None,
        journal=None,
        medline=None,
        pubmed=None,
        remark=None,
    ):
        """Initialize the class."""
        self.description = description
        self.authors = authors
        self.consortium = consortium
        self.title = title
        self.journal = journal
        self.medline = medline
        self.pubmed = pubmed
        self.remark = remark


class Feature(_Entry):
    """Hold information about a Feature in the Feature Table of GenBank record.

    Attributes:
     - key - The key name of the feature (ie. source)
     - location - The location of the feature, as a Location object.
     - qualifiers - A list of Qualifier objects in the feature, in file
       order and including duplicates.

    """

    _fields = ("key", "location", "qualifiers")

    def __init__(self, key="", location=None, qualifiers=None):
        """Initialize the class."""
        self.key = key
        self.location = location
        self.qualifiers = qualifiers or []

    def qualifier_values(self, key):
        """Iterate over the values of the qualifiers with the given key.

        Qualifiers without a value (such as /pseudo) are skipped:

        >>> feature = Feature("gene", qualifiers=[
        ...     Qualifier("pseudo"), Qualifier("note", "a"), Qualifier("note", "b")])
        >>> list(feature.qualifier_values("note"))
        ['a', 'b']

        """
        for qualifier in self.qualifiers:
            if qualifier.key == key and qualifier.value is not None:
                yield qualifier.value


class Qualifier(_Entry):
    """Hold information about a qualifier in a GenBank feature.

    Attributes:
     - key - The key name of the qualifier (ie. db_xref), without the slash.
     - value - The value of the qualifier, or None for flags like /pseudo.

    """

    _fields = ("key", "value")

    def __init__(self, key="", value=None):
        """Initialize the class."""
        self.key = key
        self.value = value

    def __repr__(self):
        if self.value is None:
            return "Qualifier(%r)" % self.key
        return "Qualifier(%r, %r)" % (self.key, self.value)
