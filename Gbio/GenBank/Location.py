# Copyright 2026 by the Gbio developers.  All rights reserved.
#
# This file is part of the Gbio distribution and governed by your
# choice of the "MIT License" or the "BSD 3-Clause License".
# Please see the LICENSE file that should have been included as part of this
# package.
"""Feature locations of GenBank records.

A location is a small tree. The leaves are Point, Range, Between and Gap;
Complement, Join, Order, Bond, OneOf and External own their children.
Coordinates are kept exactly as written in the file: one based, with both
ends of a range included.

Locations are parsed with parse_location and turned back into GenBank
syntax with str() (or format_location):

>>> from Gbio.GenBank.Location import parse_location
>>> location = parse_location("join(complement(5..10),1..3)")
>>> location
Join([Complement(Range(5, 10)), Range(1, 3)])
>>> print(location)
join(complement(5..10),1..3)

Neither the parser nor the formatter recurses, so deeply nested input
cannot exhaust the Python stack.
"""

import re

from Gbio import InvalidLocation


class Location:
    """Base class of all the location types (PRIVATE)."""

    __slots__ = ()

    def __str__(self):
        """Return the location in GenBank syntax."""
        return format_location(self)

    def __ne__(self, other):
        return not self == other

    @property
    def strand(self):
        """Strand of the location, "-" if it is complemented, "+" otherwise."""
        return "+"

    def bounds(self):
        """Return the outermost (start, end) coordinates, both inclusive.

        Raises ValueError for locations without a usable extent (external
        references, gaps, empty lists).
        """
        raise ValueError("Can't determine bounds of %r" % (self,))


class Point(Location):
    """A single base, e.g. ``467``, ``<1`` or ``>99``."""

    __slots__ = ("position", "before", "after")

    def __init__(self, position, before=False, after=False):
        """Initialize the point; before/after mark the < and > fuzziness."""
        if before and after:
            raise ValueError("A point can't be both before and after")
        self.position = position
        self.before = before
        self.after = after

    def __eq__(self, other):
        return (
            type(other) is Point
            and self.position == other.position
            and self.before == other.before
            and self.after == other.after
        )

    __hash__ = None

    def __repr__(self):
        args = [repr(self.position)]
        if self.before:
            args.append("before=True")
        if self.after:
            args.append("after=True")
        return "Point(%s)" % ", ".join(args)

    def bounds(self):
        """Return (position, position)."""
        return self.position, self.position


class Range(Location):
    """A span of bases, e.g. ``340..565``, ``<345..500`` or ``<1..>888``."""

    __slots__ = ("start", "end", "before", "after")

    def __init__(self, start, end, before=False, after=False):
        """Initialize the range.

        Arguments:
         - start - first base (one based).
         - end - last base, included in the range.
         - before - the start is fuzzy, written as ``<start``.
         - after - the end is fuzzy, written as ``>end``.

        """
        self.start = start
        self.end = end
        self.before = before
        self.after = after

    def __eq__(self, other):
        return (
            type(other) is Range
            and self.start == other.start
            and self.end == other.end
            and self.before == other.before
            and self.after == other.after
        )

    __hash__ = None

    def __repr__(self):
        args = [repr(self.start), repr(self.end)]
        if self.before:
            args.append("before=True")
        if self.after:
            args.append("after=True")
        return "Range(%s)" % ", ".join(args)

    def bounds(self):
        """Return (start, end)."""
        return self.start, self.end


class Between(Location):
    """A site between two adjacent bases, e.g. ``123^124``."""

    __slots__ = ("start", "end")

    def __init__(self, start, end):
        """Initialize the site between start and end."""
        self.start = start
        self.end = end

    def __eq__(self, other):
        return (
            type(other) is Between
            and self.start == other.start
            and self.end == other.end
        )

    __hash__ = None

    def __repr__(self):
        return "Between(%r, %r)" % (self.start, self.end)

    def bounds(self):
        """Return (start, end)."""
        return self.start, self.end


class Gap(Location):
    """A gap in a CONTIG line, e.g. ``gap()``, ``gap(100)`` or ``gap(unk100)``."""

    __slots__ = ("length", "unknown")

    def __init__(self, length=None, unknown=False):
        """Initialize the gap, length None meaning an unspecified size."""
        if unknown and length is None:
            raise ValueError("An unknown gap needs an estimated length")
        self.length = length
        self.unknown = unknown

    def __eq__(self, other):
        return (
            type(other) is Gap
            and self.length == other.length
            and self.unknown == other.unknown
        )

    __hash__ = None

    def __repr__(self):
        if self.unknown:
            return "Gap(%r, unknown=True)" % self.length
        if self.length is None:
            return "Gap()"
        return "Gap(%r)" % self.length


class Complement(Location):
    """The complementary strand of the wrapped location."""

    __slots__ = ("location",)

    def __init__(self, location):
        """Initialize, taking ownership of location."""
        self.location = location

    def __eq__(self, other):
        return type(other) is Complement and self.location == other.location

    __hash__ = None

    def __repr__(self):
        return "Complement(%r)" % (self.location,)

    @property
    def strand(self):
        """Strand of the location, flipping the strand of the inner one."""
        return "+" if self.location.strand == "-" else "-"

    @property
    def start(self):
        """First base of the inner location."""
        return self.location.bounds()[0]

    @property
    def end(self):
        """Last base of the inner location."""
        return self.location.bounds()[1]

    def bounds(self):
        """Return the bounds of the inner location."""
        return self.location.bounds()


class _Compound(Location):
    """Base class for the operators taking a list of locations (PRIVATE)."""

    __slots__ = ("locations",)
    operator = None

    def __init__(self, locations):
        """Initialize, taking ownership of the given locations."""
        self.locations = list(locations)

    def __eq__(self, other):
        return type(other) is type(self) and self.locations == other.locations

    __hash__ = None

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.locations)

    @property
    def strand(self):
        """Strand of the compound, "-" only if all the parts are on "-"."""
        strands = {location.strand for location in self.locations}
        return "-" if strands == {"-"} else "+"

    def bounds(self):
        """Return the smallest and largest coordinates of the parts.

        Parts without bounds are skipped.
        """
        found = []
        for location in self.locations:
            try:
                found.append(location.bounds())
            except ValueError:
                continue
        if not found:
            raise ValueError("Can't determine bounds of %r" % (self,))
        return min(s for s, e in found), max(e for s, e in found)


class Join(_Compound):
    """Parts joined into one contiguous sequence, in the order given."""

    __slots__ = ()
    operator = "join"

    @property
    def start(self):
        """First base of the first part."""
        return self.bounds()[0]

    @property
    def end(self):
        """Last base of the last part."""
        return self.bounds()[1]

    def bounds(self):
        """Return the start of the first part and the end of the last one."""
        if not self.locations:
            raise ValueError("Empty join")
        return self.locations[0].bounds()[0], self.locations[-1].bounds()[1]


class Order(_Compound):
    """Parts in an unspecified order."""

    __slots__ = ()
    operator = "order"


class Bond(_Compound):
    """Bonded residues, used for proteins."""

    __slots__ = ()
    operator = "bond"


class OneOf(_Compound):
    """One location among a set of alternatives."""

    __slots__ = ()
    operator = "one-of"


class External(Location):
    """A location on another record, e.g. ``J00194.1:100..202``."""

    __slots__ = ("accession", "location")

    def __init__(self, accession, location=None):
        """Initialize with the accession (kept verbatim) and inner location."""
        self.accession = accession
        self.location = location

    def __eq__(self, other):
        return (
            type(other) is External
            and self.accession == other.accession
            and self.location == other.location
        )

    __hash__ = None

    def __repr__(self):
        if self.location is None:
            return "External(%r)" % self.accession
        return "External(%r, %r)" % (self.accession, self.location)


_OPERATORS = {
    "complement": Complement,
    "join": Join,
    "order": Order,
    "bond": Bond,
    "one-of": OneOf,
}

_re_operator = re.compile(r"(complement|join|order|bond|one-of)\(")
_re_gap = re.compile(r"gap\((?:(unk)?([0-9]+))?\)")
_re_single = re.compile(
    r"(?:([A-Za-z][A-Za-z0-9_.|-]*):)?"  # external accession
    r"([<>]?)([0-9]+)"  # first position
    r"(?:(\.\.|\^)([<>]?)([0-9]+))?"  # range or between
)


def _parse_single(text, match):
    """Turn a match of _re_single into a location (PRIVATE)."""
    accession, fuzz1, first, sep, fuzz2, second = match.groups()
    first = int(first)
    if sep is None:
        location = Point(first, before=fuzz1 == "<", after=fuzz1 == ">")
    elif sep == "^":
        if fuzz1 or fuzz2:
            raise InvalidLocation(
                "Fuzzy position in between location", text, match.span()
            )
        location = Between(first, int(second))
    else:
        if fuzz1 == ">" or fuzz2 == "<":
            raise InvalidLocation(
                "Misplaced fuzzy marker in range", text, match.span()
            )
        location = Range(first, int(second), before=fuzz1 == "<", after=fuzz2 == ">")
    if accession is not None:
        location = External(accession, location)
    return location


def parse_location(text):
    """Parse a GenBank location string into a Location tree.

    Whitespace is ignored, so strings gathered from several lines of a
    feature table can be passed as they are:

    >>> parse_location("<1..>100")
    Range(1, 100, before=True, after=True)
    >>> parse_location("complement(join(490883..490885,\\n1..879))")
    Complement(Join([Range(490883, 490885), Range(1, 879)]))
    >>> parse_location("AL121804.2:41^42")
    External('AL121804.2', Between(41, 42))

    Malformed strings raise InvalidLocation, which points at the problem:

    >>> parse_location("join()")
    Traceback (most recent call last):
       ...
    Gbio.InvalidLocation: Empty location list at position 6 in 'join()'

    The parser keeps its own stack of open operators instead of recursing.
    """
    text = "".join(text.split())
    length = len(text)
    # Each entry is [operator, children, index of the operator]
    stack = []
    i = 0
    while True:
        # Expecting a location
        match = _re_operator.match(text, i)
        if match is not None:
            stack.append([match.group(1), [], i])
            i = match.end()
            continue
        match = _re_gap.match(text, i)
        if match is not None:
            unknown, size = match.groups()
            location = Gap(
                int(size) if size is not None else None, unknown=unknown is not None
            )
            i = match.end()
        else:
            match = _re_single.match(text, i)
            if match is None:
                if i < length and text[i] == ")" and stack:
                    raise InvalidLocation("Empty location list", text, (i, i + 1))
                if i >= length:
                    raise InvalidLocation("Unexpected end of location", text, (i, i))
                end = i + 1
                while end < length and text[end] not in ",()":
                    end += 1
                raise InvalidLocation("Invalid location", text, (i, end))
            location = _parse_single(text, match)
            i = match.end()
        # Got a location, close as many operators as we can
        while True:
            if not stack:
                if i != length:
                    raise InvalidLocation(
                        "Unexpected text after location", text, (i, length)
                    )
                return location
            operator, children, start = stack[-1]
            children.append(location)
            if i < length and text[i] == ",":
                if operator == "complement":
                    raise InvalidLocation(
                        "complement takes a single location", text, (start, i + 1)
                    )
                i += 1
                break
            if i < length and text[i] == ")":
                i += 1
                stack.pop()
                if operator == "complement":
                    location = Complement(children[0])
                else:
                    location = _OPERATORS[operator](children)
                continue
            if i >= length:
                raise InvalidLocation("Unbalanced parentheses", text, (start, length))
            raise InvalidLocation("Unexpected character", text, (i, i + 1))


def _format_position(position, before, after):
    if before:
        return "<%i" % position
    if after:
        return ">%i" % position
    return "%i" % position


def format_location(location):
    """Return the GenBank syntax of a Location tree.

    >>> format_location(Join([Range(1, 10, before=True), Complement(Point(12))]))
    'join(<1..10,complement(12))'

    Trees the parser could never have produced are refused:

    >>> format_location(Join([]))
    Traceback (most recent call last):
       ...
    ValueError: Empty join list

    """
    parts = []
    stack = [location]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, Range):
            parts.append(
                "%s..%s"
                % (
                    _format_position(item.start, item.before, False),
                    _format_position(item.end, False, item.after),
                )
            )
        elif isinstance(item, Point):
            parts.append(_format_position(item.position, item.before, item.after))
        elif isinstance(item, Between):
            parts.append("%i^%i" % (item.start, item.end))
        elif isinstance(item, Gap):
            if item.length is None:
                parts.append("gap()")
            elif item.unknown:
                parts.append("gap(unk%i)" % item.length)
            else:
                parts.append("gap(%i)" % item.length)
        elif isinstance(item, Complement):
            if item.location is None:
                raise ValueError("Empty complement")
            parts.append("complement(")
            stack.append(")")
            stack.append(item.location)
        elif isinstance(item, _Compound):
            if not item.locations:
                raise ValueError("Empty %s list" % item.operator)
            parts.append("%s(" % item.operator)
            stack.append(")")
            for index in range(len(item.locations) - 1, -1, -1):
                stack.append(item.locations[index])
                if index:
                    stack.append(",")
        elif isinstance(item, External):
            if item.location is None:
                parts.append(item.accession)
            else:
                parts.append("%s:" % item.accession)
                stack.append(item.location)
        else:
            raise ValueError("Expected a Location object, got %r" % (item,))
    return "".join(parts)
