import random
import unittest

from Gbio import InvalidLocation, LocationParserError
from Gbio.GenBank.Location import (
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


class TestParseLocation(unittest.TestCase):

    def test_join_of_complement(self):
        location = parse_location("join(complement(5..10),1..3)")
        self.assertEqual(location, Join([Complement(Range(5, 10)), Range(1, 3)]))
        self.assertEqual(str(location), "join(complement(5..10),1..3)")

    def test_point(self):
        self.assertEqual(parse_location("467"), Point(467))
        self.assertEqual(parse_location("<1"), Point(1, before=True))
        self.assertEqual(parse_location(">99"), Point(99, after=True))

    def test_range(self):
        self.assertEqual(parse_location("340..565"), Range(340, 565))
        self.assertEqual(parse_location("<345..500"), Range(345, 500, before=True))
        self.assertEqual(parse_location("1..>888"), Range(1, 888, after=True))
        self.assertEqual(
            parse_location("<1..>100"), Range(1, 100, before=True, after=True)
        )

    def test_between(self):
        self.assertEqual(parse_location("123^124"), Between(123, 124))

    def test_external(self):
        self.assertEqual(
            parse_location("J00194.1:100..202"), External("J00194.1", Range(100, 202))
        )
        self.assertEqual(
            parse_location("AL358792.24.1.166931:3274..3461"),
            External("AL358792.24.1.166931", Range(3274, 3461)),
        )
        self.assertEqual(
            parse_location("join(1..10,NC_016402.1:6618..6676)"),
            Join([Range(1, 10), External("NC_016402.1", Range(6618, 6676))]),
        )

    def test_order(self):
        location = parse_location("order(1..69,1308..1465,1524)")
        self.assertEqual(
            location, Order([Range(1, 69), Range(1308, 1465), Point(1524)])
        )

    def test_bond_and_one_of(self):
        self.assertEqual(parse_location("bond(12,63)"), Bond([Point(12), Point(63)]))
        self.assertEqual(
            parse_location("one-of(6,9)"), OneOf([Point(6), Point(9)])
        )

    def test_gap(self):
        self.assertEqual(parse_location("gap()"), Gap())
        self.assertEqual(parse_location("gap(100)"), Gap(100))
        self.assertEqual(parse_location("gap(unk100)"), Gap(100, unknown=True))

    def test_child_order_kept(self):
        location = parse_location("join(complement(20..30),5..6,1..2)")
        self.assertEqual(
            [str(part) for part in location.locations],
            ["complement(20..30)", "5..6", "1..2"],
        )

    def test_whitespace_ignored(self):
        self.assertEqual(
            parse_location(" join(1..5,\n   8..10) "), Join([Range(1, 5), Range(8, 10)])
        )

    def test_deep_nesting(self):
        depth = 5000
        text = "complement(" * depth + "1..2" + ")" * depth
        location = parse_location(text)
        self.assertEqual(format_location(location), text)


class TestInvalidLocation(unittest.TestCase):

    def assertInvalid(self, text):
        with self.assertRaises(InvalidLocation) as ctx:
            parse_location(text)
        return ctx.exception

    def test_empty_join(self):
        err = self.assertInvalid("join()")
        self.assertEqual(err.text, "join()")
        self.assertEqual(err.span, (5, 6))

    def test_empty_order(self):
        self.assertInvalid("order()")

    def test_unbalanced(self):
        self.assertInvalid("join(1..2")
        self.assertInvalid("join(1..2,complement(3..4)")
        self.assertInvalid("1..2)")

    def test_non_numeric(self):
        err = self.assertInvalid("join(1..5,x..9)")
        self.assertEqual(err.fragment, "x..9")
        self.assertInvalid("abc")
        self.assertInvalid("1..")

    def test_empty(self):
        self.assertInvalid("")

    def test_complement_of_two(self):
        self.assertInvalid("complement(1..2,3..4)")

    def test_misplaced_fuzzy_markers(self):
        self.assertInvalid(">1..10")
        self.assertInvalid("1..<10")
        self.assertInvalid("<5^6")

    def test_within_position(self):
        self.assertInvalid("(1.5)..10")

    def test_trailing_comma(self):
        self.assertInvalid("join(1..2,)")

    def test_is_location_parser_error(self):
        self.assertTrue(issubclass(InvalidLocation, LocationParserError))
        self.assertTrue(issubclass(InvalidLocation, ValueError))


class TestFormatLocation(unittest.TestCase):

    def test_fuzzy(self):
        self.assertEqual(str(Range(1, 100, before=True, after=True)), "<1..>100")
        self.assertEqual(str(Point(5, after=True)), ">5")

    def test_external(self):
        location = External("AL121804.2", Between(41, 42))
        self.assertEqual(str(location), "AL121804.2:41^42")
        self.assertEqual(str(External("AL121804.2")), "AL121804.2")

    def test_empty_lists(self):
        self.assertRaises(ValueError, format_location, Join([]))
        self.assertRaises(ValueError, format_location, Order([]))
        self.assertRaises(ValueError, format_location, Join([Range(1, 2), Join([])]))

    def test_not_a_location(self):
        self.assertRaises(ValueError, format_location, 12)
        self.assertRaises(ValueError, format_location, Join([Range(1, 2), None]))


class TestLocationProperties(unittest.TestCase):

    def test_strand(self):
        self.assertEqual(Range(1, 2).strand, "+")
        self.assertEqual(Complement(Range(1, 2)).strand, "-")
        self.assertEqual(Complement(Complement(Range(1, 2))).strand, "+")
        self.assertEqual(
            Join([Complement(Range(1, 2)), Complement(Range(5, 6))]).strand, "-"
        )
        self.assertEqual(Join([Complement(Range(1, 2)), Range(5, 6)]).strand, "+")

    def test_bounds(self):
        self.assertEqual(Range(3, 9).bounds(), (3, 9))
        self.assertEqual(Point(4).bounds(), (4, 4))
        self.assertEqual(Complement(Range(3, 9)).bounds(), (3, 9))
        self.assertEqual(Join([Range(1, 3), Range(5, 10)]).bounds(), (1, 10))
        self.assertEqual(Order([Range(5, 10), Range(1, 3)]).bounds(), (1, 10))
        self.assertRaises(ValueError, External("X1.1", Range(1, 2)).bounds)
        self.assertRaises(ValueError, Gap(10).bounds)
        self.assertRaises(ValueError, Join([]).bounds)

    def test_equality(self):
        self.assertEqual(Range(1, 2), Range(1, 2))
        self.assertNotEqual(Range(1, 2), Range(1, 2, before=True))
        self.assertNotEqual(Join([Range(1, 2)]), Order([Range(1, 2)]))
        self.assertNotEqual(Point(1), Range(1, 1))


class TestRoundTrip(unittest.TestCase):

    accessions = ["J00194.1", "AL121804.2", "NC_016402.1", "AADE01000001"]

    def random_simple(self, rng):
        kind = rng.randrange(3)
        start = rng.randint(1, 10000)
        if kind == 0:
            fuzzy = rng.randrange(3)
            return Point(start, before=fuzzy == 1, after=fuzzy == 2)
        elif kind == 1:
            return Range(
                start,
                start + rng.randint(0, 500),
                before=rng.random() < 0.3,
                after=rng.random() < 0.3,
            )
        return Between(start, start + 1)

    def random_tree(self, rng, depth):
        if depth == 0 or rng.random() < 0.3:
            kind = rng.randrange(6)
            if kind == 0:
                return External(rng.choice(self.accessions), self.random_simple(rng))
            elif kind == 1:
                unknown = rng.random() < 0.5
                return Gap(rng.randint(1, 1000), unknown=unknown)
            return self.random_simple(rng)
        kind = rng.choice([Complement, Join, Order, Bond, OneOf])
        if kind is Complement:
            return Complement(self.random_tree(rng, depth - 1))
        children = [
            self.random_tree(rng, depth - 1) for _ in range(rng.randint(1, 4))
        ]
        return kind(children)

    def test_parse_format_closure(self):
        rng = random.Random(42)
        for _ in range(500):
            tree = self.random_tree(rng, 4)
            text = format_location(tree)
            self.assertEqual(parse_location(text), tree, text)
            self.assertEqual(format_location(parse_location(text)), text)


if __name__ == "__main__":
    unittest.main()
