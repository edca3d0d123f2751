# tests/test_deduplicator.py

"""Tests for ListingDeduplicator per-file ASIN registration."""

import unittest

from deal_checker.filters.deduplicator import ListingDeduplicator
from deal_checker.models.listing import DuplicateRecord, UnresolvedReference

A = "https://www.amazon.com/dp/B000111222"
B = "https://www.amazon.com/gp/product/B07FZ8S74R"
C = "https://www.amazon.com/Some-Thing/dp/B09XS7JWHH/ref=sr_1_1"


class TestBuildRegistry(unittest.TestCase):
    """ListingDeduplicator.build_registry behaviour."""

    def test_empty_list(self) -> None:
        """Empty input gives an empty registry."""
        registry = ListingDeduplicator.build_registry([])
        self.assertEqual(len(registry), 0)
        self.assertEqual(registry.duplicates, ())
        self.assertEqual(registry.unresolved, ())

    def test_registration_order(self) -> None:
        """ASINs keep first-seen order."""
        registry = ListingDeduplicator.build_registry([C, A, B])
        self.assertEqual(
            registry.asins, ("B09XS7JWHH", "B000111222", "B07FZ8S74R")
        )

    def test_duplicate_reports_both_lines(self) -> None:
        """Same ASIN on lines 3 and 7 → one entry, DuplicateRecord(3, 7)."""
        lines = [
            B,
            C,
            A,
            "https://www.amazon.com/dp/B0AAAAAAA1",
            "https://www.amazon.com/dp/B0AAAAAAA2",
            "https://www.amazon.com/dp/B0AAAAAAA3",
            "https://www.amazon.com/other-title/dp/B000111222?th=1",
        ]
        registry = ListingDeduplicator.build_registry(lines)
        self.assertEqual(len(registry), 6)
        self.assertEqual(registry.asins.count("B000111222"), 1)
        self.assertEqual(
            registry.duplicates,
            (DuplicateRecord("B000111222", 3, 7),),
        )
        self.assertEqual(registry.first_lines["B000111222"], 3)

    def test_first_link_wins(self) -> None:
        """The link kept for an ASIN is the one from its first line."""
        other = "https://www.amazon.com/x/dp/B000111222"
        registry = ListingDeduplicator.build_registry([A, other])
        self.assertEqual(registry.link_for("B000111222"), A)

    def test_triple_occurrence(self) -> None:
        """Each repeat references the first line."""
        registry = ListingDeduplicator.build_registry([A, A, A])
        self.assertEqual(
            [(d.line1, d.line2) for d in registry.duplicates],
            [(1, 2), (1, 3)],
        )

    def test_unresolved_lines(self) -> None:
        """Lines without an ASIN are kept aside, not registered."""
        registry = ListingDeduplicator.build_registry(
            [A, "https://www.amazon.com/s?k=headphones"]
        )
        self.assertEqual(registry.asins, ("B000111222",))
        self.assertEqual(
            registry.unresolved,
            (UnresolvedReference(2, "https://www.amazon.com/s?k=headphones"),),
        )

    def test_blank_lines_do_not_count(self) -> None:
        """Blank lines are skipped and line numbers ignore them."""
        registry = ListingDeduplicator.build_registry(["", A, "   ", A])
        self.assertEqual(
            registry.duplicates, (DuplicateRecord("B000111222", 1, 2),)
        )

    def test_scheme_less_lines_are_normalised(self) -> None:
        """'amazon.com/dp/...' gets https://www. prepended."""
        registry = ListingDeduplicator.build_registry(
            ["amazon.com/dp/B000111222"]
        )
        self.assertEqual(
            registry.link_for("B000111222"),
            "https://www.amazon.com/dp/B000111222",
        )

    def test_link_for_unknown(self) -> None:
        """link_for returns None for unknown or absent ASINs."""
        registry = ListingDeduplicator.build_registry([A])
        self.assertIsNone(registry.link_for("B999999999"))
        self.assertIsNone(registry.link_for(None))

    def test_sum_invariant(self) -> None:
        """unique + duplicates + unresolved == non-blank lines."""
        lines = [A, B, A, "not a link", C, B, ""]
        registry = ListingDeduplicator.build_registry(lines)
        self.assertEqual(
            len(registry)
            + len(registry.duplicates)
            + len(registry.unresolved),
            6,
        )


if __name__ == "__main__":
    unittest.main()
