# deal_checker/filters/deduplicator.py

"""ASIN deduplication across the lines of one input list."""

import logging

from deal_checker.models.listing import (
    DuplicateRecord,
    IdentifierRegistry,
    UnresolvedReference,
)
from deal_checker.parsers.asin_parser import (
    extract_asin,
    normalize_listing_url,
)

logger = logging.getLogger("deal_checker.filters")


class ListingDeduplicator:
    """Register each ASIN once, keeping the line it was first seen on."""

    @staticmethod
    def build_registry(references: list[str]) -> IdentifierRegistry:
        """Build the identifier registry for one input file.

        Blank references are skipped and do not count as lines.  A
        repeated ASIN is recorded as a duplicate of its first line and
        never registered twice; a reference without an ASIN lands in
        ``unresolved``.
        """
        asins: list[str] = []
        links: dict[str, str] = {}
        first_lines: dict[str, int] = {}
        duplicates: list[DuplicateRecord] = []
        unresolved: list[UnresolvedReference] = []

        lines = [r.strip() for r in references if r and r.strip()]
        for line_no, raw in enumerate(lines, 1):
            url = normalize_listing_url(raw)
            asin = extract_asin(url)

            if asin is None:
                unresolved.append(UnresolvedReference(line_no, url))
                logger.debug("No ASIN on line %d: %s", line_no, url)
                continue

            if asin in first_lines:
                duplicates.append(
                    DuplicateRecord(asin, first_lines[asin], line_no)
                )
                continue

            first_lines[asin] = line_no
            links[asin] = url
            asins.append(asin)

        if duplicates:
            logger.info(
                "Deduplication skipped %d repeated ASINs",
                len(duplicates),
            )

        return IdentifierRegistry(
            asins=tuple(asins),
            links=links,
            first_lines=first_lines,
            duplicates=tuple(duplicates),
            unresolved=tuple(unresolved),
        )
