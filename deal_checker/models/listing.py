# deal_checker/models/listing.py

"""Identifier registry built from one input list."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DuplicateRecord:
    """An ASIN that appeared again after its first registration."""

    asin: str
    line1: int
    line2: int


@dataclass(frozen=True)
class UnresolvedReference:
    """An input line from which no ASIN could be extracted."""

    line: int
    url: str


@dataclass(frozen=True)
class IdentifierRegistry:
    """First-seen ASINs of one input file, in registration order."""

    asins: tuple[str, ...] = ()
    links: dict[str, str] = field(default_factory=lambda: dict[str, str]())
    first_lines: dict[str, int] = field(
        default_factory=lambda: dict[str, int]()
    )
    duplicates: tuple[DuplicateRecord, ...] = ()
    unresolved: tuple[UnresolvedReference, ...] = ()

    def __len__(self) -> int:
        return len(self.asins)

    def link_for(self, asin: str | None) -> str | None:
        """Return the first-seen listing reference for *asin*."""
        if asin is None:
            return None
        return self.links.get(asin)
