"""Post-scan query language.

A query is a whitespace-separated list of ``key:value`` tokens. Every
filter must hold for a record to survive (logical AND); ``newest:true``
then reduces the survivors to the single most recently modified record.

Recognized keys:
    name      Substring of the file name.
    ext       Extension without the dot, exact and case-sensitive.
    tag       Tag carried by any finding of the record.
    size_lt   File size strictly below the value (bytes).
    size_gt   File size strictly above the value (bytes).
    newest    ``true`` selects the newest survivor; any other value is false.

Any other key names a capability: ``git-status:Modified`` keeps records
whose git-status finding has a message containing ``Modified``.

Example:
    >>> query = Query.parse("ext:py git-status:Modified newest:true")
    >>> latest = query.apply(result.records)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from rapidfuzz import fuzz, process

from fslint.models import ScanRecord

# Minimum RapidFuzz ratio for a key suggestion
SUGGESTION_CUTOFF = 60.0


class QueryParseError(ValueError):
    """Raised when a query string cannot be parsed.

    Attributes:
        token: The offending token.
    """

    def __init__(self, message: str, token: str) -> None:
        super().__init__(message)
        self.token = token


class FilterKind(Enum):
    NAME = "name"
    EXTENSION = "ext"
    TAG = "tag"
    SIZE_LT = "size_lt"
    SIZE_GT = "size_gt"
    NEWEST = "newest"
    CAPABILITY = "capability"


BUILTIN_KEYS = ("name", "ext", "tag", "size_lt", "size_gt", "newest")


@dataclass(frozen=True)
class Filter:
    """One parsed ``key:value`` token."""
    kind: FilterKind
    key: str                          # Key as written in the query
    value: str                        # Raw value
    number: Optional[int] = None      # Parsed value of size filters

    def matches(self, record: ScanRecord) -> bool:
        """Test one record. The newest selector always matches here."""
        if self.kind is FilterKind.NAME:
            return self.value in record.name
        if self.kind is FilterKind.EXTENSION:
            return record.extension == self.value
        if self.kind is FilterKind.TAG:
            return any(self.value in finding.tags for finding in record.findings)
        if self.kind is FilterKind.SIZE_LT:
            return record.size < self.number
        if self.kind is FilterKind.SIZE_GT:
            return record.size > self.number
        if self.kind is FilterKind.CAPABILITY:
            finding = record.finding_for(self.key)
            if finding is None or finding.message is None:
                return False
            return self.value in finding.message
        return True


def _parse_size(key: str, value: str, token: str) -> int:
    # Sizes are unsigned decimal integers
    if not (value.isascii() and value.isdigit()):
        raise QueryParseError(f"Invalid size for {key}: '{value}'", token)
    return int(value)


@dataclass
class Query:
    """A parsed query: conjunctive filters plus the optional newest selector."""
    filters: List[Filter] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "Query":
        """Parse a query string.

        An empty or blank string yields a query that matches everything.
        The value is everything after the first ``:``, so values may contain
        colons themselves.

        Args:
            text: The query string.

        Returns:
            The parsed Query.

        Raises:
            QueryParseError: If a token has no ``:`` or a size value is not
                a non-negative integer. Nothing is filtered in that case.

        Example:
            >>> Query.parse("name:report size_gt:1024").filters[1].number
            1024
        """
        filters: List[Filter] = []
        for token in text.split():
            key, sep, value = token.partition(":")
            if not sep:
                raise QueryParseError(f"Invalid query part: {token}", token)

            if key == "name":
                filters.append(Filter(FilterKind.NAME, key, value))
            elif key == "ext":
                filters.append(Filter(FilterKind.EXTENSION, key, value))
            elif key == "tag":
                filters.append(Filter(FilterKind.TAG, key, value))
            elif key == "size_lt":
                filters.append(Filter(FilterKind.SIZE_LT, key, value, _parse_size(key, value, token)))
            elif key == "size_gt":
                filters.append(Filter(FilterKind.SIZE_GT, key, value, _parse_size(key, value, token)))
            elif key == "newest":
                filters.append(Filter(FilterKind.NEWEST, key, value))
            else:
                filters.append(Filter(FilterKind.CAPABILITY, key, value))
        return cls(filters)

    @property
    def newest(self) -> bool:
        """Value of the last ``newest`` token; True only for ``true``."""
        flags = [f.value == "true" for f in self.filters if f.kind is FilterKind.NEWEST]
        return flags[-1] if flags else False

    def matches(self, record: ScanRecord) -> bool:
        return all(f.matches(record) for f in self.filters)

    def apply(self, records: Sequence[ScanRecord]) -> List[ScanRecord]:
        """Filter records, then reduce to the newest one if requested.

        Records keep their input order. For ``newest:true`` the record with
        the greatest modified time wins; on a tie the earliest record wins,
        and records with an unknown modified time rank below all others.
        """
        matched = [record for record in records if self.matches(record)]
        if not self.newest or not matched:
            return matched

        newest = max(
            matched,
            key=lambda r: (r.modified is not None, r.modified if r.modified is not None else 0.0),
        )
        return [newest]

    def capability_keys(self) -> List[str]:
        """Keys of the capability-message filters, in query order."""
        return [f.key for f in self.filters if f.kind is FilterKind.CAPABILITY]

    def unknown_keys(self, known_capabilities: Iterable[str]) -> List[str]:
        """Capability-filter keys that name no known capability.

        Such filters can never match, which is usually a typo (``exts:py``).
        """
        known = set(known_capabilities)
        unknown: List[str] = []
        for key in self.capability_keys():
            if key not in known and key not in unknown:
                unknown.append(key)
        return unknown


def suggest_key(key: str, candidates: Iterable[str]) -> Optional[str]:
    """Return the candidate closest to ``key``, or None if nothing is close.

    Example:
        >>> suggest_key("git-stat", ["git-status", "file-age"])
        'git-status'
    """
    choices = list(candidates)
    if not choices:
        return None
    match = process.extractOne(key, choices, scorer=fuzz.ratio, score_cutoff=SUGGESTION_CUTOFF)
    if match is None:
        return None
    return match[0]
