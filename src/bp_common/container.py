"""ContainerKey — the (period, group, subgroup, term, cohort) grouping of one print run."""

from dataclasses import dataclass

from src.bp_common.enums import PrintMode

# Sentinels substituted for blank components by ContainerKey.normalized().
UNKNOWN_PERIOD = "Unknown Period"
UNKNOWN_GROUP = "Unknown Group"
UNKNOWN_SUBGROUP = "Unknown Subgroup"
UNKNOWN_TERM = "Unknown Term"
UNKNOWN_COHORT = "Unknown Cohort"

_SEPARATOR = "|"


@dataclass(frozen=True)
class ContainerKey:
    period: str
    group: str
    subgroup: str
    term: str
    cohort: str

    @classmethod
    def normalized(
        cls,
        period: str | None,
        group: str | None,
        subgroup: str | None,
        term: str | None,
        cohort: str | None,
    ) -> "ContainerKey":
        """Build a key from raw attributes, replacing blank components with sentinels."""
        return cls(
            period=_or_sentinel(period, UNKNOWN_PERIOD),
            group=_or_sentinel(group, UNKNOWN_GROUP),
            subgroup=_or_sentinel(subgroup, UNKNOWN_SUBGROUP),
            term=_or_sentinel(term, UNKNOWN_TERM),
            cohort=_or_sentinel(cohort, UNKNOWN_COHORT),
        )

    def as_tuple(self) -> tuple[str, str, str, str, str]:
        return (self.period, self.group, self.subgroup, self.term, self.cohort)

    def cache_key(self, print_mode: PrintMode | None = None) -> str:
        """Stable string key; the print mode is appended only when filtering by it.

        ContainerKey("2025", "CS", "A", "3", "B1").cache_key(PrintMode.DUPLEX)
            -> "2025|CS|A|3|B1|DUPLEX"
        """
        parts = list(self.as_tuple())
        if print_mode is not None:
            parts.append(PrintMode(print_mode).value)
        return _SEPARATOR.join(parts)


def _or_sentinel(value: str | None, sentinel: str) -> str:
    if value is None or not value.strip():
        return sentinel
    return value
