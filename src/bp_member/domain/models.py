"""Member profile — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.bp_common.container import ContainerKey

_CONTAINER_FIELDS = ("period", "group", "subgroup", "term", "cohort")


@dataclass(frozen=True)
class MemberProfile:
    id: str
    display_name: str
    roll_number: str | None = None
    period: str | None = None
    group: str | None = None
    subgroup: str | None = None
    term: str | None = None
    cohort: str | None = None

    def missing_container_fields(self) -> list[str]:
        """Names of container-key attributes that are unset or blank."""
        return [
            name
            for name in _CONTAINER_FIELDS
            if not (getattr(self, name) or "").strip()
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_container_fields()

    def container_key(self) -> ContainerKey:
        """Raises ValueError if the profile is incomplete; callers check is_complete first."""
        missing = self.missing_container_fields()
        if missing:
            raise ValueError(f"Profile {self.id} missing container fields: {missing}")
        return ContainerKey(
            period=self.period,  # type: ignore[arg-type]
            group=self.group,  # type: ignore[arg-type]
            subgroup=self.subgroup,  # type: ignore[arg-type]
            term=self.term,  # type: ignore[arg-type]
            cohort=self.cohort,  # type: ignore[arg-type]
        )
