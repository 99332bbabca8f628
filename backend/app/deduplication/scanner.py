"""Multi-pass duplicate detection over the provider registry."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from app.deduplication.normalization import (
    DEFAULT_MASK_CHARACTER,
    is_masked,
    normalize_email,
    normalize_name,
    normalize_tax_id,
)
from app.deduplication.similarity import name_similarity
from app.schemas.provider import ProviderRead

MatchType = Literal["email", "tax_id", "name"]
EXACT_MATCH_TYPES: frozenset[str] = frozenset({"email", "tax_id"})
DEFAULT_NAME_SIMILARITY_THRESHOLD = 85


@dataclass(slots=True)
class DuplicateGroup:
    """Providers that matched each other in one detection pass."""

    match_type: MatchType
    match_value: str
    providers: list[ProviderRead]
    similarity: int | None = None

    @property
    def is_exact(self) -> bool:
        return self.match_type in EXACT_MATCH_TYPES


@dataclass(slots=True)
class DuplicateScanResult:
    groups: list[DuplicateGroup] = field(default_factory=list)
    total_duplicates: int = 0
    scanned_count: int = 0


class DuplicateScanner:
    """Groups duplicate providers by email, then tax id, then fuzzy name.

    Each pass only sees providers not claimed by an earlier pass, so a record
    belongs to at most one group.
    """

    def __init__(
        self,
        *,
        name_similarity_threshold: int = DEFAULT_NAME_SIMILARITY_THRESHOLD,
        mask_character: str = DEFAULT_MASK_CHARACTER,
    ) -> None:
        self.name_similarity_threshold = name_similarity_threshold
        self.mask_character = mask_character

    def scan(
        self,
        providers: Sequence[ProviderRead],
        *,
        include_name_pass: bool = True,
    ) -> DuplicateScanResult:
        """Build duplicate groups for the given registry snapshot (read-only)."""

        claimed: set[int] = set()
        groups = self._exact_pass(
            providers,
            claimed,
            match_type="email",
            key=lambda provider: normalize_email(provider.email, self.mask_character),
        )
        groups.extend(
            self._exact_pass(
                providers,
                claimed,
                match_type="tax_id",
                key=lambda provider: normalize_tax_id(provider.tax_id, self.mask_character),
            )
        )
        if include_name_pass:
            groups.extend(self._name_pass(providers, claimed))

        return DuplicateScanResult(
            groups=groups,
            total_duplicates=sum(len(group.providers) - 1 for group in groups),
            scanned_count=len(providers),
        )

    def _exact_pass(
        self,
        providers: Sequence[ProviderRead],
        claimed: set[int],
        *,
        match_type: MatchType,
        key: Callable[[ProviderRead], str | None],
    ) -> list[DuplicateGroup]:
        buckets: dict[str, list[ProviderRead]] = {}
        for provider in providers:
            if provider.id in claimed:
                continue
            value = key(provider)
            if value is None:
                continue
            buckets.setdefault(value, []).append(provider)

        groups: list[DuplicateGroup] = []
        for value, members in buckets.items():
            if len(members) < 2:
                continue
            groups.append(DuplicateGroup(match_type=match_type, match_value=value, providers=members))
            claimed.update(member.id for member in members)
        return groups

    def _name_pass(self, providers: Sequence[ProviderRead], claimed: set[int]) -> list[DuplicateGroup]:
        """Single-link clustering over normalized names.

        A group is seeded by the first unclaimed provider; every member that
        joins is itself compared against the remaining providers, so chains of
        pairwise matches end up in one group. The reported similarity is the
        lowest score among the accepted links, not the lowest score over every
        pair of members: in a chain A-B-C, A and C may score below the
        threshold while the group still reports the A-B or B-C score.
        """

        remaining = [
            (provider, normalize_name(provider.name))
            for provider in providers
            if provider.id not in claimed and not is_masked(provider.name, self.mask_character)
        ]
        groups: list[DuplicateGroup] = []

        for seed_index, (seed, _) in enumerate(remaining):
            if seed.id in claimed:
                continue
            members = [remaining[seed_index]]
            member_ids = {seed.id}
            weakest = 100
            cursor = 0
            while cursor < len(members):
                _, member_name = members[cursor]
                cursor += 1
                for candidate, candidate_name in remaining[seed_index + 1 :]:
                    if candidate.id in claimed or candidate.id in member_ids:
                        continue
                    score = name_similarity(member_name, candidate_name)
                    if score >= self.name_similarity_threshold:
                        members.append((candidate, candidate_name))
                        member_ids.add(candidate.id)
                        weakest = min(weakest, score)

            if len(members) < 2:
                continue
            claimed.update(member_ids)
            groups.append(
                DuplicateGroup(
                    match_type="name",
                    match_value=seed.name,
                    providers=[provider for provider, _ in members],
                    similarity=weakest,
                )
            )
        return groups
