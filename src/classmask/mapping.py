# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run-scoped original-to-token mapping table and its construction."""

import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass

from classmask.errors import MappingError
from classmask.ignore import IgnoreMatcher, is_ignored
from classmask.naming import NameGenerator

logger = logging.getLogger(__name__)


class MappingTable(Mapping[str, str]):
    """Insertion-ordered map from original names to obfuscated tokens.

    Keys and values are both unique. Entries are never changed once assigned,
    and the table rejects every mutation after ``freeze``.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        """Initialize table.

        Args:
            entries: Initial entries, assigned in iteration order.

        Raises:
            MappingError: If entries repeat a token.
        """
        self._entries: dict[str, str] = {}
        self._tokens: set[str] = set()
        self._frozen = False
        self._lock = threading.Lock()
        for original, token in (entries or {}).items():
            self.assign(original, token)

    def __getitem__(self, original: str) -> str:
        return self._entries[original]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MappingTable({self._entries!r}, frozen={self._frozen})"

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def tokens(self) -> frozenset[str]:
        """Assigned tokens."""
        return frozenset(self._tokens)

    def assign(self, original: str, token: str) -> None:
        """Add one entry.

        Args:
            original: Original name.
            token: Obfuscated token.

        Raises:
            MappingError: If frozen, or the name or token is already present.
        """
        if self._frozen:
            raise MappingError(f"Mapping is frozen; cannot assign {original!r}")
        if original in self._entries:
            raise MappingError(f"Name already mapped: {original!r}")
        if token in self._tokens:
            raise MappingError(f"Token already assigned: {token!r}")
        self._entries[original] = token
        self._tokens.add(token)

    def assign_generated(self, original: str, generator: NameGenerator) -> str:
        """Assign a fresh token to a name unless it is already mapped.

        Token generation and the uniqueness check run under the table lock, so
        concurrent callers never receive the same token.

        Args:
            original: Original name.
            generator: Token generator.

        Returns:
            Token mapped to the name.
        """
        with self._lock:
            existing = self._entries.get(original)
            if existing is not None:
                return existing
            token = generator.generate(taken=self._tokens)
            self.assign(original, token)
            return token

    def freeze(self) -> "MappingTable":
        """Make the table read-only and return it."""
        self._frozen = True
        return self

    def as_dict(self) -> dict[str, str]:
        """Copy entries in insertion order."""
        return dict(self._entries)


@dataclass(frozen=True)
class MappingBuild:
    """Store the outcome of mapping construction.

    Args:
        table: Frozen mapping table.
        assigned: Names that received a new token in this run.
        reused: Names whose token came from the previous mapping.
        ignored: Discovered names exempted by ignore rules.
        dropped: Previous entries discarded because ignore rules now cover them.
    """

    table: MappingTable
    assigned: tuple[str, ...]
    reused: tuple[str, ...]
    ignored: tuple[str, ...]
    dropped: tuple[str, ...]


def build_mapping(
    candidates: list[str],
    matcher: IgnoreMatcher,
    generator: NameGenerator,
    previous: Mapping[str, str] | None = None,
) -> MappingBuild:
    """Build the frozen mapping for discovered names.

    Args:
        candidates: Distinct names in discovery order.
        matcher: Ignore matcher; matching names never enter the table.
        generator: Token generator for names without a previous token.
        previous: Entries loaded from an earlier run, reused when still valid.

    Returns:
        Mapping build outcome with a frozen table.
    """
    candidate_names = set(candidates)
    table = MappingTable()
    reused: list[str] = []
    dropped: list[str] = []
    for original, token in (previous or {}).items():
        if matcher.is_ignored(original) or is_ignored(token, matcher.rules):
            dropped.append(original)
            continue
        table.assign(original, token)
        if original in candidate_names:
            reused.append(original)
    if dropped:
        logger.warning(
            "Dropped previous mappings covered by ignore rules (count=%s)", len(dropped)
        )

    assigned: list[str] = []
    for original in candidates:
        if matcher.is_ignored(original):
            continue
        if original in table:
            continue
        table.assign_generated(original, generator)
        assigned.append(original)

    ignored = tuple(name for name in matcher.ignored if name in candidate_names)
    logger.info(
        "Mapping built (assigned=%s reused=%s ignored=%s total=%s)",
        len(assigned),
        len(reused),
        len(ignored),
        len(table),
    )
    return MappingBuild(
        table=table.freeze(),
        assigned=tuple(assigned),
        reused=tuple(reused),
        ignored=ignored,
        dropped=tuple(dropped),
    )


def blocked_token_predicate(
    matcher: IgnoreMatcher,
    originals: list[str],
    reserved: Iterable[str] = (),
) -> Callable[[str], bool]:
    """Build the predicate rejecting tokens that clash with untouchable names.

    Args:
        matcher: Ignore matcher whose rules tokens must not satisfy.
        originals: Discovered names a token must not equal.
        reserved: Names used elsewhere, such as markup-only class attribute
            tokens, that a token must not equal either.

    Returns:
        Predicate returning True for tokens that must not be issued.
    """
    original_names = frozenset(originals) | frozenset(reserved)

    def _is_blocked(token: str) -> bool:
        return token in original_names or is_ignored(token, matcher.rules)

    return _is_blocked
