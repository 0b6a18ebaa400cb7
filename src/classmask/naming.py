# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Generate collision-free obfuscated class tokens."""

import logging
import random
import string
from typing import Callable, Container, Literal, Protocol

from classmask.errors import MappingError

logger = logging.getLogger(__name__)

Strategy = Literal["random", "sequential"]

TOKEN_ALPHABET = string.ascii_lowercase + string.digits
LEADING_ALPHABET = string.ascii_lowercase
BASE36_DIGITS = string.digits + string.ascii_lowercase
SEQUENTIAL_LEAD = "a"
SEQUENTIAL_SEED = 1
MAX_ATTEMPTS = 10_000


class CoreStrategy(Protocol):
    """Produce the core of a token, before affixes are applied."""

    def next_core(self) -> str:
        """Return the next candidate core."""


class RandomStrategy:
    """Draw fixed-length alphanumeric cores that start with a letter."""

    def __init__(self, length: int, rng: random.Random | None = None) -> None:
        """Initialize strategy.

        Args:
            length: Core length.
            rng: Random source; a fresh unseeded generator when omitted.

        Raises:
            ValueError: If length is not positive.
        """
        if length <= 0:
            raise ValueError("length must be > 0")
        self._length = length
        self._rng = rng or random.Random()

    def next_core(self) -> str:
        head = self._rng.choice(LEADING_ALPHABET)
        tail = "".join(self._rng.choice(TOKEN_ALPHABET) for _ in range(self._length - 1))
        return head + tail


class SequentialStrategy:
    """Count upward in base 36 behind a fixed lead letter: a1, a2, ... az, a10."""

    def __init__(self, start: int = SEQUENTIAL_SEED) -> None:
        self._counter = start

    def next_core(self) -> str:
        core = SEQUENTIAL_LEAD + to_base36(self._counter)
        self._counter += 1
        return core


class NameGenerator:
    """Wrap strategy cores with affixes and reject unusable tokens."""

    def __init__(
        self,
        strategy: CoreStrategy,
        prefix: str = "",
        suffix: str = "",
        is_blocked: Callable[[str], bool] | None = None,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        """Initialize generator.

        Args:
            strategy: Core producer.
            prefix: Literal prepended to every token.
            suffix: Literal appended to every token.
            is_blocked: Predicate for tokens that must never be issued.
            max_attempts: Consecutive rejections tolerated before giving up.
        """
        self._strategy = strategy
        self._prefix = prefix
        self._suffix = suffix
        self._is_blocked = is_blocked or (lambda _token: False)
        self._max_attempts = max_attempts

    def generate(self, taken: Container[str]) -> str:
        """Produce a token that is neither taken nor blocked.

        Args:
            taken: Tokens already assigned in this run.

        Returns:
            Unique token.

        Raises:
            MappingError: If no usable token was found within the attempt limit.
        """
        for _ in range(self._max_attempts):
            token = f"{self._prefix}{self._strategy.next_core()}{self._suffix}"
            if token in taken or self._is_blocked(token):
                continue
            return token
        raise MappingError(
            f"No unique token found after {self._max_attempts} attempts; "
            "increase the token length"
        )


def to_base36(value: int) -> str:
    """Render a non-negative integer in lower-case base 36."""
    if value < 0:
        raise ValueError("value must be >= 0")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def build_strategy(method: Strategy, length: int, seed: int | None = None) -> CoreStrategy:
    """Create the configured core strategy.

    Args:
        method: Strategy name.
        length: Core length for the random strategy.
        seed: Optional random seed.

    Returns:
        Core strategy instance.

    Raises:
        ValueError: If method is unknown.
    """
    if method == "random":
        return RandomStrategy(length=length, rng=random.Random(seed))
    if method == "sequential":
        return SequentialStrategy()
    raise ValueError(f"Unsupported generation strategy: {method}")
