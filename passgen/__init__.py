"""passgen -- randomized password generation and strength estimation.

Core functions for building passwords from character-class settings,
balancing per-class character counts, and scoring password strength.
"""

import enum
import logging
import math
import re
import secrets
import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

log = logging.getLogger(__name__)

SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
BASIC_SYMBOLS = "!@#$%^&*()_+"

# Upper bound of a single class's required count (slider range of the UI).
MAX_REQUIRED = 10


class ConfigurationError(ValueError):
    """Raised when a generation config cannot produce a password."""


# ── Character classes ──────────────────────────────────────────────────────


class CharClass(enum.Enum):
    """Character classes, declared in canonical order."""

    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    DIGITS = "digits"
    SPECIAL = "special"

    @property
    def resistance(self) -> float:
        """How strongly this class resists absorbing a rebalance delta."""
        return _RESISTANCE[self]


_RESISTANCE = {
    CharClass.UPPERCASE: 2.0,
    CharClass.LOWERCASE: 1.0,
    CharClass.DIGITS: 1.5,
    CharClass.SPECIAL: 1.2,
}

_FIXED_ALPHABETS = {
    CharClass.UPPERCASE: string.ascii_uppercase,
    CharClass.LOWERCASE: string.ascii_lowercase,
    CharClass.DIGITS: string.digits,
}


@dataclass(frozen=True)
class ClassOption:
    enabled: bool = True
    required: int = 0

    def __post_init__(self):
        if isinstance(self.required, bool) or not isinstance(self.required, int):
            raise ConfigurationError(
                f"Required count must be an integer, got {self.required!r}"
            )
        if self.required < 0:
            raise ConfigurationError(
                f"Required count must be non-negative, got {self.required}"
            )


def _default_classes() -> Mapping["CharClass", ClassOption]:
    return MappingProxyType({cls: ClassOption() for cls in CharClass})


@dataclass(frozen=True)
class GenerationConfig:
    """Immutable description of the password to generate.

    *classes* maps each character class to its :class:`ClassOption`;
    classes missing from the mapping are treated as disabled.  With
    *ensure_each* every enabled class contributes at least one character.
    """

    length: int = 12
    classes: Mapping[CharClass, ClassOption] = field(default_factory=_default_classes)
    symbols: str = SYMBOLS
    ensure_each: bool = False

    @classmethod
    def from_flags(
        cls,
        length: int = 12,
        *,
        uppercase: bool = True,
        lowercase: bool = True,
        digits: bool = True,
        special: bool = True,
        counts: Mapping[CharClass, int] | None = None,
        symbols: str = SYMBOLS,
        ensure_each: bool = False,
    ) -> "GenerationConfig":
        """Build a config from on/off switches and optional per-class counts."""
        flags = {
            CharClass.UPPERCASE: uppercase,
            CharClass.LOWERCASE: lowercase,
            CharClass.DIGITS: digits,
            CharClass.SPECIAL: special,
        }
        counts = counts or {}
        classes = {
            c: ClassOption(enabled=on, required=counts.get(c, 0))
            for c, on in flags.items()
        }
        return cls(
            length=length,
            classes=MappingProxyType(classes),
            symbols=symbols,
            ensure_each=ensure_each,
        )

    def alphabet(self, char_class: CharClass) -> str:
        if char_class is CharClass.SPECIAL:
            return self.symbols
        return _FIXED_ALPHABETS[char_class]

    def enabled_classes(self) -> list[CharClass]:
        """Enabled classes with a non-empty alphabet, in canonical order."""
        return [
            c for c in CharClass
            if c in self.classes
            and self.classes[c].enabled
            and self.alphabet(c)
        ]

    def charset(self) -> str:
        return "".join(self.alphabet(c) for c in self.enabled_classes())

    def required_counts(self) -> dict[CharClass, int]:
        """Effective minimum number of characters per enabled class."""
        counts = {}
        for c in self.enabled_classes():
            required = self.classes[c].required
            if self.ensure_each:
                required = max(required, 1)
            counts[c] = required
        return counts

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` if no password can be built."""
        if not self.enabled_classes():
            raise ConfigurationError("Select at least one character type")
        if isinstance(self.length, bool) or not isinstance(self.length, int):
            raise ConfigurationError(
                f"Password length must be an integer, got {self.length!r}"
            )
        if self.length <= 0:
            raise ConfigurationError(
                f"Password length must be positive, got {self.length}"
            )
        total = sum(self.required_counts().values())
        if total > self.length:
            raise ConfigurationError(
                f"Total required characters ({total}) exceed "
                f"password length ({self.length})"
            )


# ── Password generation ────────────────────────────────────────────────────


def generate_password(config: GenerationConfig | None = None, *, rng=None) -> str:
    """Generate a random password satisfying *config*.

    Without required counts every character is drawn uniformly from the
    combined alphabet of the enabled classes, so larger classes show up
    proportionally more often.  With required counts (or ``ensure_each``)
    the guaranteed characters are drawn first, the rest is filled from the
    combined alphabet, and the result is shuffled.

    *rng* is any :class:`random.Random`-compatible source; it defaults to
    :class:`secrets.SystemRandom` for cryptographic randomness.
    """
    cfg = config or GenerationConfig()
    cfg.validate()
    rng = rng or secrets.SystemRandom()

    charset = cfg.charset()
    required = {c: n for c, n in cfg.required_counts().items() if n > 0}

    if not required:
        log.debug("Drawing %d characters from a %d-character alphabet",
                  cfg.length, len(charset))
        return "".join(rng.choice(charset) for _ in range(cfg.length))

    chars = []
    for char_class, count in required.items():
        alphabet = cfg.alphabet(char_class)
        chars.extend(rng.choice(alphabet) for _ in range(count))

    log.debug("Guaranteed %d characters across %d classes, filling %d",
              len(chars), len(required), cfg.length - len(chars))
    chars.extend(rng.choice(charset) for _ in range(cfg.length - len(chars)))

    # Fisher-Yates shuffle so guaranteed characters are not clustered
    for i in range(len(chars) - 1, 0, -1):
        j = rng.randrange(i + 1)
        chars[i], chars[j] = chars[j], chars[i]

    return "".join(chars)


# ── Character-count balancing ──────────────────────────────────────────────


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int) -> int:
    return max(0, min(MAX_REQUIRED, value))


def rebalance(
    counts: Mapping[CharClass, int],
    changed: CharClass,
    new_value: float,
    length: int,
    enabled: Iterable[CharClass],
) -> dict[CharClass, int]:
    """Set *changed* to *new_value* and offset the change on the other classes.

    The delta is split across the other enabled classes in inverse
    proportion to their resistance; every count stays within
    ``[0, MAX_REQUIRED]``.  If the enabled total ends up above *length*,
    the most affected classes give up the excess.  A disabled *changed*
    class leaves every count as it was.  Returns a new mapping; *counts*
    is not modified.
    """
    enabled_set = set(enabled)
    result = {c: counts.get(c, 0) for c in CharClass}
    new_value = _clamp(_round_half_up(new_value))
    others = [c for c in CharClass if c in enabled_set and c is not changed]

    if changed not in enabled_set:
        return result

    result[changed] = new_value
    if not others:
        return result

    delta = new_value - counts.get(changed, 0)
    weights = {c: 1 / c.resistance for c in others}
    total_weight = sum(weights.values())

    adjustments = {}
    remaining = delta
    for c in others:
        adjustment = _round_half_up(delta * weights[c] / total_weight)
        result[c] = _clamp(result[c] - adjustment)
        adjustments[c] = adjustment
        remaining -= adjustment

    if remaining:
        first = others[0]
        result[first] = _clamp(result[first] - remaining)
        adjustments[first] += remaining

    excess = sum(result[c] for c in enabled_set) - length
    if excess > 0:
        log.debug("Rebalanced counts exceed length %d by %d", length, excess)
        by_impact = sorted(others, key=lambda c: -abs(adjustments[c]))
        for c in by_impact + [changed]:
            taken = min(excess, result[c])
            result[c] -= taken
            excess -= taken
            if not excess:
                break

    return result


def distribute_counts(length: int, enabled: Iterable[CharClass]) -> dict[CharClass, int]:
    """Split *length* as evenly as possible across the *enabled* classes.

    Classes earlier in canonical order receive the remainder.
    """
    if length <= 0:
        raise ConfigurationError(f"Password length must be positive, got {length}")

    enabled_set = set(enabled)
    active = [c for c in CharClass if c in enabled_set]
    counts = {c: 0 for c in CharClass}
    if not active:
        return counts

    base, remainder = divmod(length, len(active))
    for i, c in enumerate(active):
        counts[c] = base + (1 if i < remainder else 0)
    return counts


# ── Strength analysis ──────────────────────────────────────────────────────

_CLASS_PATTERNS = {
    "uppercase": re.compile(r"[A-Z]"),
    "lowercase": re.compile(r"[a-z]"),
    "digits":    re.compile(r"[0-9]"),
    "symbols":   re.compile(r"[^A-Za-z0-9]"),
}

RATINGS = ["Very Weak", "Weak", "Medium", "Strong", "Very Strong"]


def _char_classes(password: str) -> dict[str, bool]:
    return {name: bool(p.search(password)) for name, p in _CLASS_PATTERNS.items()}


def score_strength(password: str) -> int:
    """Return a 0-100 strength score for *password*.

    Length contributes up to 40 points, each character class present 15,
    and the number of distinct characters up to 20.
    """
    if not password:
        return 0

    score = min(len(password) * 4, 40)
    score += 15 * sum(_char_classes(password).values())
    score += min(len(set(password)) * 2, 20)
    return max(0, min(score, 100))


def strength_label(score: int) -> str:
    if score < 40:
        return "Weak"
    if score < 70:
        return "Medium"
    return "Strong"


def rate_password(password: str) -> str:
    """Return a five-level rating based on length and character variety."""
    checks = [len(password) >= 12, *_char_classes(password).values()]
    passed = sum(checks)
    if passed < 2:
        return RATINGS[0]
    return RATINGS[passed - 1]


def analyse_strength(password: str) -> dict:
    """Analyse password strength and return a report.

    Returns a dict with keys:
        length       -- int
        unique       -- int  (distinct characters)
        char_classes -- dict[str, bool]  (uppercase, lowercase, digits, symbols)
        score        -- int 0-100
        label        -- str  (Weak / Medium / Strong)
        rating       -- str  (Very Weak ... Very Strong)
    """
    score = score_strength(password)
    return {
        "length": len(password),
        "unique": len(set(password)),
        "char_classes": _char_classes(password),
        "score": score,
        "label": strength_label(score),
        "rating": rate_password(password),
    }
