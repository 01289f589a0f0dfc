from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .errors import PolicyMisconfiguration

DEFAULT_THRESHOLDS = (3, 7, 10, 15, 20, 25)
DEFAULT_COOLDOWNS = (60, 180, 600, 900, 1800)
DEFAULT_CYCLE_SECONDS = 10
MAX_TIER = 5


class Tier(Enum):
    NONE = 'none'
    WARN = 'warn'
    BLOCK_1 = 1
    BLOCK_2 = 2
    BLOCK_3 = 3
    BLOCK_4 = 4
    BLOCK_5 = 5

    @property
    def level(self):
        """Block level stored on the record, None for an unflagged count."""
        if self is Tier.NONE:
            return None
        if self is Tier.WARN:
            return 0
        return self.value

    @property
    def is_block(self) -> bool:
        return isinstance(self.value, int)

    @classmethod
    def for_level(cls, level: int) -> 'Tier':
        return cls(level)


@dataclass(frozen=True)
class EscalationPolicy:
    """Click-count thresholds and per-tier cool-downs.

    thresholds are T0..T5: T0 opens the flood warning, T1..T5 open block
    tiers 1..5. Each tier covers the half-open window [Tn, Tn+1).
    cooldowns are seconds for tiers 1..5.
    """

    thresholds: Tuple[int, ...] = DEFAULT_THRESHOLDS
    cooldowns: Tuple[int, ...] = DEFAULT_COOLDOWNS
    cycle_seconds: int = DEFAULT_CYCLE_SECONDS
    flood_intensity: int = 1

    def __post_init__(self):
        if len(self.thresholds) != MAX_TIER + 1:
            raise PolicyMisconfiguration(f'expected {MAX_TIER + 1} thresholds, got {len(self.thresholds)}')
        if self.thresholds[0] < 0:
            raise PolicyMisconfiguration('thresholds must be non-negative')
        for low, high in zip(self.thresholds, self.thresholds[1:]):
            if high <= low:
                raise PolicyMisconfiguration(f'thresholds must be strictly increasing: {self.thresholds}')
        if len(self.cooldowns) != MAX_TIER:
            raise PolicyMisconfiguration(f'expected {MAX_TIER} cooldowns, got {len(self.cooldowns)}')
        if any(c <= 0 for c in self.cooldowns):
            raise PolicyMisconfiguration(f'cooldowns must be positive: {self.cooldowns}')
        if self.cycle_seconds <= 0:
            raise PolicyMisconfiguration('cycle_seconds must be positive')
        if self.flood_intensity not in (1, 2):
            raise PolicyMisconfiguration(f'flood_intensity must be 1 or 2, got {self.flood_intensity}')

    def tier_for(self, click_count: int) -> Tier:
        if click_count < self.thresholds[0]:
            return Tier.NONE
        if click_count < self.thresholds[1]:
            return Tier.WARN
        for level in range(1, MAX_TIER):
            if click_count < self.thresholds[level + 1]:
                return Tier.for_level(level)
        return Tier.BLOCK_5

    def cooldown_seconds_for(self, tier: Tier) -> int:
        if not tier.is_block:
            raise ValueError(f'{tier} has no cooldown')
        return self.cooldowns[tier.value - 1]

    def wait_label_for(self, tier: Tier) -> str:
        # minutes, as the clients display it
        return '%g' % (self.cooldown_seconds_for(tier) / 60)
