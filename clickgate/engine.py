"""Admission/escalation state machine.

The engine never touches storage: each operation takes the subject's current
snapshot (or None when absent) and returns a Transition carrying the full
record to persist, if any, plus the decision for the caller. The service
layer owns the read and the conditional write.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .clock import Clock
from .decisions import Decision
from .policy import EscalationPolicy, MAX_TIER, Tier
from .records import ClickStatus, SubjectState


@dataclass(frozen=True)
class Transition:
    decision: Decision
    state: Optional[SubjectState] = None

    @property
    def writes(self) -> bool:
        return self.state is not None


class AdmissionEngine:
    def __init__(self, policy: EscalationPolicy, clock: Clock):
        self.policy = policy
        self.clock = clock

    def evaluate(self, subject_id: str, current: Optional[SubjectState]) -> Transition:
        now = self.clock.now()
        cycle_end = now + timedelta(seconds=self.policy.cycle_seconds)

        if current is None:
            state = SubjectState(
                subject_id=subject_id,
                click_count=1,
                status=ClickStatus.ACTIVE,
                block_level=None,
                created_at=now,
                expires_at=cycle_end,
            )
            return Transition(Decision.allow(cycle_end), state)

        if current.status is ClickStatus.IDLE:
            # a finalized cycle reopens; count and level carry over
            state = current.evolve(status=ClickStatus.ACTIVE, expires_at=cycle_end, updated_at=now)
            return Transition(Decision.allow(cycle_end), state)

        if now > current.expires_at:
            return self._expire(current, now)

        return self._escalate(current, now)

    def _expire(self, current: SubjectState, now) -> Transition:
        if current.block_level == MAX_TIER or self.policy.flood_intensity == 1:
            clicks = 0
        else:
            clicks = current.click_count
        state = current.evolve(
            click_count=clicks,
            block_level=0,
            status=ClickStatus.IDLE,
            updated_at=now,
        )
        return Transition(Decision.allow(current.expires_at), state)

    def _escalate(self, current: SubjectState, now) -> Transition:
        tier = self.policy.tier_for(current.click_count)
        clicks = current.click_count + 1

        if tier is Tier.NONE:
            state = current.evolve(click_count=clicks, updated_at=now)
            return Transition(Decision.denied(current.expires_at), state)

        if tier is Tier.WARN:
            state = current.evolve(click_count=clicks, block_level=0, updated_at=now)
            return Transition(Decision.flood_warning(current.expires_at), state)

        state = None
        can_write = now < current.expires_at
        if tier is Tier.BLOCK_5 and (current.block_level or 0) >= MAX_TIER:
            # ceiling reached: neither the counter nor the cool-down moves
            can_write = False
        if can_write:
            unlock = now + timedelta(seconds=self.policy.cooldown_seconds_for(tier))
            state = current.evolve(
                click_count=clicks,
                block_level=tier.level,
                expires_at=max(current.expires_at, unlock),
                updated_at=now,
            )
        unlock_at = state.expires_at if state else current.expires_at
        return Transition(self._blocked(tier, unlock_at), state)

    def finalize(self, current: Optional[SubjectState]) -> Transition:
        now = self.clock.now()
        if current is None:
            return Transition(Decision.allow(now, declaration='click-updated'))
        if current.block_level is not None and current.block_level > 0:
            decision = self._blocked(
                Tier.for_level(current.block_level),
                current.expires_at,
                declaration='click-flood-block-updated',
            )
            return Transition(decision)
        return self._release(current, now)

    def force_release(self, current: Optional[SubjectState]) -> Transition:
        now = self.clock.now()
        if current is None:
            return Transition(Decision.allow(now, declaration='click-updated'))
        return self._release(current, now)

    def _release(self, current: SubjectState, now) -> Transition:
        state = current.evolve(
            click_count=0,
            status=ClickStatus.IDLE,
            block_level=0,
            expires_at=now,
            updated_at=now,
        )
        return Transition(Decision.allow(now, declaration='click-updated'), state)

    def _blocked(self, tier: Tier, unlock_at, declaration=None) -> Decision:
        return Decision.blocked(
            tier=tier.level,
            wait_seconds=self.policy.cooldown_seconds_for(tier),
            wait_label=self.policy.wait_label_for(tier),
            unlock_at=unlock_at,
            declaration=declaration,
        )
