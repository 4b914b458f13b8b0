# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Feature-flag evaluation and staged percentage rollout.

Flags:
    A flag set is a mapping of flag name to boolean. Unknown flags are OFF:
    is_enabled() returns False for them and never raises.

Rollout:
    A rollout strategy is an ordered list of stages, each with a cumulative
    percentage and a duration::

        stages:
          - {percentage: 5, duration: 1_day}
          - {percentage: 25, duration: 3_days}
          - {percentage: 50, duration: 1_week}
          - {percentage: 100, duration: ongoing}

    Stage i is active while the time elapsed since the rollout started is
    below the sum of the durations of stages 0..i. A stage with duration
    "ongoing" never expires. After the last finite stage expires, the last
    stage stays active.

    Each subject is placed in a stable bucket in [0, 100) derived from the
    SHA-256 of its id, so the same subject lands in the same bucket in every
    process. A subject is in the rollout when its bucket is below the active
    stage's percentage.

    RolloutSchedule remembers the highest stage it has reported. The
    percentage it serves never goes down, even if the clock does.

    Datetimes without a timezone (start times, clock readings) are taken
    as UTC.

Durations:
    ``<n>_<unit>`` where unit is minute, hour, day or week (singular or
    plural), or the literal ``ongoing``.

Example:
    ```python
    from stratacfg.features import FeatureFlags

    flags = FeatureFlags.from_config(resolved)
    if flags.is_in_rollout("advancedAnalytics", user_id):
        ...
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
import hashlib
import re
from typing import Any

from stratacfg.exceptions import StructuralError
from stratacfg.logging import get_global_logger
from stratacfg.paths import get_path

__all__ = [
    "ONGOING",
    "RolloutStage",
    "RolloutSchedule",
    "FeatureFlags",
    "bucket_for",
    "is_enabled",
    "is_in_rollout",
    "parse_duration",
    "parse_stages",
    "stage_index_at",
]

ONGOING = "ongoing"

_DURATION_RE = re.compile(r"^(\d+)_(minute|hour|day|week)s?$")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware values pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def parse_duration(text: str) -> timedelta | None:
    """Parse a stage duration.

    Args:
        text: Duration such as "1_day", "3_days", "2_weeks" or "ongoing".

    Returns:
        The duration, or None for "ongoing".

    Raises:
        StructuralError: If the text is not a recognized duration.
    """
    if not isinstance(text, str):
        raise StructuralError(f"Rollout duration must be a string, got {text!r}")
    normalized = text.strip().lower()
    if normalized == ONGOING:
        return None
    match = _DURATION_RE.match(normalized)
    if not match:
        raise StructuralError(f"Unrecognized rollout duration: {text!r}")
    amount, unit = int(match.group(1)), match.group(2)
    return timedelta(**{f"{unit}s": amount})


@dataclass(frozen=True)
class RolloutStage:
    """One stage of a gradual rollout.

    Attributes:
        percentage: Cumulative share of subjects included (0-100).
        duration: How long the stage lasts, e.g. "3_days" or "ongoing".
    """

    percentage: int
    duration: str

    def __post_init__(self) -> None:
        if isinstance(self.percentage, bool) or not isinstance(self.percentage, int):
            raise StructuralError(
                f"Rollout percentage must be an integer, got {self.percentage!r}"
            )
        if not 0 <= self.percentage <= 100:
            raise StructuralError(
                f"Rollout percentage must be between 0 and 100, got {self.percentage}"
            )
        parse_duration(self.duration)

    @property
    def span(self) -> timedelta | None:
        """Length of the stage, or None if it never expires."""
        return parse_duration(self.duration)

    @classmethod
    def from_mapping(cls, node: Mapping[str, Any]) -> RolloutStage:
        if not isinstance(node, Mapping):
            raise StructuralError(f"Rollout stage must be a mapping, got {node!r}")
        return cls(percentage=node.get("percentage"), duration=node.get("duration"))


def parse_stages(raw: Sequence[Any]) -> tuple[RolloutStage, ...]:
    """Build rollout stages from configuration data.

    Args:
        raw: Sequence of stage mappings (or RolloutStage instances).

    Returns:
        The stages in order.

    Raises:
        StructuralError: If a stage is malformed, percentages decrease, or
            a stage follows an "ongoing" stage.
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise StructuralError(f"Rollout stages must be a list, got {raw!r}")

    stages = tuple(
        s if isinstance(s, RolloutStage) else RolloutStage.from_mapping(s) for s in raw
    )
    for prev, stage in zip(stages, stages[1:]):
        if stage.percentage < prev.percentage:
            raise StructuralError(
                "Rollout percentages must not decrease: "
                f"{prev.percentage} then {stage.percentage}"
            )
        if prev.span is None:
            raise StructuralError("No rollout stage may follow an 'ongoing' stage")
    return stages


def stage_index_at(stages: Sequence[RolloutStage], elapsed: timedelta) -> int:
    """Return the index of the stage active after elapsed time.

    Negative elapsed time counts as zero. Returns -1 for an empty list.
    """
    if not stages:
        return -1
    boundary = timedelta(0)
    for index, stage in enumerate(stages):
        span = stage.span
        if span is None:
            return index
        boundary += span
        if elapsed < boundary:
            return index
    return len(stages) - 1


def bucket_for(subject_id: str) -> int:
    """Map a subject id to a stable bucket in [0, 100)."""
    digest = hashlib.sha256(str(subject_id).encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % 100


def is_enabled(flags: Mapping[str, Any], name: str) -> bool:
    """Return whether a flag is on. Unknown flags are off."""
    if not isinstance(flags, Mapping):
        return False
    return bool(flags.get(name, False))


class RolloutSchedule:
    """Time-driven, monotonic rollout over a list of stages.

    Attributes:
        stages: The rollout stages in order.
        started_at: When the first stage began.
    """

    def __init__(
        self,
        stages: Sequence[Any],
        started_at: datetime | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.stages = parse_stages(stages)
        self._clock = clock or _utcnow
        if started_at is None:
            started_at = self._clock()
        self.started_at = _as_utc(started_at)
        self._highest = -1

    def current_index(self) -> int:
        """Index of the active stage; -1 when there are no stages."""
        elapsed = _as_utc(self._clock()) - self.started_at
        self._highest = max(self._highest, stage_index_at(self.stages, elapsed))
        return self._highest

    def current_stage(self) -> RolloutStage | None:
        index = self.current_index()
        return self.stages[index] if index >= 0 else None

    def percentage(self) -> int:
        stage = self.current_stage()
        return stage.percentage if stage else 0

    def includes(self, subject_id: str) -> bool:
        """Return whether subject_id falls inside the active percentage."""
        return bucket_for(subject_id) < self.percentage()


def is_in_rollout(
    stages: Sequence[Any],
    subject_id: str,
    *,
    started_at: datetime | None = None,
    now: datetime | None = None,
) -> bool:
    """Check a subject against a rollout evaluated at a single instant.

    With no started_at the rollout is taken to start at now, so the first
    stage is active.

    Args:
        stages: Rollout stages (mappings or RolloutStage instances).
        subject_id: Identifier of the user, tenant or request being checked.
        started_at: When the rollout began.
        now: Evaluation time. Defaults to the current UTC time.

    Returns:
        True if the subject's bucket is below the active percentage.
    """
    moment = _as_utc(now) if now is not None else _utcnow()
    schedule = RolloutSchedule(
        stages,
        started_at=started_at if started_at is not None else moment,
        clock=lambda: moment,
    )
    return schedule.includes(subject_id)


def _parse_started_at(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        value = raw
    else:
        try:
            value = datetime.fromisoformat(str(raw))
        except ValueError as err:
            raise StructuralError(f"Invalid rollout startedAt: {raw!r}") from err
    return _as_utc(value)


class FeatureFlags:
    """Flag set plus optional rollout schedule from a resolved tree.

    Example:
        ```python
        flags = FeatureFlags.from_config(resolved)
        flags.is_enabled("webhookProcessing")       # True
        flags.is_enabled("neverDefined")            # False
        flags.is_in_rollout("crmSync", "user-42")   # False while flag is off
        ```
    """

    def __init__(
        self,
        flags: Mapping[str, Any],
        schedule: RolloutSchedule | None = None,
    ) -> None:
        self.flags = dict(flags) if isinstance(flags, Mapping) else {}
        self.schedule = schedule

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        *,
        clock: Clock | None = None,
    ) -> FeatureFlags:
        """Build from the ``featureFlags`` section of a configuration tree.

        Args:
            config: A ResolvedConfig or plain mapping.
            clock: Time source for the rollout schedule.

        Raises:
            StructuralError: If the rollout strategy is malformed.
        """
        logger = get_global_logger()
        flags = get_path(config, "featureFlags.flags", default={})
        strategy = get_path(config, "featureFlags.rolloutStrategy", default=None)

        schedule = None
        if isinstance(strategy, Mapping) and strategy.get("stages") is not None:
            schedule = RolloutSchedule(
                strategy["stages"],
                started_at=_parse_started_at(strategy.get("startedAt")),
                clock=clock,
            )
            logger.verbose(
                "FLAGS",
                f"Rollout with {len(schedule.stages)} stage(s) "
                f"started {schedule.started_at.isoformat()}",
            )
        return cls(flags, schedule)

    def is_enabled(self, name: str) -> bool:
        return is_enabled(self.flags, name)

    def is_in_rollout(self, name: str, subject_id: str) -> bool:
        """Return whether a flag is on for a particular subject.

        The flag must be enabled. Without a rollout schedule every subject
        is included; with one, only subjects inside the active percentage.
        """
        if not self.is_enabled(name):
            return False
        if self.schedule is None:
            return True
        return self.schedule.includes(subject_id)
