from __future__ import annotations

from dataclasses import fields
from typing import Sequence

from mfe.contracts import (
    EngineConfig,
    PlayerAttributes,
    PlayerRegistry,
    PlayerSnapshot,
    TacticalStyle,
    ValidationError,
    ValidationIssue,
)

ATTRIBUTE_BOUNDS: dict[str, tuple[int, int]] = {
    "attack": (0, 1000),
    "defense": (0, 1000),
    "stamina": (0, 100),
    "form": (0, 100),
    "morale": (0, 100),
}


def parse_tactic(code: object) -> TacticalStyle | None:
    if isinstance(code, TacticalStyle):
        return code
    if isinstance(code, bool):
        return None
    if isinstance(code, int):
        try:
            return TacticalStyle(code)
        except ValueError:
            return None
    if isinstance(code, str):
        try:
            return TacticalStyle[code.strip().upper()]
        except KeyError:
            return None
    return None


class RosterValidator:
    """Validates create-match input and takes attribute snapshots.

    Collects every issue before raising so callers see the whole picture;
    nothing is returned unless the input is clean.
    """

    def __init__(self, registry: PlayerRegistry, config: EngineConfig) -> None:
        self._registry = registry
        self._config = config

    def snapshot_rosters(
        self,
        home_ids: Sequence[str],
        away_ids: Sequence[str],
        home_tactic: object,
        away_tactic: object,
        referee_strictness: int,
    ) -> tuple[list[PlayerSnapshot], list[PlayerSnapshot], TacticalStyle, TacticalStyle]:
        issues: list[ValidationIssue] = []
        issues.extend(self._roster_size_issues("home", home_ids))
        issues.extend(self._roster_size_issues("away", away_ids))

        styles: dict[str, TacticalStyle | None] = {}
        for side, code in (("home", home_tactic), ("away", away_tactic)):
            styles[side] = parse_tactic(code)
            if styles[side] is None:
                issues.append(
                    ValidationIssue(
                        code="INVALID_TACTIC",
                        severity="blocking",
                        field_path=f"{side}_tactic",
                        entity_id=side,
                        message=f"unknown tactical style code {code!r}",
                    )
                )

        if isinstance(referee_strictness, bool) or not isinstance(referee_strictness, int) or not (
            0 <= referee_strictness <= self._config.max_referee_strictness
        ):
            issues.append(
                ValidationIssue(
                    code="INVALID_REFEREE_STRICTNESS",
                    severity="blocking",
                    field_path="referee_strictness",
                    entity_id="match",
                    message=f"referee strictness must be within 0..{self._config.max_referee_strictness}",
                )
            )

        seen: set[str] = set()
        for player_id in list(home_ids) + list(away_ids):
            if player_id in seen:
                issues.append(
                    ValidationIssue(
                        code="DUPLICATE_PLAYER",
                        severity="blocking",
                        field_path="rosters",
                        entity_id=str(player_id),
                        message="player listed more than once",
                    )
                )
            seen.add(player_id)

        home = self._snapshots("home", home_ids, issues)
        away = self._snapshots("away", away_ids, issues)
        if issues:
            raise ValidationError(issues)
        return home, away, styles["home"], styles["away"]

    def _roster_size_issues(self, side: str, ids: Sequence[str]) -> list[ValidationIssue]:
        low, high = self._config.min_roster_size, self._config.max_roster_size
        if low <= len(ids) <= high:
            return []
        return [
            ValidationIssue(
                code="INVALID_ROSTER_SIZE",
                severity="blocking",
                field_path=f"{side}_ids",
                entity_id=side,
                message=f"roster size {len(ids)} outside {low}..{high}",
            )
        ]

    def _snapshots(self, side: str, ids: Sequence[str], issues: list[ValidationIssue]) -> list[PlayerSnapshot]:
        snapshots: list[PlayerSnapshot] = []
        for index, player_id in enumerate(ids):
            if not self._registry.exists(player_id):
                issues.append(
                    ValidationIssue(
                        code="UNKNOWN_PLAYER",
                        severity="blocking",
                        field_path=f"{side}_ids[{index}]",
                        entity_id=str(player_id),
                        message="player cannot be resolved in the registry",
                    )
                )
                continue
            attributes = self._registry.get_attributes(player_id)
            issues.extend(self._attribute_issues(player_id, attributes))
            snapshots.append(
                PlayerSnapshot(
                    player_id=player_id,
                    owner=self._registry.owner_of(player_id),
                    attributes=attributes,
                )
            )
        return snapshots

    def _attribute_issues(self, player_id: str, attributes: PlayerAttributes) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for f in fields(attributes):
            value = getattr(attributes, f.name)
            low, high = ATTRIBUTE_BOUNDS[f.name]
            if not isinstance(value, int) or not low <= value <= high:
                issues.append(
                    ValidationIssue(
                        code="ATTRIBUTE_OUT_OF_RANGE",
                        severity="blocking",
                        field_path=f"attributes.{f.name}",
                        entity_id=player_id,
                        message=f"{f.name}={value!r} outside {low}..{high}",
                    )
                )
        return issues
