from __future__ import annotations

import logging
import threading
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Sequence

from mfe.contracts import (
    ActionType,
    CallerIdentity,
    EngineConfig,
    Match,
    MatchEventType,
    MatchStatus,
    PlayerRegistry,
    ProgressionPolicy,
    RandomnessConfig,
    Role,
    SegmentOutcome,
    Side,
    TeamRoster,
)
from mfe.core.access import AccessPolicy
from mfe.core.config import default_engine_config
from mfe.core.errors import EngineIntegrityError, StateError, TerminalStateError, build_forensic_artifact
from mfe.core.events import EventBus
from mfe.core.ids import make_id, now_utc
from mfe.football.power import TeamPowerCalculator
from mfe.football.rewards import RewardDistributor, RewardSubmissionError, compute_awards
from mfe.football.segment import SegmentEventSimulator, batch_problem
from mfe.football.validation import RosterValidator
from mfe.oracle.gateway import PendingRequest, RandomnessGateway

logger = logging.getLogger(__name__)

GATEWAY_IDENTITY = CallerIdentity(caller_id="randomness_gateway", roles=frozenset({Role.ORACLE}))


def match_snapshot(match: Match) -> dict[str, object]:
    return {
        "match_id": match.match_id,
        "status": match.status.value,
        "current_segment": match.current_segment,
        "home_score": match.home.score,
        "away_score": match.away.score,
        "last_request_id": match.last_request_id,
    }


class MatchLifecycleController:
    """Owns match entities and drives Setup -> Active <-> Cooldown -> Concluded | Failed.

    Every mutating operation takes the calling identity and checks it against
    the access policy before touching state. A match never has more than one
    live randomness request; ``current_segment`` only moves inside ``fulfill``.
    """

    def __init__(
        self,
        registry: PlayerRegistry,
        gateway: RandomnessGateway,
        *,
        event_bus: EventBus,
        config: EngineConfig | None = None,
        access: AccessPolicy | None = None,
        power_calculator: TeamPowerCalculator | None = None,
        simulator: SegmentEventSimulator | None = None,
        distributor: RewardDistributor | None = None,
    ) -> None:
        self._config = config or default_engine_config()
        self._config.validate()
        self._registry = registry
        self._gateway = gateway
        self._event_bus = event_bus
        self._access = access or AccessPolicy(self._config.role_grants)
        self._validator = RosterValidator(registry, self._config)
        self._power = power_calculator or TeamPowerCalculator()
        self._simulator = simulator or SegmentEventSimulator()
        self._distributor = distributor or RewardDistributor(registry, event_bus)
        self._matches: dict[str, Match] = {}
        self._locks: defaultdict[str, threading.RLock] = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()
        gateway.bind(self._fulfill_from_gateway)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def create_match(
        self,
        caller: CallerIdentity,
        home_ids: Sequence[str],
        away_ids: Sequence[str],
        home_tactic: object,
        away_tactic: object,
        referee_strictness: int = 0,
    ) -> str:
        self._access.require(caller, ActionType.CREATE_MATCH)
        home_players, away_players, home_style, away_style = self._validator.snapshot_rosters(
            home_ids, away_ids, home_tactic, away_tactic, referee_strictness
        )
        match = Match(
            match_id=make_id("match"),
            home=TeamRoster(players=home_players, tactical_style=home_style),
            away=TeamRoster(players=away_players, tactical_style=away_style),
            initiator=caller.caller_id,
            created_at=now_utc(),
            referee_strictness=referee_strictness,
            status=MatchStatus.SETUP,
        )
        self._power.refresh(match.home, is_home=True)
        self._power.refresh(match.away, is_home=False)

        with self._lock_for(match.match_id):
            # The match is only stored once its first request is live.
            token = self._gateway.request_randomness(match.match_id, self._purpose(match))
            match.last_request_id = token
            match.status = MatchStatus.ACTIVE
            self._matches[match.match_id] = match
            self._event_bus.publish(
                MatchEventType.MATCH_CREATED,
                match.match_id,
                initiator=caller.caller_id,
                home_players=match.home.player_ids(),
                away_players=match.away.player_ids(),
                home_tactic=home_style.name.lower(),
                away_tactic=away_style.name.lower(),
                referee_strictness=referee_strictness,
            )
            self._publish_requested(match, token)
        logger.info("match created match=%s initiator=%s token=%s", match.match_id, caller.caller_id, token)
        return match.match_id

    def fulfill(self, caller: CallerIdentity, request_id: str, words: Sequence[int]) -> SegmentOutcome:
        self._access.require(caller, ActionType.FULFILL_RANDOMNESS)
        match_id = self._gateway.lookup(request_id)
        with self._lock_for(match_id):
            # A concurrent delivery may have consumed the token while we waited.
            self._gateway.lookup(request_id)
            match = self._get(match_id)
            if match.status.terminal:
                raise TerminalStateError(f"match '{match_id}' is {match.status.value}")
            if match.status not in (MatchStatus.ACTIVE, MatchStatus.COOLDOWN):
                raise StateError(f"match '{match_id}' cannot accept randomness while {match.status.value}")
            problem = batch_problem(words)
            if problem is not None:
                raise self._malformed_words(match, request_id, words, problem)

            self._gateway.consume(request_id)
            segment_index = match.current_segment + 1
            self._event_bus.publish(
                MatchEventType.SEGMENT_SIMULATION_STARTED,
                match_id,
                segment=segment_index,
                request_id=request_id,
            )
            home_power = self._power.refresh(match.home, is_home=True)
            away_power = self._power.refresh(match.away, is_home=False)
            outcome = self._simulator.simulate(
                words,
                segment_index=segment_index,
                home=match.home,
                away=match.away,
                home_power=home_power,
                away_power=away_power,
                referee_strictness=match.referee_strictness,
            )
            self._apply_outcome(match, outcome)

            if match.current_segment >= self._config.segment_count:
                self._conclude(match)
            else:
                match.status = MatchStatus.COOLDOWN
                if self._config.progression is ProgressionPolicy.AUTO:
                    self._issue_request(match, MatchStatus.ACTIVE)
            return outcome

    def trigger_next_segment(self, caller: CallerIdentity, match_id: str) -> str:
        self._access.require(caller, ActionType.TRIGGER_NEXT_SEGMENT)
        with self._lock_for(match_id):
            match = self._get(match_id)
            if match.status.terminal:
                raise TerminalStateError(f"match '{match_id}' is {match.status.value}")
            if match.status is not MatchStatus.COOLDOWN:
                raise StateError(f"match '{match_id}' can only be resumed from cooldown, not {match.status.value}")
            if self._gateway.outstanding_for(match_id) is not None:
                raise StateError(f"match '{match_id}' already awaits randomness")
            return self._issue_request(match, MatchStatus.COOLDOWN)

    def force_fail(self, caller: CallerIdentity, match_id: str, request_id: str | None = None) -> None:
        self._access.require(caller, ActionType.FORCE_FAIL)
        with self._lock_for(match_id):
            match = self._get(match_id)
            if match.status.terminal:
                raise TerminalStateError(f"match '{match_id}' is already {match.status.value}")
            if match.status not in (MatchStatus.ACTIVE, MatchStatus.COOLDOWN):
                raise StateError(f"match '{match_id}' cannot be failed while {match.status.value}")
            purged = self._gateway.purge(request_id, match_id)
            stray = self._gateway.outstanding_for(match_id)
            if stray is not None:
                self._gateway.purge(stray, match_id)
            match.status = MatchStatus.FAILED
            match.failed_at = now_utc()
            self._event_bus.publish(
                MatchEventType.RANDOMNESS_REQUEST_FAILED,
                match_id,
                request_id=request_id,
                purged=purged,
                stray_request_id=stray,
                segment=match.current_segment,
                failed_by=caller.caller_id,
            )
        logger.warning("match force-failed match=%s token=%s by=%s", match_id, request_id, caller.caller_id)

    def configure_randomness(self, caller: CallerIdentity, config: RandomnessConfig) -> None:
        self._access.require(caller, ActionType.CONFIGURE_RANDOMNESS)
        self._gateway.configure(config)
        self._config.randomness = config
        logger.info("randomness reconfigured by=%s key_hash=%s", caller.caller_id, config.key_hash)

    def get_match(self, match_id: str) -> Match:
        return self._get(match_id)

    def matches(self) -> list[Match]:
        return sorted(self._matches.values(), key=lambda m: m.created_at)

    def stale_requests(self, older_than: timedelta, now: datetime | None = None) -> list[PendingRequest]:
        cutoff = (now or now_utc()) - older_than
        return [p for p in self._gateway.pending() if p.issued_at <= cutoff]

    def _fulfill_from_gateway(self, request_id: str, words: Sequence[int]) -> SegmentOutcome:
        return self.fulfill(GATEWAY_IDENTITY, request_id, words)

    def _issue_request(self, match: Match, next_status: MatchStatus) -> str:
        token = self._gateway.request_randomness(match.match_id, self._purpose(match))
        match.last_request_id = token
        match.status = next_status
        self._publish_requested(match, token)
        return token

    def _apply_outcome(self, match: Match, outcome: SegmentOutcome) -> None:
        match.segments.append(outcome)
        match.current_segment += 1
        self._event_bus.publish(
            MatchEventType.SEGMENT_RESOLVED,
            match.match_id,
            segment=outcome.segment_index,
            attacking_side=outcome.attacking_side.value,
            segment_event=outcome.event_type.value,
            success_rate=outcome.success_rate,
            accuracy=outcome.accuracy.value if outcome.accuracy else None,
            goal=outcome.goal,
        )
        if not outcome.goal:
            return
        roster = match.roster(outcome.attacking_side)
        roster.score += 1
        roster.players[outcome.scorer_index].goals_scored += 1
        self._event_bus.publish(
            MatchEventType.GOAL_SCORED,
            match.match_id,
            segment=outcome.segment_index,
            side=outcome.attacking_side.value,
            scorer_id=outcome.scorer_id,
            home_score=match.home.score,
            away_score=match.away.score,
        )

    def _conclude(self, match: Match) -> None:
        # Terminal before the first registry write.
        match.awards = compute_awards(match, match.current_segment)
        match.status = MatchStatus.CONCLUDED
        match.concluded_at = now_utc()
        try:
            self._distributor.submit(match, match.awards)
        except RewardSubmissionError as exc:
            raise self._payout_failed(match, exc) from exc
        home_score, away_score = match.scoreline
        if home_score == away_score:
            winner = None
        else:
            winner = Side.HOME.value if home_score > away_score else Side.AWAY.value
        self._event_bus.publish(
            MatchEventType.MATCH_CONCLUDED,
            match.match_id,
            home_score=home_score,
            away_score=away_score,
            winner=winner,
            segments=match.current_segment,
        )
        logger.info("match concluded match=%s score=%d-%d", match.match_id, home_score, away_score)

    def _publish_requested(self, match: Match, token: str) -> None:
        self._event_bus.publish(
            MatchEventType.RANDOMNESS_REQUESTED,
            match.match_id,
            request_id=token,
            segment=match.current_segment + 1,
            status=match.status.value,
        )

    def _purpose(self, match: Match) -> str:
        return f"{match.match_id}:segment:{match.current_segment + 1}"

    def _malformed_words(
        self, match: Match, request_id: str, words: Sequence[object], problem: str
    ) -> EngineIntegrityError:
        artifact = build_forensic_artifact(
            engine_scope="match_lifecycle",
            error_code="MALFORMED_RANDOM_WORDS",
            message=problem,
            state_snapshot=match_snapshot(match),
            context={"word_count": len(words), "word_types": sorted({type(w).__name__ for w in words})},
            identifiers={"match_id": match.match_id, "request_id": request_id},
            causal_fragment=["randomness_fulfilment", "word_batch_validation"],
        )
        return EngineIntegrityError(artifact)

    def _payout_failed(self, match: Match, exc: RewardSubmissionError) -> EngineIntegrityError:
        artifact = build_forensic_artifact(
            engine_scope="reward_distribution",
            error_code="REWARD_SUBMISSION_FAILED",
            message=str(exc),
            state_snapshot=match_snapshot(match),
            context={"paid": exc.paid, "unpaid": exc.unpaid, "cause": repr(exc.__cause__)},
            identifiers={"match_id": match.match_id, "player_id": exc.award.player_id},
            causal_fragment=["segment_budget_reached", "experience_submission"],
        )
        return EngineIntegrityError(artifact)

    def _get(self, match_id: str) -> Match:
        match = self._matches.get(match_id)
        if match is None:
            raise StateError(f"unknown match '{match_id}'")
        return match

    def _lock_for(self, match_id: str) -> threading.RLock:
        with self._locks_guard:
            return self._locks[match_id]
