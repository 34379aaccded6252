from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Sequence

from mfe.contracts import (
    ActionRequest,
    ActionResult,
    ActionType,
    EngineConfig,
    Match,
    PlayerRegistry,
    RandomnessConfig,
    RandomnessOracle,
    ValidationError,
)
from mfe.core import (
    AccessPolicy,
    EngineIntegrityError,
    EventBus,
    MatchEngineError,
    default_engine_config,
    entropy_random,
    load_engine_config,
    persist_forensic_artifact,
    seeded_random,
)
from mfe.football import MatchLifecycleController
from mfe.football.lifecycle import GATEWAY_IDENTITY
from mfe.oracle import LocalRandomnessOracle, RandomnessGateway
from mfe.persistence import AnalyticsStore, MatchStore, run_match_etl

logger = logging.getLogger(__name__)


class RuntimePaths:
    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def sqlite_path(self) -> Path:
        return self.root / "data" / "matches.sqlite3"

    @property
    def duckdb_path(self) -> Path:
        return self.root / "data" / "analytics.duckdb"

    @property
    def forensic_dir(self) -> Path:
        return self.root / "forensics"

    @property
    def config_path(self) -> Path:
        return self.root / "engine_config.json"


def match_view(match: Match) -> dict[str, Any]:
    return {
        "match_id": match.match_id,
        "status": match.status.value,
        "current_segment": match.current_segment,
        "home_score": match.home.score,
        "away_score": match.away.score,
        "home_power": [match.home.attack_power, match.home.defense_power],
        "away_power": [match.away.attack_power, match.away.defense_power],
        "last_request_id": match.last_request_id,
        "referee_strictness": match.referee_strictness,
        "scorers": [s.scorer_id for s in match.segments if s.goal],
        "awards": {a.player_id: a.amount for a in match.awards},
    }


class MatchRuntime:
    """Wires controller, gateway, event log and stores behind ``handle_action``."""

    def __init__(
        self,
        root: Path,
        registry: PlayerRegistry,
        *,
        seed: int | None = None,
        config: EngineConfig | None = None,
        oracle: RandomnessOracle | None = None,
    ) -> None:
        self.paths = RuntimePaths(root)
        self.paths.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        if config is None:
            config = load_engine_config(self.paths.config_path) if self.paths.config_path.exists() else default_engine_config()
        self.config = config
        self.seed = seed
        self.rand = seeded_random(seed) if seed is not None else entropy_random()

        self.store = MatchStore(self.paths.sqlite_path)
        self.store.initialize_schema()
        self.event_bus = EventBus(start_sequence=self.store.last_sequence())
        self.event_bus.subscribe(self.store.append_event)

        self.oracle = oracle or LocalRandomnessOracle(self.rand.spawn("oracle"))
        self.gateway = RandomnessGateway(self.oracle, config.randomness)
        if isinstance(self.oracle, LocalRandomnessOracle) and self.oracle.gateway is None:
            self.oracle.gateway = self.gateway
        self.access = AccessPolicy(config.role_grants)
        self.controller = MatchLifecycleController(
            registry,
            self.gateway,
            event_bus=self.event_bus,
            config=config,
            access=self.access,
        )
        self.gateway.bind(self._supply_and_persist)

        self.halted = False
        self.last_forensic_path: str | None = None

    def handle_action(self, request: ActionRequest) -> ActionResult:
        if self.halted:
            return ActionResult(
                request.request_id,
                False,
                f"runtime halted after integrity failure; forensic={self.last_forensic_path}",
                {"forensic_path": self.last_forensic_path},
            )

        try:
            return self._handle_action_core(request)
        except EngineIntegrityError as exc:
            self._halt(exc)
            return ActionResult(
                request.request_id,
                False,
                f"integrity failure: {exc.artifact.error_code}",
                {"forensic_path": self.last_forensic_path},
            )

    def deliver_pending(self, limit: int | None = None) -> int:
        """Drain the local oracle queue. Returns the number of accepted fulfilments."""
        if not isinstance(self.oracle, LocalRandomnessOracle):
            raise RuntimeError("deliver_pending requires the local randomness oracle")
        accepted = 0
        while not self.halted and (limit is None or accepted < limit):
            pending = self.oracle.undelivered()
            if not pending:
                break
            try:
                if self.oracle.deliver(pending[0].token):
                    accepted += 1
            except EngineIntegrityError as exc:
                self._halt(exc)
        return accepted

    def refresh_analytics(self) -> AnalyticsStore:
        return run_match_etl(self.paths.sqlite_path, self.paths.duckdb_path)

    def _handle_action_core(self, request: ActionRequest) -> ActionResult:
        caller = self.access.identity(request.caller_id)
        payload = request.payload
        try:
            action = ActionType(request.action_type)
        except ValueError:
            return ActionResult(request.request_id, False, f"unsupported action: {request.action_type}")

        try:
            if action == ActionType.CREATE_MATCH:
                match_id = self.controller.create_match(
                    caller,
                    list(payload.get("home_ids", [])),
                    list(payload.get("away_ids", [])),
                    payload.get("home_tactic", 0),
                    payload.get("away_tactic", 0),
                    payload.get("referee_strictness", 0),
                )
                return self._match_result(request, "match created", match_id)

            if action == ActionType.FULFILL_RANDOMNESS:
                request_id = str(payload["request_id"])
                words = list(payload["words"])
                if any(isinstance(w, bool) or not isinstance(w, int) for w in words):
                    return ActionResult(request.request_id, False, "invalid payload: random words must be integers")
                match_id = self.gateway.lookup(request_id)
                outcome = self.controller.fulfill(caller, request_id, words)
                result = self._match_result(request, f"segment {outcome.segment_index} resolved", match_id)
                result.data["outcome"] = asdict(outcome)
                return result

            if action == ActionType.TRIGGER_NEXT_SEGMENT:
                match_id = str(payload["match_id"])
                token = self.controller.trigger_next_segment(caller, match_id)
                result = self._match_result(request, "next segment requested", match_id)
                result.data["request_id"] = token
                return result

            if action == ActionType.FORCE_FAIL:
                match_id = str(payload["match_id"])
                self.controller.force_fail(caller, match_id, payload.get("request_id"))
                return self._match_result(request, "match failed", match_id)

            if action == ActionType.CONFIGURE_RANDOMNESS:
                current = self.gateway.config
                config = RandomnessConfig(
                    key_hash=str(payload.get("key_hash", current.key_hash)),
                    confirmations=int(payload.get("confirmations", current.confirmations)),
                    callback_limit=int(payload.get("callback_limit", current.callback_limit)),
                    word_count=int(payload.get("word_count", current.word_count)),
                )
                self.controller.configure_randomness(caller, config)
                return ActionResult(request.request_id, True, "randomness configured", asdict(config))

            if action == ActionType.GET_MATCH:
                match = self.controller.get_match(str(payload["match_id"]))
                return ActionResult(request.request_id, True, "ok", match_view(match))

            if action == ActionType.LIST_MATCHES:
                return ActionResult(
                    request.request_id,
                    True,
                    "ok",
                    {"matches": [match_view(m) for m in self.controller.matches()]},
                )

            if action == ActionType.GET_PENDING_REQUESTS:
                return ActionResult(
                    request.request_id,
                    True,
                    "ok",
                    {"pending": [asdict(p) for p in self.gateway.pending()]},
                )
        except ValidationError as exc:
            return ActionResult(
                request.request_id,
                False,
                "validation failed",
                {"issues": [asdict(i) for i in exc.issues]},
            )
        except MatchEngineError as exc:
            logger.info("action rejected action=%s caller=%s error=%s", action.value, caller.caller_id, exc)
            return ActionResult(request.request_id, False, str(exc), {"error_code": exc.code})
        except (KeyError, TypeError, ValueError) as exc:
            return ActionResult(request.request_id, False, f"invalid payload: {exc}")

        return ActionResult(request.request_id, False, f"unsupported action: {action.value}")

    def _match_result(self, request: ActionRequest, message: str, match_id: str) -> ActionResult:
        match = self.controller.get_match(match_id)
        self.store.save_match(match)
        return ActionResult(request.request_id, True, message, match_view(match))

    def _supply_and_persist(self, request_id: str, words: Sequence[int]) -> object:
        match_id = self.gateway.lookup(request_id)
        outcome = self.controller.fulfill(GATEWAY_IDENTITY, request_id, words)
        self.store.save_match(self.controller.get_match(match_id))
        return outcome

    def _halt(self, exc: EngineIntegrityError) -> None:
        match_id = exc.artifact.identifiers.get("match_id")
        if match_id is not None:
            self.store.save_match(self.controller.get_match(match_id))
        self.last_forensic_path = str(persist_forensic_artifact(exc.artifact, self.paths.forensic_dir))
        self.halted = True
        logger.error("runtime halted error_code=%s forensic=%s", exc.artifact.error_code, self.last_forensic_path)
