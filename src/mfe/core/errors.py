from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from mfe.contracts import ForensicArtifact
from mfe.core.ids import make_id, now_utc


class MatchEngineError(RuntimeError):
    """Base class for rejected match operations. Raised before any mutation."""

    code = "MATCH_ENGINE_ERROR"


class StateError(MatchEngineError):
    code = "INVALID_STATE"


class TerminalStateError(StateError):
    code = "TERMINAL_STATE"


class CorrelationError(MatchEngineError):
    code = "UNKNOWN_REQUEST"


class AccessDeniedError(MatchEngineError):
    code = "ACCESS_DENIED"


class EngineIntegrityError(RuntimeError):
    """A broken collaborator or programming error. The host halts and keeps the artifact."""

    def __init__(self, artifact: ForensicArtifact) -> None:
        super().__init__(artifact.message)
        self.artifact = artifact


def build_forensic_artifact(
    *,
    engine_scope: str,
    error_code: str,
    message: str,
    state_snapshot: dict[str, object],
    context: dict[str, object] | None = None,
    identifiers: dict[str, str] | None = None,
    causal_fragment: list[str] | None = None,
) -> ForensicArtifact:
    return ForensicArtifact(
        artifact_id=make_id("forensic"),
        timestamp=now_utc(),
        engine_scope=engine_scope,
        error_code=error_code,
        message=message,
        state_snapshot=state_snapshot,
        context=context or {},
        identifiers=identifiers or {},
        causal_fragment=causal_fragment or [],
    )


def persist_forensic_artifact(artifact: ForensicArtifact, output_dir: Path) -> Path:
    """Write ``<scope>/<match>_<error>_<id>.json`` under ``output_dir`` and return the path."""
    match_id = artifact.identifiers.get("match_id", "no_match")
    target = output_dir / artifact.engine_scope
    target.mkdir(parents=True, exist_ok=True)
    path = target / f"{match_id}_{artifact.error_code.lower()}_{artifact.artifact_id}.json"
    path.write_text(json.dumps(asdict(artifact), default=str, indent=2, sort_keys=True), encoding="utf-8")
    return path
