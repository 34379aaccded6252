from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict

from mfe.contracts import MatchEvent, MatchEventType
from mfe.core.ids import now_utc

MatchEventHandler = Callable[[MatchEvent], None]


class EventBus:
    """Ordered match event stream.

    Every published event gets the next global sequence number, so the
    history (and anything a subscriber persists) replays in emission order.
    """

    def __init__(self, start_sequence: int = 0) -> None:
        self._handlers: list[MatchEventHandler] = []
        self._history: list[MatchEvent] = []
        self._counter: DefaultDict[MatchEventType, int] = defaultdict(int)
        self._sequence = start_sequence

    def subscribe(self, handler: MatchEventHandler) -> None:
        self._handlers.append(handler)

    def publish(self, event_type: MatchEventType, match_id: str, **payload: Any) -> MatchEvent:
        self._sequence += 1
        event = MatchEvent(
            sequence=self._sequence,
            event_type=event_type,
            match_id=match_id,
            time=now_utc(),
            payload=payload,
        )
        self._history.append(event)
        self._counter[event_type] += 1
        for handler in self._handlers:
            handler(event)
        return event

    def history(self, match_id: str | None = None) -> list[MatchEvent]:
        if match_id is None:
            return list(self._history)
        return [e for e in self._history if e.match_id == match_id]

    def emitted_count(self, event_type: MatchEventType | None = None) -> int:
        if event_type is None:
            return sum(self._counter.values())
        return self._counter[event_type]
