from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

# Qué tabla cambió: las vistas suscritas releen la tabla completa
Topic = Literal["patients", "visits"]

PATIENTS: Topic = "patients"
VISITS: Topic = "visits"


@dataclass
class EventBus:
    _subs: dict[Topic, list[Callable[[], None]]] = field(default_factory=dict)

    def subscribe(self, topic: Topic, fn: Callable[[], None]) -> None:
        self._subs.setdefault(topic, []).append(fn)

    def publish(self, topic: Topic) -> None:
        for fn in self._subs.get(topic, []):
            fn()
