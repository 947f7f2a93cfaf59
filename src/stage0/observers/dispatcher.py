# src/stage0/observers/dispatcher.py
from __future__ import annotations
import logging
from typing import List, Protocol
from .events import BaseEvent

log = logging.getLogger("stage0")


class Observer(Protocol):
    def notify(self, event: BaseEvent) -> None: ...


class EventBus:
    def __init__(self, observers: List[Observer] = None):
        self._observers = list(observers or [])

    def add(self, observer: Observer) -> None:
        self._observers.append(observer)

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                # observers must not break a run
                log.debug("observer %r failed", ob, exc_info=True)
