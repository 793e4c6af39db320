"""
Bus d'événements typé — abonnement explicite aux changements de l'éditeur.

Le BlockStore possède le bus ; l'historique, l'autosave et l'API s'y
abonnent directement (pas de diffusion globale).
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

log = logging.getLogger(__name__)


class Topic(str, Enum):
    BLOCKS_CHANGED      = "blocks.changed"
    SELECTION_CHANGED   = "selection.changed"
    SITE_CHANGED        = "site.changed"
    SAVE_STATUS_CHANGED = "save.status_changed"
    PUBLISHED           = "site.published"


@dataclass(frozen=True)
class Event:
    topic:   Topic
    payload: Dict[str, Any] = field(default_factory=dict)


Handler = Callable[[Event], None]


class EventBus:
    def __init__(self):
        self._handlers: Dict[Topic, List[Handler]] = defaultdict(list)

    def subscribe(self, topic: Topic, handler: Handler) -> Callable[[], None]:
        """Abonne handler au topic. Retourne la fonction de désabonnement."""
        self._handlers[topic].append(handler)

        def unsubscribe():
            if handler in self._handlers[topic]:
                self._handlers[topic].remove(handler)

        return unsubscribe

    def publish(self, topic: Topic, **payload) -> Event:
        event = Event(topic=topic, payload=payload)
        for handler in list(self._handlers[topic]):
            try:
                handler(event)
            except Exception:
                log.exception("Handler %r en échec sur %s", handler, topic.value)
        return event

    def subscribers(self, topic: Topic) -> int:
        return len(self._handlers[topic])
