"""
"Data changed" channel.

The storage layer publishes after every successful write; anything that keeps
derived state (the calendar day cache, for instance) subscribes and drops what
it holds. Subscribers run synchronously on the writer's thread.
"""
import logging
from typing import Callable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class DataChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    collection: str
    action: Literal['create', 'update', 'delete']
    document_id: Optional[str] = None


Subscriber = Callable[[DataChange], None]


class DataChangeBus:
    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: DataChange) -> None:
        # a failing subscriber must not withhold the notification from the others
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception("data change subscriber %r failed on %s", callback, change)


bus = DataChangeBus()
