"""
In-process fan-out of order change events.

The admin dashboard keeps an order count badge fresh by listening on a
server-sent events stream; every open stream holds one subscriber queue.
"""
import json
import logging
import queue
import threading

logger = logging.getLogger(__name__)


class OrderFeed:
    def __init__(self, maxsize=100):
        self.maxsize = maxsize
        self._subscribers = []
        self._lock = threading.Lock()

    def subscribe(self):
        q = queue.Queue(maxsize=self.maxsize)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q):
        with self._lock:
            if q in self._subscribers:
                self._subscribers.remove(q)

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def publish(self, event, order_id, count):
        message = {"event": event, "order_id": order_id, "count": count}
        with self._lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            try:
                q.put_nowait(message)
            except queue.Full:
                logger.warning(f"Order feed subscriber is full, dropped {event} for order {order_id}")
        return len(subscribers)


def format_sse(data, event=None):
    msg = f"data: {json.dumps(data)}\n\n"
    if event is not None:
        msg = f"event: {event}\n{msg}"
    return msg


order_feed = OrderFeed()
