"""
FavTube - Queue Player
Sequential playback cursor over a fixed list of videos
"""

import threading
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple, Union

from ..errors import EmptyQueueError, ValidationError
from ..schemas import VideoRef


class PlayerState(str, Enum):
    EMPTY = "empty"
    READY = "ready"


class _EndOfQueue:
    """Returned by QueuePlayer.advance() after the last item"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "END_OF_QUEUE"

    def __bool__(self):
        return False


END_OF_QUEUE = _EndOfQueue()


class QueuePlayer:
    """
    Plays a materialized queue front to back, stopping at the end

    The queue is copied on load, later playlist edits do not affect it.
    """

    def __init__(self):
        self._queue: Tuple[VideoRef, ...] = ()
        self._position = 0

    @property
    def state(self) -> PlayerState:
        return PlayerState.READY if self._queue else PlayerState.EMPTY

    @property
    def position(self) -> int:
        return self._position

    @property
    def queue(self) -> Tuple[VideoRef, ...]:
        return self._queue

    @property
    def remaining(self) -> int:
        if not self._queue:
            return 0
        return len(self._queue) - self._position - 1

    def load(self, queue: Iterable[VideoRef]) -> None:
        items = tuple(queue)
        if not items:
            raise ValidationError("Cannot play an empty queue")
        self._queue = items
        self._position = 0

    def current(self) -> VideoRef:
        if not self._queue:
            raise EmptyQueueError("Nothing is playing")
        return self._queue[self._position]

    def advance(self) -> Union[VideoRef, _EndOfQueue]:
        if not self._queue:
            raise EmptyQueueError("Nothing is playing")
        if self._position + 1 >= len(self._queue):
            self.stop()
            return END_OF_QUEUE
        self._position += 1
        return self._queue[self._position]

    def retreat(self) -> VideoRef:
        if not self._queue:
            raise EmptyQueueError("Nothing is playing")
        self._position = max(0, self._position - 1)
        return self._queue[self._position]

    def stop(self) -> None:
        self._queue = ()
        self._position = 0


class PlayerRegistry:
    """One QueuePlayer per user, kept in process memory"""

    def __init__(self):
        self._players: Dict[str, QueuePlayer] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> QueuePlayer:
        with self._lock:
            player = self._players.get(user_id)
            if player is None:
                player = self._players[user_id] = QueuePlayer()
            return player

    def discard(self, user_id: str) -> Optional[QueuePlayer]:
        with self._lock:
            return self._players.pop(user_id, None)

    def find(self, user_id: str) -> Optional[QueuePlayer]:
        """Existing player for user_id; never creates one"""
        with self._lock:
            return self._players.get(user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)
