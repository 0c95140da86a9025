from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple
import time
import uuid

MIN_NUMBER = 1
MAX_NUMBER = 90
CARD_SIZE = 5


class SessionStatus(str, Enum):
    WAITING = 'waiting'
    ACTIVE = 'active'


def generate_id() -> str:
    """Generate an opaque id for a session or player.

    uuid4 carries 122 random bits, so the chance of any collision among n
    ids is roughly n**2 / 2**123 (below 1e-25 for a million ids). Session
    ids double as unlisted room addresses; they are hard to guess but are
    not secrets.
    """
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def empty_marks() -> List[List[bool]]:
    return [[False] * CARD_SIZE for _ in range(CARD_SIZE)]


@dataclass
class Session:
    id: str
    status: SessionStatus = SessionStatus.WAITING
    drawn_numbers: List[int] = field(default_factory=list)
    created_at: int = field(default_factory=now_ms)

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status.value,
            'drawnNumbers': list(self.drawn_numbers),
            'createdAt': self.created_at,
        }


@dataclass
class Player:
    id: str
    session_id: str
    card: Tuple[Tuple[int, ...], ...]
    marked: List[List[bool]] = field(default_factory=empty_marks)
    created_at: int = field(default_factory=now_ms)

    def to_dict(self):
        return {
            'id': self.id,
            'sessionId': self.session_id,
            'card': [list(row) for row in self.card],
            'marked': [list(row) for row in self.marked],
            'createdAt': self.created_at,
        }
