"""
Session Manager - Authoritative game sessions.

Clients send commands, never state. Each GameSession is the single
authority for one game: commands are applied one at a time under a lock,
and every accepted command bumps the version and pushes a fresh snapshot
to the registered listeners (the transport layer).

LIFECYCLE:
1. create_session -> lobby (status waiting)
2. join / set_ready for each player
3. start -> setup runs once every seated player is ready
4. submit commands until the game finishes
5. end_session -> removed from memory

Sessions are in-memory only. A snapshot can always be reloaded with
engine_core.load_state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import random
import threading
import time
import uuid

from ..catalog import Catalog
from ..config import RulesConfig, DEFAULT_RULES
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.serialization import serialize_state
from ..engine_core.state import GameState, GameStatus

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base error for session operations."""


class SessionNotFoundError(SessionError):
    """No session with that id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class LobbyError(SessionError):
    """Lobby operation not allowed in the current state."""


Listener = Callable[[dict[str, Any], ActionResult], None]


@dataclass
class GameSession:
    """
    One authoritative game.

    Contains:
    - The catalog and reducer
    - The canonical GameState
    - A version counter bumped on every accepted command
    - Listeners notified with (snapshot, result) after each accepted command
    """
    session_id: str
    catalog: Catalog
    config: RulesConfig = DEFAULT_RULES
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    version: int = 0
    state: GameState = field(init=False)
    reducer: Reducer = field(init=False)
    listeners: list[Listener] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        self.state = GameState.create(self.session_id, [])
        self.reducer = Reducer(self.catalog, self.config)

    @property
    def status(self) -> GameStatus:
        return self.state.status

    def is_active(self) -> bool:
        """Check if the game is still in the lobby or in progress."""
        return self.state.status != GameStatus.FINISHED

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------

    def join(self, player_id: str, name: str) -> None:
        """Seat a player. Seating order is join order."""
        with self._lock:
            if self.state.status != GameStatus.WAITING:
                raise LobbyError("Game already started")
            if player_id in self.state.players:
                raise LobbyError(f"Player {player_id} already joined")
            self.state.add_player(player_id, name)
            self._touch()
            logger.info("%s joined game %s", name, self.session_id)

    def set_ready(self, player_id: str, ready: bool = True) -> None:
        with self._lock:
            if self.state.status != GameStatus.WAITING:
                raise LobbyError("Game already started")
            player = self.state.get_player(player_id)
            if player is None:
                raise LobbyError(f"Player {player_id} has not joined")
            player.ready = ready
            self._touch()

    def all_ready(self) -> bool:
        players = self.state.players.values()
        return bool(self.state.players) and all(p.ready for p in players)

    def start(self, seed: int | None = None) -> dict[str, Any]:
        """
        Run setup once every seated player is ready.

        Returns the first snapshot.
        """
        with self._lock:
            if self.state.status != GameStatus.WAITING:
                raise LobbyError("Game already started")
            if not self.state.players:
                raise LobbyError("No players have joined")
            not_ready = [p.name for p in self.state.players.values() if not p.ready]
            if not_ready:
                raise LobbyError(f"Waiting for: {', '.join(not_ready)}")

            self.state.random_seed = seed if seed is not None else random.randrange(2**31)
            self.reducer.rules.setup_game(self.state)
            self.version += 1
            self._touch()
            snapshot = serialize_state(self.state)

        result = ActionResult.success_with_state(self.state, changes=["Game started"])
        self._notify(snapshot, result)
        return snapshot

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit(self, action: Action) -> ActionResult:
        """
        Apply one command atomically.

        Accepted commands bump the version and notify listeners.
        """
        with self._lock:
            result = self.reducer.apply(self.state, action)
            if not result.success:
                return result
            self.version += 1
            self._touch()
            snapshot = serialize_state(self.state)

        self._notify(snapshot, result)
        return result

    def snapshot(self) -> dict[str, Any]:
        """Serialized state, taken under the lock."""
        with self._lock:
            return serialize_state(self.state)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def _notify(self, snapshot: dict[str, Any], result: ActionResult) -> None:
        for listener in list(self.listeners):
            try:
                listener(snapshot, result)
            except Exception:
                logger.exception("Listener failed for game %s", self.session_id)

    def _touch(self) -> None:
        self.last_activity = time.time()


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions bound to a catalog
    - Track active sessions
    - Clean up finished or idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, catalog: Catalog, config: RulesConfig = DEFAULT_RULES):
        self.catalog = catalog
        self.config = config
        self._sessions: dict[str, GameSession] = {}
        self._lock = threading.Lock()

    def create_session(self, session_id: str | None = None) -> GameSession:
        """Create a new game in the lobby."""
        session_id = session_id or uuid.uuid4().hex[:12]
        with self._lock:
            if session_id in self._sessions:
                raise SessionError(f"Session {session_id} already exists")
            session = GameSession(session_id=session_id, catalog=self.catalog, config=self.config)
            self._sessions[session_id] = session
        logger.info("Created game %s", session_id)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> GameSession:
        """Get a session by ID or raise SessionNotFoundError."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """Remove a session from memory."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.listeners.clear()
        logger.info("Ended game %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions still in the lobby or in progress."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        Remove finished sessions, and any session idle longer than max_age.

        Called periodically to free memory.
        """
        now = time.time()
        stale = [
            sid for sid, session in list(self._sessions.items())
            if not session.is_active() or now - session.last_activity > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale
