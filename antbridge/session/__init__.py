"""
Session Module - Authoritative game sessions.

A session represents one play-through of a game:
- Created in the lobby, started once every player is ready
- Holds the canonical game state
- Serializes all commands through one lock
- Broadcasts snapshots to listeners after each accepted command

Sessions are in-memory only.
"""

from .manager import (
    GameSession,
    SessionManager,
    SessionError,
    SessionNotFoundError,
    LobbyError,
)

__all__ = [
    "GameSession",
    "SessionManager",
    "SessionError",
    "SessionNotFoundError",
    "LobbyError",
]
