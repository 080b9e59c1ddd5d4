"""
Negotiation session storage abstraction.

Separates persistence from the engine for testability.
"""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import pydantic

from .schema import NegotiationSession

logger = logging.getLogger(__name__)


def ensure_dir(path: Path | str) -> Path:
    """Create a directory (and parents) if missing. Returns it as a Path."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


@runtime_checkable
class SessionStore(Protocol):
    """
    Storage interface for negotiation sessions.

    Implementations:
    - JsonSessionStore: File-based persistence (production)
    - MemorySessionStore: In-memory storage (testing)
    """

    def save(self, session: NegotiationSession) -> None:
        """Persist a session."""
        ...

    def load(self, session_id: str) -> NegotiationSession | None:
        """Load a session by ID. Returns None if not found."""
        ...

    def delete(self, session_id: str) -> bool:
        """Delete a session. Returns True if deleted."""
        ...

    def list_all(self) -> list[NegotiationSession]:
        """All sessions, most recently updated first."""
        ...

    def exists(self, session_id: str) -> bool:
        """Check if a session exists."""
        ...


class JsonSessionStore:
    """
    File-based session storage using JSON.

    Features:
    - Automatic backup on save
    - Partial ID matching on load
    """

    def __init__(self, sessions_dir: Path | str = "negotiations"):
        self.sessions_dir = ensure_dir(sessions_dir)

    def _path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    def _session_files(self):
        # Dotfiles (the user config) share the directory but are not sessions
        return (f for f in self.sessions_dir.glob("*.json") if not f.name.startswith("."))

    def _read(self, path: Path) -> NegotiationSession | None:
        try:
            return NegotiationSession.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, pydantic.ValidationError) as e:
            logger.warning(f"Skipping unreadable session file {path.name}: {e}")
            return None

    def save(self, session: NegotiationSession) -> None:
        """Save session to JSON file with backup."""
        session_file = self._path(session.id)

        if session_file.exists():
            backup = session_file.with_suffix(".json.bak")
            backup.write_text(session_file.read_text(encoding="utf-8"), encoding="utf-8")

        session_file.write_text(session.model_dump_json(indent=2), encoding="utf-8")

    def load(self, session_id: str) -> NegotiationSession | None:
        """
        Load session by ID or partial match.

        Supports:
        - Full ID: "a1b2c3d4"
        - Partial prefix: "a1b2"
        """
        session_file = self._path(session_id)

        if not session_file.exists() and session_id:
            for f in self._session_files():
                if f.stem.startswith(session_id):
                    session_file = f
                    break

        if session_file.exists():
            return self._read(session_file)
        return None

    def delete(self, session_id: str) -> bool:
        """Delete session file and its backup."""
        session_file = self._path(session_id)

        if session_file.exists():
            session_file.unlink()
            backup = session_file.with_suffix(".json.bak")
            if backup.exists():
                backup.unlink()
            return True

        return False

    def list_all(self) -> list[NegotiationSession]:
        """List all readable sessions, newest update first."""
        sessions = []
        for f in self._session_files():
            session = self._read(f)
            if session is not None:
                sessions.append(session)

        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions

    def exists(self, session_id: str) -> bool:
        return self._path(session_id).exists()


class MemorySessionStore:
    """
    In-memory session storage for testing.

    Stores copies, so mutating a loaded session does not change the
    stored one until it is saved again.
    """

    def __init__(self):
        self.sessions: dict[str, NegotiationSession] = {}

    def save(self, session: NegotiationSession) -> None:
        self.sessions[session.id] = session.model_copy(deep=True)

    def load(self, session_id: str) -> NegotiationSession | None:
        session = self.sessions.get(session_id)

        if session is None and session_id:
            session = next(
                (s for sid, s in self.sessions.items() if sid.startswith(session_id)),
                None,
            )

        return session.model_copy(deep=True) if session is not None else None

    def delete(self, session_id: str) -> bool:
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def list_all(self) -> list[NegotiationSession]:
        sessions = [s.model_copy(deep=True) for s in self.sessions.values()]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions

    def exists(self, session_id: str) -> bool:
        return session_id in self.sessions

    def clear(self) -> None:
        """Clear all sessions (test utility)."""
        self.sessions.clear()
