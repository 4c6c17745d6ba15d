from typing import Dict, Optional

from common.core.exceptions import ProcessingError
from packages.generation.models.domain.session import GenerationSession


class SessionRegistry:
    """Active sessions of this process, keyed by session id."""

    def __init__(self):
        self._sessions: Dict[str, GenerationSession] = {}

    def register(self, session: GenerationSession) -> None:
        if session.session_id in self._sessions:
            raise ProcessingError(f"Session {session.session_id} is already registered")
        self._sessions[session.session_id] = session

    def get(self, session_id: str) -> Optional[GenerationSession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[GenerationSession]:
        return self._sessions.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
