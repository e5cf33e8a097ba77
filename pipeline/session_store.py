"""Session Store: persists pipelines as JSON, one file per session.

Layout: <settings.session_dir>/<session_id>.json
"""
import logging
from pathlib import Path

from models.pipeline import Pipeline
from settings import Settings

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, settings: Settings) -> None:
        self._root = settings.session_dir

    def path_for(self, session_id: str) -> Path:
        """Raises ValueError for ids that would leave the session directory."""
        if not session_id or session_id in (".", "..") or "/" in session_id or "\\" in session_id:
            raise ValueError(f"Invalid session id {session_id!r}")
        return self._root / f"{session_id}.json"

    def save(self, pipeline: Pipeline) -> Path:
        """Write the pipeline (steps, progress, assets) and return the file path."""
        self._root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(pipeline.session_id)
        path.write_text(pipeline.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("Saved session %s → %s", pipeline.session_id, path)
        return path

    def load(self, session_id: str) -> Pipeline:
        """Read a stored pipeline. Raises FileNotFoundError for unknown sessions."""
        path = self.path_for(session_id)
        if not path.exists():
            raise FileNotFoundError(f"No stored session {session_id!r} at {path}")
        return Pipeline.model_validate_json(path.read_text(encoding="utf-8"))

    def exists(self, session_id: str) -> bool:
        return self.path_for(session_id).exists()

    def list_sessions(self) -> list[str]:
        """Stored session ids, oldest file first."""
        if not self._root.exists():
            return []
        files = sorted(self._root.glob("*.json"), key=lambda p: p.stat().st_mtime)
        return [p.stem for p in files]
