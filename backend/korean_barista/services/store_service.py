# backend/korean_barista/services/store_service.py
"""
Learner store: profile, settings, points, history and mistake records.

The whole document is persisted as one JSON file named after the storage key.
The store is owned by the application shell and handed to the endpoints; the
analysis engine never touches it.
"""
import json
import logging
import os
import random
import string
import tempfile
import threading
import time

from pydantic import ValidationError

from ..models_api import schemas

logger = logging.getLogger(__name__)

POINTS_PER_LEVEL = 100
EXPORT_VERSION = 0


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=9))


class UserStore:
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self.state = self._load()

    def _default_state(self) -> schemas.UserState:
        return schemas.UserState(joinDate=_now_ms())

    def _load(self) -> schemas.UserState:
        if not os.path.exists(self.path):
            logger.info(f"No learner store at {self.path}, starting with defaults.")
            return self._default_state()
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            return schemas.UserState.model_validate(raw.get("state", raw))
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.error(f"Could not read learner store {self.path}: {e}. Starting with defaults.", exc_info=True)
            return self._default_state()

    def _save(self, state: schemas.UserState):
        """Writes the given state to disk. The file is only replaced once the new document is complete."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._document(state), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
            logger.debug(f"Saved learner store to {self.path}")
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _commit(self, state: schemas.UserState) -> schemas.UserState:
        # Caller holds the lock; memory only follows a successful write
        self._save(state)
        self.state = state
        return state

    def _draft(self) -> schemas.UserState:
        return self.state.model_copy(deep=True)

    # --- Profile & settings ---

    def update_profile(self, updates: dict) -> schemas.UserProfile:
        with self._lock:
            state = self._draft()
            merged = {**state.profile.model_dump(), **{k: v for k, v in updates.items() if v is not None}}
            state.profile = schemas.UserProfile.model_validate(merged)
            return self._commit(state).profile

    def update_settings(self, updates: dict) -> schemas.UserSettings:
        with self._lock:
            state = self._draft()
            merged = {**state.settings.model_dump(), **{k: v for k, v in updates.items() if v is not None}}
            state.settings = schemas.UserSettings.model_validate(merged)
            return self._commit(state).settings

    # --- Game data ---

    @staticmethod
    def _award(state: schemas.UserState, amount: int):
        state.points += amount
        # Level up every 100 points
        state.level = state.points // POINTS_PER_LEVEL + 1

    def add_points(self, amount: int) -> schemas.UserState:
        with self._lock:
            state = self._draft()
            self._award(state, amount)
            return self._commit(state)

    def add_history(self, record: dict) -> schemas.TypingHistory:
        with self._lock:
            state = self._draft()
            entry = schemas.TypingHistory(id=_new_id(), **record)
            state.history.append(entry)
            self._commit(state)
            return entry

    def add_mistake(self, record: dict) -> schemas.MistakeRecord:
        with self._lock:
            state = self._draft()
            entry = schemas.MistakeRecord(id=_new_id(), **record)
            state.mistakes.append(entry)
            self._commit(state)
            return entry

    def record_attempt(self, points: int, history: dict, mistakes: list) -> schemas.UserState:
        """
        Saves one finished attempt (points, its history entry and its mistake
        records) in a single write. Nothing is kept if the write fails.
        """
        with self._lock:
            state = self._draft()
            self._award(state, points)
            state.history.append(schemas.TypingHistory(id=_new_id(), **history))
            state.mistakes.extend(schemas.MistakeRecord(id=_new_id(), **m) for m in mistakes)
            return self._commit(state)

    def clear_history(self):
        with self._lock:
            state = self._draft()
            state.history = []
            state.mistakes = []
            state.points = 0
            state.level = 1
            self._commit(state)
        logger.info("Cleared learner history, mistakes and points.")

    # --- Backup ---

    @staticmethod
    def _document(state: schemas.UserState) -> dict:
        return {"state": state.model_dump(), "version": EXPORT_VERSION}

    def export_data(self) -> dict:
        """Backup document, wrapped the same way the browser store persisted it."""
        return self._document(self.state)

    def import_data(self, data) -> bool:
        """
        Restores a backup. Accepts either the raw state or the {"state": ..., "version": ...}
        wrapper produced by export_data. Returns False and leaves the store untouched
        when the document is not a usable backup.
        """
        if isinstance(data, dict) and isinstance(data.get("state"), dict):
            data = data["state"]
        if not isinstance(data, dict) or not isinstance(data.get("history"), list):
            logger.warning("Rejected import: document has no history list.")
            return False

        with self._lock:
            current = self.state.model_dump()
            try:
                merged = {
                    **current,
                    **data,
                    "history": data.get("history") or [],
                    "mistakes": data.get("mistakes") or [],
                    "points": data.get("points") or 0,
                    "level": data.get("level") or 1,
                    "profile": {**current["profile"], **(data.get("profile") or {})},
                    "settings": {**current["settings"], **(data.get("settings") or {})},
                }
                state = schemas.UserState.model_validate(merged)
            except (TypeError, ValidationError) as e:
                logger.warning(f"Rejected import: {e}")
                return False
            self._commit(state)

        logger.info(f"Imported backup with {len(self.state.history)} history records.")
        return True
