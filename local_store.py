"""
Client-side persisted state.

The web front-end keeps these keys in the browser's localStorage. Here
the same keys live behind a small key-value interface so any backing store
(memory, a JSON file, something else) can hold them. Values are strings;
structured values cross a JSON codec boundary in get_json/set_json.
"""
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from pydantic import BaseModel, ValidationError

from cache import normalize_key

logger = logging.getLogger(__name__)

HISTORY_KEY = "searchHistory"
THEME_KEY = "theme-preference"
MISSION_CACHE_KEY = "missionCache"
NOTES_PREFIX = "notes-"
CHECKLIST_PREFIX = "checklist-"
MAX_HISTORY = 8


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class FileStore:
    """All keys in one JSON file, rewritten on every change."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def keys(self) -> List[str]:
        return list(self._load())


def get_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Corrupt value under {key}, ignoring it")
        return default


def set_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))


# -------- Persisted shapes --------

class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class CompanyNotes(BaseModel):
    notes: str = ""
    questions: str = ""
    saved: bool = False


class ChecklistItem(BaseModel):
    id: str
    label: str
    done: bool = False


def default_checklist() -> List[ChecklistItem]:
    return [
        ChecklistItem(id="resume", label="Resume tailored"),
        ChecklistItem(id="mock", label="Mock interview completed"),
        ChecklistItem(id="referral", label="Reached out to alumni/referral"),
    ]


class ClientState:
    """Everything the client remembers between sessions, keyed by normalized company name."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    # -- search history --

    def history(self) -> List[str]:
        items = get_json(self.store, HISTORY_KEY, [])
        return [i for i in items if isinstance(i, str)] if isinstance(items, list) else []

    def record_search(self, company: str) -> List[str]:
        """Most recent first, one entry per normalized name, at most MAX_HISTORY."""
        normalized = normalize_key(company)
        if not normalized:
            return self.history()
        updated = [normalized] + [h for h in self.history() if normalize_key(h) != normalized]
        updated = updated[:MAX_HISTORY]
        set_json(self.store, HISTORY_KEY, updated)
        return updated

    def clear_history(self) -> None:
        self.store.remove(HISTORY_KEY)

    # -- notes & saved companies --

    def load_notes(self, company: str) -> CompanyNotes:
        raw = get_json(self.store, NOTES_PREFIX + normalize_key(company))
        if isinstance(raw, dict):
            try:
                return CompanyNotes(**raw)
            except ValidationError:
                pass
        return CompanyNotes()

    def save_notes(self, company: str, notes: CompanyNotes) -> None:
        set_json(self.store, NOTES_PREFIX + normalize_key(company), notes.model_dump())

    def update_notes(self, company: str, notes: Optional[str] = None, questions: Optional[str] = None) -> CompanyNotes:
        current = self.load_notes(company)
        if notes is not None:
            current.notes = notes
        if questions is not None:
            current.questions = questions
        self.save_notes(company, current)
        return current

    def toggle_saved(self, company: str) -> CompanyNotes:
        current = self.load_notes(company)
        current.saved = not current.saved
        self.save_notes(company, current)
        return current

    def saved_companies(self) -> List[str]:
        saved = []
        for key in self.store.keys():
            if not key.startswith(NOTES_PREFIX):
                continue
            raw = get_json(self.store, key)
            if isinstance(raw, dict) and raw.get("saved"):
                saved.append(key[len(NOTES_PREFIX):])
        return saved

    # -- checklist --

    def load_checklist(self, company: str) -> List[ChecklistItem]:
        raw = get_json(self.store, CHECKLIST_PREFIX + normalize_key(company))
        if isinstance(raw, list) and raw:
            try:
                return [ChecklistItem(**item) for item in raw]
            except (TypeError, ValidationError):
                logger.warning(f"Resetting malformed checklist for {company}")
        return default_checklist()

    def save_checklist(self, company: str, items: List[ChecklistItem]) -> None:
        if items:
            set_json(self.store, CHECKLIST_PREFIX + normalize_key(company), [i.model_dump() for i in items])

    def toggle_checklist_item(self, company: str, item_id: str) -> List[ChecklistItem]:
        items = self.load_checklist(company)
        for item in items:
            if item.id == item_id:
                item.done = not item.done
        self.save_checklist(company, items)
        return items

    # -- theme --

    def theme(self, prefers_dark: bool = False) -> Theme:
        stored = self.store.get(THEME_KEY)
        if stored in (Theme.LIGHT.value, Theme.DARK.value):
            return Theme(stored)
        return Theme.DARK if prefers_dark else Theme.LIGHT

    def set_theme(self, theme: Theme) -> None:
        self.store.set(THEME_KEY, Theme(theme).value)

    def toggle_theme(self) -> Theme:
        new = Theme.LIGHT if self.theme() == Theme.DARK else Theme.DARK
        self.set_theme(new)
        return new

    # -- mission summaries --

    def cached_mission(self, company: str) -> Optional[str]:
        cache = get_json(self.store, MISSION_CACHE_KEY, {})
        if not isinstance(cache, dict):
            return None
        return cache.get(normalize_key(company))

    def cache_mission(self, company: str, summary: str) -> None:
        cache = get_json(self.store, MISSION_CACHE_KEY, {})
        if not isinstance(cache, dict):
            cache = {}
        cache[normalize_key(company)] = summary
        set_json(self.store, MISSION_CACHE_KEY, cache)
