from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional


class PreferenceStore(ABC):
    @abstractmethod
    def get_categories(self, user_id: str) -> Optional[List[str]]:
        """Return the user's preferred categories, or ``None`` if none are stored."""


class InMemoryPreferenceStore(PreferenceStore):
    def __init__(self, preferences: Optional[Dict[str, Iterable[str]]] = None) -> None:
        self._preferences: Dict[str, List[str]] = {
            user_id: list(categories) for user_id, categories in (preferences or {}).items()
        }

    def set_categories(self, user_id: str, categories: Iterable[str]) -> None:
        self._preferences[user_id] = list(categories)

    def get_categories(self, user_id: str) -> Optional[List[str]]:
        categories = self._preferences.get(user_id)
        return list(categories) if categories is not None else None
