"""SQLAlchemy ORM models for WeatherDesk.

All models are exported from this module for convenient imports:
    from weatherdesk.models import User, Search

- user.py: User (account, credential, theme, pending reset)
- search.py: Search (per-user search history)
"""

from weatherdesk.models.base import Base
from weatherdesk.models.search import LANGUAGES, Search
from weatherdesk.models.user import DEFAULT_THEME, THEMES, User

__all__ = [
    "DEFAULT_THEME",
    "LANGUAGES",
    "THEMES",
    "Base",
    "Search",
    "User",
]
