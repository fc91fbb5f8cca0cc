from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.schemas.avatar import CurrentUserAvatarData

log = logging.getLogger(__name__)


class CurrentUserAvatarStore:
    """Holds at most one `CurrentUserAvatarData` record.

    Only the session flow writes to a store: on login and every identity
    refetch it calls `set`, on logout `clear`. Everyone else reads.
    """

    def __init__(self, data: CurrentUserAvatarData | Mapping[str, Any] | None = None):
        self._data: CurrentUserAvatarData | None = None
        self.set(data)

    def get(self) -> CurrentUserAvatarData | None:
        return self._data

    def set(self, data: CurrentUserAvatarData | Mapping[str, Any] | None) -> None:
        if data is not None and not isinstance(data, CurrentUserAvatarData):
            data = CurrentUserAvatarData.model_validate(data)
        self._data = data
        if data is None:
            log.debug("Current user avatar overlay cleared")
        else:
            log.debug("Current user avatar overlay set for user %s (fields=%s)", data.id, sorted(data.model_fields_set))

    def clear(self) -> None:
        self.set(None)


# Process-wide store for the active viewer
current_user_avatar_store = CurrentUserAvatarStore()


def set_current_user_avatar_data(data: CurrentUserAvatarData | Mapping[str, Any] | None) -> None:
    current_user_avatar_store.set(data)


def get_current_user_avatar_data() -> CurrentUserAvatarData | None:
    return current_user_avatar_store.get()


def clear_current_user_avatar_data() -> None:
    current_user_avatar_store.clear()
