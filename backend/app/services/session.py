from __future__ import annotations

import logging
from typing import Any

from app.schemas.avatar import CharacterAvatarPreference, CurrentUserAvatarData
from app.schemas.me import MeOut
from app.services.avatar_overlay import CurrentUserAvatarStore, current_user_avatar_store

log = logging.getLogger(__name__)


def current_user_avatar_data(me: MeOut) -> CurrentUserAvatarData:
    """Overlay record for the viewer described by a "who am I" payload."""
    preference = me.avatar_preference
    if (
        isinstance(preference, CharacterAvatarPreference)
        and not preference.cached_avatar_url
        and me.resolved_avatar_url
    ):
        preference = preference.model_copy(update={"cached_avatar_url": me.resolved_avatar_url})

    fields: dict[str, Any] = {
        "id": me.id,
        "preference": preference,
        "custom_avatar_url": me.custom_avatar_url,
    }
    # Characters are only authoritative when the payload actually carried them
    if "characters" in me.model_fields_set:
        fields["character_portraits"] = me.characters
    return CurrentUserAvatarData(**fields)


def sync_current_user(me: MeOut | None, store: CurrentUserAvatarStore | None = None) -> CurrentUserAvatarData | None:
    """Write the viewer's overlay after login or a refetch; `None` means logout."""
    store = store if store is not None else current_user_avatar_store
    if me is None:
        store.clear()
        log.debug("Current user avatar overlay cleared on logout")
        return None

    data = current_user_avatar_data(me)
    store.set(data)
    return data
