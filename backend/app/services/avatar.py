from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from app.core.config import settings
from app.schemas.avatar import (
    AvatarOption,
    AvatarOptionsUserIn,
    AvatarUser,
    AvatarUserIn,
    CharacterAvatarPreference,
    CharacterIn,
    CustomAvatarPreference,
    DiscordAvatarPreference,
    ResolvedAvatar,
)
from app.services.avatar_overlay import CurrentUserAvatarStore, current_user_avatar_store

log = logging.getLogger(__name__)

# Fields copied from the caller's DTO and replaced by the viewer overlay
_OVERLAY_FIELDS = ("preference", "character_portraits", "custom_avatar_url")

_UNLINKED_DISCORD_PREFIXES = ("local:", "unlinked:")

INITIALS = ResolvedAvatar(url=None, type="initials")


def _looks_like_url(value: str | None) -> bool:
    return bool(value) and value.startswith("http")


def is_discord_linked(discord_id: str | None) -> bool:
    """False for missing ids and for local-only / unlinked placeholder ids."""
    return bool(discord_id) and not discord_id.startswith(_UNLINKED_DISCORD_PREFIXES)


def build_discord_avatar_url(
    discord_id: str | None,
    avatar_hash: str | None,
    *,
    cdn_base_url: str | None = None,
) -> str | None:
    if not discord_id or not avatar_hash:
        return None
    if _looks_like_url(avatar_hash):
        return avatar_hash
    base = (settings.DISCORD_CDN_BASE_URL if cdn_base_url is None else cdn_base_url).rstrip("/")
    return f"{base}/avatars/{discord_id}/{avatar_hash}.png"


def custom_avatar_absolute_url(path: str, *, api_base_url: str | None = None) -> str:
    if _looks_like_url(path):
        return path
    base = (settings.API_BASE_URL if api_base_url is None else api_base_url).rstrip("/")
    return f"{base}/{path.lstrip('/')}"


def to_avatar_user(
    user: AvatarUserIn | Mapping[str, Any],
    store: CurrentUserAvatarStore | None = None,
) -> AvatarUser:
    """Convert any user-shaped DTO into the canonical `AvatarUser`.

    When the DTO describes the viewer held in `store` (the process-wide store
    by default), every field the overlay defines replaces the DTO's value,
    explicit nulls included.
    """
    if not isinstance(user, AvatarUserIn):
        try:
            user = AvatarUserIn.model_validate(user)
        except ValidationError as exc:
            log.warning("Normalizing malformed user payload as empty: %s", exc.errors(include_url=False))
            user = AvatarUserIn()

    third_party = build_discord_avatar_url(user.discord_id, user.avatar)
    if third_party is None and _looks_like_url(user.avatar):
        third_party = user.avatar

    fields: dict[str, Any] = {"third_party_avatar_url": third_party}
    for name in _OVERLAY_FIELDS:
        if name in user.model_fields_set:
            fields[name] = getattr(user, name)

    overlay = (store if store is not None else current_user_avatar_store).get()
    if overlay is not None and user.id is not None and user.id == overlay.id:
        overlaid = [name for name in _OVERLAY_FIELDS if name in overlay.model_fields_set]
        for name in overlaid:
            fields[name] = getattr(overlay, name)
        if overlaid:
            log.debug("Applied current user overlay to user %s: %s", user.id, overlaid)

    return AvatarUser(**fields)


def _character_by_name(user: AvatarUser, name: str):
    for portrait in user.character_portraits or ():
        if portrait.name == name:
            return portrait
    return None


def _character_for_game(user: AvatarUser, game_id: str):
    for portrait in user.character_portraits or ():
        if portrait.context_id == game_id and portrait.avatar_url:
            return portrait
    return None


def _resolve_preference(user: AvatarUser, api_base_url: str | None) -> ResolvedAvatar | None:
    pref = user.preference
    if isinstance(pref, CustomAvatarPreference):
        if user.custom_avatar_url:
            return ResolvedAvatar(url=custom_avatar_absolute_url(user.custom_avatar_url, api_base_url=api_base_url), type="custom")
    elif isinstance(pref, DiscordAvatarPreference):
        if user.third_party_avatar_url:
            return ResolvedAvatar(url=user.third_party_avatar_url, type="discord")
    elif isinstance(pref, CharacterAvatarPreference):
        if not pref.character_name:
            return None
        portrait = _character_by_name(user, pref.character_name)
        if portrait is not None and portrait.avatar_url:
            return ResolvedAvatar(url=portrait.avatar_url, type="character")
        if pref.cached_avatar_url:
            return ResolvedAvatar(url=pref.cached_avatar_url, type="character")
    # Unrecognized preferences fall through to the default order
    return None


def resolve_avatar(
    user: AvatarUser | Mapping[str, Any] | None,
    game_id: str | None = None,
    *,
    api_base_url: str | None = None,
) -> ResolvedAvatar:
    """Pick the single avatar to show for `user`.

    An honored preference wins; otherwise the order is custom upload, the
    character portrait for `game_id`, the Discord avatar, then initials.
    Unavailable sources fall through to the next rule; this never raises.
    """
    if user is None:
        return INITIALS
    if not isinstance(user, AvatarUser):
        try:
            user = AvatarUser.model_validate(user)
        except ValidationError as exc:
            log.warning("Cannot resolve avatar for non-mapping user payload: %s", exc.errors(include_url=False))
            return INITIALS

    if user.preference is not None:
        preferred = _resolve_preference(user, api_base_url)
        if preferred is not None:
            return preferred

    if user.custom_avatar_url:
        return ResolvedAvatar(url=custom_avatar_absolute_url(user.custom_avatar_url, api_base_url=api_base_url), type="custom")

    if game_id:
        portrait = _character_for_game(user, game_id)
        if portrait is not None:
            return ResolvedAvatar(url=portrait.avatar_url, type="character")

    if user.third_party_avatar_url:
        return ResolvedAvatar(url=user.third_party_avatar_url, type="discord")

    return INITIALS


def build_avatar_options(
    user: AvatarOptionsUserIn | Mapping[str, Any],
    characters: Iterable[CharacterIn | Mapping[str, Any]] = (),
    *,
    api_base_url: str | None = None,
) -> list[AvatarOption]:
    """Avatars a user can pick from, in display order."""
    if not isinstance(user, AvatarOptionsUserIn):
        user = AvatarOptionsUserIn.model_validate(user)

    options: list[AvatarOption] = []
    if user.custom_avatar_url:
        options.append(
            AvatarOption(
                url=custom_avatar_absolute_url(user.custom_avatar_url, api_base_url=api_base_url),
                label="Custom",
                type="custom",
            )
        )

    discord_url = build_discord_avatar_url(user.discord_id, user.avatar)
    if is_discord_linked(user.discord_id) and discord_url:
        options.append(AvatarOption(url=discord_url, label="Discord", type="discord"))

    for char in characters:
        if not isinstance(char, CharacterIn):
            char = CharacterIn.model_validate(char)
        if char.avatar_url:
            options.append(
                AvatarOption(url=char.avatar_url, label=char.name, type="character", character_name=char.name)
            )
    return options


def preference_for_option(option: AvatarOption):
    """The preference to persist when `option` is picked."""
    if option.type == "character":
        return CharacterAvatarPreference(character_name=option.character_name, cached_avatar_url=option.url)
    if option.type == "discord":
        return DiscordAvatarPreference()
    if option.type == "custom":
        return CustomAvatarPreference()
    raise ValueError(f"Avatar type is not selectable: {option.type}")
