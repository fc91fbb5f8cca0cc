from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)

AvatarType = Literal["custom", "character", "discord", "initials"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")


class CustomAvatarPreference(CamelModel):
    type: Literal["custom"] = "custom"


class DiscordAvatarPreference(CamelModel):
    type: Literal["discord"] = "discord"


class CharacterAvatarPreference(CamelModel):
    type: Literal["character"] = "character"
    character_name: str | None = None
    # Portrait URL captured when the preference was saved
    cached_avatar_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cachedAvatarUrl", "cached_avatar_url", "avatarUrl"),
    )


class UnrecognizedAvatarPreference(CamelModel):
    """Any stored preference payload that does not match a known shape."""

    type: Literal["unrecognized"] = "unrecognized"
    raw: Any = None


AvatarPreference = Union[
    CustomAvatarPreference, DiscordAvatarPreference, CharacterAvatarPreference, UnrecognizedAvatarPreference
]

_preference_adapter = TypeAdapter(Annotated[AvatarPreference, Field(discriminator="type")])
_PREFERENCE_TYPES = (CustomAvatarPreference, DiscordAvatarPreference, CharacterAvatarPreference, UnrecognizedAvatarPreference)


def parse_avatar_preference(raw: Any):
    """Coerce a stored preference payload into an AvatarPreference.

    `None` stays `None`. Payloads with an unknown tag or a malformed body come
    back as `UnrecognizedAvatarPreference` instead of raising.
    """
    if raw is None:
        return None
    if isinstance(raw, _PREFERENCE_TYPES):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    try:
        return _preference_adapter.validate_python(raw)
    except ValidationError:
        log.debug("Unrecognized avatar preference payload: %r", raw)
        return UnrecognizedAvatarPreference(raw=raw)


class CharacterPortrait(CamelModel):
    context_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("contextId", "gameId", "context_id"),
    )
    name: str | None = None
    avatar_url: str | None = None


def parse_character_portraits(raw: Any) -> list[CharacterPortrait] | None:
    """Keep the well-formed portraits of a loosely-typed list, dropping the rest.

    A value that is not a list at all counts as an empty list.
    """
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple)):
        log.debug("Ignoring non-list character portraits: %r", raw)
        return []
    portraits = []
    for item in raw:
        if isinstance(item, CharacterPortrait):
            portraits.append(item)
            continue
        try:
            portraits.append(CharacterPortrait.model_validate(item))
        except ValidationError:
            log.debug("Dropping malformed character portrait: %r", item)
    return portraits


def _lenient_str(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    # Snowflake ids sometimes arrive as JSON numbers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    log.debug("Discarding non-string avatar field value: %r", value)
    return None


class _LenientSourceFields(CamelModel):
    @field_validator("preference", mode="before", check_fields=False)
    @classmethod
    def _coerce_preference(cls, value):
        return parse_avatar_preference(value)

    @field_validator("character_portraits", mode="before", check_fields=False)
    @classmethod
    def _coerce_portraits(cls, value):
        return parse_character_portraits(value)

    @field_validator(
        "third_party_avatar_url", "custom_avatar_url", "avatar", "discord_id", mode="before", check_fields=False
    )
    @classmethod
    def _coerce_str(cls, value):
        return _lenient_str(value)


class AvatarUser(_LenientSourceFields):
    """Canonical, resolver-ready view of one person's avatar sources.

    Unset optional fields are left out of `model_fields_set`; explicit nulls
    are kept in it.
    """

    third_party_avatar_url: str | None = None
    custom_avatar_url: str | None = None
    character_portraits: list[CharacterPortrait] | None = None
    preference: AvatarPreference | None = None

    def to_wire(self) -> dict[str, Any]:
        """JSON body with camelCase keys, leaving out top-level fields never set."""
        dumped = self.model_dump(mode="json", by_alias=True)
        keys = {type(self).model_fields[name].alias or name for name in self.model_fields_set}
        return {key: value for key, value in dumped.items() if key in keys}


class AvatarUserIn(_LenientSourceFields):
    """Loose user DTO as returned by any endpoint (roster, signup, profile...)."""

    id: int | None = None
    avatar: str | None = None
    discord_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("discordId", "providerId", "discord_id"),
    )
    custom_avatar_url: str | None = None
    character_portraits: list[CharacterPortrait] | None = Field(
        default=None,
        validation_alias=AliasChoices("characterPortraits", "characters", "character_portraits"),
    )
    preference: AvatarPreference | None = Field(
        default=None,
        validation_alias=AliasChoices("avatarPreference", "preference"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        if isinstance(value, bool):
            return None
        if isinstance(value, int) or value is None:
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        log.debug("Discarding non-numeric user id: %r", value)
        return None


class CurrentUserAvatarData(_LenientSourceFields):
    """Authoritative avatar state of the signed-in viewer."""

    id: int
    preference: AvatarPreference | None = Field(
        default=None,
        validation_alias=AliasChoices("avatarPreference", "preference"),
    )
    character_portraits: list[CharacterPortrait] | None = Field(
        default=None,
        validation_alias=AliasChoices("characterPortraits", "characters", "character_portraits"),
    )
    custom_avatar_url: str | None = None


class ResolvedAvatar(CamelModel):
    url: str | None = None
    type: AvatarType


class AvatarOption(CamelModel):
    url: str
    label: str
    type: AvatarType
    character_name: str | None = None


class CharacterIn(CamelModel):
    name: str
    avatar_url: str | None = None
    game_id: str | None = None


class AvatarOptionsUserIn(CamelModel):
    discord_id: str | None = None
    avatar: str | None = None
    custom_avatar_url: str | None = None


class AvatarOptionsIn(CamelModel):
    user: AvatarOptionsUserIn
    characters: list[CharacterIn] = Field(default_factory=list)


class DiscordAvatarUrlOut(CamelModel):
    url: str | None = None
