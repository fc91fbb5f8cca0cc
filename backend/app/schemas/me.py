from typing import Literal

from pydantic import AliasChoices, Field, field_validator

from app.schemas.avatar import AvatarPreference, CharacterPortrait, CamelModel, parse_avatar_preference


class MeOut(CamelModel):
    id: int
    discord_id: str | None = None
    username: str
    display_name: str | None = None
    avatar: str | None = None
    custom_avatar_url: str | None = None
    role: Literal["member", "operator", "admin"] = "member"
    avatar_preference: AvatarPreference | None = None
    # Portrait URL of a character preference, resolved server-side
    resolved_avatar_url: str | None = None
    characters: list[CharacterPortrait] | None = Field(
        default=None,
        validation_alias=AliasChoices("characters", "characterPortraits"),
    )

    @field_validator("avatar_preference", mode="before")
    @classmethod
    def _coerce_preference(cls, value):
        return parse_avatar_preference(value)
