from pydantic import Field

from app.schemas.avatar import AvatarUserIn, CamelModel
from app.schemas.me import MeOut


class ResolveAvatarIn(CamelModel):
    user: AvatarUserIn | None = None
    game_id: str | None = None
    viewer: MeOut | None = None


class NormalizeAvatarIn(CamelModel):
    user: AvatarUserIn
    viewer: MeOut | None = Field(default=None, description="Signed-in viewer, used for the overlay")
