from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.api.deps import viewer_avatar_store
from app.schemas.avatar import AvatarOption, AvatarOptionsIn, DiscordAvatarUrlOut, ResolvedAvatar
from app.schemas.avatar_api import NormalizeAvatarIn, ResolveAvatarIn
from app.services.avatar import build_avatar_options, build_discord_avatar_url, resolve_avatar, to_avatar_user

router = APIRouter()


@router.get("/discord-url", response_model=DiscordAvatarUrlOut)
def discord_avatar_url(
    discord_id: str | None = Query(default=None, alias="discordId", max_length=64),
    avatar: str | None = Query(default=None, max_length=2048),
):
    return DiscordAvatarUrlOut(url=build_discord_avatar_url(discord_id, avatar))


@router.post("/resolve", response_model=ResolvedAvatar)
def resolve(payload: ResolveAvatarIn):
    if payload.user is None:
        return resolve_avatar(None, payload.game_id)
    store = viewer_avatar_store(payload.viewer)
    return resolve_avatar(to_avatar_user(payload.user, store), payload.game_id)


@router.post("/normalize")
def normalize(payload: NormalizeAvatarIn):
    store = viewer_avatar_store(payload.viewer)
    avatar_user = to_avatar_user(payload.user, store)
    # Unset fields stay out of the body so callers can tell "absent" from null
    return JSONResponse(avatar_user.to_wire())


@router.post("/options", response_model=list[AvatarOption])
def options(payload: AvatarOptionsIn):
    return build_avatar_options(payload.user, payload.characters)
