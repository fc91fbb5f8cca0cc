from app.schemas.me import MeOut
from app.services.avatar_overlay import CurrentUserAvatarStore
from app.services.session import sync_current_user


def viewer_avatar_store(viewer: MeOut | None) -> CurrentUserAvatarStore:
    # Request-scoped: the process-wide store belongs to the local session only
    store = CurrentUserAvatarStore()
    sync_current_user(viewer, store)
    return store
