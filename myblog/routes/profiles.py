"""
Profile routes: public profiles and the signed-in user's "my page".
"""
from fastapi import APIRouter, Depends, File, Query, UploadFile
from typing import Any, Dict, List

from ..auth import get_required_user
from ..config import get_settings
from ..datastore import AVATARS_BUCKET, AsyncDataStore, BlobStorage, StoreError, get_blob_storage, get_store
from ..logging_config import api_logger
from ..models.user import User
from ..responses import not_found, raise_for_store_error, store_error, validation_error
from ..schemas.posts import PostResponse
from ..schemas.profiles import ProfileResponse, ProfileStatsResponse, ProfileUpdate
from ..services.images import AVATAR_MAX_DIMENSION, ImageValidationError, avatar_path, resize_image, validate_image
from ..services.profile_stats import load_liked_posts, load_my_posts, load_profile_stats
from ..services.records import attach_post_authors
from .posts import post_to_dict

settings = get_settings()

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


def profile_to_dict(profile: Dict[str, Any], is_owner: bool = False) -> dict:
    """Convert a profile row to a response. Email is hidden from others unless made public."""
    show_email = is_owner or bool(profile["email_public"])
    return {
        "id": profile["id"],
        "nickname": profile["nickname"],
        "bio": profile["bio"],
        "avatar_url": profile["avatar_url"],
        "email": profile["email"] if show_email else None,
        "email_public": bool(profile["email_public"]),
        "created_at": profile["created_at"],
    }


async def _load_profile(store: AsyncDataStore, profile_id: int) -> Dict[str, Any]:
    result = await store.select_single("profiles", {"id": profile_id}, required=False)
    profile = raise_for_store_error(result, "load the profile", "Profile")
    if profile is None:
        not_found("Profile", profile_id)
    return profile


async def _update_profile(store: AsyncDataStore, user: User, patch: Dict[str, Any]) -> dict:
    result = await store.update("profiles", patch, {"id": user.id})
    rows = raise_for_store_error(result, "update the profile", "Profile")
    if not rows:
        not_found("Profile", user.id)
    return profile_to_dict(rows[0], is_owner=True)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    profile = await _load_profile(store, current_user.id)
    return profile_to_dict(profile, is_owner=True)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    payload: ProfileUpdate,
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Update nickname, bio, avatar URL or email visibility."""
    changes = payload.model_dump(exclude_unset=True)
    patch: Dict[str, Any] = {}
    if "nickname" in changes:
        nickname = (changes["nickname"] or "").strip()
        if not nickname:
            validation_error("Nickname is required", {"field": "nickname"})
        patch["nickname"] = nickname
    if "bio" in changes:
        patch["bio"] = (changes["bio"] or "").strip() or None
    if "avatar_url" in changes:
        patch["avatar_url"] = changes["avatar_url"] or None
    if changes.get("email_public") is not None:
        patch["email_public"] = changes["email_public"]
    if not patch:
        return profile_to_dict(await _load_profile(store, current_user.id), is_owner=True)
    return await _update_profile(store, current_user, patch)


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    store: AsyncDataStore = Depends(get_store),
    blobs: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(get_required_user),
):
    """Resize and store a new avatar, then point the profile at it."""
    data = await file.read()
    try:
        extension = validate_image(file.content_type, len(data), settings.max_upload_bytes)
        image = resize_image(data, AVATAR_MAX_DIMENSION, AVATAR_MAX_DIMENSION)
    except ImageValidationError as e:
        validation_error(str(e))

    path = avatar_path(current_user.id, extension)
    uploaded = blobs.upload(AVATARS_BUCKET, path, image.data, upsert=True)
    raise_for_store_error(uploaded, "upload the avatar", "Avatar")
    api_logger.info("avatar updated", user_id=current_user.id, path=path)
    return await _update_profile(store, current_user, {"avatar_url": blobs.get_public_url(AVATARS_BUCKET, path)})


@router.get("/me/stats", response_model=ProfileStatsResponse)
async def get_my_stats(
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Post count and total likes, recomputed on every call."""
    try:
        stats = await load_profile_stats(store, current_user.id)
    except StoreError as e:
        store_error(e, "load stats")
    return {"post_count": stats.post_count, "total_likes": stats.total_likes}


@router.get("/me/posts", response_model=List[PostResponse])
async def get_my_posts(
    filter: str = Query("all", pattern="^(all|public|private)$"),
    sort: str = Query("latest", pattern="^(latest|popular|views)$"),
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    try:
        rows = await load_my_posts(store, current_user.id, filter, sort)
        posts = await attach_post_authors(store, rows)
    except StoreError as e:
        store_error(e, "load your posts")
    return [post_to_dict(p) for p in posts]


@router.get("/me/likes", response_model=List[PostResponse])
async def get_my_liked_posts(
    sort: str = Query("latest", pattern="^(latest|popular|views)$"),
    store: AsyncDataStore = Depends(get_store),
    current_user: User = Depends(get_required_user),
):
    """Posts the current user liked."""
    try:
        rows = await load_liked_posts(store, current_user.id, sort)
        posts = await attach_post_authors(store, rows)
    except StoreError as e:
        store_error(e, "load liked posts")
    return [post_to_dict(p) for p in posts]


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile_id: int, store: AsyncDataStore = Depends(get_store)):
    """Public profile. The email is shown only if its owner made it public."""
    profile = await _load_profile(store, profile_id)
    return profile_to_dict(profile)
