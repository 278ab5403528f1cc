"""
Image uploads for posts and serving of stored objects.
"""
from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import FileResponse

from ..auth import get_required_user
from ..config import get_settings
from ..datastore import POST_IMAGES_BUCKET, BlobStorage, get_blob_storage
from ..logging_config import api_logger
from ..models.user import User
from ..responses import not_found, raise_for_store_error, validation_error
from ..services.images import ImageValidationError, format_file_size, post_image_path, resize_image, validate_image

settings = get_settings()

router = APIRouter(tags=["uploads"])


@router.post("/api/uploads/images", status_code=status.HTTP_201_CREATED)
async def upload_post_image(
    file: UploadFile = File(...),
    blobs: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(get_required_user),
):
    """Validate, shrink to fit 1920x1920 and store an image for use in a post."""
    data = await file.read()
    try:
        extension = validate_image(file.content_type, len(data), settings.max_upload_bytes)
        image = resize_image(data, settings.max_image_dimension, settings.max_image_dimension)
    except ImageValidationError as e:
        validation_error(str(e))

    path = post_image_path(extension)
    uploaded = blobs.upload(POST_IMAGES_BUCKET, path, image.data, upsert=False)
    raise_for_store_error(uploaded, "upload the image", "Image")
    api_logger.info(
        "post image stored",
        user_id=current_user.id,
        path=path,
        size=format_file_size(len(image.data)),
        resized=image.resized,
    )
    return {
        "url": blobs.get_public_url(POST_IMAGES_BUCKET, path),
        "path": path,
        "width": image.width,
        "height": image.height,
        "size": len(image.data),
    }


@router.get("/storage/{bucket}/{path:path}")
def get_stored_object(bucket: str, path: str, blobs: BlobStorage = Depends(get_blob_storage)):
    """Serve a stored object by its public URL."""
    target = blobs.resolve(bucket, path)
    if target is None:
        not_found("Object", f"{bucket}/{path}")
    return FileResponse(target)
