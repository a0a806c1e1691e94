"""
Image Endpoints.

Generation of event flyers and images through the provider layer, the
user's gallery, and upscaling. Generation and upscaling each cost one
credit.
"""

from fastapi import APIRouter, HTTPException, Query, status

from flyergen.core.database.entities.generated_images import GeneratedImage
from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories import GeneratedImageRepository
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import (
    GeneratedImageList,
    GeneratedImageRead,
    GenerateImageRequest,
    GenerateImageResponse,
    UpscaleResponse,
)
from flyergen.server.services.deps import CurrentUserDep, ProviderManagerDep, SessionDep, UpscalerDep
from flyergen.server.services.image_generation import ImageGenerationService
from flyergen.server.services.upscale import upscale_image

logger = get_logger(__name__)

router = APIRouter()


async def _get_owned_image(repository: GeneratedImageRepository, image_id: str, user: User) -> GeneratedImage:
    image = await repository.get_by_id(image_id)
    if image is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
    if image.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this image")
    return image


@router.post(
    "/generate",
    response_model=GenerateImageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate Image",
    description="Generate an image (optionally an event flyer) with the configured providers.",
    response_description="The stored image and the remaining credit balance.",
    responses={
        201: {"description": "Image generated"},
        400: {"description": "Invalid generation parameters or unanswered event questions"},
        401: {"description": "Not authenticated"},
        402: {"description": "No credits left"},
        429: {"description": "Provider quota or rate limit reached"},
        503: {"description": "Providers unavailable"},
    },
)
async def generate_image(
    payload: GenerateImageRequest,
    user: CurrentUserDep,
    session: SessionDep,
    manager: ProviderManagerDep,
) -> GenerateImageResponse:
    """
    Generate an image.

    - **prompt**: the user's prompt; for flyers it is appended to the event prompt.
    - **event_type** / **event_details**: build an event flyer prompt from the system prompts.
    - **aspect_ratio**: ``W:H`` or ``WxH``; unsupported ratios fall back to ``1:1``.
    - **provider** / **quality**: preferences; an admin default preset takes precedence over the provider.
    """
    service = ImageGenerationService(session, manager)
    image = await service.generate(
        user,
        prompt=payload.prompt,
        aspect_ratio=payload.aspect_ratio,
        event_type=payload.event_type,
        event_details=payload.event_details,
        style_name=payload.style_name,
        custom_style=payload.custom_style,
        preferred_provider=payload.provider,
        quality=payload.quality,
        seed=payload.seed,
        provider_options=payload.provider_options,
    )
    return GenerateImageResponse(
        image=GeneratedImageRead.model_validate(image),
        credits_remaining=user.credits,
        message=f"Image generated successfully using {image.provider} provider",
    )


@router.get(
    "",
    response_model=GeneratedImageList,
    summary="List My Images",
    description="List the authenticated user's images, newest first.",
)
async def list_images(
    user: CurrentUserDep,
    session: SessionDep,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> GeneratedImageList:
    repository = GeneratedImageRepository(session)
    images = await repository.list_for_user(user.id, limit=limit, offset=offset)
    total = await repository.count_for_user(user.id)
    return GeneratedImageList(
        items=[GeneratedImageRead.model_validate(image) for image in images],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{image_id}",
    response_model=GeneratedImageRead,
    summary="Get Image",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Image not found"}},
)
async def get_image(image_id: str, user: CurrentUserDep, session: SessionDep) -> GeneratedImageRead:
    image = await _get_owned_image(GeneratedImageRepository(session), image_id, user)
    return GeneratedImageRead.model_validate(image)


@router.delete(
    "/{image_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Image",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Image not found"}},
)
async def delete_image(image_id: str, user: CurrentUserDep, session: SessionDep) -> None:
    repository = GeneratedImageRepository(session)
    image = await _get_owned_image(repository, image_id, user)
    # Detach the images linked to this one before removing it
    for linked_id in (image.original_image_id, image.upscaled_image_id):
        linked = await repository.get_by_id(linked_id) if linked_id else None
        if linked is not None:
            if linked.upscaled_image_id == image.id:
                linked.upscaled_image_id = None
            if linked.original_image_id == image.id:
                linked.original_image_id = None
            session.add(linked)
    await repository.delete(image.id)
    logger.info(f"User {user.id} deleted image {image_id}")


@router.post(
    "/{image_id}/upscale",
    response_model=UpscaleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upscale Image",
    description="Upscale one of the user's images two times with the clarity upscaler.",
    responses={
        201: {"description": "Upscaled image stored"},
        402: {"description": "No credits left"},
        403: {"description": "Not the owner"},
        404: {"description": "Image not found"},
    },
)
async def upscale(
    image_id: str,
    user: CurrentUserDep,
    session: SessionDep,
    upscaler: UpscalerDep,
) -> UpscaleResponse:
    """
    Upscale an image.

    The upscaled copy is stored as a new image linked to the original in both directions.
    """
    original = await _get_owned_image(GeneratedImageRepository(session), image_id, user)
    upscaled = await upscale_image(session, user, original, upscaler)
    return UpscaleResponse(image=GeneratedImageRead.model_validate(upscaled), credits_remaining=user.credits)
