"""
Provider Settings Endpoints.

Admin-managed tuning presets for the image providers, the read-only view of
the default preset for signed-in users, and the provider layer status.

At most one preset per provider is the default: saving a preset as default
clears the flag on the provider's other presets in the same transaction.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from flyergen.core.database.entities.provider_settings import ProviderSettings
from flyergen.core.database.repositories import ProviderSettingsRepository
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import (
    ProviderSettingsRead,
    ProviderSettingsUpdate,
    ProviderSettingsUpsert,
    ProviderStatusRead,
)
from flyergen.server.services.deps import AdminUserDep, CurrentUserDep, ProviderManagerDep, SessionDep

logger = get_logger(__name__)

router = APIRouter()
public_router = APIRouter()
status_router = APIRouter()


@router.get(
    "",
    response_model=List[ProviderSettingsRead],
    summary="List Provider Settings",
    description="List presets ordered by provider, defaults first. "
    "With ``defaultOnly=true`` only the active default preset is returned.",
)
async def list_provider_settings(
    admin: AdminUserDep,
    session: SessionDep,
    provider_id: Optional[str] = Query(default=None, alias="providerId"),
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    default_only: bool = Query(default=False, alias="defaultOnly"),
) -> List[ProviderSettingsRead]:
    repository = ProviderSettingsRepository(session)
    if default_only:
        default = await repository.get_default()
        return [ProviderSettingsRead.model_validate(default)] if default else []
    presets = await repository.search(provider_id=provider_id, is_active=is_active)
    logger.debug(f"Retrieved {len(presets)} provider settings (provider={provider_id}, active={is_active})")
    return [ProviderSettingsRead.model_validate(preset) for preset in presets]


@router.post(
    "",
    response_model=ProviderSettingsRead,
    summary="Save Provider Settings",
    description="Create a preset, or replace the provider's preset of the same name and bump its version.",
)
async def upsert_provider_settings(
    payload: ProviderSettingsUpsert, admin: AdminUserDep, session: SessionDep
) -> ProviderSettingsRead:
    repository = ProviderSettingsRepository(session)
    provider_id = payload.provider_id.value
    preset = await repository.get_by_name(provider_id, payload.name)
    if preset is None:
        preset = ProviderSettings(provider_id=provider_id, name=payload.name, created_by=admin.id)
    else:
        preset.version += 1

    preset.description = payload.description
    preset.base_settings = payload.base_settings
    preset.specific_settings = payload.specific_settings
    preset.is_active = payload.is_active
    preset.is_default = payload.is_default
    preset.updated_by = admin.id

    if payload.is_default:
        await repository.clear_default(provider_id, exclude_id=preset.id)
    preset = await repository.update(preset)
    logger.info(f"Saved provider settings {provider_id}/{preset.name} v{preset.version}")
    return ProviderSettingsRead.model_validate(preset)


@router.patch(
    "/{settings_id}",
    response_model=ProviderSettingsRead,
    summary="Update Provider Settings",
    responses={404: {"description": "Settings not found"}},
)
async def update_provider_settings(
    settings_id: str, payload: ProviderSettingsUpdate, admin: AdminUserDep, session: SessionDep
) -> ProviderSettingsRead:
    repository = ProviderSettingsRepository(session)
    preset = await repository.get_by_id(settings_id)
    if preset is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Settings not found")

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(preset, key, value)
    if payload.is_default:
        await repository.clear_default(preset.provider_id, exclude_id=preset.id)
    preset.version += 1
    preset.updated_by = admin.id
    preset = await repository.update(preset)
    logger.info(f"Updated provider settings {preset.provider_id}/{preset.name} v{preset.version}")
    return ProviderSettingsRead.model_validate(preset)


@router.delete(
    "/{settings_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Provider Settings",
    responses={
        400: {"description": "Default settings cannot be deleted"},
        404: {"description": "Settings not found"},
    },
)
async def delete_provider_settings(settings_id: str, admin: AdminUserDep, session: SessionDep) -> None:
    repository = ProviderSettingsRepository(session)
    preset = await repository.get_by_id(settings_id)
    if preset is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Settings not found")
    if preset.is_default:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete default settings")
    await repository.delete(settings_id)
    logger.info(f"Deleted provider settings {preset.provider_id}/{preset.name}")


@public_router.get(
    "/default",
    response_model=Optional[ProviderSettingsRead],
    summary="Get Default Provider Settings",
    description="The active default preset, or null when none is set.",
)
async def get_default_provider_settings(user: CurrentUserDep, session: SessionDep) -> Optional[ProviderSettingsRead]:
    default = await ProviderSettingsRepository(session).get_default()
    return ProviderSettingsRead.model_validate(default) if default else None


@status_router.get(
    "/status",
    response_model=ProviderStatusRead,
    summary="Provider Status",
    description="Configuration summary, setup validation, health and circuit breaker state of the providers.",
)
async def get_provider_status(admin: AdminUserDep, manager: ProviderManagerDep) -> ProviderStatusRead:
    config_manager = manager.config_manager
    return ProviderStatusRead(
        default_provider=config_manager.get_default_provider().value,
        available_providers=[provider.value for provider in config_manager.get_available_providers()],
        providers=config_manager.get_config_summary(),
        validation=manager.registry.validate_provider_setup(),
        health=await manager.get_providers_health(),
        circuit_breakers=manager.get_circuit_breaker_status(),
    )
