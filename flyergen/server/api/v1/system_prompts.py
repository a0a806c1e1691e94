"""
System Prompt Endpoints.

Admin management of the versioned prompts used to build flyer prompts.
Editing a prompt stores a new version; deleting one only deactivates it.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from flyergen.core.database.entities.system_prompts import SystemPrompt
from flyergen.core.database.entities.users import User
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import (
    ImportResult,
    PromptCategoryRead,
    SeedResult,
    SystemPromptCreate,
    SystemPromptImport,
    SystemPromptRead,
    SystemPromptUpdate,
)
from flyergen.server.services.deps import AdminUserDep, SessionDep
from flyergen.server.services.permissions import can_access, can_admin
from flyergen.server.services.system_prompts import PROMPT_CATEGORIES, SystemPromptService

logger = get_logger(__name__)

router = APIRouter()


def _require_view(user: User) -> None:
    if not can_access(user.role, "system:prompts:view"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


def _require_manage(user: User) -> None:
    if not can_admin(user.role, "system:prompts:manage"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


async def _get_prompt(service: SystemPromptService, prompt_id: str) -> SystemPrompt:
    prompt = await service.repository.get_by_id(prompt_id)
    if prompt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="System prompt not found")
    return prompt


@router.get(
    "",
    response_model=List[SystemPromptRead],
    summary="List System Prompts",
    description="List prompt versions, optionally filtered by category, subcategory and active flag.",
)
async def list_prompts(
    admin: AdminUserDep,
    session: SessionDep,
    category: Optional[str] = Query(default=None),
    subcategory: Optional[str] = Query(default=None),
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
) -> List[SystemPromptRead]:
    _require_view(admin)
    filters = {"category": category, "subcategory": subcategory, "is_active": is_active}
    prompts = await SystemPromptService(session).repository.list(filters=filters)
    return [SystemPromptRead.model_validate(prompt) for prompt in prompts]


@router.get(
    "/categories",
    response_model=List[PromptCategoryRead],
    summary="List Prompt Categories",
)
async def list_categories(admin: AdminUserDep) -> List[PromptCategoryRead]:
    _require_view(admin)
    return [
        PromptCategoryRead(
            id=category.id,
            name=category.name,
            description=category.description,
            subcategories=list(category.subcategories),
        )
        for category in PROMPT_CATEGORIES
    ]


@router.post(
    "/seed",
    response_model=SeedResult,
    summary="Seed Default Prompts",
    description="Create the built-in prompts that do not exist yet.",
)
async def seed_prompts(admin: AdminUserDep, session: SessionDep) -> SeedResult:
    _require_manage(admin)
    created = await SystemPromptService(session).seed_default_prompts(admin.id)
    return SeedResult(created=created)


@router.post(
    "/import",
    response_model=ImportResult,
    summary="Import System Prompts",
    description="Load prompts from an export, adding a new version where the text changed.",
)
async def import_prompts(payload: SystemPromptImport, admin: AdminUserDep, session: SessionDep) -> ImportResult:
    _require_manage(admin)
    imported, skipped, errors = await SystemPromptService(session).import_prompts(payload.prompts, admin.id)
    return ImportResult(imported=imported, skipped=skipped, errors=errors, total=len(payload.prompts))


@router.post(
    "",
    response_model=SystemPromptRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create System Prompt",
    description="Add a prompt as the next version of its category/subcategory.",
)
async def create_prompt(payload: SystemPromptCreate, admin: AdminUserDep, session: SessionDep) -> SystemPromptRead:
    _require_manage(admin)
    prompt = await SystemPromptService(session).create_prompt(
        category=payload.category,
        name=payload.name,
        prompt_text=payload.prompt_text,
        user_id=admin.id,
        subcategory=payload.subcategory,
        description=payload.description,
        is_active=payload.is_active,
    )
    return SystemPromptRead.model_validate(prompt)


@router.get("/{prompt_id}", response_model=SystemPromptRead, summary="Get System Prompt")
async def get_prompt(prompt_id: str, admin: AdminUserDep, session: SessionDep) -> SystemPromptRead:
    _require_view(admin)
    prompt = await _get_prompt(SystemPromptService(session), prompt_id)
    return SystemPromptRead.model_validate(prompt)


@router.get(
    "/{prompt_id}/history",
    response_model=List[SystemPromptRead],
    summary="Get Prompt History",
    description="All versions of the prompt's category/subcategory, newest first.",
)
async def get_prompt_history(prompt_id: str, admin: AdminUserDep, session: SessionDep) -> List[SystemPromptRead]:
    _require_view(admin)
    service = SystemPromptService(session)
    prompt = await _get_prompt(service, prompt_id)
    history = await service.get_prompt_history(prompt.category, prompt.subcategory)
    return [SystemPromptRead.model_validate(version) for version in history]


@router.put(
    "/{prompt_id}",
    response_model=SystemPromptRead,
    summary="Update System Prompt",
    description="Store the edited prompt as a new version.",
)
async def update_prompt(
    prompt_id: str, payload: SystemPromptUpdate, admin: AdminUserDep, session: SessionDep
) -> SystemPromptRead:
    _require_manage(admin)
    prompt = await SystemPromptService(session).update_prompt(
        prompt_id,
        admin.id,
        name=payload.name,
        description=payload.description,
        prompt_text=payload.prompt_text,
        is_active=payload.is_active,
    )
    if prompt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="System prompt not found")
    return SystemPromptRead.model_validate(prompt)


@router.delete(
    "/{prompt_id}",
    response_model=SystemPromptRead,
    summary="Deactivate System Prompt",
    description="Deactivate a prompt version; its history is kept.",
)
async def deactivate_prompt(prompt_id: str, admin: AdminUserDep, session: SessionDep) -> SystemPromptRead:
    _require_manage(admin)
    prompt = await SystemPromptService(session).deactivate_prompt(prompt_id, admin.id)
    if prompt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="System prompt not found")
    logger.info(f"System prompt {prompt_id} deactivated by {admin.id}")
    return SystemPromptRead.model_validate(prompt)
