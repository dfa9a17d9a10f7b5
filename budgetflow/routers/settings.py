"""
Application settings router.

Mounts under ``/api/settings`` (prefix set in ``main.py``).

Every authenticated user may read the preferences (the frontend needs the
currency, date format and theme); changes are restricted to ``admin``.

Endpoints
---------
GET  /        - Current preferences (stored document merged over defaults).
PUT  /        - Merge the supplied keys over the current preferences.
POST /reset   - Restore the defaults.
GET  /export  - Download the preferences as a .json file.
POST /import  - Upload a .json file; it is merged over the defaults.
"""

from __future__ import annotations

import io
import logging
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from budgetflow.models.user_profile import UserProfile
from budgetflow.preferences import AppPreferences, dump_preferences
from budgetflow.services import preferences_service
from budgetflow.services.auth_service import get_current_user, require_role
from budgetflow.utils.constants import Role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Settings"])

AdminUser = Annotated[UserProfile, Depends(require_role(Role.ADMIN))]

_WRITE_RESPONSES = {
    401: {"description": "Missing or invalid JWT."},
    403: {"description": "Requires the admin role."},
    422: {"description": "Invalid preference values; every bad key is listed."},
}


@router.get("/", response_model=AppPreferences, summary="Get preferences")
def get_settings(
    _current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> AppPreferences:
    return preferences_service.get_preferences()


@router.put("/", response_model=AppPreferences, summary="Update preferences", responses=_WRITE_RESPONSES)
def update_settings(
    changes: Annotated[dict[str, Any], Body(description="Keys to change (snake_case or camelCase).")],
    admin: AdminUser,
) -> AppPreferences:
    logger.info("PUT /settings keys=%s by '%s'", sorted(changes), admin.username)
    return preferences_service.update_preferences(changes)


@router.post("/reset", response_model=AppPreferences, summary="Reset preferences", responses=_WRITE_RESPONSES)
def reset_settings(admin: AdminUser) -> AppPreferences:
    logger.info("POST /settings/reset by '%s'", admin.username)
    return preferences_service.reset_preferences()


@router.get(
    "/export",
    summary="Download preferences",
    response_class=StreamingResponse,
    responses={200: {"content": {"application/json": {}}}},
)
def export_settings(
    _current_user: Annotated[UserProfile, Depends(get_current_user)],
) -> StreamingResponse:
    data = dump_preferences(preferences_service.get_preferences()).encode("utf-8")
    filename = f"budgetflow-settings-{date.today().isoformat()}.json"
    return StreamingResponse(
        io.BytesIO(data),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(data)),
        },
    )


@router.post("/import", response_model=AppPreferences, summary="Upload preferences", responses=_WRITE_RESPONSES)
async def import_settings(
    file: Annotated[UploadFile, File(description="JSON document previously exported.")],
    admin: AdminUser,
) -> AppPreferences:
    raw = await file.read()
    logger.info("POST /settings/import file=%s by '%s'", file.filename, admin.username)
    return preferences_service.import_preferences(raw)
