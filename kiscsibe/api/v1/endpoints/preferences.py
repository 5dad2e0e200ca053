"""
Consent preference endpoints:
  GET /preferences/{session_id}   – Cookie and notification consent flags
  PUT /preferences/{session_id}   – Update one or both flags
"""
from fastapi import APIRouter, Depends, Path

from kiscsibe.core.dependencies import SESSION_ID_PATTERN, db_dependency
from kiscsibe.schemas.preferences import ConsentResponse, ConsentUpdate
from kiscsibe.services.preference_service import PreferenceService

router = APIRouter(prefix="/preferences", tags=["Preferences"])


@router.get("/{session_id}", response_model=ConsentResponse, summary="Get consent flags")
def get_preferences(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    return PreferenceService(conn).get(session_id)


@router.put("/{session_id}", response_model=ConsentResponse, summary="Update consent flags")
def update_preferences(
    data: ConsentUpdate,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    conn=Depends(db_dependency),
):
    return PreferenceService(conn).update(session_id, data)
