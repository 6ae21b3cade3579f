"""Vehicle share links: authenticated issuance and the public read."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.core import security
from app.core.response import DataResponse
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.schemas.share import PublicVehicle, ShareCreate, ShareOut
from app.services.share import ShareService

router = APIRouter(prefix="/share", tags=["Share"])


@router.post(
    "/vehicle/{vehicle_id}",
    response_model=DataResponse[ShareOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_share(
    vehicle_id: int,
    body: ShareCreate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await ShareService(db, actor).create_share(vehicle_id, body)}


@router.get(
    "/vehicle/public/{token}",
    response_model=DataResponse[PublicVehicle],
    response_model_exclude_none=True,
)
async def public_vehicle(
    token: str,
    db: SessionExecutor = Depends(get_executor),
):
    """No authentication; only the aggregates named when the link was issued."""
    return {"data": await ShareService(db).get_public_vehicle(token)}
