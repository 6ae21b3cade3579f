"""Vehicle routes: CRUD, sibling updates, history, featured, images and documents.

Static paths (``/featured``, ``/dropdown/options``, ``/shipping/history/recent`` ...)
are declared before ``/{vehicle_id}`` so they are not captured by it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse

from app.core import security
from app.core.config import settings
from app.core.exceptions import BadRequestError
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, MessageResponse, paginated, with_meta
from app.core.security import Principal, require_permission
from app.db.executor import SessionExecutor, get_executor
from app.domain.vehicle import Vehicle, VehicleComplete, VehicleDocument
from app.filters import VehicleFilter
from app.repositories.history import RECENT_DEFAULT_LIMIT
from app.schemas.vehicle import (
    AssignCustomer,
    DropdownOptions,
    FeaturedUpdate,
    FinancialsUpdate,
    PresignedFile,
    PurchaseUpdate,
    SalesUpdate,
    ShippingUpdate,
    VehicleCreate,
    VehicleUpdate,
)
from app.services.vehicle import FEATURED_DEFAULT_LIMIT, IncomingFile, VehicleService

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(db: SessionExecutor, actor: Principal | None = None) -> VehicleService:
    return VehicleService(db, actor)


async def _read_files(files: list[UploadFile], cap_mb: int) -> list[IncomingFile]:
    """Read uploads into memory, rejecting the batch once it exceeds *cap_mb*."""
    cap = cap_mb * 1024 * 1024
    total = 0
    incoming: list[IncomingFile] = []
    for upload in files:
        data = await upload.read()
        total += len(data)
        if total > cap:
            raise BadRequestError(f"Upload exceeds the {cap_mb} MB limit")
        incoming.append(
            IncomingFile(
                filename=upload.filename or "",
                content_type=upload.content_type or "",
                data=data,
            )
        )
    return incoming


# ------------------------------------------------------------------
# Collection
# ------------------------------------------------------------------

@router.get("")
async def list_vehicles(
    request: Request,
    pagination: PaginationParams = Depends(),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    """List vehicles. Accepts every VehicleFilter parameter plus page/limit."""
    filter = VehicleFilter.from_query(request.query_params)
    items, total = await _svc(db, actor).list_vehicles(filter, pagination)
    return paginated(items, total, pagination)


@router.post("", response_model=DataResponse[Vehicle], status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    body: VehicleCreate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    vehicle = await _svc(db, actor).create_vehicle(body)
    return {"data": vehicle}


@router.get("/dropdown/options", response_model=DataResponse[DropdownOptions])
async def dropdown_options(db: SessionExecutor = Depends(get_executor)):
    """Distinct makes/models, colors and years plus the fixed status lists."""
    return {"data": await _svc(db).get_dropdown_options()}


@router.get("/featured", response_model=DataResponse[list[Vehicle]])
async def featured_vehicles(
    limit: int = Query(default=FEATURED_DEFAULT_LIMIT),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).get_featured(limit)}


@router.get("/customer/{customer_id}")
async def vehicles_by_customer(
    customer_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    items = await _svc(db, actor).vehicles_by_customer(customer_id)
    return with_meta(items, customer_id=customer_id)


# ------------------------------------------------------------------
# History
# ------------------------------------------------------------------

@router.get("/shipping/history/recent")
async def recent_shipping_history(
    limit: int = Query(default=RECENT_DEFAULT_LIMIT),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.SHIPPING_ACCESS)),
):
    return with_meta(await _svc(db, actor).recent_shipping_history(limit), limit=limit)


@router.get("/shipping/history/{vehicle_id}")
async def shipping_history(
    vehicle_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.SHIPPING_ACCESS)),
):
    return with_meta(await _svc(db, actor).shipping_history(vehicle_id), vehicle_id=vehicle_id)


@router.get("/purchase/history/recent")
async def recent_purchase_history(
    limit: int = Query(default=RECENT_DEFAULT_LIMIT),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.PURCHASE_ACCESS)),
):
    return with_meta(await _svc(db, actor).recent_purchase_history(limit), limit=limit)


@router.get("/purchase/history/status/{purchase_status}")
async def purchase_history_by_status(
    purchase_status: str,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.PURCHASE_ACCESS)),
):
    items = await _svc(db, actor).purchase_history_by_status(purchase_status)
    return with_meta(items, status=purchase_status)


@router.get("/purchase/history/supplier/{supplier_id}")
async def purchase_history_by_supplier(
    supplier_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.PURCHASE_ACCESS)),
):
    items = await _svc(db, actor).purchase_history_by_supplier(supplier_id)
    return with_meta(items, supplier_id=supplier_id)


@router.get("/purchase/history/{vehicle_id}")
async def purchase_history(
    vehicle_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.PURCHASE_ACCESS)),
):
    return with_meta(await _svc(db, actor).purchase_history(vehicle_id), vehicle_id=vehicle_id)


# ------------------------------------------------------------------
# Images and documents
# ------------------------------------------------------------------

def _upload_response(code: int, data: dict, errors: list[str] | None) -> JSONResponse:
    """Per-file failures sit beside ``data`` so a 207 body lists them at the top level."""
    content: dict = {"data": data}
    if errors:
        content["errors"] = errors
        content["partial_success"] = True
    return JSONResponse(status_code=code, content=content)


@router.post("/upload-image/{vehicle_id}")
async def upload_images(
    vehicle_id: int,
    images: list[UploadFile] = File(default=[]),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    """Multipart field ``images``. 201 when all stored, 207 on partial success, 400 when none."""
    incoming = await _read_files(images, settings.max_image_upload_mb)
    result = await _svc(db, actor).upload_images(vehicle_id, incoming)
    if result.total_uploaded == 0:
        code = status.HTTP_400_BAD_REQUEST
    elif result.errors:
        code = status.HTTP_207_MULTI_STATUS
    else:
        code = status.HTTP_201_CREATED
    data = result.model_dump(mode="json", exclude_none=True, exclude={"errors", "partial_success"})
    return _upload_response(code, data, result.errors)


@router.get("/upload-image/{filename}", response_model=DataResponse[PresignedFile])
async def image_url(
    filename: str,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).image_url(filename)}


@router.get("/download-image/{vehicle_id}/{filename}", response_model=DataResponse[PresignedFile])
async def download_image(
    vehicle_id: int,
    filename: str,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).image_url(filename, vehicle_id=vehicle_id)}


@router.post("/upload-document/{vehicle_id}")
async def upload_documents(
    vehicle_id: int,
    documents: list[UploadFile] = File(default=[]),
    document_type: list[str] = Form(default=[]),
    document_name: list[str] = Form(default=[]),
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_CREATE)),
):
    """Multipart field ``documents``; ``document_type`` / ``document_name`` pair by position."""
    incoming = await _read_files(documents, settings.max_document_upload_mb)
    stored, errors = await _svc(db, actor).upload_documents(
        vehicle_id, incoming, document_type, document_name
    )
    if not stored:
        code = status.HTTP_400_BAD_REQUEST
    elif errors:
        code = status.HTTP_207_MULTI_STATUS
    else:
        code = status.HTTP_201_CREATED
    body: dict = {
        "uploaded_documents": [d.model_dump(mode="json") for d in stored],
        "total_uploaded": len(stored),
        "total_files": len(incoming),
    }
    return _upload_response(code, body, errors)


@router.get("/download-document/{document_id}", response_model=DataResponse[PresignedFile])
async def download_document(
    document_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).document_url(document_id)}


# ------------------------------------------------------------------
# Single vehicle
# ------------------------------------------------------------------

@router.get("/{vehicle_id}", response_model=DataResponse[VehicleComplete])
async def get_vehicle(
    vehicle_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    return {"data": await _svc(db, actor).get_vehicle_complete(vehicle_id)}


@router.put("/{vehicle_id}", response_model=MessageResponse)
async def update_vehicle(
    vehicle_id: int,
    body: VehicleUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).update_vehicle(vehicle_id, body)
    return {"message": "Vehicle details updated successfully"}


@router.delete("/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(
    vehicle_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_DELETE)),
):
    await _svc(db, actor).delete_vehicle(vehicle_id)
    return {"message": "Vehicle deleted successfully"}


@router.put("/{vehicle_id}/shipping", response_model=MessageResponse)
async def update_shipping(
    vehicle_id: int,
    body: ShippingUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.SHIPPING_EDIT)),
):
    await _svc(db, actor).update_shipping(vehicle_id, body)
    return {"message": "Shipping status updated successfully"}


@router.put("/{vehicle_id}/purchase", response_model=MessageResponse)
async def update_purchase(
    vehicle_id: int,
    body: PurchaseUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.PURCHASE_EDIT)),
):
    await _svc(db, actor).update_purchase(vehicle_id, body)
    return {"message": "Purchase details updated successfully"}


@router.put("/{vehicle_id}/financials", response_model=MessageResponse)
async def update_financials(
    vehicle_id: int,
    body: FinancialsUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.FINANCIAL_EDIT)),
):
    await _svc(db, actor).update_financials(vehicle_id, body)
    return {"message": "Financial details updated successfully"}


@router.put("/{vehicle_id}/sales", response_model=MessageResponse)
async def update_sales(
    vehicle_id: int,
    body: SalesUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.SALES_EDIT)),
):
    await _svc(db, actor).update_sales(vehicle_id, body)
    return {"message": "Sales details updated successfully"}


@router.put("/{vehicle_id}/featured", response_model=MessageResponse)
async def set_featured(
    vehicle_id: int,
    body: FeaturedUpdate,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).set_featured(vehicle_id, body.is_featured)
    action = "featured" if body.is_featured else "unfeatured"
    return {"message": f"Vehicle {action} successfully"}


@router.put("/{vehicle_id}/customer", response_model=MessageResponse)
async def assign_customer(
    vehicle_id: int,
    body: AssignCustomer,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.SALES_EDIT)),
):
    await _svc(db, actor).assign_customer(vehicle_id, body.customer_id)
    return {"message": "Customer assigned to vehicle successfully"}


@router.delete("/{vehicle_id}/customer", response_model=MessageResponse)
async def remove_customer(
    vehicle_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.SALES_EDIT)),
):
    await _svc(db, actor).remove_customer(vehicle_id)
    return {"message": "Customer removed from vehicle successfully"}


@router.put("/{vehicle_id}/images/{image_id}/set-primary", response_model=MessageResponse)
async def set_primary_image(
    vehicle_id: int,
    image_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_EDIT)),
):
    await _svc(db, actor).set_primary_image(vehicle_id, image_id)
    return {"message": "Primary image set successfully"}


@router.get("/{vehicle_id}/documents")
async def list_documents(
    vehicle_id: int,
    db: SessionExecutor = Depends(get_executor),
    actor: Principal = Depends(require_permission(security.VEHICLE_ACCESS)),
):
    documents: list[VehicleDocument] = await _svc(db, actor).list_documents(vehicle_id)
    return with_meta(documents, vehicle_id=vehicle_id)
