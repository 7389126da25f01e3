"""Listing of the exported patient operations and their call kinds."""

from fastapi import APIRouter

from ...operations import OPERATIONS
from ..models.responses import OperationInfo, OperationListResponse

router = APIRouter(prefix="/operations", tags=["operations"])


@router.get("", response_model=OperationListResponse)
async def list_operations() -> OperationListResponse:
    operations = [
        OperationInfo(name=op.name, kind=op.kind, description=op.description)
        for op in OPERATIONS.list_operations()
    ]
    return OperationListResponse(operations=operations, total=len(operations))
