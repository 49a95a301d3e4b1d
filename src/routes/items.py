# src/routes/items.py
from fastapi import APIRouter, Depends, Query, HTTPException, status, Path, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from src.core.auth_dependencies import get_current_account
from src.core.config import Settings
from src.core.database import get_db, get_app_settings
from src.core.exceptions import InventoryException
from src.schemas.inventory import ItemCreate, ItemReplace, ItemOut, StockMovementOut
from src.schemas.pagination import PaginatedResponse, PaginationParams
from src.schemas.security import CurrentAccount
from src.services.item_query import ItemQueryService
from src.services.item_service import ItemService
from src.services.stock_ledger import MovementLedger

logger = logging.getLogger(__name__)

item_router = APIRouter(prefix="/items", tags=["Items"])


def _raise_http(e: InventoryException):
    raise HTTPException(status_code=e.status_code, detail=e.message)


def _raise_internal(action: str):
    logger.exception(f"Unexpected error while trying to {action}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )


@item_router.post("/",
    response_model=ItemOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create item",
    description="Create an item together with its initial stock rows"
)
def create_item(
    data: ItemCreate,
    current_account: CurrentAccount = Depends(get_current_account),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    """
    Create a new item in the caller's organization.

    - **name**: Item name (required)
    - **category_id**: Category of the item (required)
    - **stock**: Initial stock rows, one per location
    """
    try:
        return ItemService.create_item(
            db,
            current_account.organization_id,
            data,
            actor_id=current_account.user_id,
            timeout=settings.TRANSACTION_TIMEOUT_SECONDS,
        )
    except InventoryException as e:
        _raise_http(e)
    except Exception:
        _raise_internal("create item")


@item_router.get("/",
    response_model=PaginatedResponse[ItemOut],
    summary="List items",
    description="List the organization's items, newest first, with stock rows"
)
def list_items(
    pagination: PaginationParams = Depends(),
    current_account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db)
):
    try:
        items = ItemService.list_items(
            db, current_account.organization_id, pagination.page, pagination.page_size
        )
        total = ItemService.count_items(db, current_account.organization_id)
    except InventoryException as e:
        _raise_http(e)
    except Exception:
        _raise_internal("fetch items")

    logger.info(f"Fetched {len(items)} items for organization {current_account.organization_id}")
    return PaginatedResponse[ItemOut](
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
        total_pages=ItemQueryService.total_pages(total, pagination.page_size),
        items=[ItemOut.model_validate(item) for item in items],
    )


@item_router.get("/{item_id}",
    response_model=ItemOut,
    summary="Get item",
    description="Get an item with all of its stock rows"
)
def get_item(
    item_id: UUID = Path(..., description="Item ID"),
    current_account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db)
):
    try:
        return ItemService.get_item(db, item_id, organization_id=current_account.organization_id)
    except InventoryException as e:
        _raise_http(e)
    except Exception:
        _raise_internal("retrieve item")


@item_router.put("/{item_id}",
    response_model=ItemOut,
    summary="Replace item",
    description="Update item fields and replace its complete stock-row set"
)
def replace_item(
    data: ItemReplace,
    item_id: UUID = Path(..., description="Item ID"),
    current_account: CurrentAccount = Depends(get_current_account),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    """
    Replace an item's stock.

    - **stock**: The complete new stock set. Send back each row's `id` and
      `version` as last read to have concurrent changes rejected with 409.
    - **expected**: Location id -> `{id, version}` as last read, for rows
      being dropped or moved; checked the same way.
    - Any other field present in the body overwrites the stored value.
    """
    try:
        return ItemService.replace_item(
            db,
            item_id,
            current_account.organization_id,
            data,
            actor_id=current_account.user_id,
            timeout=settings.TRANSACTION_TIMEOUT_SECONDS,
        )
    except InventoryException as e:
        _raise_http(e)
    except Exception:
        _raise_internal("update item")


@item_router.delete("/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete item",
    description="Delete an item and its stock rows; movement history is kept"
)
def delete_item(
    item_id: UUID = Path(..., description="Item ID"),
    current_account: CurrentAccount = Depends(get_current_account),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
):
    try:
        ItemService.delete_item(
            db,
            item_id,
            current_account.organization_id,
            actor_id=current_account.user_id,
            timeout=settings.TRANSACTION_TIMEOUT_SECONDS,
        )
    except InventoryException as e:
        _raise_http(e)
    except Exception:
        _raise_internal("delete item")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@item_router.get("/{item_id}/movements",
    response_model=List[StockMovementOut],
    summary="Item stock history",
    description="Stock movements recorded for an item, oldest first"
)
def list_item_movements(
    item_id: UUID = Path(..., description="Item ID"),
    after: Optional[UUID] = Query(None, description="Resume after this movement ID"),
    limit: int = Query(50, ge=1, le=500, description="Maximum movements to return"),
    current_account: CurrentAccount = Depends(get_current_account),
    db: Session = Depends(get_db)
):
    try:
        return MovementLedger.list_for_item(
            db, item_id, current_account.organization_id, after=after, limit=limit
        )
    except InventoryException as e:
        _raise_http(e)
    except Exception:
        _raise_internal("fetch item movements")
