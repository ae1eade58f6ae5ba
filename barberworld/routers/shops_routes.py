# barberworld/routers/shops_routes.py

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barberworld.db import get_session
from barberworld.schemas import ShopCreate, ShopPublic, ShopUpdate
from barberworld.auth import get_current_user
from barberworld.deps import require_role
from barberworld.repository import ShopRepository

router = APIRouter(
    prefix="/api/shop",
    tags=["shops"],
)


@router.post("/create", response_model=ShopPublic, status_code=201)
def create_shop(
    shop: ShopCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")  # only owners have shops
    return ShopRepository(session).create(
        owner_user_id=current_user["id"],
        **shop.model_dump(mode="json"),
    )


@router.put("/update", response_model=ShopPublic)
def update_shop(
    updates: ShopUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")
    repo = ShopRepository(session)
    shop = repo.get_by_owner(current_user["id"])
    return repo.update(shop, **updates.model_dump(mode="json", exclude_unset=True))


@router.get("/byUserId/{user_id}", response_model=ShopPublic)
def get_shop_by_owner(
    user_id: int,
    session: Session = Depends(get_session),
):
    return ShopRepository(session).get_by_owner(user_id)


@router.get("/{shop_id}", response_model=ShopPublic)
def get_shop(
    shop_id: int,
    session: Session = Depends(get_session),
):
    return ShopRepository(session).get(shop_id)
