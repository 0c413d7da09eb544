# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_session
from storefront.domain.schemas import CartItem, CartItemIn, CartOut, QuantityIn
from storefront.services.cart_service import CartManager, make_item_id
from storefront.services.session_registry import ClientSession

router = APIRouter(prefix="/cart", tags=["cart"])


def cart_out(cart: CartManager) -> CartOut:
    return CartOut(
        items=cart.snapshot(),
        total_items=cart.total_items(),
        total_price=cart.total_price(),
    )


@router.get("", response_model=CartOut)
def get_cart(session: ClientSession = Depends(get_session)):
    return cart_out(session.cart)


@router.post("/items", response_model=CartOut)
def add_item(payload: CartItemIn, session: ClientSession = Depends(get_session)):
    item = CartItem(
        id=make_item_id(payload.product_id, payload.variant_id),
        **payload.model_dump(),
    )
    session.cart.add(item)
    return cart_out(session.cart)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(item_id: str, payload: QuantityIn, session: ClientSession = Depends(get_session)):
    session.cart.set_quantity(item_id, payload.quantity)
    return cart_out(session.cart)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(item_id: str, session: ClientSession = Depends(get_session)):
    session.cart.remove(item_id)
    return cart_out(session.cart)


@router.delete("", response_model=CartOut)
def clear_cart(session: ClientSession = Depends(get_session)):
    session.cart.clear()
    return cart_out(session.cart)
