from fastapi import APIRouter, Depends, Request

from cloudstage.api.deps import get_services
from cloudstage.core.container import ServiceContainer
from cloudstage.schemas.checkout import CheckoutResponse
from cloudstage.services.checkout_service import create_checkout_order

router = APIRouter()


@router.post("/checkout/{provider}", response_model=CheckoutResponse)
async def create_checkout(
    provider: str,
    request: Request,
    services: ServiceContainer = Depends(get_services),
):
    """
    Create a provider order and hand the browser what it needs to open checkout.
    Fulfillment happens later, from the provider's webhook.
    """
    # Decoded by the service so malformed bodies surface as InvalidInput
    payload = await request.body()

    return await create_checkout_order(
        provider,
        payload,
        settings=services.settings,
        gateways=services.gateways,
    )
