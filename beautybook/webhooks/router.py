# beautybook/webhooks/router.py
from fastapi import APIRouter

webhook_router = APIRouter()


# Import handlers inside a function to avoid circular imports
def register_handlers():
    from beautybook.webhooks import payment_handler
    webhook_router.include_router(payment_handler.router)


register_handlers()


@webhook_router.get("/")
async def webhook_info():
    return {
        "endpoints": {
            "payments": "/webhooks/payments",
        },
        "note": "POST with an HMAC-SHA256 signature of the body in the X-Signature header"
    }
