# app/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.errors import BoundaryRoute

router = APIRouter(tags=["Health"], route_class=BoundaryRoute)

ENDPOINTS = {
    "products": {
        "getAll": "/api/posts",
        "create": "POST /api/posts",
        "myProducts": "/api/my-products",
        "updateProduct": "PUT /api/my-products/:id",
        "deleteProduct": "DELETE /api/my-products/:id",
        "sellerStats": "/api/seller-stats",
    },
    "cart": {
        "getCart": "/api/cart",
        "addToCart": "POST /api/cart",
        "updateItem": "PUT /api/cart/:id",
        "removeItem": "DELETE /api/cart/:id",
        "clearCart": "DELETE /api/cart",
    },
    "auth": {
        "register": "/api/auth/register",
        "login": "/api/auth/login",
        "logout": "/api/auth/logout",
        "magicLink": "/api/auth/magic-link",
        "google": "/api/auth/google",
        "session": "/api/auth/session",
        "profile": "/api/auth/profile",
    },
}


@router.get("/health")
def health():
    """Liveness check plus a directory of the API's endpoints."""
    return {
        "status": "OK",
        "message": "Backend server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": ENDPOINTS,
    }
