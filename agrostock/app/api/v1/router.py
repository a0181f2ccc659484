from fastapi import APIRouter

from agrostock.app.api.v1.endpoints.health import router as health_router
from agrostock.app.api.v1.endpoints.products import router as products_router
from agrostock.app.api.v1.endpoints.stock import router as stock_router
from agrostock.app.api.v1.endpoints.stock_movements import router as stock_movements_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(products_router, tags=["products"])
router.include_router(stock_router, tags=["stock"])
router.include_router(stock_movements_router, tags=["stock_movements"])
