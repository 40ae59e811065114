import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bakery.api.health import router as health_router
from bakery.api.routes_address import router as address_router
from bakery.api.routes_admin import router as admin_router
from bakery.api.routes_cart import router as cart_router
from bakery.api.routes_order import router as order_router
from bakery.config import settings
from bakery.db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
log = logging.getLogger("bakery")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()
    yield


app = FastAPI(title="Bakery Storefront - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(cart_router, tags=["cart"])

app.include_router(address_router, tags=["addresses"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

app.include_router(admin_router, tags=["admin"])
