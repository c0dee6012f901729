import logging
from fastapi import FastAPI, HTTPException, status, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from voltedge.core.config import settings
from voltedge.core.backend_client import BackendAPIError, backend_client
from voltedge.api import cart, orders

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=f"{settings.SHOP_NAME} - Storefront",
    description="Customer-facing cart and checkout API",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Session cookie carries the cart slot (or the id of the slot) for each browser
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET_KEY,
    max_age=settings.SESSION_MAX_AGE_SECONDS
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart.router)
app.include_router(orders.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "shop_name": settings.SHOP_NAME}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.exception_handler(BackendAPIError)
async def backend_exception_handler(request: Request, exc: BackendAPIError):
    # Relay the backend's status code and error body unchanged
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.SHOP_NAME} storefront (cart storage: {settings.CART_STORAGE_BACKEND})")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down storefront application")
    await backend_client.close()
