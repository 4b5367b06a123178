import logging
import sys
import time
from typing import List, Optional

from fastapi import APIRouter, FastAPI, Depends, HTTPException, Path, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import crud, database, schemas, tracking
from .config import SERVER_HOST, SERVER_PORT, Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Ids are stored in a 32-bit integer column
MAX_ID = 2**31 - 1


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# Dependency to get database session
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def describe_validation_error(errors) -> str:
    """Turn pydantic validation errors into a single client-facing message"""
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if loc[:1] == ("path",):
            return "Invalid order ID"
        if loc == ("body", "status"):
            return "Invalid status"
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ())[1:]) or 'body'}: {error.get('msg')}"
        for error in errors
    )
    return f"Invalid request: {details}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = describe_validation_error(exc.errors())
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )


async def log_requests(request: Request, call_next):
    """Log method, path, client, status and latency of every request"""
    start_time = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start_time) * 1000
    client_ip = request.client.host if request.client else "-"
    logger.info(
        f"[{request.method}] {request.url.path} {client_ip} - {response.status_code} ({duration_ms:.2f}ms)"
    )
    return response


def order_not_found(order_id: int):
    logger.warning(f"Order with ID {order_id} not found")
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


@router.get("/orders", response_model=schemas.APIResponse[List[schemas.Order]], tags=["Orders"])
def read_orders(db: Session = Depends(get_db)):
    """Get all orders, newest first"""
    logger.info("Fetching all orders")
    orders = sorted(
        crud.list_orders(db),
        key=lambda order: (order.created_at, order.id),
        reverse=True,
    )
    return schemas.APIResponse[List[schemas.Order]](
        success=True,
        message="Orders retrieved successfully",
        data=[schemas.Order.model_validate(order) for order in orders],
    )


@router.get("/orders/{order_id}", response_model=schemas.APIResponse[schemas.Order], tags=["Orders"])
def read_order(order_id: int = Path(..., ge=0, le=MAX_ID), db: Session = Depends(get_db)):
    """Get order by ID"""
    logger.info(f"Fetching order with ID: {order_id}")
    order = crud.get_order(db, order_id)
    if order is None:
        raise order_not_found(order_id)
    return schemas.APIResponse[schemas.Order](
        success=True,
        message="Order retrieved successfully",
        data=schemas.Order.model_validate(order),
    )


@router.post(
    "/orders",
    response_model=schemas.APIResponse[schemas.Order],
    status_code=status.HTTP_201_CREATED,
    tags=["Orders"],
)
def create_order(order: schemas.OrderCreate, db: Session = Depends(get_db)):
    """Create a new order"""
    logger.info(f"Creating order for customer: {order.customer_name}")
    db_order = crud.create_order(db, order)
    logger.info(f"Order {db_order.id} created with total {db_order.total_amount}")
    return schemas.APIResponse[schemas.Order](
        success=True,
        message="Order created successfully",
        data=schemas.Order.model_validate(db_order),
    )


@router.put("/orders/{order_id}", response_model=schemas.APIResponse[schemas.Order], tags=["Orders"])
def update_order(
    changes: schemas.OrderUpdate,
    order_id: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
):
    """Update an order"""
    logger.info(f"Updating order with ID: {order_id}")
    order = crud.update_order(db, order_id, changes)
    if order is None:
        raise order_not_found(order_id)
    return schemas.APIResponse[schemas.Order](
        success=True,
        message="Order updated successfully",
        data=schemas.Order.model_validate(order),
    )


@router.delete(
    "/orders/{order_id}",
    response_model=schemas.APIResponse,
    response_model_exclude_none=True,
    tags=["Orders"],
)
def delete_order(order_id: int = Path(..., ge=0, le=MAX_ID), db: Session = Depends(get_db)):
    """Delete an order"""
    logger.info(f"Deleting order with ID: {order_id}")
    if not crud.delete_order(db, order_id):
        raise order_not_found(order_id)
    return schemas.APIResponse(success=True, message="Order deleted successfully")


@router.patch("/orders/{order_id}/status", response_model=schemas.APIResponse[schemas.Order], tags=["Orders"])
def update_order_status(
    status_update: schemas.OrderStatusUpdate,
    order_id: int = Path(..., ge=0, le=MAX_ID),
    db: Session = Depends(get_db),
):
    """Update order status"""
    logger.info(f"Updating status for order ID: {order_id} to {status_update.status.value}")
    if status_update.message:
        logger.info(f"Status note for order {order_id}: {status_update.message}")
    order = crud.set_status(db, order_id, status_update.status)
    if order is None:
        raise order_not_found(order_id)
    return schemas.APIResponse[schemas.Order](
        success=True,
        message="Order status updated successfully",
        data=schemas.Order.model_validate(order),
    )


@router.get("/orders/{order_id}/track", response_model=schemas.APIResponse[schemas.TrackingInfo], tags=["Tracking"])
def track_order(order_id: int = Path(..., ge=0, le=MAX_ID), db: Session = Depends(get_db)):
    """Get the tracking view of an order"""
    logger.info(f"Fetching tracking for order ID: {order_id}")
    order = crud.get_order(db, order_id)
    if order is None:
        raise order_not_found(order_id)
    return schemas.APIResponse[schemas.TrackingInfo](
        success=True,
        message="Tracking information retrieved",
        data=tracking.build_tracking_info(order),
    )


@router.get("/stats", response_model=schemas.APIResponse[schemas.OrderStats], tags=["Statistics"])
def read_statistics(db: Session = Depends(get_db)):
    """Get aggregate order statistics"""
    logger.info("Computing order statistics")
    return schemas.APIResponse[schemas.OrderStats](
        success=True,
        message="Statistics retrieved successfully",
        data=crud.compute_statistics(db),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and its database engine"""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = database.create_db_engine(settings.sqlalchemy_url)
    try:
        database.init_db(engine)
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
    logger.info("Database initialized successfully")

    # Initialize FastAPI app
    app = FastAPI(
        title="Order Delivery Service",
        description="Manages food delivery orders",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = database.create_session_factory(engine)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Added first so CORS wraps it
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=12 * 60 * 60,
    )

    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness probe"""
        return {"status": "ok"}

    app.include_router(router)
    return app


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    logger.info(f"Starting Order Delivery API server on :{SERVER_PORT}")
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
