import time
from contextlib import asynccontextmanager
from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, Path, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from . import auth, config, crud, models, notifications, schemas, seed
from .db import Database, get_db
from .errors import NotFoundError, UnauthorizedError, register_exception_handlers
from .logger import get_logger, setup_logger
from .orders import place_order
from .routes import API

logger = get_logger(__name__)

router = APIRouter()

RecordId = Annotated[int, Path(le=schemas.MAX_INT)]


@router.post(API.auth.login.path, response_model=API.auth.login.response_model)
def login(
    login_in: schemas.LoginRequest, request: Request, db: Session = Depends(get_db)
):
    user = crud.authenticate_user(db, login_in.username, login_in.password)
    if not user:
        logger.warning(f"Login failed for '{login_in.username}'")
        raise UnauthorizedError("Invalid username or password")
    auth.login_session(request, user)
    logger.info(f"Login successful: user_id={user.id}")
    return user


@router.post(API.auth.logout.path)
def logout(request: Request):
    auth.logout_session(request)
    return Response(status_code=200)


@router.get(API.auth.user.path, response_model=API.auth.user.response_model)
def get_user(current_user: models.User = Depends(auth.get_current_user)):
    return current_user


@router.get(API.products.list.path, response_model=API.products.list.response_model)
def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = schemas.ProductListQuery(search=search, category=category)
    return crud.list_products(db, search=query.search, category=query.category)


@router.get(API.products.get.path, response_model=API.products.get.response_model)
def get_product(id: RecordId, db: Session = Depends(get_db)):
    product = crud.get_product(db, id)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.post(
    API.products.create.path,
    response_model=API.products.create.response_model,
    status_code=API.products.create.success_status,
)
def create_product(
    product_in: schemas.ProductCreate,
    db: Session = Depends(get_db),
    _: models.User = Depends(auth.get_current_user),
):
    product = crud.create_product(db, product_in.model_dump())
    logger.info(f"Product {product.id} created: {product.name}")
    return product


@router.put(API.products.update.path, response_model=API.products.update.response_model)
def update_product(
    id: RecordId,
    product_in: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    _: models.User = Depends(auth.get_current_user),
):
    changes = product_in.model_dump(exclude_unset=True, exclude_none=True)
    product = crud.update_product(db, id, changes)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.delete(
    API.products.delete.path, status_code=API.products.delete.success_status
)
def delete_product(
    id: RecordId,
    db: Session = Depends(get_db),
    _: models.User = Depends(auth.get_current_user),
):
    if not crud.delete_product(db, id):
        raise NotFoundError("Product not found")
    logger.info(f"Product {id} deleted")
    return Response(status_code=API.products.delete.success_status)


@router.post(
    API.orders.create.path,
    response_model=API.orders.create.response_model,
    status_code=API.orders.create.success_status,
)
def create_order(
    order_in: schemas.OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    order = place_order(db, order_in)
    order_out = schemas.OrderWithItemsOut.model_validate(order)
    background_tasks.add_task(notifications.notify_order_placed, order_out)
    return order_out


@router.get(API.orders.list.path, response_model=API.orders.list.response_model)
def list_orders(
    db: Session = Depends(get_db),
    _: models.User = Depends(auth.get_current_user),
):
    return crud.list_orders(db)


@router.get(API.orders.get.path, response_model=API.orders.get.response_model)
def get_order(
    id: RecordId,
    db: Session = Depends(get_db),
    _: models.User = Depends(auth.get_current_user),
):
    order = crud.get_order_with_items(db, id)
    if not order:
        raise NotFoundError("Order not found")
    return order


@router.patch(
    API.orders.update_status.path,
    response_model=API.orders.update_status.response_model,
)
def update_order_status(
    id: RecordId,
    status_in: schemas.OrderStatusUpdate,
    db: Session = Depends(get_db),
    _: models.User = Depends(auth.get_current_user),
):
    order = crud.update_order_status(db, id, status_in.status)
    if not order:
        raise NotFoundError("Order not found")
    logger.info(f"Order {id} marked {order.status}")
    return order


@router.get("/health")
def health(request: Request):
    status = {"status": "healthy", "service": "storefront-api"}
    try:
        request.app.state.database.ping()
        status["database"] = "connected"
    except SQLAlchemyError as exc:
        status["database"] = f"error: {exc.__class__.__name__}"
        status["status"] = "degraded"
    return status


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.create_all()
    db = database.session()
    try:
        seed.ensure_admin_user(db)
        if app.state.seed_data:
            seed.seed_products(db)
    finally:
        db.close()
    logger.info("Storefront API started")
    yield
    database.dispose()
    logger.info("Storefront API stopped")


async def log_api_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
        )
    return response


def create_app(
    database_url: str = None,
    session_secret: str = None,
    seed_data: bool = None,
) -> FastAPI:
    setup_logger()

    app = FastAPI(title="Storefront", version="1.0.0", lifespan=lifespan)
    app.state.database = Database(database_url or config.DATABASE_URL, echo=config.DB_ECHO)
    app.state.seed_data = config.SEED_DATA if seed_data is None else seed_data

    app.middleware("http")(log_api_requests)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret or config.SESSION_SECRET,
        max_age=config.SESSION_MAX_AGE,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
