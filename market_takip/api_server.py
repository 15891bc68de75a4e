"""FastAPI application exposing the inventory to a browser UI."""

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .models.product import Category
from .services.inventory_service import InventoryService
from .services.query import ALL_CATEGORIES, SortOption
from .services.scanner import ProductDraft
from .utils.exceptions import (
    DataImportError,
    DuplicateIdError,
    ImageError,
    InvalidRecordError,
    StorageError,
)
from .utils.logger import get_api_logger


class ProductCreateRequest(BaseModel):
    """Body of ``POST /products``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    barcode: str
    category: Category = Category.OTHER
    expiry_date: date = Field(alias="expiryDate")
    quantity: int = 1
    image: Optional[str] = None


def create_app(service: Optional[InventoryService] = None) -> FastAPI:
    """Create the API app around an inventory service (built from config if omitted)."""
    service = service or InventoryService()
    config = service.config
    logger = get_api_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the persisted inventory on startup."""
        logger.info("=" * 60)
        logger.info("MarketTakip API Starting")
        logger.info("=" * 60)
        logger.info(f"Environment:  {config.env.environment}")
        logger.info(f"Storage:      {config.storage.directory} ({config.storage.key})")

        service.initialize()

        yield

        logger.info("MarketTakip API shut down.")

    app = FastAPI(
        title=config.api.title,
        description="Perishable product inventory with expiry alerts",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": config.api.title,
            "version": __version__,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "products": len(service.repository.snapshot()),
            "storage_kb": service.storage_usage_kb()
        }

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    @app.get("/products")
    async def list_products(
        search: str = "",
        category: str = ALL_CATEGORIES,
        sort: str = SortOption.EXPIRY_ASC.value
    ):
        try:
            products = service.list_products(search, category, sort)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            "items": [p.to_dict() for p in products],
            "total": len(products)
        }

    @app.post("/products", status_code=201)
    async def create_product(payload: ProductCreateRequest):
        # The draft treats 0 as "not entered"; an explicit API value must be valid
        if payload.quantity < 1:
            raise HTTPException(status_code=400, detail="Quantity must be at least 1")

        draft = ProductDraft(
            name=payload.name,
            barcode=payload.barcode,
            category=payload.category,
            quantity=payload.quantity,
            expiry_date=payload.expiry_date,
            image=payload.image,
        )
        try:
            product = service.add_product(draft)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except DuplicateIdError as e:
            raise HTTPException(status_code=409, detail=e.message)
        except StorageError as e:
            raise HTTPException(status_code=507, detail=e.message)
        return product.to_dict()

    @app.get("/products/{product_id}")
    async def get_product(product_id: str):
        product = service.get_product(product_id)
        if product is None:
            raise HTTPException(status_code=404, detail=f"Product not found: {product_id}")
        return product.to_dict()

    @app.delete("/products/{product_id}")
    async def delete_product(product_id: str):
        try:
            products = service.delete_product(product_id)
        except StorageError as e:
            raise HTTPException(status_code=507, detail=e.message)
        return {"status": "deleted", "id": product_id, "total": len(products)}

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @app.get("/stats")
    async def stats():
        return service.stats().to_dict()

    @app.get("/dashboard")
    async def dashboard():
        return service.dashboard()

    @app.get("/notifications")
    async def notifications():
        alerts = service.notifications()
        return {
            "items": [alert.to_dict() for alert in alerts],
            "total": len(alerts)
        }

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    @app.get("/export")
    async def export_backup():
        document = service.export_backup()
        return Response(
            content=document.content,
            media_type=document.media_type,
            headers={"Content-Disposition": f'attachment; filename="{document.filename}"'}
        )

    @app.post("/import")
    async def import_backup(request: Request):
        body = await request.body()
        try:
            products = service.import_backup(body)
        except (DataImportError, InvalidRecordError) as e:
            logger.warning(f"Import rejected: {e.message}")
            raise HTTPException(status_code=400, detail=e.message)
        except StorageError as e:
            raise HTTPException(status_code=507, detail=e.message)
        return {"status": "imported", "total": len(products)}

    # ------------------------------------------------------------------
    # Images and settings
    # ------------------------------------------------------------------

    @app.post("/images/compress")
    async def compress_image(request: Request, max_width: Optional[int] = None):
        body = await request.body()
        try:
            image = await service.compress_image(body, max_width)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ImageError as e:
            raise HTTPException(status_code=400, detail=e.message)
        return {"image": image}

    @app.post("/theme/toggle")
    async def toggle_theme():
        return {"dark_mode": service.toggle_theme()}

    # ------------------------------------------------------------------
    # Exception handlers
    # ------------------------------------------------------------------

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Custom HTTP exception handler."""
        logger.warning(f"HTTP {exc.status_code}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status_code": exc.status_code
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Request body/query validation errors, in the same shape as other errors."""
        errors = jsonable_encoder(exc.errors())
        message = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in errors
        )
        logger.warning(f"HTTP 422: {message}")
        return JSONResponse(
            status_code=422,
            content={
                "error": message or "Invalid request",
                "status_code": 422,
                "details": errors
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """General exception handler for unexpected errors."""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if not config.is_production else "An error occurred"
            }
        )

    return app


if __name__ == "__main__":
    import uvicorn

    from .utils.config import get_config

    settings = get_config().env
    uvicorn.run(create_app(), host=settings.host, port=settings.port)
