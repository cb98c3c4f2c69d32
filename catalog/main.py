# catalog/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Config, get_config
from .core import QueryEngine
from .errors import ProductNotFound
from .logging import configure_from, get_logger
from .models import CategoryList, Product, ProductIn, ProductPage

log = get_logger(__name__)

router = APIRouter()


def get_engine(request: Request) -> QueryEngine:
    return request.app.state.engine


def page_size_param(request: Request, size: Optional[int] = Query(None, ge=1)) -> int:
    paging = request.app.state.config.paging
    if size is None:
        return paging.default_page_size
    # bounded by config, so checked here rather than in Query()
    if size > paging.max_page_size:
        raise HTTPException(status_code=422, detail=f"size must be <= {paging.max_page_size}")
    return size


# ---------------------------
# Health
# ---------------------------
@router.get("/health")
async def health(engine: QueryEngine = Depends(get_engine)):
    return {"status": "ok", "products": len(engine.store)}


# ---------------------------
# Product endpoints
# ---------------------------
@router.post("/products", response_model=Product, status_code=201)
async def create_product(payload: ProductIn, engine: QueryEngine = Depends(get_engine)):
    return await engine.create(payload.category, payload.name)


@router.get("/products", response_model=ProductPage)
async def list_products(
    page: int = Query(0, ge=0),
    size: int = Depends(page_size_param),
    engine: QueryEngine = Depends(get_engine),
):
    return await engine.list_products(page, size)


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: int, engine: QueryEngine = Depends(get_engine)):
    return await engine.get_by_id(product_id)


@router.put("/products/{product_id}", response_model=Product)
async def update_product(product_id: int, payload: ProductIn, engine: QueryEngine = Depends(get_engine)):
    return await engine.update(product_id, payload.category, payload.name)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: int, engine: QueryEngine = Depends(get_engine)):
    await engine.delete(product_id)
    return Response(status_code=204)


# ---------------------------
# Category endpoints
# ---------------------------
@router.get("/categories", response_model=CategoryList)
async def list_categories(engine: QueryEngine = Depends(get_engine)):
    return CategoryList(categories=await engine.list_categories())


# ":path" so categories containing "/" (sent as %2F) still match this route
@router.get("/categories/{category:path}/products", response_model=ProductPage)
async def list_products_by_category(
    category: str,
    page: int = Query(0, ge=0),
    size: int = Depends(page_size_param),
    engine: QueryEngine = Depends(get_engine),
):
    return await engine.list_by_category(category, page, size)


# ---------------------------
# Utility: reset (for tests/demo)
# ---------------------------
@router.post("/reset")
async def reset_all(engine: QueryEngine = Depends(get_engine)):
    await engine.reset()
    return {"status": "reset"}


# ---------------------------
# Error mapping
# ---------------------------
async def product_not_found_handler(request: Request, exc: ProductNotFound):
    return JSONResponse(
        status_code=404,
        content={"detail": "product not found", "product_id": exc.product_id},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    log.error(
        "request_failed",
        status=500,
        error_type=type(exc).__name__,
        error_cause=str(exc),
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "internal server error"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_from(app.state.config)
    log.info("service_started", products=len(app.state.engine.store))
    yield


def create_app(engine: Optional[QueryEngine] = None, config: Optional[Config] = None) -> FastAPI:
    config = config or get_config()
    app = FastAPI(title="catalog-service", version="1.0.0", lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine if engine is not None else QueryEngine.from_config(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ProductNotFound, product_not_found_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(config=config), host=config.server.host, port=config.server.port)


app = create_app()

if __name__ == "__main__":
    run()
