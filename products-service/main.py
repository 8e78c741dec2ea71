import sys
import time
import uuid
from typing import List

from fastapi import Depends, FastAPI, Request, Response
from loguru import logger
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from config import settings
from docs import router as docs_router
from errors import Failure
from handlers import ProductHandler
from metrics import REQUEST_COUNT, REQUEST_LATENCY, SERVICE_NAME, record_error
from models import ProductStore
from problems import (
    failure_response,
    fault_response,
    is_bodiless_error,
    problem_response,
    register_problem_handlers,
    status_problem,
)
from schemas import ProductCreate, ProductResponse, ProductUpdate

# Config logging JSON (niveaux INFO, WARNING, ERROR)
logger.remove()
logger.add(sys.stderr, level=settings.log_level)
logger.add(
    sink=settings.log_sink,
    format="{time:YYYY-MM-DDTHH:mm:ss.SSSZ} | {level} | {message} | {extra}",
    level=settings.log_level,
    serialize=True,
    rotation="1 day",
)

# Stockage en mémoire, propriété explicite du service
store = ProductStore.seeded() if settings.seed_products else ProductStore()
product_handler = ProductHandler(store)


def get_handler() -> ProductHandler:
    return product_handler


app = FastAPI(
    title="Products Service",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
)
register_problem_handlers(app)
app.include_router(docs_router)


def _failure(failure: Failure, request: Request, endpoint: str) -> Response:
    record_error(endpoint, failure.error_type)
    return failure_response(failure, request)


# Middleware pour logger les requests avec correlation ID
@app.middleware("http")
async def log_requests(request: Request, call_next):
    # Generate or propagate correlation ID (trace-id)
    trace_id = request.headers.get("X-Trace-ID", str(uuid.uuid4()))
    request_id = uuid.uuid4().hex
    start_time = time.time()

    # Store ids in request state for problem details
    request.state.trace_id = trace_id
    request.state.request_id = request_id

    # Bind trace_id to logger context
    with logger.contextualize(trace_id=trace_id, request_id=request_id, service=SERVICE_NAME):
        logger.bind(method=request.method, url=str(request.url)).info(
            f"Request: {request.method} {request.url.path}"
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            # Toute exception non gérée devient un Problem Details 500
            record_error(request.url.path, "unhandled_fault")
            response = fault_response(exc, request)

        if is_bodiless_error(response):
            response = problem_response(status_problem(response.status_code), request)

        # Calculate latency
        latency = time.time() - start_time

        # Record metrics
        REQUEST_COUNT.labels(
            service=SERVICE_NAME,
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        REQUEST_LATENCY.labels(
            service=SERVICE_NAME,
            method=request.method,
            endpoint=request.url.path
        ).observe(latency)

        logger.info(
            f"Response status: {response.status_code}",
            extra={"status": response.status_code, "latency": latency}
        )

        # Add trace_id to response headers for tracing
        response.headers["X-Trace-ID"] = trace_id
        response.headers["X-Request-ID"] = request_id
        return response


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Endpoint /metrics compatible Prometheus"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy", "service": SERVICE_NAME}


@app.get("/products", response_model=List[ProductResponse], name="GetProducts")
async def get_products(handler: ProductHandler = Depends(get_handler)):
    return handler.list_products()


# Scénario de dysfonctionnement: Service en erreur contrôlée (must be before {product_id} route)
@app.get("/products/error", name="SimulateError")
async def error_endpoint(request: Request, handler: ProductHandler = Depends(get_handler)):
    """
    Endpoint générant volontairement une erreur HTTP 500.
    Utilisé pour tester le rendu Problem Details des erreurs serveur.
    """
    return _failure(handler.simulate_failure(), request, "/products/error")


@app.get("/products/{product_id}", response_model=ProductResponse, name="GetProductById")
async def get_product(product_id: int, request: Request, handler: ProductHandler = Depends(get_handler)):
    result = handler.get_product(product_id)
    if isinstance(result, Failure):
        return _failure(result, request, "/products/{product_id}")
    return result


@app.post("/products", response_model=ProductResponse, status_code=201, name="CreateProduct")
async def create_product(
    product: ProductCreate,
    request: Request,
    response: Response,
    handler: ProductHandler = Depends(get_handler),
):
    logger.info("Creating product")
    result = handler.create_product(product.name, product.price)
    if isinstance(result, Failure):
        return _failure(result, request, "/products")
    created, location = result
    response.headers["Location"] = location
    return created


@app.put("/products/{product_id}", response_model=ProductResponse, name="UpdateProduct")
async def update_product(
    product_id: int,
    product: ProductUpdate,
    request: Request,
    handler: ProductHandler = Depends(get_handler),
):
    result = handler.update_product(product_id, product.name, product.price)
    if isinstance(result, Failure):
        return _failure(result, request, "/products/{product_id}")
    return result


@app.delete("/products/{product_id}", status_code=204, name="DeleteProduct")
async def delete_product(product_id: int, request: Request, handler: ProductHandler = Depends(get_handler)):
    failure = handler.delete_product(product_id)
    if failure is not None:
        return _failure(failure, request, "/products/{product_id}")
    return Response(status_code=204)


if __name__ == "__main__":
    logger.info(f"Starting Products Service on port {settings.port}")
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
