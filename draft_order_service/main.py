"""
main.py — FastAPI Entry Point for the Draft Order Service

This module provides the REST API interface used by the storefront product
configurator. It turns a configuration selection into a Shopify draft order
and answers with the invoice URL.

Responsibilities:
    • Accept configuration selections via HTTP API
    • Check configuration and request authenticity before any Admin API call
    • Map workflow results and errors to HTTP responses
    • Provide system health information
"""

from typing import Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .clients import ShopifyAdminClient
from .config import Settings, get_settings, require_configuration
from .errors import DraftOrderError, MethodNotAllowedError, SignatureVerificationError
from .logging_config import get_logger, setup_logging
from .verification import get_verifier
from .workflow import create_draft_order_workflow

DRAFT_ORDER_PATH = "/api/configurator/create-draft"

# Initialization
# Configure logging and initialize FastAPI app
_startup_settings = get_settings()
setup_logging(_startup_settings.log_level, _startup_settings.log_file)
log = get_logger(__name__)
app = FastAPI(title="Configurator Draft Order Service")


def get_admin_client_factory() -> Callable[[Settings], ShopifyAdminClient]:
    """Dependency returning the factory used to build Admin API clients."""
    return ShopifyAdminClient.from_settings


def error_response(error: DraftOrderError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def read_json_body(request: Request):
    """Parsed JSON body, or None if the body is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


# API Endpoint: Storefront → Draft Order Service
@app.post(DRAFT_ORDER_PATH)
async def create_draft(
        request: Request,
        settings: Settings = Depends(get_settings),
        client_factory: Callable[[Settings], ShopifyAdminClient] = Depends(get_admin_client_factory)
):
    """
    Creates a draft order for a configured product.

    The request body carries `productHandle`, an optional `productTitle` and
    the customer's `selection`. The Admin API calls are blocking and run in
    the thread pool.

    Returns:
        JSONResponse:
            - 200 {"invoice_url": ...} on success
            - 4xx/500 {"error": <tag>} for every reported error
            - 500 {"error": "draft_order_failed"} for any unexpected failure
    """
    try:
        require_configuration(settings)

        if not get_verifier(settings).verify(request.query_params.multi_items()):
            log.warning("Request rejected: invalid app proxy signature.")
            raise SignatureVerificationError()

        body = await read_json_body(request)

        def run_workflow():
            with client_factory(settings) as client:
                return create_draft_order_workflow(body, client)

        invoice_url = await run_in_threadpool(run_workflow)
        return {"invoice_url": invoice_url}

    except DraftOrderError as e:
        return error_response(e)

    except Exception as e:
        log.critical(f"[create-draft] Unexpected error: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "draft_order_failed"})


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed(request: Request, exc: StarletteHTTPException):
    """Every method except POST is rejected with 405 `method_not_allowed`."""
    if exc.status_code == 405:
        return error_response(MethodNotAllowedError())
    return await http_exception_handler(request, exc)


# Health Check Endpoint
@app.get("/health")
def health_check():
    """
    Simple health check endpoint.

    Can be used by monitoring systems or container orchestrators
    (e.g., Docker, Kubernetes) to verify that the service is running.

    Returns:
        dict: A basic JSON object indicating service availability.
    """
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
