"""
Error responder: shapes every failure into an RFC 9457 problem-details body.

- Handler failures (NotFound, ValidationFailed, UnhandledFault) map to a
  fixed status, type URI and title.
- Framework errors (unknown route, bad method, malformed body) are rendered
  through the same contract.
- Non-success responses that leave the app without a body are upgraded to a
  minimal problem for their status.
"""
from http import HTTPStatus
from typing import Dict, List, Set

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.routing import Match

from config import PRODUCT_NOT_FOUND_TYPE, VALIDATION_ERROR_TYPE
from errors import Failure, NotFound, UnhandledFault, ValidationFailed
from metrics import record_error
from schemas import ProblemDetails

PROBLEM_MEDIA_TYPE = "application/problem+json"

HTTP_400 = 400
HTTP_404 = 404
HTTP_405 = 405
HTTP_500 = 500

PRODUCT_NOT_FOUND_TITLE = "Product not found"
VALIDATION_FAILED_TITLE = "Validation failed"
UNHANDLED_FAULT_TITLE = "An error occurred while processing your request."
UNHANDLED_FAULT_DETAIL = "An unexpected error occurred. Use the traceId to report this problem."


class ProblemResponse(JSONResponse):
    media_type = PROBLEM_MEDIA_TYPE


def _instance(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def _correlate(problem: ProblemDetails, request: Request) -> ProblemDetails:
    """Attach instance and correlation identifiers from the request."""
    return problem.model_copy(
        update={
            "instance": _instance(request),
            "trace_id": getattr(request.state, "trace_id", None),
            "request_id": getattr(request.state, "request_id", None),
        }
    )


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def status_problem(status_code: int, detail: str = None) -> ProblemDetails:
    """Minimal problem for a bare status code."""
    return ProblemDetails(title=_reason_phrase(status_code), status=status_code, detail=detail)


def problem_for(failure: Failure) -> ProblemDetails:
    if isinstance(failure, NotFound):
        return ProblemDetails(
            type=PRODUCT_NOT_FOUND_TYPE,
            title=PRODUCT_NOT_FOUND_TITLE,
            status=HTTP_404,
            detail=failure.detail,
        )
    if isinstance(failure, ValidationFailed):
        return ProblemDetails(
            type=VALIDATION_ERROR_TYPE,
            title=VALIDATION_FAILED_TITLE,
            status=HTTP_400,
            detail=failure.detail,
            errors={field: list(messages) for field, messages in failure.errors.items()},
        )
    if isinstance(failure, UnhandledFault):
        return unhandled_fault_problem()
    raise TypeError(f"Unknown failure type: {type(failure).__name__}")


def unhandled_fault_problem() -> ProblemDetails:
    return ProblemDetails(
        title=UNHANDLED_FAULT_TITLE,
        status=HTTP_500,
        detail=UNHANDLED_FAULT_DETAIL,
    )


def problem_response(problem: ProblemDetails, request: Request) -> ProblemResponse:
    problem = _correlate(problem, request)
    return ProblemResponse(status_code=problem.status, content=problem.to_body())


def failure_response(failure: Failure, request: Request) -> ProblemResponse:
    if isinstance(failure, UnhandledFault):
        logger.error(f"Unhandled fault: {failure.message}")
    return problem_response(problem_for(failure), request)


def fault_response(exc: Exception, request: Request) -> ProblemResponse:
    """Convert an exception that escaped a route into a generic 500 problem."""
    logger.opt(exception=exc).error(f"Unhandled exception: {type(exc).__name__}")
    return problem_response(unhandled_fault_problem(), request)


def _field_name(error: dict) -> str:
    if error.get("type") == "json_invalid":
        return "body"
    loc = error.get("loc", ())
    if loc and loc[0] == "body":
        loc = loc[1:]
    # Les positions (index, offset JSON) ne sont pas des noms de champ
    parts = [part for part in loc if isinstance(part, str)]
    return ".".join(parts) if parts else "body"


def _group_validation_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error), []).append(error.get("msg", "Invalid value"))
    return errors


def _allowed_methods(request: Request) -> Set[str]:
    """Methods of routes without path parameters that match the request path.

    Mirrors an integer-constrained route: "/products/error" is never an id,
    so DELETE on it is a wrong method, not a missing product.
    """
    methods: Set[str] = set()
    for route in request.app.router.routes:
        if not isinstance(route, APIRoute) or route.param_convertors:
            continue
        match, _ = route.matches(request.scope)
        if match == Match.PARTIAL:
            methods.update(route.methods)
    return methods


def is_bodiless_error(response: Response) -> bool:
    if response.status_code < 400:
        return False
    return response.headers.get("content-length", "0") == "0"


def register_problem_handlers(app: FastAPI) -> None:
    """Render framework-level errors as problem details."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else None
        if detail == _reason_phrase(exc.status_code):
            detail = None
        response = problem_response(status_problem(exc.status_code, detail), request)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        path_errors = [error for error in errors if error.get("loc", ("",))[0] == "path"]
        if path_errors:
            # Chemin fixe existant pour une autre méthode (DELETE /products/error)
            allowed = _allowed_methods(request)
            if allowed:
                response = problem_response(status_problem(HTTP_405), request)
                response.headers["Allow"] = ", ".join(sorted(allowed))
                return response
        # Paramètre de chemin invalide (/products/abc) : la route n'existe pas
        if errors and len(path_errors) == len(errors):
            return problem_response(status_problem(HTTP_404), request)
        logger.warning("Request body rejected by schema validation")
        route = request.scope.get("route")
        record_error(getattr(route, "path", request.url.path), "validation_error")
        return problem_response(
            problem_for(ValidationFailed(_group_validation_errors(exc))), request
        )
