from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import health
from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.core.monitoring import configure_error_monitoring
from app.core.observability import configure_observability
from app.domains.employees.router import router as employee_router
from app.domains.payroll.router import router as payroll_router
from payroll_engine.exceptions import (
    DuplicateRunError,
    InvalidStateError,
    LedgerPostingError,
    PayrollError,
    RunNotFoundError,
    TaxTableError,
    ValidationError,
)

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)

# most specific first
ERROR_STATUS = [
    (ValidationError, 400),
    (RunNotFoundError, 404),
    (DuplicateRunError, 409),
    (InvalidStateError, 409),
    (LedgerPostingError, 502),
    (TaxTableError, 500),
]

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(employee_router)
app.include_router(payroll_router)


def status_for(exc: PayrollError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(PayrollError)
def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log("payroll_request_failed", path=request.url.path, code=exc.code, status=status_code, error=str(exc))
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Payroll engine running", "environment": settings.env}
