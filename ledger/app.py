"""FastAPI app initialization, exception handling"""

import logging
import traceback

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ledger.config import Config, get_config
from ledger.errors.base import ApplicationError
from ledger.routes.company import company_router
from ledger.routes.treasury import treasury_router
from ledger.routes.treasury_transaction import treasury_transaction_router

logger = logging.getLogger(__name__)

config: Config = get_config()
app = FastAPI(title=config.app_name, version=config.app_version)
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
if not config.secret_key:
    raise ValueError(
        "LEDGER_SECRET_KEY is missing in the configuration. Please set a valid secret key."
    )


@app.exception_handler(ResponseValidationError)
async def response_validation_exception_handler(
    request: Request, exc: ResponseValidationError
):
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Response validation error encountered",
            "errors": exc.errors(),
        },
    )


@app.exception_handler(ApplicationError)
def application_exception_handler(request: Request, exc: ApplicationError):
    c = {
        "error_code": exc.error_code,
        "error": exc.error,
        "where": exc.where,
    }
    logger.error(c)
    # Only print full traceback when in debug logging
    if logger.isEnabledFor(logging.DEBUG):
        traceback.print_exception(exc)
    return JSONResponse(
        status_code=exc.http_code or 418,
        content=c,
    )


@app.exception_handler(SQLAlchemyError)
def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(exc)
    if logger.isEnabledFor(logging.DEBUG):
        traceback.print_exception(exc)
    return JSONResponse(
        status_code=418,
        content={"error_code": 1500, "error": exc._message()},
    )


app.include_router(company_router)
app.include_router(treasury_router)
app.include_router(treasury_transaction_router)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
