"""
Fungible Token API Application

FastAPI surface over the host adapter. Read-only operations are served
under /view/{method}; every other invocation goes through /call/{method}
with the caller identity and attached value carried in headers.
"""

from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .amounts import parse_amount
from .config import get_config
from .contract import CallContext
from .errors import (
    AlreadyInitialized, DepositNotAccepted, InsufficientBalance, InsufficientDeposit,
    InvalidAmount, InvalidArguments, NotInitialized, OperationNotFound,
    ReceiverNotRegistered, SenderNotRegistered, TokenError, ViewOnlyViolation,
)
from .logging_config import setup_logging
from .schemas import InvokeRequest
from .system import TokenSystem, get_token_system


# Error kind -> HTTP status
ERROR_STATUS = {
    OperationNotFound: 404,
    ReceiverNotRegistered: 404,
    SenderNotRegistered: 404,
    NotInitialized: 409,
    AlreadyInitialized: 409,
    InsufficientDeposit: 400,
    InsufficientBalance: 400,
    DepositNotAccepted: 400,
    ViewOnlyViolation: 400,
    InvalidAmount: 422,
    InvalidArguments: 422,
}


def status_for(error: TokenError) -> int:
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return 400


def create_app(system: Optional[TokenSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Fungible Token Ledger API",
        description="NEP-141 style fungible token ledger",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_system() -> TokenSystem:
        return system if system is not None else get_token_system()

    @app.exception_handler(TokenError)
    async def token_error_handler(request: Request, exc: TokenError):
        return JSONResponse(
            status_code=status_for(exc),
            content={"error": type(exc).__name__, "detail": str(exc)}
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "fungible_token_api",
            "version": __version__
        }

    # Root endpoint
    @app.get("/")
    async def get_api_info(token_system: TokenSystem = Depends(get_system)):
        """Get API information"""
        return {
            "name": "Fungible Token Ledger API",
            "version": __version__,
            "initialized": token_system.ledger.is_initialized(),
            "owner_id": token_system.ledger.owner_id(),
            "registered_accounts": token_system.ledger.account_count(),
            "operations": sorted(token_system.adapter.operations),
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "view": "/view/{method}",
                "call": "/call/{method}",
            }
        }

    @app.post("/view/{method}")
    def view(
        method: str,
        request: Optional[InvokeRequest] = None,
        token_system: TokenSystem = Depends(get_system)
    ):
        """Invoke a read-only operation"""
        args = request.args if request else {}
        return {"result": token_system.adapter.view(method, args)}

    @app.post("/call/{method}")
    def call(
        method: str,
        request: Optional[InvokeRequest] = None,
        x_caller_id: str = Header(...),
        x_attached_deposit: str = Header("0"),
        token_system: TokenSystem = Depends(get_system)
    ):
        """Invoke an operation on behalf of the caller in X-Caller-Id"""
        deposit = parse_amount(x_attached_deposit, "attached_deposit")
        if not x_caller_id.strip():
            raise InvalidArguments("X-Caller-Id cannot be empty")
        context = CallContext(predecessor_account_id=x_caller_id, attached_deposit=deposit)
        args = request.args if request else {}
        return {"result": token_system.adapter.call(method, args, context)}

    return app


# Create the app instance for uvicorn
app = create_app()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format, log_file=config.log_file)
    uvicorn.run(
        "fungible_token.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level="info"
    )
