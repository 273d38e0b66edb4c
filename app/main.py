from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, swap, wallet
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .providers.solana import close_solana_rpc_provider


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging()
    yield
    await close_solana_rpc_provider()


# Create FastAPI app
app = FastAPI(
    title="Voice Swap API",
    description="Custodial Solana wallet and Jupiter swap backend",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(wallet.router, tags=["Wallet"])
app.include_router(swap.router, tags=["Swap"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Voice Swap API",
        "version": "0.1.0",
        "cluster": settings.solana_cluster,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
