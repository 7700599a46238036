"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from trustboard.cache import InMemoryResultCache, RedisResultCache, ResultCache
from trustboard.config import Config
from trustboard.datasources import EvmRpcClient, FlowScriptGateway, HyperionOracle, Relayer
from trustboard.exceptions import GatewayError, NotConfigured, RelayError, ValidationError
from trustboard.api import router
from trustboard.services import IdentityLinker, LeaderboardService, TrustEnricher

logger = logging.getLogger(__name__)


def build_cache(config: Config) -> ResultCache:
    if config.redis_url:
        return RedisResultCache.from_url(config.redis_url)
    return InMemoryResultCache()


def create_app(
    config: Config | None = None,
    leaderboard_service: Optional[LeaderboardService] = None,
    identity_linker: Optional[IdentityLinker] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration. If None, loads from environment.
        leaderboard_service: Prebuilt leaderboard service (tests inject stubs)
        identity_linker: Prebuilt identity linker (tests inject stubs)

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = Config.from_env()

    # Clients owned by this app; closed on shutdown
    owned: list = []

    if leaderboard_service is None or identity_linker is None:
        rpc = EvmRpcClient(config.hyperion_rpc_url, timeout=config.request_timeout)
        owned.append(rpc)

    if leaderboard_service is None:
        gateway = FlowScriptGateway(config.flow_rest_url, timeout=config.request_timeout)
        cache = build_cache(config)
        owned.extend([gateway, cache])
        leaderboard_service = LeaderboardService(
            gateway=gateway,
            enricher=TrustEnricher(
                HyperionOracle(rpc, config.oracle_address),
                deadline=config.enrichment_deadline,
            ),
            cache=cache,
            leaderboard_contract=config.leaderboard_contract,
            leaderboard_admin=config.leaderboard_admin,
            current_period_alias=config.current_period_alias,
            cache_ttl=config.cache_ttl,
        )

    if identity_linker is None:
        relayer = None
        if config.relayer_private_key:
            relayer = Relayer(rpc, config.relayer_private_key, config.hyperion_chain_id)
        identity_linker = IdentityLinker(
            relayer=relayer,
            rpc=rpc,
            mapper_address=config.address_mapper_address,
            app_id=config.app_id,
            poll_interval=config.tx_poll_interval,
            poll_attempts=config.tx_poll_attempts,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        # Startup
        logger.info("Starting trustboard API")
        logger.info(f"Using Flow REST API: {config.flow_rest_url}")
        logger.info(f"Using Hyperion RPC: {config.hyperion_rpc_url}")
        if identity_linker.relayer is None:
            logger.warning("RELAYER_PRIVATE_KEY not set; link requests will fail to relay")
        else:
            logger.info(f"Relayer account: {identity_linker.relayer.address}")

        yield

        # Shutdown
        logger.info("Shutting down...")
        for resource in owned:
            await resource.close()

    app = FastAPI(
        title="Trustboard API",
        description="Flow leaderboard with Hyperion trust flags and identity linking",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.leaderboard_service = leaderboard_service
    app.state.identity_linker = identity_linker

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        logger.error(f"{request.url.path} failed upstream: {exc}")
        return JSONResponse(status_code=500, content={"error": f"Upstream ledger query failed: {exc}"})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {problems}"})

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        return JSONResponse(status_code=500, content={"error": str(exc), "details": exc.details})

    @app.exception_handler(NotConfigured)
    async def not_configured_handler(request: Request, exc: NotConfigured):
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # Include API routes
    app.include_router(router)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app
