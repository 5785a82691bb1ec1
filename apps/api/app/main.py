import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import APP_NAME, CORS_ALLOW_ALL
from .land_funnel import LandFunnelError
from .routes import funnel, health


logger = logging.getLogger("uvicorn.error")


def create_app() -> FastAPI:
    app = FastAPI(title=APP_NAME)

    if CORS_ALLOW_ALL:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(LandFunnelError)
    async def land_funnel_error_handler(request: Request, exc: LandFunnelError):
        logger.warning("Land funnel error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=funnel.status_for_error(exc),
            content={"detail": {"message": str(exc), "logs": []}},
        )

    app.include_router(health.router)
    app.include_router(funnel.router)

    logger.info("%s ready", APP_NAME)
    return app


app = create_app()
