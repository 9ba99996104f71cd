"""FastAPI application for flow design, node runs and session history."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stateflow.errors import StateFlowError
from stateflow.execution.node_runner import NodeRunner
from stateserver.config import Settings
from stateserver.db import Database
from stateserver.flow_routes import router as flow_router
from stateserver.node_routes import router as node_router
from stateserver.session_routes import router as session_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; the database is opened by the lifespan handler."""
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize the database on startup."""
        db = Database(settings.db_path)
        db.init_schema()
        app.state.db = db
        app.state.node_runner = NodeRunner(timeout=settings.node_run_timeout)
        yield
        logger.info("shutting down")

    app = FastAPI(
        title="StateFlow API",
        description="API server for flow graphs, node runs and session history",
        version=VERSION,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StateFlowError)
    async def handle_stateflow_error(request: Request, exc: StateFlowError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": f"invalid request: {details}"})

    # include routes
    app.include_router(flow_router)
    app.include_router(node_router)
    app.include_router(session_router)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": VERSION,
            "db": str(settings.db_path),
            "endpoints": {
                "flows": "/flow",
                "run_node": "/nodes/run",
                "sessions": "/sessions",
                "history": "/sessions/history",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
