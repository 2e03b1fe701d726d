"""
FastAPI application factory.

Service handles (store, generation client, workflow) are created in the
lifespan and disposed at shutdown. Handles passed to create_app() are
used as-is and left for the caller to dispose.
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from carebot.agents.generation import GenerationClient
from carebot.api.routes import router
from carebot.config import SERVER_HOST, SERVER_PORT, validate_config
from carebot.graph import ChatWorkflow
from carebot.store.database import Database
from carebot.store.repository import CustomerRepository
from carebot.utils.logging import Colors, get_logger, setup_logging

logger = get_logger("app")


def _bind(app: FastAPI, database: Database, generator: GenerationClient) -> None:
    repository = CustomerRepository(database)
    app.state.database = database
    app.state.generator = generator
    app.state.repository = repository
    app.state.workflow = ChatWorkflow(repository, generator)


def create_app(
    database: Optional[Database] = None,
    generator: Optional[GenerationClient] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        database: An opened Database; created from config at startup if omitted
        generator: A GenerationClient; created from config at startup if omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for FastAPI app"""
        owned = []
        if not hasattr(app.state, "workflow"):
            db = database
            if db is None:
                db = Database().open()
                owned.append(db)
            gen = generator
            if gen is None:
                gen = GenerationClient()
                owned.append(gen)
            _bind(app, db, gen)
        logger.info("Customer care API started")

        yield

        logger.info("Shutting down customer care API...")
        for handle in owned:
            handle.close()

    app = FastAPI(
        title="Customer Care Assistant",
        description="Customer data and AI chat for telecom support agents",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Injected handles are usable even without running the lifespan
    if database is not None and generator is not None:
        _bind(app, database, generator)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"error": "Invalid request"})

    app.include_router(router)
    return app


def main():
    """Run the API with uvicorn."""
    setup_logging(level=logging.INFO)

    try:
        validate_config()
    except ValueError as e:
        print(f"{Colors.ERROR}[ERROR] Configuration Error:{Colors.RESET}")
        print(f"   {e}")
        print(f"\n   Please set up your {Colors.BOLD}.env{Colors.RESET} file.")
        print(f"   See {Colors.BOLD}.env.example{Colors.RESET} for reference.")
        sys.exit(1)

    uvicorn.run(create_app(), host=SERVER_HOST, port=SERVER_PORT)


if __name__ == "__main__":
    main()
