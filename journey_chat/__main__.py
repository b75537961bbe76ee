import time
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from journey_chat.db import init_db
from journey_chat.errors import BadRequest, JourneyChatError
from journey_chat.routes.chat.route import router as chat_router
from journey_chat.routes.journeys.route import router as journeys_router
from journey_chat.settings import config

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": config.cors_allow_methods,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


def initialize_app() -> FastAPI:
    app = FastAPI(
        title="Journey Chat API",
        description="Chat sessions and guided journeys backed by a hosted LLM",
        version="1.0.0",
        docs_url="/chat/docs",
        redoc_url="/chat/redoc",
        openapi_url="/chat/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(chat_router, prefix="/api/v1/chat", tags=["chat"])
    app.include_router(journeys_router, prefix="/api/v1/journeys", tags=["journeys"])
    return app


def add_exception_handlers(app: FastAPI):
    @app.exception_handler(JourneyChatError)
    async def journey_chat_error_handler(request: Request, exc: JourneyChatError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        error = BadRequest()
        return JSONResponse(status_code=error.status_code, content={"error": error.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            message = "Method not allowed"
        elif exc.status_code == 404:
            message = "Not found"
        else:
            message = str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def add_middlewares(app: FastAPI):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def answer_preflight(request: Request, call_next):
        # every endpoint answers preflight the same way, before routing
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        return await call_next(request)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response


app = initialize_app()
add_exception_handlers(app)
add_middlewares(app)


@app.get("/")
async def root():
    return {"message": "Journey Chat API is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    logger.info("Starting Journey Chat API server...")
    import uvicorn

    uvicorn.run(
        "journey_chat.__main__:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
