# cryptofolio/main.py
import os

from dotenv import load_dotenv
load_dotenv()

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cryptofolio.routers.health import router as health_router
from cryptofolio.routers.home import router as home_router
from cryptofolio.routers.auth import router as auth_router
from cryptofolio.routers.portfolio import router as portfolio_router
from cryptofolio.routers.stats import router as stats_router

from cryptofolio.auth import AuthMiddleware, require_user
from cryptofolio.errors import ApiError
from cryptofolio.logging_config import configure_logging
from cryptofolio.middleware.cache import CacheMiddleware
from cryptofolio.middleware.cors import CorsMiddleware
from cryptofolio.middleware.request_logging import RequestLoggingMiddleware

from cryptofolio.db import engine
from cryptofolio.orm_models import Base

app = FastAPI(title=os.getenv("SERVICE_NAME", "cryptofolio-api"))

# add_middleware wraps: the last one added runs first.
# Request order: CORS -> logging -> cache -> auth -> routes.
app.add_middleware(AuthMiddleware)
app.add_middleware(CacheMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorsMiddleware)


@app.on_event("startup")
def _startup():
    configure_logging()
    Base.metadata.create_all(bind=engine)


@app.exception_handler(ApiError)
async def _api_error(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.body(), headers=exc.headers())


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "path", "query")]
        details.append(f"{'.'.join(loc) or 'body'}: {err.get('msg', 'Invalid value')}")
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


app.include_router(home_router)
app.include_router(health_router, prefix="/api/health", tags=["health"])

api = APIRouter(prefix="/api")

# public:
api.include_router(auth_router)

# protected (require a Bearer token):
api.include_router(portfolio_router, dependencies=[Depends(require_user)])
api.include_router(stats_router, dependencies=[Depends(require_user)])

app.include_router(api)
