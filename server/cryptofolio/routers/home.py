# cryptofolio/routers/home.py
from fastapi import APIRouter, Request
from fastapi.routing import APIRoute

router = APIRouter()


def _api_routes(request: Request) -> list[dict]:
    out = []
    for route in request.app.routes:
        if isinstance(route, APIRoute) and route.path.startswith("/api"):
            out.append({"name": route.name, "path": route.path, "methods": sorted(route.methods)})
    return out


@router.api_route("/", methods=["GET", "HEAD"])
def root():
    return {"service": "cryptofolio-api", "message": "OK"}


@router.api_route("/api/routes", methods=["GET", "HEAD"])
def list_routes(request: Request):
    routes = _api_routes(request)
    return {"routes": routes, "count": len(routes), "base_url": str(request.base_url).rstrip("/")}
