from fastapi import APIRouter, Request
from fastapi.routing import APIRoute

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    return {"message": "ok"}


@router.get("/__debug/routes")
def list_routes(request: Request):
    out = []
    for r in request.app.routes:
        if isinstance(r, APIRoute):
            fn = r.endpoint
            out.append({
                "path": r.path,
                "methods": sorted(list(r.methods or [])),
                "name": r.name,
                "endpoint": f"{getattr(fn, '__module__', '?')}.{getattr(fn, '__name__', '?')}",
            })
    return out
