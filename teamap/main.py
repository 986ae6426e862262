# teamap/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from teamap.core.json import UTF8JSONResponse
from teamap.core.config import settings
from teamap.core.errors import register_error_handlers
from teamap.db.init_db import init_models, dispose_engine

# routers
from teamap.users.router import router as users_router
from teamap.spots.router import router as spots_router
from teamap.activities.router import router as activities_router
from teamap.comments.router import router as comments_router
from teamap.stats.router import router as stats_router

log = logging.getLogger("uvicorn")

app = FastAPI(
    title="Tea Map API",
    default_response_class=UTF8JSONResponse,
)

# CORS (credentials: la cookie accessToken viaja desde el front)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def utf8_json_header(request: Request, call_next):
    response = await call_next(request)
    ct = response.headers.get("content-type", "")
    if ct.startswith("application/json") and "charset=" not in ct:
        response.headers["content-type"] = "application/json; charset=utf-8"
    return response


@app.on_event("startup")
async def on_startup():
    log.info("🍵 Iniciando Tea Map API…")
    await init_models()
    log.info("✅ Startup listo.")


@app.on_event("shutdown")
async def on_shutdown():
    await dispose_engine()


@app.get("/api/health/")
async def health():
    return {"ok": True, "service": "teamap", "msg": "healthy 🍵"}


# routers
app.include_router(users_router)       # /api/users/...
app.include_router(spots_router)       # /api/spots/...
app.include_router(activities_router)  # /api/activities/...
app.include_router(comments_router)    # /api/activities/{id}/comments/...
app.include_router(stats_router)       # /api/stats/...
