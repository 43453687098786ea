import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slotgrid.config import get_settings
from slotgrid.controllers.events import router as events_router
from slotgrid.controllers.health import router as health_router
from slotgrid.controllers.ws_events import router as ws_events_router
from slotgrid.errors import register_exception_handlers
from slotgrid.lifespan import lifespan
from slotgrid.middleware import HTTPLogMiddleware

settings = get_settings()

app = FastAPI(title="Slotgrid Scheduling API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_origin_regex=settings.cors.origins_regex or None,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("slotgrid.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)

if settings.debug.websocket:
    logging.getLogger("slotgrid.ws.events").setLevel(logging.DEBUG)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(events_router)
app.include_router(ws_events_router)
