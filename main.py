# main.py : shadow reflection service

from fastapi import FastAPI

from logger import get_logger
from reflection.config import load_config, config_path
from reflection.engine import ShadowEngine
from reflection.ruler import DeclaredRuler
from reflection.store import InMemoryReportStore
from routes import admin_reflection


# ------------------------------------------------------------------------------
# Init
# ------------------------------------------------------------------------------

config = load_config()

log = get_logger("Reflection.Service", to_file=config.log_file)

ruler = DeclaredRuler()
ruler.load(config.rules)

store = InMemoryReportStore(limit=config.store_limit)

# Monitored modules decorate their methods with engine.monitor
engine = ShadowEngine(ruler=ruler, store=store, config=config)

log.info({
    "event": "reflection_config_loaded",
    "path": str(config_path()),
    "enabled": config.enabled,
    "reflect_amount": config.reflect_amount,
    "reflect_limit": config.reflect_limit,
    "declared_methods": len(config.rules),
})

admin_reflection.store = store

app = FastAPI(title="Shadow Reflection Service")

# ------------------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------------------

app.include_router(admin_reflection.router, prefix="/admin/reflect", tags=["reflection"])


@app.get("/healthz")
@app.get("/healthz/")
def health():
    return {"status": "ok"}
