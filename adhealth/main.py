import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adhealth.config import APP_TITLE, APP_VERSION, ALGO_VERSION, ALLOW_ORIGINS, LOG_LEVEL
from adhealth.routers import export, health, pacing
from adhealth.scoring.rules import RULES

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app = FastAPI(title=APP_TITLE, version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pacing.router)
app.include_router(health.router)
app.include_router(export.router)


@app.get("/api/meta")
def meta():
    return {"version": APP_VERSION, "algo_version": ALGO_VERSION, "rules_version": RULES.version}
