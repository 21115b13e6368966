from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from warroom.feature_flags import FeatureFlags
from warroom.projects.api import portfolio_router, router as projects_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Set the root log level from the feature flag config."""
    level = FeatureFlags.get_config().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger().setLevel(level)


configure_logging()

app = FastAPI(title="War Room – Project Status API")
app.include_router(projects_router)
app.include_router(portfolio_router)
logger.info("Projects and Portfolio APIs loaded successfully")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Endpoints
# -------------------------------

@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/config")
def get_config() -> Dict[str, Any]:
    """Active feature flags."""
    return FeatureFlags.to_dict()


@app.put("/config/item-status-policy")
def set_item_status_policy(policy: str) -> Dict[str, Any]:
    """Switch between approval-gated and boq-strict item statuses."""
    if not FeatureFlags.set_item_status_policy(policy):
        raise HTTPException(status_code=400, detail=f"Invalid item status policy: {policy}")
    return FeatureFlags.to_dict()
