import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

import store
from ingest.validation import validate_config
from models.base import CamelModel
from models.config import AIDetectionConfig
from scoring.engine import merge_config
from scoring.tuning import rebalance_weights

logger = logging.getLogger(__name__)

router = APIRouter(tags=["config"])


# ---------- Request / Response schemas ----------

class RebalanceRequest(CamelModel):
    heuristic: str          # "bulkInsertionScore" or "bulk_insertion_score"
    value: float


# ---------- Endpoints ----------

@router.get("/config", response_model=AIDetectionConfig)
async def get_config():
    """Returns the config snapshot new analyses will run against."""
    return store.engine.get_config()


@router.patch("/config", response_model=AIDetectionConfig)
async def update_config(partial: dict[str, Any] = Body(...)):
    """
    Merges a partial config into the current one, section by section.

    The merged result must pass validate_config; otherwise 422 and the
    current snapshot stays in place.
    """
    try:
        candidate = merge_config(store.engine.get_config(), partial)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if not validate_config(candidate):
        raise HTTPException(status_code=422, detail="Config failed validation")

    updated = store.engine.update_config(candidate.model_dump())
    logger.info("Config updated: sections %s", sorted(partial))
    return updated


@router.post("/config/rebalance", response_model=AIDetectionConfig)
async def rebalance(body: RebalanceRequest):
    """
    Sets one heuristic weight and rescales the other five so the set sums to 1.0.
    """
    current = store.engine.get_config()
    try:
        weights = rebalance_weights(current.weights, to_snake(body.heuristic), body.value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    updated = store.engine.update_config({"weights": weights})
    logger.info("Rebalanced %s to %.3f", body.heuristic, body.value)
    return updated
