"""Decision, scaling and restaurant search endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from meshisele.api.dependencies import require_user
from meshisele.api.models import (
    CriteriaPayload,
    FinalizePayload,
    RestaurantSearchPayload,
    candidate_payload,
    decision_payload,
    history_payload,
    scaled_recipe_payload,
)
from meshisele.domain.candidates import Coordinate, EatingOutMeal, Recipe
from meshisele.domain.enums import ResultType
from meshisele.services.scaling import scale

if TYPE_CHECKING:
    from meshisele.containers import AppContainer

router = APIRouter(tags=["decisions"])


@router.post("/decisions")
async def start_decision(
    payload: CriteriaPayload, request: Request
) -> dict[str, object]:
    """Filter candidates for the selections and pick one."""
    container: AppContainer = request.app.state.container
    result = container.decision_service.start(payload.to_criteria())
    return decision_payload(result)


@router.post("/decisions/{session_id}/rerun")
async def rerun_decision(session_id: str, request: Request) -> dict[str, object]:
    """Pick again from the pool of an earlier decision."""
    container: AppContainer = request.app.state.container
    try:
        result = container.decision_service.rerun(session_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="decision_session_expired"
        ) from exc
    return decision_payload(result)


@router.post("/decisions/finalize")
async def finalize_decision(
    payload: FinalizePayload,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Record the user's decision in history."""
    container: AppContainer = request.app.state.container
    try:
        entry = container.decision_service.finalize_by_id(
            user_id,
            payload.criteria.to_criteria(),
            payload.result_type,
            payload.result_id,
            is_decided=payload.is_decided,
        )
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return history_payload(entry)


@router.post("/recipes/{recipe_id}/scale")
async def scaled_recipe(
    recipe_id: str, request: Request, servings: int = Query(ge=1, le=100)
) -> dict[str, object]:
    """Return ingredients, nutrition and cost for a serving count."""
    container: AppContainer = request.app.state.container
    recipe = container.candidate_repository.get_candidate(ResultType.RECIPE, recipe_id)
    if not isinstance(recipe, Recipe):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return scaled_recipe_payload(scale(recipe, servings))


@router.post("/restaurants/search")
async def search_restaurants(
    payload: RestaurantSearchPayload, request: Request
) -> dict[str, object]:
    """Find restaurants for a decided eating-out meal."""
    container: AppContainer = request.app.state.container
    meal = container.candidate_repository.get_candidate(
        ResultType.EATING_OUT_MEAL, payload.meal_id
    )
    if not isinstance(meal, EatingOutMeal):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    origin = None
    if payload.latitude is not None and payload.longitude is not None:
        origin = Coordinate(latitude=payload.latitude, longitude=payload.longitude)
    restaurants = await container.restaurant_search_service.search_for_meal(
        meal,
        payload.criteria.to_criteria(),
        origin=origin,
        sort=payload.sort,
        limit=payload.limit,
    )
    return {"restaurants": [candidate_payload(item) for item in restaurants]}
