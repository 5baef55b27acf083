"""History, rating and preference endpoints for a signed-in user."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from meshisele.api.dependencies import require_user
from meshisele.api.models import (
    CriteriaPayload,
    HistoryUpdatePayload,
    RatingPayload,
    criteria_payload,
    history_payload,
    preferences_payload,
    rating_summary_payload,
    stats_payload,
)
from meshisele.domain.enums import (
    DietFilter,
    HistoryFilterType,
    HistorySortOption,
    HistoryTab,
    MealMode,
    ResultType,
)
from meshisele.domain.history import HistoryFilter

if TYPE_CHECKING:
    from meshisele.containers import AppContainer

router = APIRouter(tags=["history"])


@router.get("/history")
async def list_history(  # noqa: PLR0913
    request: Request,
    user_id: str = Depends(require_user),
    kind: HistoryFilterType = HistoryFilterType.ALL,
    meal_mode: MealMode | None = Query(default=None, alias="mealMode"),
    diet_filter: DietFilter | None = Query(default=None, alias="dietFilter"),
    min_rating: float | None = Query(default=None, alias="minRating", ge=0, le=5),
    start: datetime | None = None,
    end: datetime | None = None,
    sort: HistorySortOption = HistorySortOption.DATE_DESCENDING,
    tab: HistoryTab | None = None,
    q: str | None = None,
) -> dict[str, object]:
    """Return the user's history entries, filtered and sorted."""
    container: AppContainer = request.app.state.container
    history_filter = HistoryFilter(
        kind=kind,
        meal_mode=meal_mode,
        diet_filter=diet_filter,
        min_rating=min_rating,
        start=start,
        end=end,
        sort=sort,
    )
    entries = container.history_service.list_entries(
        user_id, history_filter, tab=tab, query=q
    )
    return {"entries": [history_payload(entry) for entry in entries]}


@router.get("/history/stats")
async def history_stats(
    request: Request, user_id: str = Depends(require_user)
) -> dict[str, object]:
    """Return summary counters for the user's history."""
    container: AppContainer = request.app.state.container
    return stats_payload(container.history_service.stats(user_id))


@router.get("/history/export", response_class=PlainTextResponse)
async def export_history(
    request: Request, user_id: str = Depends(require_user)
) -> PlainTextResponse:
    """Return the user's history as plain text."""
    container: AppContainer = request.app.state.container
    return PlainTextResponse(container.history_service.export_text(user_id))


@router.post("/history/{entry_id}/redo")
async def redo_history_entry(
    entry_id: str, request: Request, user_id: str = Depends(require_user)
) -> dict[str, object]:
    """Return the selections of a past decision so it can be decided again."""
    container: AppContainer = request.app.state.container
    try:
        criteria = container.history_service.redo_criteria(user_id, entry_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return criteria_payload(criteria)


@router.patch("/history/{entry_id}")
async def update_history_entry(
    entry_id: str,
    payload: HistoryUpdatePayload,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Set the rating and comment of an entry."""
    container: AppContainer = request.app.state.container
    try:
        entry = container.history_service.rate_entry(
            user_id, entry_id, rating=payload.rating, comment=payload.comment
        )
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return history_payload(entry)


@router.delete("/history/{entry_id}")
async def delete_history_entry(
    entry_id: str, request: Request, user_id: str = Depends(require_user)
) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.history_service.delete_entry(user_id, entry_id)
    return {"status": "ok"}


@router.delete("/history")
async def clear_history(
    request: Request, user_id: str = Depends(require_user)
) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.history_service.clear(user_id)
    return {"status": "ok"}


@router.get("/ratings/{item_type}/{item_id}")
async def rating_summary(
    item_type: ResultType, item_id: str, request: Request
) -> dict[str, object]:
    """Return the global rating of an item."""
    container: AppContainer = request.app.state.container
    summary = container.rating_service.summary(item_id, item_type)
    return rating_summary_payload(summary)


@router.put("/ratings/{item_type}/{item_id}")
async def rate_item(
    item_type: ResultType,
    item_id: str,
    payload: RatingPayload,
    request: Request,
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Record the user's rating of an item and return the new summary."""
    container: AppContainer = request.app.state.container
    container.rating_service.rate(
        item_id, item_type, user_id, payload.rating, payload.comment
    )
    summary = container.rating_service.summary(item_id, item_type)
    return rating_summary_payload(summary)


@router.get("/preferences")
async def get_preferences(
    request: Request, user_id: str = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return preferences_payload(container.preferences_service.get(user_id))


@router.get("/preferences/criteria")
async def preference_criteria(
    request: Request,
    meal_mode: MealMode = Query(alias="mealMode"),
    user_id: str = Depends(require_user),
) -> dict[str, object]:
    """Return starting selections for a meal mode."""
    container: AppContainer = request.app.state.container
    criteria = container.preferences_service.criteria_for(user_id, meal_mode)
    return criteria_payload(criteria)


@router.put("/preferences")
async def save_preferences(
    payload: CriteriaPayload, request: Request, user_id: str = Depends(require_user)
) -> dict[str, object]:
    """Store the selections as defaults for their meal mode."""
    container: AppContainer = request.app.state.container
    preferences = container.preferences_service.save_from_criteria(
        user_id, payload.to_criteria()
    )
    return preferences_payload(preferences)


@router.delete("/preferences")
async def reset_preferences(
    request: Request, user_id: str = Depends(require_user)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return preferences_payload(container.preferences_service.reset(user_id))
