"""
handlers/goal_handler.py
------------------------
Savings goals and contributions.
"""

from fastapi import APIRouter, Depends, Query

from context import AppContext
from handlers.envelope import get_context, ok
from handlers.schemas import Contribution, GoalCreate, GoalPatch

router = APIRouter(prefix="/api/goals", tags=["goals"])


@router.get("")
def list_goals(
    include_inactive: bool = Query(False, alias="includeInactive"),
    ctx: AppContext = Depends(get_context),
):
    return ok(ctx.goals.list_goals(include_inactive=include_inactive))


@router.post("")
def create_goal(body: GoalCreate, ctx: AppContext = Depends(get_context)):
    return ok(
        ctx.goals.create_goal(
            name=body.name,
            target_amount=body.target_amount,
            description=body.description,
            target_date=body.target_date,
            icon=body.icon,
            color=body.color,
        )
    )


@router.get("/{goal_id}")
def get_goal(goal_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.goals.get_goal(goal_id))


@router.patch("/{goal_id}")
def update_goal(goal_id: str, body: GoalPatch, ctx: AppContext = Depends(get_context)):
    return ok(ctx.goals.update_goal(goal_id, body.patch()))


@router.delete("/{goal_id}")
def close_goal(goal_id: str, ctx: AppContext = Depends(get_context)):
    return ok(ctx.goals.close_goal(goal_id))


@router.post("/{goal_id}/contributions")
def contribute(goal_id: str, body: Contribution, ctx: AppContext = Depends(get_context)):
    return ok(ctx.goals.contribute(goal_id, body.amount, body.from_account_id))
