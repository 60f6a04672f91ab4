"""
Savings goals screen.

Lists every goal newest first with a summary header, and creates new
goals. A new goal is validated client-side, inserted with
current_amount 0 and a random palette color, and then the list is
fetched again; it is never added to the list locally.
"""

import random
from typing import Optional

from pydantic import BaseModel, Field

from financez.audit.logger import AuditLogger
from financez.backend.interface import BackendError, RowStoreInterface
from financez.models.audit import AuditEventBuilder
from financez.models.finance import GOAL_COLOR_OPTIONS, GOALS_TABLE, SavingsGoal
from financez.models.forms import GoalDraft
from financez.models.money import ZERO, to_wire
from financez.models.results import ActionResult
from financez.queries import catalog
from financez.queries.aggregates import GoalsSummary, summarize_goals
from financez.screens.base import ScreenController
from financez.validation.validator import FormValidator, parse_target_amount


GOAL_CREATED = "Goal created successfully!"
GOAL_CREATE_FAILED = "Failed to create goal."
NOT_SIGNED_IN = "You must be logged in."


class GoalsView(BaseModel):
    goals: list[SavingsGoal] = Field(default_factory=list)
    summary: GoalsSummary = Field(default_factory=GoalsSummary)


class GoalsController(ScreenController[GoalsView]):
    screen_name = "goals"
    fetch_error_message = "Failed to fetch your goals."

    def __init__(
        self,
        session_manager,
        store: RowStoreInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(session_manager, store, audit_logger)
        self._validator = validator or FormValidator()
        self._rng = rng or random.Random()
        self.creating = False

    async def fetch(self, user_id: str) -> GoalsView:
        goals = await self._queries.fetch(catalog.GOALS, user_id)
        return GoalsView(goals=goals, summary=summarize_goals(goals))

    async def create_goal(self, draft: GoalDraft) -> ActionResult:
        """
        Validate and insert a goal, then refetch the list.

        A second submission while one is in flight is ignored.
        """
        if self.creating:
            return ActionResult.fail("A goal is already being created.")

        user_id = self.user_id
        if user_id is None:
            return ActionResult.fail(NOT_SIGNED_IN)

        validation = self._validator.validate_goal(draft)
        if not validation.is_valid:
            self._audit.log_validation_failed(validation, user_id)
            return ActionResult.from_validation(validation)

        self.creating = True
        try:
            rows = await self._store.insert(GOALS_TABLE, {
                "user_id": user_id,
                "title": draft.title,
                "target_amount": to_wire(parse_target_amount(draft.target_amount)),
                "current_amount": to_wire(ZERO),
                "emoji": draft.emoji,
                "color": self._rng.choice(GOAL_COLOR_OPTIONS),
            })
        except BackendError as e:
            self._audit.log(AuditEventBuilder.goal_create_failed(user_id, draft.title, str(e)))
            return ActionResult.fail(GOAL_CREATE_FAILED)
        finally:
            self.creating = False

        goal_id = str(rows[0]["id"]) if rows and rows[0].get("id") is not None else None
        self._audit.log(AuditEventBuilder.goal_created(user_id, goal_id, draft.title))

        await self.on_refresh()
        return ActionResult.ok(GOAL_CREATED)
