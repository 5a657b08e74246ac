"""
Adapters: requesting team creation for a newly registered user.

CeleryTeamCreationQueue publishes a task to the broker; a worker runs
CreateTeamUseCase. InlineTeamCreationQueue runs the use case right away,
which is what local development and the test suite use.
"""

import logging
from uuid import UUID

from celery import Task

from app.application.market.create_team import CreateTeamUseCase
from app.application.market.dtos import CreateTeamCommand
from app.domain.market.ports import TeamCreationQueue

logger = logging.getLogger(__name__)


class CeleryTeamCreationQueue(TeamCreationQueue):
    """Publishes ``teams.create_team_for_user`` to the Celery broker."""

    def __init__(self, task: Task) -> None:
        self._task = task

    def enqueue(self, user_id: UUID) -> None:
        result = self._task.delay(str(user_id))
        logger.info("Enqueued team creation for user %s [%s]", user_id, result.id)


class InlineTeamCreationQueue(TeamCreationQueue):
    """Creates the team synchronously in the caller's process."""

    def __init__(self, use_case: CreateTeamUseCase) -> None:
        self._use_case = use_case

    def enqueue(self, user_id: UUID) -> None:
        team = self._use_case.execute(CreateTeamCommand(user_id=user_id))
        logger.info("Created team %s inline for user %s", team.id, user_id)
