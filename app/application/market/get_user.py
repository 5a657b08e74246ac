"""
Use case: Look up a user profile.

Input: user id
Output: UserResult (never exposes the credential hash)
Side effects: None (read-only query).
Failure cases: UserNotFoundError.
"""

from uuid import UUID

from app.application.market.dtos import UserResult
from app.domain.market.errors import UserNotFoundError
from app.domain.market.ports import MarketUnitOfWork


class GetUserUseCase:
    def __init__(self, uow: MarketUnitOfWork) -> None:
        self._uow = uow

    def execute(self, user_id: UUID) -> UserResult:
        with self._uow:
            user = self._uow.users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            team = self._uow.teams.get_by_user(user_id)

        return UserResult(
            id=user.id,
            email=user.email,
            team_id=team.id if team else None,
            created_at=user.created_at,
        )
