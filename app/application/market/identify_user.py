"""
Use case: Register or log in a user.

Input: IdentifyCommand (email, password)
Output: IdentifyResult (message, token, user_id, registered)
Side effects:
    - Unknown email: inserts the user and enqueues team creation.
    - Known email without a team: enqueues team creation again.
Failure cases: InvalidCredentialsError on a wrong password.

Two registrations of one email may race; the loser of the unique(email)
insert is treated as a login against the winner's row.
"""

import logging
from uuid import UUID

from app.application.market.dtos import IdentifyCommand, IdentifyResult
from app.domain.market.entities import User
from app.domain.market.errors import EmailAlreadyRegisteredError, InvalidCredentialsError
from app.domain.market.ports import (
    MarketUnitOfWork,
    PasswordHasher,
    TeamCreationQueue,
    TokenIssuer,
)

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "User registered successfully. Team creation in progress."
LOGGED_IN_MESSAGE = "Logged in successfully"


class IdentifyUserUseCase:
    """Single entry point for sign-up and sign-in."""

    def __init__(
        self,
        uow: MarketUnitOfWork,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        team_queue: TeamCreationQueue,
    ) -> None:
        self._uow = uow
        self._hasher = hasher
        self._tokens = tokens
        self._team_queue = team_queue

    def execute(self, command: IdentifyCommand) -> IdentifyResult:
        """Register the email if unknown, otherwise verify the password.

        Raises:
            InvalidCredentialsError: If the email exists and the password
                does not match.
        """
        email = command.email.strip().lower()

        user = self._register(email, command.password)
        if user is not None:
            # Enqueued only after the user row is committed so the worker
            # can always see it.
            self._request_team(user.id)
            logger.info("Registered user %s.", user.id)
            return IdentifyResult(
                message=REGISTERED_MESSAGE,
                token=self._tokens.issue(user.id),
                user_id=user.id,
                registered=True,
            )

        with self._uow:
            user = self._uow.users.get_by_email(email)
            has_team = user is not None and self._uow.teams.get_by_user(user.id) is not None

        if user is None or not self._hasher.verify(command.password, user.password_hash):
            logger.warning("Rejected login for %s.", user.id if user else "unknown user")
            raise InvalidCredentialsError()

        if not has_team:
            logger.warning("User %s has no team yet; requesting it again.", user.id)
            self._request_team(user.id)

        logger.info("User %s logged in.", user.id)
        return IdentifyResult(
            message=LOGGED_IN_MESSAGE,
            token=self._tokens.issue(user.id),
            user_id=user.id,
            registered=False,
        )

    def _register(self, email: str, password: str) -> User | None:
        """Insert the user; return None when the email is already taken."""
        try:
            with self._uow:
                if self._uow.users.get_by_email(email) is not None:
                    return None
                user = self._uow.users.add(email, self._hasher.hash(password))
                self._uow.commit()
        except EmailAlreadyRegisteredError:
            logger.info("Concurrent registration of one email; continuing as login.")
            return None
        return user

    def _request_team(self, user_id: UUID) -> None:
        """Enqueue team creation. A failure is retried on the next login."""
        try:
            self._team_queue.enqueue(user_id)
        except Exception:
            logger.exception("Could not enqueue team creation for user %s.", user_id)
