from enum import Enum


class ErrorKind(Enum):
    TEAM_EXISTS = 'TEAM_EXISTS'
    PR_EXISTS = 'PR_EXISTS'
    NOT_FOUND = 'NOT_FOUND'
    AUTHOR_TEAM_NOT_FOUND = 'AUTHOR_TEAM_NOT_FOUND'
    PR_MERGED = 'PR_MERGED'
    NOT_ASSIGNED = 'NOT_ASSIGNED'
    NO_CANDIDATE = 'NO_CANDIDATE'
    VALIDATION_FAILED = 'VALIDATION_FAILED'


class ReviewServiceError(Exception):
    """
    Базовая ошибка сервиса. Различается по kind, а не по тексту сообщения
    """
    kind: ErrorKind
    default_message = 'review service error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TeamExists(ReviewServiceError):
    kind = ErrorKind.TEAM_EXISTS
    default_message = 'team_name already exists'


class PRExists(ReviewServiceError):
    kind = ErrorKind.PR_EXISTS
    default_message = 'PR id already exists'


class NotFound(ReviewServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = 'resource not found'


class AuthorTeamNotFound(ReviewServiceError):
    kind = ErrorKind.AUTHOR_TEAM_NOT_FOUND
    default_message = 'author team not found'


class PRMerged(ReviewServiceError):
    kind = ErrorKind.PR_MERGED
    default_message = 'cannot reassign on merged PR'


class NotAssigned(ReviewServiceError):
    kind = ErrorKind.NOT_ASSIGNED
    default_message = 'reviewer is not assigned to this PR'


class NoCandidate(ReviewServiceError):
    kind = ErrorKind.NO_CANDIDATE
    default_message = 'no active replacement candidate in team'


class ValidationFailed(ReviewServiceError):
    kind = ErrorKind.VALIDATION_FAILED
    default_message = 'required fields are missing'
