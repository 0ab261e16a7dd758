"""Domain errors raised by the services layer.

Each error knows the HTTP status and machine code it maps to, so blueprints
can either let it bubble up to the registered handler or translate it into
an endpoint-specific body.
"""


class DailyPollError(Exception):
    status_code = 400
    code = "DAILY_POLL_ERROR"
    message = "Request could not be completed"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class NotAuthorized(DailyPollError):
    status_code = 403
    code = "NOT_AUTHORIZED"
    message = "Email not authorized"


class AlreadyRegistered(DailyPollError):
    status_code = 400
    code = "ALREADY_REGISTERED"
    message = "Already registered"


class AdminAlreadyExists(DailyPollError):
    status_code = 400
    code = "ADMIN_ALREADY_EXISTS"
    message = "Admin already exists"


class ProvisioningError(DailyPollError):
    status_code = 400
    code = "PROVISIONING_FAILED"
    message = "Failed to provision account"


class IdentityExists(DailyPollError):
    status_code = 409
    code = "IDENTITY_EXISTS"
    message = "Email already exists"


class PollNotFound(DailyPollError):
    status_code = 404
    code = "POLL_NOT_FOUND"
    message = "Poll not found"


class OptionNotFound(DailyPollError):
    status_code = 404
    code = "OPTION_NOT_FOUND"
    message = "Option not found for this poll"


class PollLocked(DailyPollError):
    status_code = 409
    code = "POLL_LOCKED"
    message = "Poll options cannot be changed after voting has started"


class VotingClosed(DailyPollError):
    """Vote submitted while the voter's state is anything but OPEN_UNVOTED."""

    status_code = 403
    code = "VOTING_CLOSED"
    message = "Voting is not open for this poll"

    def __init__(self, state, message: str | None = None):
        super().__init__(message, details={"state": str(state)})
        self.state = state


class DuplicateVote(DailyPollError):
    status_code = 409
    code = "DUPLICATE_VOTE"
    message = "You've already cast your vote today."


class InvalidCredentials(DailyPollError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class InactiveAccount(DailyPollError):
    status_code = 403
    code = "ACCOUNT_INACTIVE"
    message = "Account is not active. Please contact support."


class IdentityNotFound(DailyPollError):
    status_code = 404
    code = "IDENTITY_NOT_FOUND"
    message = "Directory entry not found"


class ImportRejected(DailyPollError):
    status_code = 400
    code = "IMPORT_REJECTED"
    message = "File could not be imported"
