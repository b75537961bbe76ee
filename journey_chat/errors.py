class JourneyChatError(Exception):
    """Base for failures that end a request with a short JSON error."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class Unauthorized(JourneyChatError):
    status_code = 401
    default_message = "Unauthorized"


class BadRequest(JourneyChatError):
    status_code = 400
    default_message = "Missing required fields"


class NotFoundOrForbidden(JourneyChatError):
    """The handle is unknown or belongs to someone else; deliberately not told apart."""

    status_code = 404
    default_message = "Conversation not found or access denied"


class UpstreamPromptMissing(JourneyChatError):
    default_message = "System prompt not found"


class HistoryFetchFailed(JourneyChatError):
    default_message = "Failed to fetch conversation history"


class RemoteFailure(JourneyChatError):
    default_message = "LLM API request failed"


class EmptyResponse(JourneyChatError):
    default_message = "LLM returned empty response"


class PersistenceFailed(JourneyChatError):
    default_message = "Failed to save message"
