from fastapi import status


class AppException(Exception):
    """Base for every error surfaced through the API.

    Subclasses set ``status_code`` and a default ``detail``; a specific
    detail and an enumerated ``reason`` can be passed at raise time.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error occurred."
    reason = None

    def __init__(self, detail: str = None, reason: str = None):
        if detail is not None:
            self.detail = detail
        if reason is not None:
            self.reason = reason
        super().__init__(self.detail)
