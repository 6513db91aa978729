from fastapi import status
from .base import AppException

class RecordNotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Record not found."

class StorageUnavailableException(AppException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Stored records are unavailable right now. Please retry."

class RateLimitExceededException(AppException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    detail = "Rate limit exceeded. Please try again later."

class InvalidRecordQueryException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid record query."
