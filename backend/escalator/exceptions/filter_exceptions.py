"""
Filter Exceptions

Raised while saving, previewing or generating filter configurations.
"""

from fastapi import status
from escalator.exceptions.base import AppException


class FilterValidationException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid filter configuration."


class InvalidPromptException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Prompt is required."


class TranslationException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Failed to generate filters with AI."


class TranslatorNotConfiguredException(AppException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Gemini API key not configured."
