from fastapi import status
from .base import AppException

class NoFileProvidedException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "No file provided."

class InvalidFileTypeException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid file type. Please upload an Excel (.xlsx, .xls) or CSV file."

class FileTooLargeException(AppException):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    detail = "File too large."

class SpreadsheetValidationException(AppException):
    # Missing columns and bad row values
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "The uploaded sheet failed validation."

class SpreadsheetParseException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Failed to parse Excel file. Please check the file format and try again."
