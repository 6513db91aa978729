from fastapi import status
from .base import AppException

class MailNotConfiguredException(AppException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Email service not configured."

class MissingMailFieldsException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Missing required fields: recordId, to, subject, body."

class InvalidEmailException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid email address format."

class MailDeliveryException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Failed to send email."

class MailAlreadySentException(AppException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Escalation mail was already sent for this record."

class MailInProgressException(AppException):
    status_code = status.HTTP_409_CONFLICT
    detail = "An escalation mail for this record is already being sent."
