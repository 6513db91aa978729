from typing import Optional

from escalator.schema.base import CamelModel


class SendMailRequest(CamelModel):
    record_id: Optional[int] = None
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class SendMailResponse(CamelModel):
    success: bool
    record_id: int
    message_id: Optional[str] = None


class MailStatus(CamelModel):
    configured: bool
    # only set when a live SMTP check was requested
    reachable: Optional[bool] = None
