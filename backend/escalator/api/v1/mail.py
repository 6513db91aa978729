from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from escalator.api.deps import enforce_mail_rate_limit, get_db, get_mailer
from escalator.schema.mail import MailStatus, SendMailRequest, SendMailResponse
from escalator.services.mail_service import mail_service
from escalator.services.mailer import Mailer

router = APIRouter(prefix="/mail", tags=["mail"])


@router.post("/send", response_model=SendMailResponse, dependencies=[Depends(enforce_mail_rate_limit)])
def send_mail(
    request: SendMailRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):

    return mail_service.send_escalation(db, mailer, request)


@router.get("/status", response_model=MailStatus)
def get_mail_status(
    verify: bool = Query(False, description="Open an SMTP connection to check the server answers"),
    mailer: Mailer = Depends(get_mailer)
):

    configured = mailer.is_configured()
    reachable = mailer.verify_connection() if verify and configured else None

    return MailStatus(configured=configured, reachable=reachable)
