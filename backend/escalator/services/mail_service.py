import logging
import threading
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from escalator.crud import crud_record
from escalator.schema.mail import SendMailRequest, SendMailResponse
from escalator.services.filters.notifications import RECORDS_TOPIC, ChangeNotifier, change_notifier
from escalator.services.mailer import Mailer
from escalator.services.spreadsheet_parser import is_valid_email
from escalator.exceptions.mail_exceptions import (
    InvalidEmailException,
    MailAlreadySentException,
    MailDeliveryException,
    MailInProgressException,
    MailNotConfiguredException,
    MissingMailFieldsException,
)
from escalator.exceptions.record_exceptions import RecordNotFoundException, StorageUnavailableException

logger = logging.getLogger(__name__)


class MailService:
    """Sends one escalation per record.

    A record that already has ``mail_sent`` set is refused, and so is a
    second send for a record whose first send has not finished.
    """

    def __init__(self, notifier: ChangeNotifier = change_notifier):
        self.notifier = notifier
        self._in_flight = set()
        self._lock = threading.Lock()

    def _claim(self, record_id: int) -> None:
        with self._lock:
            if record_id in self._in_flight:
                raise MailInProgressException()
            self._in_flight.add(record_id)

    def _release(self, record_id: int) -> None:
        with self._lock:
            self._in_flight.discard(record_id)

    def send_escalation(self, db: Session, mailer: Mailer, request: SendMailRequest) -> SendMailResponse:

        if not mailer.is_configured():
            raise MailNotConfiguredException()

        if not request.record_id or not request.to or not request.subject or not request.body:
            raise MissingMailFieldsException()

        if not is_valid_email(request.to):
            raise InvalidEmailException()

        # claim before reading, so a finished send is always visible to the next one
        self._claim(request.record_id)
        try:
            record = crud_record.get_record(db, request.record_id)

            if record is None:
                raise RecordNotFoundException()

            db.refresh(record)
            if record.mail_sent:
                raise MailAlreadySentException()

            result = mailer.send(to=request.to, subject=request.subject, body=request.body)

            if not result.success:
                logger.error(f"Escalation mail for record {record.id} failed: {result.error}")
                raise MailDeliveryException(result.error or "Failed to send email")

            try:
                crud_record.update_mail_sent(db, record.id, True)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Mail for record {record.id} sent but status update failed: {e}")
                raise StorageUnavailableException()
        finally:
            self._release(request.record_id)

        logger.info(f"Escalation mail sent for record {record.id}")
        self.notifier.publish(RECORDS_TOPIC)

        return SendMailResponse(
            success=True,
            record_id=record.id,
            message_id=result.message_id
        )


mail_service = MailService()
