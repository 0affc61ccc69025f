"""
Welcome and cancellation notifications.

Delivery is fire-and-forget: every backend logs failures and returns, so a
mail outage never undoes an account change.
"""
import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from ..core.config import Settings
from ..core.rabbitmq import RabbitMQPublisher

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to Task-It"
CANCELLATION_SUBJECT = "Sorry to see you go"


def welcome_body(name: str) -> str:
    return f"Welcome to Task-It, {name}.\nHow are things with you?\n\nRegards,\nThe Task-It team"


def cancellation_body(name: str) -> str:
    return f"Sorry to see you go, {name}.\nIs there anything we could have done better?\n\nRegards,\nThe Task-It team"


class Notifier(ABC):
    """Interface for account notifications"""

    @abstractmethod
    def send_welcome(self, email: str, name: str) -> None:
        ...

    @abstractmethod
    def send_cancellation(self, email: str, name: str) -> None:
        ...

    def close(self) -> None:
        pass


class LogNotifier(Notifier):
    """Writes notifications to the application log only"""

    def send_welcome(self, email: str, name: str) -> None:
        logger.info(f"NOTIFICATION: welcome -> {email}")

    def send_cancellation(self, email: str, name: str) -> None:
        logger.info(f"NOTIFICATION: cancellation -> {email}")


class SmtpNotifier(Notifier):
    """Sends plain-text mail through an SMTP relay"""

    def __init__(self, host: str, port: int, user: str = None, password: str = None,
                 from_email: str = "management@task-it.com"):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email

    def send_welcome(self, email: str, name: str) -> None:
        self.send(email, WELCOME_SUBJECT, welcome_body(name))

    def send_cancellation(self, email: str, name: str) -> None:
        self.send(email, CANCELLATION_SUBJECT, cancellation_body(name))

    def send(self, to: str, subject: str, body: str) -> bool:
        msg = MIMEMultipart()
        msg['From'] = self.from_email
        msg['To'] = to
        msg['Subject'] = subject
        msg.attach(MIMEText(body, 'plain'))

        try:
            with smtplib.SMTP(self.host, self.port) as server:
                server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, [to], msg.as_string())
            logger.info(f"Email '{subject}' sent to {to}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email '{subject}' to {to}: {e}")
            return False


class EventNotifier(Notifier):
    """Publishes account events for a separate mailer to pick up"""

    def __init__(self, publisher: RabbitMQPublisher):
        self.publisher = publisher

    def send_welcome(self, email: str, name: str) -> None:
        self.publisher.publish_event("user.registered", {"email": email, "name": name})

    def send_cancellation(self, email: str, name: str) -> None:
        self.publisher.publish_event("user.deleted", {"email": email, "name": name})

    def close(self) -> None:
        self.publisher.close()


def build_notifier(settings: Settings) -> Notifier:
    """Pick the notification backend named by ``settings.notifier``"""
    backend = settings.notifier.lower()
    if backend == "smtp":
        return SmtpNotifier(
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_user,
            settings.smtp_password,
            settings.from_email,
        )
    if backend == "rabbitmq":
        return EventNotifier(RabbitMQPublisher(settings.rabbitmq_url))
    if backend != "log":
        logger.warning(f"Unknown notifier '{settings.notifier}', falling back to log")
    return LogNotifier()
