"""
Outbound email: SMTP transport and the HTML templates the garage sends.
"""
import asyncio
import logging
from datetime import datetime
from functools import lru_cache

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import DictLoader, Environment

from garage.branding import Branding
from garage.config import Settings, get_settings
from garage.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

REMINDER_SUBJECT = "Time for Your Next Vehicle Service!"
MANUAL_REMINDER_SUBJECT = "Vehicle Service Reminder"

_LAYOUT = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
  <div style="text-align: center; margin-bottom: 20px;">
    <h2 style="color: #2563eb; margin: 10px 0;">{{ garage.name }}</h2>
    {% if garage.address %}<p style="color: #4b5563; margin: 5px 0;">{{ garage.address }}</p>{% endif %}
    {% if garage.locality %}<p style="color: #4b5563; margin: 5px 0;">{{ garage.locality }}</p>{% endif %}
    {% if garage.phone %}<p style="color: #4b5563; margin: 5px 0;">Phone: {{ garage.phone }}</p>{% endif %}
    {% if show_gst and garage.gst_number %}<p style="color: #4b5563; margin: 5px 0;">GST No: {{ garage.gst_number }}</p>{% endif %}
  </div>
  {% block content %}{% endblock %}
  <p style="color: #4b5563; margin-top: 20px;">Best regards,<br>{{ garage.name }}</p>
  {% if garage.footer %}
  <div style="margin-top: 20px; padding-top: 20px; border-top: 1px solid #e5e7eb;">
    <p style="color: #6b7280; font-size: 0.875rem;">{{ garage.footer }}</p>
  </div>
  {% endif %}
</div>
"""

_REMINDER = """\
{% extends "layout.html" %}
{% block content %}
  <p>Dear <strong>{{ name }}</strong>,</p>
  <p>We hope you're doing well!</p>
  <p>
    This is a friendly reminder from <strong>{{ garage.name }}</strong> that it's time
    for your vehicle's regular servicing.
  </p>
  <table style="margin: 20px 0; border-collapse: collapse;">
    <tr><td><strong>Vehicle Number:</strong></td><td>{{ vehicle_number }}</td></tr>
    <tr><td><strong>Last Service Date:</strong></td><td>{{ last_service_date }}</td></tr>
  </table>
  <p>We recommend booking your next service appointment soon. Call or reply to this email to schedule it.</p>
{% endblock %}
"""

_MANUAL_REMINDER = """\
{% extends "layout.html" %}
{% block content %}
  <h2 style="color: #2563eb; margin-bottom: 20px;">Service Reminder</h2>
  <p>Dear {{ name }},</p>
  <p>It has been {{ months }} month{{ "" if months == 1 else "s" }} since your last service.</p>
  <div style="background-color: #f3f4f6; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <p><strong>Last Service Details:</strong></p>
    <ul>
      <li>Date: {{ last_service_date }}</li>
      <li>Vehicle: {{ vehicle_number }}</li>
      <li>KM Reading: {{ km_in }}</li>
    </ul>
  </div>
  <p>To keep your vehicle safe and running well, we recommend scheduling a service appointment.</p>
{% endblock %}
"""

_OFFER = """\
{% extends "layout.html" %}
{% block content %}
  <h2 style="color: #2563eb; margin-bottom: 20px;">Special Offer for {{ customer_name }}</h2>
  <div style="background-color: #f3f4f6; padding: 20px; border-radius: 8px; margin: 20px 0;">
    {% for line in lines %}{{ line }}{% if not loop.last %}<br>{% endif %}{% endfor %}
  </div>
{% endblock %}
"""

_MESSAGE = """\
{% extends "layout.html" %}
{% block content %}
  <h2 style="color: #2563eb; margin-bottom: 20px;">{{ subject }}</h2>
  <div style="background-color: #f3f4f6; padding: 20px; border-radius: 8px; margin: 20px 0;">
    {% for line in lines %}{{ line }}{% if not loop.last %}<br>{% endif %}{% endfor %}
  </div>
{% endblock %}
"""

_templates = Environment(
    loader=DictLoader({
        "layout.html": _LAYOUT,
        "reminder.html": _REMINDER,
        "manual_reminder.html": _MANUAL_REMINDER,
        "offer.html": _OFFER,
        "message.html": _MESSAGE,
    }),
    autoescape=True,
)


def _date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def render_reminder_email(name: str, vehicle_number: str, last_service_date: datetime,
                          garage: Branding) -> str:
    """HTML body of a periodic service reminder."""
    return _templates.get_template("reminder.html").render(
        garage=garage,
        name=name,
        vehicle_number=vehicle_number,
        last_service_date=_date(last_service_date),
    )


def render_manual_reminder_email(name: str, vehicle_number: str, last_service_date: datetime,
                                 km_in: int, months: int, garage: Branding) -> str:
    return _templates.get_template("manual_reminder.html").render(
        garage=garage,
        name=name,
        vehicle_number=vehicle_number,
        last_service_date=_date(last_service_date),
        km_in=km_in,
        months=months,
    )


def offer_subject(garage: Branding) -> str:
    return f"Special Offer from {garage.name}"


def render_offer_email(customer_name: str, offer_details: str, garage: Branding) -> str:
    """Offer text is plain; line breaks are kept, markup is escaped."""
    return _templates.get_template("offer.html").render(
        garage=garage,
        show_gst=True,
        customer_name=customer_name,
        lines=offer_details.splitlines(),
    )


def render_message_email(subject: str, text: str, garage: Branding) -> str:
    return _templates.get_template("message.html").render(
        garage=garage,
        subject=subject,
        lines=text.splitlines(),
    )


class Mailer:
    """Sends HTML mail through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self.timeout = settings.mail_timeout
        self.config = ConnectionConfig(
            MAIL_USERNAME=settings.mail_username,
            MAIL_PASSWORD=settings.mail_password,
            MAIL_FROM=settings.mail_from,
            MAIL_FROM_NAME=settings.mail_from_name,
            MAIL_PORT=settings.mail_port,
            MAIL_SERVER=settings.mail_server,
            MAIL_STARTTLS=settings.mail_starttls,
            MAIL_SSL_TLS=settings.mail_ssl_tls,
            USE_CREDENTIALS=bool(settings.mail_username),
            SUPPRESS_SEND=int(settings.mail_suppress_send),
        )
        self.client = FastMail(self.config)

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Send one message, waiting at most ``mail_timeout`` seconds.
        Every failure, including a recipient the mail library rejects, is an ExternalServiceError.
        """
        try:
            message = MessageSchema(
                subject=subject,
                recipients=[to],
                body=html,
                subtype=MessageType.html,
            )
            await asyncio.wait_for(self.client.send_message(message), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ExternalServiceError(f"Timed out sending mail to {to}") from exc
        except Exception as exc:
            raise ExternalServiceError(f"Could not send mail to {to}: {exc}") from exc
        logger.info("Mail sent to %s: %s", to, subject)


@lru_cache()
def get_mailer() -> Mailer:
    """Get cached mailer instance."""
    return Mailer(get_settings())
