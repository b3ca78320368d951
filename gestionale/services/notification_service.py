"""
Notification Service
Order confirmation, staff alert and daily delivery report emails

Mail goes out over SMTP with aiosmtplib. Every send is best-effort: SMTP
failures are logged and reported as False, never raised, and
dispatch_order_notifications shields callers from anything else.
"""
import json
import logging
from datetime import date
from email.message import EmailMessage
from email.utils import formataddr
from typing import List, Optional, Sequence

import aiosmtplib

from gestionale.core.config import Settings, settings as default_settings
from gestionale.domain.order import Order, OrderItem

logger = logging.getLogger(__name__)


def format_date(value: date) -> str:
    """dd/mm/yyyy"""
    return value.strftime("%d/%m/%Y")


def format_euro(amount) -> str:
    return f"€{float(amount):.2f}"


def describe_configuration(note: Optional[str]) -> List[str]:
    """
    Readable options of a configured item

    The payload is usually a JSON object of chosen options; its values are
    listed. Anything else is shown as sent.
    """
    if not note:
        return []
    try:
        options = json.loads(note)
    except ValueError:
        return [note]
    if isinstance(options, dict):
        return [str(value) for value in options.values()]
    if isinstance(options, list):
        return [str(value) for value in options]
    return [str(options)]


def render_items(items: Sequence[OrderItem], with_prices: bool = True) -> str:
    if not items:
        return "Nessun prodotto."

    lines = []
    for item in items:
        line = f"- {item.nome or f'Prodotto {item.prodotto_id}'} x{item.quantita}"
        if with_prices:
            line += f"  {format_euro(item.prezzo_unitario)} cad. = {format_euro(item.totale_riga)}"
        lines.append(line)
        lines.extend(f"    * {option}" for option in describe_configuration(item.note_configurazione))
    return "\n".join(lines)


class MailNotificationDispatcher:
    """
    Sends order-related emails through one SMTP account

    The staff inbox receives new-order alerts and the daily report.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_name: str = "Lab di Abigail",
        staff_email: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_name = from_name
        self.staff_email = staff_email or username
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "MailNotificationDispatcher":
        return cls(
            host=settings.MAIL_HOST,
            port=settings.MAIL_PORT,
            username=settings.MAIL_USER,
            password=settings.MAIL_PASS,
            use_tls=settings.MAIL_USE_TLS,
            from_name=settings.MAIL_FROM_NAME,
            staff_email=settings.get_staff_email(),
            timeout=settings.MAIL_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.from_name, self.username))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def send_mail(self, to: str, subject: str, body: str) -> bool:
        """
        Send one plain-text email

        Returns:
            True when the SMTP server accepted the message
        """
        if not self.is_configured:
            logger.warning(f"Mail not configured - skipping '{subject}' to {to}")
            return False

        message = self.build_message(to, subject, body)

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending '{subject}' to {to}: {e}")
            return False

        logger.info(f"Email '{subject}' sent to {to}")
        return True

    async def send_order_confirmation(self, order: Order) -> bool:
        """Confirmation to the customer who placed the order"""
        name = order.cliente.nome if order.cliente and order.cliente.nome else order.nome

        body = "\n".join(filter(None, [
            f"Ciao {name}, grazie per il tuo ordine!",
            "",
            "Il tuo ordine è stato confermato con successo.",
            "",
            f"Data consegna: {format_date(order.data_consegna)}",
            f"Luogo: {order.luogo_consegna}",
            f"Totale: {format_euro(order.totale)}",
            "",
            "Prodotti ordinati:",
            render_items(order.prodotti),
            "",
            f"Richieste speciali: {order.note_richieste}" if order.note_richieste else None,
            "Ti contatteremo appena il tuo ordine sarà pronto per la consegna.",
        ]))

        return await self.send_mail(order.contact_email, "Conferma del tuo ordine", body)

    async def send_staff_alert(self, order: Order) -> bool:
        """New-order alert to the staff inbox"""
        body = "\n".join(filter(None, [
            f"Nuovo ordine ricevuto: #{order.id}",
            "",
            f"Cliente: {order.nome} {order.cognome}",
            f"Email: {order.email}",
            f"Telefono: {order.cellulare}",
            "",
            f"Data consegna: {format_date(order.data_consegna)}",
            f"Luogo: {order.luogo_consegna}",
            f"Totale: {format_euro(order.totale)}",
            "",
            "Prodotti:",
            render_items(order.prodotti, with_prices=False),
            "",
            f"Richieste cliente: {order.note_richieste}" if order.note_richieste else None,
        ]))

        return await self.send_mail(self.staff_email, "Nuovo ordine ricevuto", body)

    async def send_daily_report(self, orders: Sequence[Order], today: date, window_days: int) -> bool:
        """Deliveries due in the window, one block per order"""
        subject = "Resoconto ordini in scadenza"

        if not orders:
            body = f"Nessun ordine in scadenza nei prossimi {window_days} giorni."
            return await self.send_mail(self.staff_email, subject, body)

        blocks = [f"Ordini con consegna dal {format_date(today)} ai prossimi {window_days} giorni:"]
        for order in orders:
            blocks.append("\n".join(filter(None, [
                f"{format_date(order.data_consegna)} - {order.luogo_consegna}",
                f"  Ordine #{order.id}: {order.nome} {order.cognome}, {order.email}, {order.cellulare}",
                f"  Totale: {format_euro(order.totale)}",
                f"  Note: {order.note_richieste}" if order.note_richieste else None,
                render_items(order.prodotti, with_prices=False),
            ])))
        blocks.append("Questo è un resoconto automatico generato dal sistema.")

        return await self.send_mail(self.staff_email, subject, "\n\n".join(blocks))


async def dispatch_order_notifications(notifier: MailNotificationDispatcher, order: Order) -> None:
    """
    Send the customer confirmation, then the staff alert

    Runs after the order is committed and the response is out. A failure of
    one notification is logged and does not stop the other.
    """
    for send in (notifier.send_order_confirmation, notifier.send_staff_alert):
        try:
            await send(order)
        except Exception:
            logger.exception(f"Notification {send.__name__} failed for order {order.id}")
