# services/email_service.py
"""Envio de emails transacionais (reset de senha e boas-vindas) via SMTP."""
import html
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from core.config import settings

logger = logging.getLogger(__name__)

TIPO_LABELS = {
    "aluno": "Aluno",
    "personal": "Personal Trainer",
    "academia": "Academia",
    "admin": "Administrador",
}


class EmailSendError(Exception):
    """Falha no envio via SMTP."""


def _html(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{title}</title></head><body>{body}"
        "<p style=\"color:#888\">GymSync</p></body></html>"
    )


class Mailer:
    """Cliente SMTP simples, configurado por settings."""

    def __init__(self, config=settings):
        self.config = config

    def send(self, to: str, subject: str, html_body: str) -> bool:
        if not self.config.EMAIL_ENABLED:
            logger.info("Envio de email desabilitado; '%s' para %s descartado", subject, to)
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self.config.SMTP_FROM_NAME, self.config.SMTP_FROM_EMAIL))
        msg["To"] = to
        msg["Message-ID"] = make_msgid(domain="gymsync.com")
        msg.set_content("Abra este email em um cliente com suporte a HTML.")
        msg.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=30) as smtp:
                if self.config.SMTP_USE_TLS:
                    smtp.starttls()
                if self.config.SMTP_USER:
                    smtp.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailSendError(f"Falha ao enviar email: {e}") from e

        logger.info("Email '%s' enviado para %s", subject, to)
        return True

    def send_password_reset(self, to: str, nome: str, token: str) -> bool:
        link = f"{self.config.FRONTEND_URL}/redefinir-senha?token={token}"
        subject = "Redefinição de Senha - GymSync"
        body = (
            "<h2>Redefinição de Senha</h2>"
            f"<p>Olá {html.escape(nome)},</p>"
            "<p>Você solicitou a redefinição de sua senha no GymSync.</p>"
            f"<p><a href=\"{link}\">Redefinir Senha</a></p>"
            f"<p>Este link expira em {self.config.RESET_TOKEN_EXPIRE_MINUTES} minutos.</p>"
            "<p>Se você não solicitou esta redefinição, ignore este email.</p>"
        )
        return self.send(to, subject, _html(subject, body))

    def send_welcome(self, to: str, nome: str, user_type: str, token: str) -> bool:
        link = f"{self.config.FRONTEND_URL}/definir-senha?token={token}"
        subject = "Bem-vindo ao GymSync"
        body = (
            f"<h2>Olá {html.escape(nome)}!</h2>"
            f"<p>Sua conta de {TIPO_LABELS.get(user_type, user_type)} foi criada.</p>"
            f"<p><a href=\"{link}\">Definir minha senha</a></p>"
            f"<p>Este link expira em {self.config.WELCOME_TOKEN_EXPIRE_DAYS} dias.</p>"
        )
        return self.send(to, subject, _html(subject, body))


def deliver(send, *args) -> None:
    """
    Executa um envio em background (BackgroundTasks).

    Falhas são registradas e não afetam a resposta já enviada.
    """
    try:
        send(*args)
    except EmailSendError:
        logger.exception("Falha no envio de email em background")


_mailer = Mailer()


def get_mailer() -> Mailer:
    """Dependency que fornece o Mailer."""
    return _mailer
