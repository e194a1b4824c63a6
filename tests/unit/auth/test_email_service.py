import smtplib
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from services.email_service import EmailSendError, Mailer, deliver


def _config(**overrides):
    values = dict(
        EMAIL_ENABLED=True,
        SMTP_HOST="smtp.test",
        SMTP_PORT=587,
        SMTP_USER="user",
        SMTP_PASSWORD="pass",
        SMTP_FROM_NAME="GymSync",
        SMTP_FROM_EMAIL="noreply@gymsync.com",
        SMTP_USE_TLS=True,
        FRONTEND_URL="https://app.gymsync.com",
        RESET_TOKEN_EXPIRE_MINUTES=60,
        WELCOME_TOKEN_EXPIRE_DAYS=7,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_disabled_email_is_not_sent():
    with patch("services.email_service.smtplib.SMTP") as smtp:
        assert Mailer(_config(EMAIL_ENABLED=False)).send("a@x.com", "Assunto", "<p>x</p>") is False
    smtp.assert_not_called()


def test_password_reset_link():
    with patch("services.email_service.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        assert Mailer(_config()).send_password_reset("a@x.com", "Ana", "tok123")

    server.starttls.assert_called_once()
    server.login.assert_called_once_with("user", "pass")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "a@x.com"
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "https://app.gymsync.com/redefinir-senha?token=tok123" in html


def test_welcome_link():
    with patch("services.email_service.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        Mailer(_config(SMTP_USE_TLS=False, SMTP_USER="")).send_welcome("a@x.com", "Ana", "personal", "tok")

    server.starttls.assert_not_called()
    server.login.assert_not_called()
    html = server.send_message.call_args.args[0].get_body(preferencelist=("html",)).get_content()
    assert "/definir-senha?token=tok" in html
    assert "Personal Trainer" in html


def test_name_is_escaped_in_html():
    with patch("services.email_service.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        Mailer(_config()).send_welcome("a@x.com", "<script>Ana</script>", "aluno", "tok")

    html = server.send_message.call_args.args[0].get_body(preferencelist=("html",)).get_content()
    assert "<script>" not in html
    assert "&lt;script&gt;Ana&lt;/script&gt;" in html


def test_smtp_failure_raises():
    with patch("services.email_service.smtplib.SMTP", side_effect=smtplib.SMTPException("down")):
        with pytest.raises(EmailSendError):
            Mailer(_config()).send("a@x.com", "Assunto", "<p>x</p>")


def test_deliver_logs_failures():
    send = MagicMock(side_effect=EmailSendError("falhou"))
    deliver(send, "a@x.com")
    send.assert_called_once_with("a@x.com")
