import smtplib
import ssl

from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from albaranes.core.config import settings
from albaranes.core.logger import logger


SMTP_TIMEOUT = 30


def smtp_connect():
    try:
        # =========================
        # SSL DIRECTO (PUERTO 465)
        # =========================
        if settings.SMTP_SSL:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(
                settings.SMTP_HOST,
                settings.SMTP_PORT,
                context=context,
                timeout=SMTP_TIMEOUT,
            )
        else:
            # =========================
            # STARTTLS
            # =========================
            server = smtplib.SMTP(
                settings.SMTP_HOST,
                settings.SMTP_PORT,
                timeout=SMTP_TIMEOUT,
            )
            server.ehlo()

            if settings.EMAIL_TLS:
                context = ssl.create_default_context()
                server.starttls(context=context)
                server.ehlo()

        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")

        return server

    except (OSError, smtplib.SMTPException) as e:
        raise RuntimeError(f"Error configurando conexión SMTP: {e}") from e


# =========================
# ENVÍO SIMPLE
# =========================
def send_email(
    to_email: str,
    subject: str,
    html_body: str,
    text_body: str | None = None,
):
    if not settings.SMTP_HOST:
        raise RuntimeError("SMTP no está configurado")

    msg = MIMEMultipart("alternative")
    sender = settings.EMAIL_FROM or settings.SMTP_USER

    msg["From"] = sender
    msg["To"] = to_email
    msg["Subject"] = subject

    if text_body:
        msg.attach(MIMEText(text_body, "plain", "utf-8"))

    msg.attach(MIMEText(html_body, "html", "utf-8"))

    server = smtp_connect()
    try:
        server.sendmail(sender, [to_email], msg.as_string())
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            pass


# =========================
# CÓDIGO DE VERIFICACIÓN
# =========================
def send_verification_email(to_email: str, code: str):
    subject = "Verifica tu cuenta"

    text_body = f"""
Gracias por registrarte.

Tu código de verificación es: {code}
"""

    html_body = f"""
<p>Gracias por registrarte.</p>
<p>Tu código de verificación es:</p>
<p style="font-size: 20px; font-weight: bold;">{code}</p>
"""

    send_email(to_email, subject, html_body, text_body)


# =========================
# PASSWORD RESET
# =========================
def send_recovery_email(to_email: str, code: str):
    subject = "Recuperación de contraseña"

    text_body = f"""
Has solicitado restablecer la contraseña.

Código de recuperación: {code}

Si no solicitaste este cambio, ignora este correo.
"""

    html_body = f"""
<p>Has solicitado restablecer la contraseña.</p>
<p>Código de recuperación:</p>
<p style="font-size: 20px; font-weight: bold;">{code}</p>
<p style="font-size: 12px; color: #666;">
  Si no solicitaste este cambio, ignora este correo.
</p>
"""

    send_email(to_email, subject, html_body, text_body)


# =========================
# INVITACIÓN
# =========================
def send_invitation_email(to_email: str, inviter_email: str, temp_password: str):
    subject = "Te han invitado"

    text_body = f"""
{inviter_email} te ha invitado a su empresa.

Usuario: {to_email}
Contraseña temporal: {temp_password}
"""

    html_body = f"""
<p><b>{inviter_email}</b> te ha invitado a su empresa.</p>
<p>Usuario: {to_email}</p>
<p>Contraseña temporal: <code>{temp_password}</code></p>
"""

    send_email(to_email, subject, html_body, text_body)


def notify(send, *args):
    """
    Envío en segundo plano (BackgroundTasks). Un fallo de correo no debe
    afectar a la petición que ya respondió: se registra y se sigue.
    """
    try:
        send(*args)
    except (RuntimeError, OSError, smtplib.SMTPException) as e:
        logger.warning(f"Email no enviado ({send.__name__}): {e}")
