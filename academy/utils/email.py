import html
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from academy.core.config import settings

logger = logging.getLogger(__name__)


def _wrap_html(title: str, body_html: str) -> str:
    return f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #eee; border-radius: 10px;">
                <h2 style="color: #1e3a8a; text-align: center;">{settings.ACADEMY_NAME}</h2>
                <h3>{title}</h3>
                {body_html}
                <hr style="border: 0; border-top: 1px solid #eee; margin: 20px 0;" />
                <p style="font-size: 12px; color: #777; text-align: center;">
                    This is an automated message from {settings.ACADEMY_NAME}.
                </p>
            </div>
        </body>
    </html>
    """


def send_email(email_to: str, subject: str, html_content: str) -> bool:
    if not settings.SMTP_HOST:
        logger.info("[email] SMTP_HOST not configured, skipping '%s' to %s", subject, email_to)
        return False

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"{settings.EMAILS_FROM_NAME or settings.ACADEMY_NAME} <{settings.EMAILS_FROM_EMAIL}>"
    message["To"] = email_to
    message.attach(MIMEText(html_content, "html"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_TLS:
                server.starttls()
            if settings.SMTP_USER:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAILS_FROM_EMAIL, email_to, message.as_string())
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("[email] failed to send '%s' to %s", subject, email_to)
        return False


def send_learning_journal_share_email(email_to: str, student_name: str, share_url: str) -> bool:
    subject = f"{settings.ACADEMY_NAME} - {student_name}'s learning journal is ready"
    student_name = html.escape(student_name)
    share_url = html.escape(share_url, quote=True)
    body = f"""
        <p>Hello,</p>
        <p>The learning journal for <strong>{student_name}</strong> has been published.</p>
        <p style="text-align: center; margin: 24px 0;">
            <a href="{share_url}" style="background-color: #1e3a8a; color: #fff; padding: 12px 20px; border-radius: 6px; text-decoration: none;">
                Open the learning journal
            </a>
        </p>
        <p>If the button does not work, copy this link into your browser:<br />{share_url}</p>
    """
    return send_email(email_to, subject, _wrap_html("Learning journal", body))


def send_enrollment_received_email(email_to: str, student_name: str, desired_class: str) -> bool:
    subject = f"{settings.ACADEMY_NAME} - Enrollment application received"
    student_name = html.escape(student_name)
    desired_class = html.escape(desired_class or "")
    body = f"""
        <p>Hello,</p>
        <p>We received the enrollment application for <strong>{student_name}</strong>
        (requested class: {desired_class}). Our staff will contact you shortly.</p>
    """
    return send_email(email_to, subject, _wrap_html("Enrollment application", body))
