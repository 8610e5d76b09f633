"""
Email Service using Resend

Sends the confirmation email that follows a membership application.
"""

import asyncio
import logging
from html import escape

import resend

from astro_api.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email: {e}")
        return False


async def send_application_received(to_email: str, full_name: str) -> bool:
    """Let an applicant know their membership application arrived."""
    safe_name = escape(full_name)

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #0b1d3a; margin-bottom: 24px; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Application Received</h1>

            <p>Hello {safe_name},</p>

            <p>Thank you for applying to join the ALU Astronomy Club. We have received your application and the team will review it shortly.</p>

            <p>You will hear from us by email once a decision has been made.</p>

            <div class="footer">
                <p>If you didn't submit this application, you can safely ignore this email.</p>
                <p>ALU Astronomy Club</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject="We received your ALU Astronomy Club application",
        html_content=html_content,
    )
