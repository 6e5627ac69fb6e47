# app/utils/email.py
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

import sendgrid
from sendgrid.helpers.mail import Mail

from app.core.config import settings

logger = logging.getLogger(__name__)

_email_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="sendgrid")


async def send_email_via_sendgrid(to_email: str, subject: str, body: str) -> bool:
    """
    Send an HTML email through SendGrid without blocking the event loop.

    Returns True only when SendGrid accepted the message (HTTP 202).
    """
    if not settings.email_enabled:
        logger.warning(f"SENDGRID_API_KEY not configured, email to {to_email} not sent")
        return False

    if not to_email or "@" not in to_email:
        logger.error(f"Invalid email format: {to_email}")
        return False

    message = Mail(
        from_email=(settings.EMAIL_FROM, settings.EMAIL_FROM_NAME),
        to_emails=to_email,
        subject=subject,
        html_content=body
    )
    message.reply_to = settings.EMAIL_FROM

    sg = sendgrid.SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)

    try:
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(_email_executor, sg.send, message)
    except Exception as e:
        logger.error(f"❌ Exception while sending email to {to_email}: {str(e)}")
        return False

    if response.status_code == 202:
        logger.info(f"✅ Email sent successfully to {to_email}")
        return True

    logger.error(f"❌ Failed to send email to {to_email}. Status code: {response.status_code}")
    return False


def render_budget_alert_email(
    user_name: str,
    category_name: str,
    current_amount: float,
    target_amount: float,
    percentage: float,
) -> str:
    remaining = target_amount - current_amount
    if percentage >= 100:
        headline = f"You've reached your {category_name} budget"
        accent = "#dc3545"
    elif percentage >= 80:
        headline = f"You've used {percentage:.0f}% of your {category_name} budget"
        accent = "#fd7e14"
    else:
        headline = f"Halfway through your {category_name} budget"
        accent = "#007bff"

    return """
    <!DOCTYPE html>
    <html>
    <body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f4f4f4;">
        <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 20px;">
            <h1 style="color: {accent}; font-size: 22px;">{headline}</h1>
            <p style="color: #666;">Hello <strong>{user_name}</strong>,</p>
            <table style="width: 100%; color: #333; border-collapse: collapse;">
                <tr><td>Category</td><td style="text-align: right;"><strong>{category_name}</strong></td></tr>
                <tr><td>Budget</td><td style="text-align: right;">{target_amount:.2f}</td></tr>
                <tr><td>Spent</td><td style="text-align: right;">{current_amount:.2f}</td></tr>
                <tr><td>Remaining</td><td style="text-align: right;">{remaining:.2f}</td></tr>
                <tr><td>Used</td><td style="text-align: right;">{percentage:.1f}%</td></tr>
            </table>
            <p style="color: #999; font-size: 12px; margin-top: 30px;">CleverBudget Team</p>
        </div>
    </body>
    </html>
    """.format(
        accent=accent,
        headline=headline,
        user_name=user_name,
        category_name=category_name,
        target_amount=target_amount,
        current_amount=current_amount,
        remaining=remaining,
        percentage=percentage,
    )
