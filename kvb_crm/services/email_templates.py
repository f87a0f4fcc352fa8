"""
Transactional email templates.
Each function returns the subject, plain text and HTML of one message.
"""
from typing import NamedTuple, Optional

from kvb_crm.config import settings


class EmailContent(NamedTuple):
    subject: str
    body: str
    html: Optional[str] = None


def _wrap(inner: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"{inner}</div>"
    )


def lead_welcome(lead_name: str) -> EmailContent:
    subject = f"Welcome to {settings.EMAIL_FROM_NAME}"
    body = (
        f"Dear {lead_name},\n\n"
        "Thank you for your interest in our solar solutions. "
        "A member of our sales team will contact you shortly.\n\n"
        f"Best regards,\n{settings.EMAIL_FROM_NAME} Team"
    )
    html = _wrap(
        f'<h2 style="color: #2d5a27;">Welcome, {lead_name}!</h2>'
        "<p>Thank you for your interest in our solar solutions.</p>"
        "<p>A member of our sales team will contact you shortly.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Team</p>"
    )
    return EmailContent(subject, body, html)


def follow_up(customer_name: str, product_name: str) -> EmailContent:
    subject = f"Follow-up on Your Enquiry - {settings.EMAIL_FROM_NAME}"
    body = (
        f"Dear {customer_name},\n\n"
        f"We're following up on your enquiry about {product_name}. "
        "Please let us know if you'd like to schedule a call or have any questions.\n\n"
        f"Best regards,\n{settings.EMAIL_FROM_NAME} Sales Team"
    )
    html = _wrap(
        '<h2 style="color: #2d5a27;">Following up on your enquiry</h2>'
        f"<p>Dear {customer_name},</p>"
        f"<p>We hope this email finds you well. We're following up on your enquiry about <strong>{product_name}</strong>.</p>"
        "<p>We're interested in learning more about your requirements and discussing how our solar solutions can benefit you.</p>"
        "<p>Please let us know if you'd like to schedule a call or have any questions.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Sales Team</p>"
    )
    return EmailContent(subject, body, html)


def enquiry_confirmation(customer_name: str, product_name: str) -> EmailContent:
    subject = f"Enquiry Received - {settings.EMAIL_FROM_NAME}"
    body = (
        f"Thank you for your enquiry, {customer_name}!\n\n"
        f"We have received your enquiry for {product_name}. "
        "Our sales team will get back to you within 24 hours.\n\n"
        f"Email: {settings.SALES_CONTACT_EMAIL}\nPhone: {settings.SALES_CONTACT_PHONE}"
    )
    html = _wrap(
        f'<h2 style="color: #2d5a27;">Thank you for your enquiry, {customer_name}!</h2>'
        f"<p>We have received your enquiry for <strong>{product_name}</strong>.</p>"
        "<p>Our sales team will review your enquiry and get back to you within 24 hours.</p>"
        "<p>If you have any urgent questions, please contact us at:</p>"
        f"<ul><li>Email: {settings.SALES_CONTACT_EMAIL}</li><li>Phone: {settings.SALES_CONTACT_PHONE}</li></ul>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Team</p>"
    )
    return EmailContent(subject, body, html)


def quotation_sent(customer_name: str, quotation_id: str, product_name: str) -> EmailContent:
    subject = f"Quotation Sent - {settings.EMAIL_FROM_NAME}"
    body = (
        f"Dear {customer_name},\n\n"
        f"We have prepared a quotation for {product_name}.\n"
        f"Quotation ID: {quotation_id}\n\n"
        "You can view and accept or reject this quotation in your customer dashboard."
    )
    html = _wrap(
        f'<h2 style="color: #2d5a27;">Quotation Ready for {product_name}</h2>'
        f"<p>Dear {customer_name},</p>"
        "<p>We have prepared a quotation for your enquiry. Please review the details and let us know if you have any questions.</p>"
        f"<p><strong>Quotation ID:</strong> {quotation_id}</p>"
        "<p>You can view and accept/reject this quotation in your customer dashboard.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Sales Team</p>"
    )
    return EmailContent(subject, body, html)


def quotation_accepted(customer_name: str, quotation_id: str, product_name: str) -> EmailContent:
    subject = "Quotation Accepted - Installation Scheduled"
    body = (
        f"Dear {customer_name},\n\n"
        f"Thank you for accepting our quotation for {product_name} (ID: {quotation_id}). "
        "Our installation team will contact you within 48 hours to schedule the installation."
    )
    html = _wrap(
        '<h2 style="color: #2d5a27;">Great News! Your Quotation is Accepted</h2>'
        f"<p>Dear {customer_name},</p>"
        f"<p>Thank you for accepting our quotation for <strong>{product_name}</strong> (ID: {quotation_id}).</p>"
        "<p>Our installation team will contact you within 48 hours to schedule the installation.</p>"
        "<p>You can track the progress of your installation in your customer dashboard.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Team</p>"
    )
    return EmailContent(subject, body, html)


def task_assigned(worker_name: str, task_title: str, customer_name: str, location: str) -> EmailContent:
    subject = f"New Task Assigned - {settings.EMAIL_FROM_NAME}"
    body = (
        f"Dear {worker_name},\n\n"
        f"You have been assigned a new task.\nTask: {task_title}\n"
        f"Customer: {customer_name}\nLocation: {location}"
    )
    html = _wrap(
        '<h2 style="color: #2d5a27;">New Task Assigned</h2>'
        f"<p>Dear {worker_name},</p><p>You have been assigned a new task:</p>"
        f"<ul><li><strong>Task:</strong> {task_title}</li>"
        f"<li><strong>Customer:</strong> {customer_name}</li>"
        f"<li><strong>Location:</strong> {location}</li></ul>"
        "<p>Please check your dashboard for complete task details and update the status as you progress.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Management</p>"
    )
    return EmailContent(subject, body, html)


def task_completed(customer_name: str, task_title: str) -> EmailContent:
    subject = f"Installation Completed - {settings.EMAIL_FROM_NAME}"
    body = (
        f"Dear {customer_name},\n\n"
        f"Your installation for {task_title} has been completed successfully."
    )
    html = _wrap(
        '<h2 style="color: #2d5a27;">Installation Completed Successfully!</h2>'
        f"<p>Dear {customer_name},</p>"
        f"<p>Great news! Your installation for <strong>{task_title}</strong> has been completed successfully.</p>"
        "<p>If you have any questions or need assistance, please don't hesitate to contact us.</p>"
        f"<br><p>Best regards,<br>{settings.EMAIL_FROM_NAME} Team</p>"
    )
    return EmailContent(subject, body, html)


def password_reset(full_name: str, reset_url: str) -> EmailContent:
    minutes = settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
    subject = f"Reset your {settings.EMAIL_FROM_NAME} password"
    body = (
        f"Hello {full_name},\n\n"
        f"You requested to reset your password. Open the link below:\n\n{reset_url}\n\n"
        f"This link expires in {minutes} minutes.\n\n"
        "If you didn't request this, please ignore this email."
    )
    html = _wrap(
        "<h2>Password Reset Request</h2>"
        "<p>Click the button below to reset your password:</p>"
        f'<p><a href="{reset_url}" style="background-color: #2196F3; color: white; padding: 14px 25px; '
        'text-decoration: none; display: inline-block; border-radius: 4px;">Reset Password</a></p>'
        f"<p>Or copy this link: {reset_url}</p>"
        f"<p><small>This link expires in {minutes} minutes.</small></p>"
    )
    return EmailContent(subject, body, html)
