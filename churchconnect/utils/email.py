from threading import Thread

from flask import current_app
from flask_mail import Mail, Message

from churchconnect.utils.dates import utcnow

mail = Mail()


def send_async_email(app, msg):
    with app.app_context():
        try:
            mail.send(msg)
        except Exception as e:
            app.logger.error(f"Failed to send email: {e}")


def _notify_address(app):
    return app.config.get("FOLLOW_UP_NOTIFY_EMAIL") or app.config.get("MAIL_USERNAME")


def _dispatch(app, subject, recipient, body):
    """Send ``body`` in the background, or log it when running in testing mode.

    Returns False when there is nobody to send to.
    """
    if app.testing:
        app.logger.info("--- MOCK EMAIL ---")
        app.logger.info(f"To: {recipient}")
        app.logger.info(f"Subject: {subject}")
        app.logger.info(f"Body: {body}")
        app.logger.info("--- END MOCK EMAIL ---")
        return True

    if not recipient:
        app.logger.warning(f"No recipient configured for email '{subject}'")
        return False

    msg = Message(
        subject,
        sender=("ChurchConnect", app.config.get("MAIL_DEFAULT_SENDER") or app.config.get("MAIL_USERNAME")),
        recipients=[recipient],
    )
    msg.body = body
    Thread(target=send_async_email, args=(app, msg)).start()
    return True


def send_follow_up_email(member, contact_method):
    """Tell church staff that ``member`` was contacted and the follow-up is complete."""
    app = current_app._get_current_object()
    now = utcnow()
    body = f"""
ChurchConnect Follow-up Notification

Member: {member.first_name} {member.surname}
Contact Method: {contact_method.upper()}
Date: {now.strftime('%B %d, %Y')}
Time: {now.strftime('%H:%M')} UTC

This member has been successfully contacted and marked as followed up.
"""
    return _dispatch(
        app,
        f"Follow-up Complete: {member.first_name} {member.surname}",
        _notify_address(app),
        body,
    )


def send_follow_up_sms(member, contact_method):
    # No SMS gateway is wired in; staff get an email with the text that would be sent
    app = current_app._get_current_object()
    now = utcnow()
    sms_message = (
        f"ChurchConnect: {member.first_name} {member.surname} was contacted via "
        f"{contact_method.upper()} on {now.strftime('%Y-%m-%d')} at "
        f"{now.strftime('%H:%M')} UTC. Follow-up complete."
    )
    body = f"""
SMS Follow-up Notification

SMS would be sent to: {member.phone or 'No phone number'}
Message: {sms_message}
"""
    return _dispatch(
        app,
        f"SMS Follow-up Notification: {member.first_name} {member.surname}",
        _notify_address(app),
        body,
    )


def send_welcome_email(church, user):
    app = current_app._get_current_object()
    trial_days = app.config.get("TRIAL_LENGTH_DAYS", 30)
    body = f"""
Welcome to ChurchConnect, {user.first_name}!

Your church "{church.name}" is registered and your {trial_days} day free trial has started.
Sign in at {app.config.get('CLIENT_URL')}/login to add members and start taking attendance.

The ChurchConnect Team
"""
    return _dispatch(app, f"Welcome to ChurchConnect - {church.name}", user.email, body)
