from .smtp_mailer import MailTransportError, SmtpMailer

__all__ = ["MailTransportError", "SmtpMailer"]
