"""
Service d'envoi d'emails SMTP.
Utilisé pour remettre au client son QR code de check-in après inscription ou réémission.
"""

import logging
import smtplib
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)


def send_scan_code_email(
    to_email: str,
    customer_name: str,
    code_value: str,
    qr_image_bytes: bytes,
) -> None:
    """
    Envoie un email HTML contenant le QR code de check-in du client.
    Le QR code est intégré en ligne dans le corps de l'email (Content-ID),
    la valeur du code est aussi affichée en clair pour une saisie manuelle.
    Lève une exception en cas d'échec SMTP.
    """
    msg = MIMEMultipart("related")
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = "TutorCheck — Votre QR code de check-in"

    html_content = f"""
    <html>
      <body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: auto;">
        <h2 style="color: #1a73e8;">TutorCheck — QR Code de check-in</h2>
        <p>Bonjour {customer_name},</p>
        <p>
          Merci pour votre inscription. Veuillez présenter ce QR code à l'accueil
          lorsque vous déposez votre enfant pour sa séance de tutorat.
        </p>
        <div style="text-align: center; margin: 24px 0;">
          <img src="cid:qrcode" alt="QR Code de check-in" style="width: 220px; height: 220px;" />
        </div>
        <p>Votre code : <strong>{code_value}</strong></p>
        <p>Il peut être affiché sur un écran ou imprimé.</p>
        <hr style="border: none; border-top: 1px solid #eee;" />
        <p style="font-size: 12px; color: #888;">
          Ce message est généré automatiquement par TutorCheck. Ne pas répondre à cet email.
        </p>
      </body>
    </html>
    """

    html_part = MIMEMultipart("alternative")
    html_part.attach(MIMEText(html_content, "html", "utf-8"))
    msg.attach(html_part)

    # QR code en pièce jointe inline (référencé par cid:qrcode dans le HTML)
    qr_attachment = MIMEImage(qr_image_bytes, name="qrcode.png")
    qr_attachment.add_header("Content-ID", "<qrcode>")
    qr_attachment.add_header("Content-Disposition", "inline", filename="qrcode.png")
    msg.attach(qr_attachment)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)

    logger.info("Email QR code envoyé à %s", to_email)
