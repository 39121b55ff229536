"""
AWS SES email service for signup confirmation codes.
"""

import logging
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from connect.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Sends confirmation-code emails through AWS SES.

    Uses explicit credentials when configured, otherwise the IAM role.
    """

    def __init__(self):
        session_kwargs = {
            'region_name': settings.AWS_REGION,
        }

        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            session_kwargs['aws_access_key_id'] = settings.AWS_ACCESS_KEY_ID
            session_kwargs['aws_secret_access_key'] = settings.AWS_SECRET_ACCESS_KEY

        self.ses_client = boto3.client('ses', **session_kwargs)

    def send_verification_code(self, code: int, to_email: str) -> bool:
        """
        Send a confirmation code email.

        Args:
            code: 6-digit confirmation code
            to_email: Recipient email address

        Returns:
            bool: True if SES accepted the message, False otherwise
        """
        subject = f"{code} is your Connect code"

        try:
            response = self.ses_client.send_email(
                Source=f"{settings.AWS_SES_FROM_NAME} <{settings.AWS_SES_FROM_EMAIL}>",
                Destination={'ToAddresses': [to_email]},
                Message={
                    'Subject': {'Data': subject, 'Charset': 'UTF-8'},
                    'Body': {
                        'Html': {'Data': build_verification_html(code, to_email), 'Charset': 'UTF-8'},
                        'Text': {'Data': build_verification_text(code, to_email), 'Charset': 'UTF-8'}
                    }
                }
            )

            message_id = response.get('MessageId')
            logger.info(f"Confirmation code email sent to {to_email} (MessageId: {message_id})")
            return True

        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"AWS SES ClientError: {error_code} - {error_message}")

            if error_code == 'MessageRejected':
                logger.error(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                logger.error("Sender email not verified in SES")

            return False

        except BotoCoreError as e:
            logger.error(f"AWS BotoCoreError: {str(e)}")
            return False


def build_verification_html(code: int, to_email: str) -> str:
    return f"""
<center>
  <table style="width:100%;max-width:400px;margin: 0 auto;" cellpadding="0" cellspacing="0" border="0">
    <tr>
      <td width="100%" style="text-align:left;">
        <p style="color:#565a5c; font-size:18px;">Hi,</p>
        <p style="color:#565a5c; font-size:18px;">
          Someone tried to sign up for a Connect account with {to_email}. If it was you, enter this confirmation code in the app:
        </p>
      </td>
    </tr>
    <tr>
      <td width="100%" style="text-align:center;">
        <p style="color:#565a5c; font-size:32px;"><strong>{code}</strong></p>
      </td>
    </tr>
  </table>
</center>
"""


def build_verification_text(code: int, to_email: str) -> str:
    return f"""Hi,

Someone tried to sign up for a Connect account with {to_email}. If it was you, enter this confirmation code in the app:

{code}
"""


# Singleton instance
email_service = EmailService()
