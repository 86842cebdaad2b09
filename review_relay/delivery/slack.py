"""
Slack client.

Posts formatted reviews to a channel through the chat.postMessage Web API.
"""

import logging

import requests

from review_relay.errors import WebhookDeliveryError

logger = logging.getLogger(__name__)

POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class SlackClient:
    """
    Minimal chat.postMessage client.

    Slack answers HTTP 200 for most failures; success is the "ok" field
    of the JSON body.
    """

    def __init__(self, token: str, channel: str, timeout: float = 30.0):
        """
        Args:
            token: Bot token (xoxb-...)
            channel: Channel id or name
            timeout: HTTP timeout in seconds
        """
        self.token = token
        self.channel = channel
        self.timeout = timeout

    def post_message(self, text: str) -> None:
        """
        Post one message with mrkdwn rendering enabled.

        Raises:
            WebhookDeliveryError: on network errors, HTTP errors, a non-JSON
                body, or an "ok": false response
        """
        payload = {
            "channel": self.channel,
            "text": text,
            "mrkdwn": True
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}"
        }

        try:
            response = requests.post(
                POST_MESSAGE_URL,
                json=payload,
                headers=headers,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise WebhookDeliveryError(f"Error sending message to Slack: {e}") from e
        except ValueError as e:
            raise WebhookDeliveryError(f"Slack returned a non-JSON response: {e}") from e

        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error", "unknown_error") if isinstance(data, dict) else "unknown_error"
            raise WebhookDeliveryError(
                f"Failed to send message to Slack channel ({self.channel}). Error: {error}"
            )

        logger.info(f"Message sent to Slack channel ({self.channel}) successfully.")
