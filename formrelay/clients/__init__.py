"""
Outbound HTTP clients for the third-party services.
"""

from .airtable import AirtableClient
from .emailoctopus import EmailOctopusClient
from .resend import ResendClient
from .slack import SlackWebhook

__all__ = ["AirtableClient", "EmailOctopusClient", "ResendClient", "SlackWebhook"]
