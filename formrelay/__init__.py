"""
Form Relay API

Server-side handlers for the marketing site's forms: validates
submissions and relays them to Airtable, EmailOctopus, Slack and Resend.
"""

__version__ = "1.0.0"
