"""
Merchandise waitlist.

Signups go to a dedicated Airtable table and are announced in the
merch Slack channel.
"""

from ..clients import AirtableClient, SlackWebhook
from ..core.config import Settings
from ..pipeline.fields import FieldKind, FieldSpec
from ..pipeline.pipeline import FormEndpoint, SettingRequirement, Submission

SERVER_ERROR = "Server error"

MERCH_FIELDS = (
    FieldSpec("name", "Name", required=True, missing_message="Name is required"),
    FieldSpec(
        "email",
        "Email",
        FieldKind.EMAIL,
        required=True,
        missing_message="Email is required",
        invalid_message="Invalid email format"
    ),
    FieldSpec(
        "sizePreference",
        "Size Preference",
        required=True,
        missing_message="Size preference is required"
    ),
    FieldSpec("interestedIn", "Interested In"),
)


async def write_waitlist_entry(submission: Submission, settings: Settings) -> None:
    client = AirtableClient(settings.airtable, timeout=settings.http_timeout)
    await client.create_record(settings.airtable.merch_table_id, submission.record)


def build_slack_message(submission: Submission) -> str:
    return "\n".join([
        "🧢 New merch waitlist signup",
        f"Name: {submission.display('name')}",
        f"Email: {submission.display('email')}",
        f"Size: {submission.display('sizePreference')}",
        f"Interested in: {submission.display('interestedIn', default='—')}",
    ])


async def notify_waitlist(submission: Submission, settings: Settings) -> None:
    if settings.slack.merch_webhook_url:
        webhook = SlackWebhook(settings.slack.merch_webhook_url, timeout=settings.http_timeout)
        await webhook.post_message(build_slack_message(submission))


MERCH_ENDPOINT = FormEndpoint(
    name="merch_waitlist",
    fields=MERCH_FIELDS,
    requirements=(
        SettingRequirement("AIRTABLE_PAT", lambda s: bool(s.airtable.pat)),
        SettingRequirement("AIRTABLE_BASE_ID", lambda s: bool(s.airtable.base_id)),
        SettingRequirement("AIRTABLE_MERCH_TABLE_ID", lambda s: bool(s.airtable.merch_table_id)),
    ),
    write=write_waitlist_entry,
    notify=notify_waitlist,
    honeypot_field="company",
    constant_fields={"Source": "merch_page"},
    misconfigured_message=SERVER_ERROR,
    upstream_message=SERVER_ERROR,
    unexpected_message=SERVER_ERROR,
)
