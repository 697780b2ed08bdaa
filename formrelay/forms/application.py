"""
Community application intake.

Applications are stored in Airtable, announced in Slack and
acknowledged to the applicant by email. Only same-origin browser
submissions are accepted.
"""

import html
import logging
from urllib.parse import quote

from ..clients import AirtableClient, ResendClient, SlackWebhook
from ..core.config import AirtableConfig, Settings
from ..models.schemas import ResponseStyle
from ..pipeline.fields import FieldKind, FieldSpec
from ..pipeline.pipeline import FormEndpoint, SettingRequirement, Submission

# Configure logging
logger = logging.getLogger(__name__)

EMAIL_REQUIRED = "Valid email is required"

APPLICATION_FIELDS = (
    FieldSpec("fullName", "Full Name", required=True, missing_message="fullName is required"),
    FieldSpec(
        "email",
        "Email",
        FieldKind.EMAIL,
        required=True,
        missing_message=EMAIL_REQUIRED,
        invalid_message=EMAIL_REQUIRED
    ),
    FieldSpec("linkedinUrl", "LinkedIn URL"),
    FieldSpec("personalWebsite", "Personal Website"),
    FieldSpec("phoneNumber", "Phone Number"),
    FieldSpec("location", "Location"),
    FieldSpec("mostAdvancedDegree", "Most Advanced Degree"),
    FieldSpec("whyTTB", "Why TTB", FieldKind.LONG_TEXT),
    FieldSpec("fields", "Field(s)", FieldKind.MULTI),
    FieldSpec("addToMailingList", "Add to Mailing List", FieldKind.FLAG),
)


def application_table(config: AirtableConfig) -> str:
    """
    Table identifier for applications.

    The table id is preferred; a table name still works but is quoted
    for the URL path and logged as deprecated.
    """
    if config.table_id:
        return config.table_id
    logger.warning(
        "AIRTABLE_TABLE_ID is preferred over AIRTABLE_TABLE_NAME. "
        "Please update your environment variables."
    )
    return quote(config.table_name or "", safe="")


async def write_application(submission: Submission, settings: Settings) -> None:
    client = AirtableClient(settings.airtable, timeout=settings.http_timeout)
    await client.create_record(application_table(settings.airtable), submission.record)


def build_slack_message(submission: Submission) -> str:
    lines = [
        "New community application received:",
        f"*Full Name:* {submission.display('fullName')}",
        f"*Email:* {submission.display('email')}",
        f"*Location:* {submission.display('location')}",
        f"*LinkedIn URL:* {submission.display('linkedinUrl')}",
        f"*Field(s):* {submission.display('fields')}",
        f"*Most Advanced Degree:* {submission.display('mostAdvancedDegree')}",
        f"*Add to Mailing List:* {submission.display('addToMailingList')}",
        f"*Submitted:* {submission.received_at}",
    ]
    return "\n".join(lines)


def build_confirmation_email(submission: Submission, settings: Settings) -> tuple[str, str, str]:
    """
    Subject, HTML and text bodies of the applicant's confirmation.
    """
    name = submission.values["fullName"]
    site_name = settings.site_name
    site_url = settings.site_url
    site_host = site_url.split("://", 1)[-1].rstrip("/")

    subject = f"We got your application - {site_name}"
    html_body = f"""
<p>Hi {html.escape(name)},</p>
<p>Thank you for applying to join the {html.escape(site_name)} community! We've received your application.</p>
<p>We'll be in touch soon. In the meantime, you can learn more about what we do at <a href="{html.escape(site_url)}">{html.escape(site_host)}</a>.</p>
<p>Best,<br />{html.escape(site_name)}</p>
"""
    text_body = (
        f"Hi {name},\n\n"
        f"Thank you for applying to join the {site_name} community! "
        f"We've received your application.\n\n"
        f"We'll be in touch soon. In the meantime, you can learn more about "
        f"what we do at {site_url}.\n\n"
        f"Best,\n{site_name}"
    )
    return subject, html_body, text_body


async def notify_application(submission: Submission, settings: Settings) -> None:
    """Slack announcement and applicant confirmation; each independent."""
    if settings.slack.webhook_url:
        webhook = SlackWebhook(settings.slack.webhook_url, timeout=settings.http_timeout)
        await webhook.post_message(build_slack_message(submission))

    if settings.resend.enabled:
        subject, html_body, text_body = build_confirmation_email(submission, settings)
        mailer = ResendClient(settings.resend, timeout=settings.http_timeout)
        await mailer.send_email(submission.values["email"], subject, html_body, text_body)


APPLICATION_ENDPOINT = FormEndpoint(
    name="community_application",
    fields=APPLICATION_FIELDS,
    requirements=(
        SettingRequirement("AIRTABLE_PAT", lambda s: bool(s.airtable.pat)),
        SettingRequirement("AIRTABLE_BASE_ID", lambda s: bool(s.airtable.base_id)),
        SettingRequirement(
            "AIRTABLE_TABLE_ID or AIRTABLE_TABLE_NAME",
            lambda s: bool(s.airtable.table_id or s.airtable.table_name)
        ),
    ),
    write=write_application,
    notify=notify_application,
    style=ResponseStyle.OK,
    check_origin=True,
    upstream_message="Failed to submit application",
)
