"""
Newsletter subscription.

Two variants share the EmailOctopus list: a minimal email-only form
and a named form that also requires first and last name. The named
variant reports upstream error detail outside production; the minimal
one never does. Each variant keeps its own rate-limit table.
"""

from ..clients import EmailOctopusClient
from ..core.config import Settings
from ..pipeline.fields import FieldKind, FieldSpec
from ..pipeline.pipeline import FormEndpoint, SettingRequirement, Submission
from ..pipeline.ratelimit import RateLimitPolicy

HONEYPOT_FIELD = "company"
SUBSCRIBE_FAILED = "Failed to subscribe. Please try again later."

EMAIL_FIELD = FieldSpec(
    "email",
    kind=FieldKind.EMAIL,
    required=True,
    missing_message="Email is required",
    invalid_message="Invalid email format"
)

NAMED_FIELDS = (
    EMAIL_FIELD,
    FieldSpec("firstName", "FirstName", required=True, missing_message="First name is required"),
    FieldSpec("lastName", "LastName", required=True, missing_message="Last name is required"),
)

NEWSLETTER_REQUIREMENTS = (
    SettingRequirement("EMAILOCTOPUS_API_KEY", lambda s: bool(s.emailoctopus.api_key)),
    SettingRequirement("EMAILOCTOPUS_LIST_ID", lambda s: bool(s.emailoctopus.list_id)),
)


async def write_contact(submission: Submission, settings: Settings) -> None:
    """Create the list contact; the mapped record becomes its custom fields."""
    client = EmailOctopusClient(settings.emailoctopus, timeout=settings.http_timeout)
    await client.create_contact(submission.values["email"], submission.record)


NEWSLETTER_ENDPOINT = FormEndpoint(
    name="newsletter_subscribe",
    fields=(EMAIL_FIELD,),
    requirements=NEWSLETTER_REQUIREMENTS,
    write=write_contact,
    honeypot_field=HONEYPOT_FIELD,
    rate_limit=RateLimitPolicy("newsletter_subscribe", limit=5, window_seconds=60.0),
    constant_fields={"SignupSource": "website_newsletter"},
    upstream_message=SUBSCRIBE_FAILED,
)

NAMED_NEWSLETTER_ENDPOINT = FormEndpoint(
    name="newsletter_signup",
    fields=NAMED_FIELDS,
    requirements=NEWSLETTER_REQUIREMENTS,
    write=write_contact,
    honeypot_field=HONEYPOT_FIELD,
    rate_limit=RateLimitPolicy("newsletter_signup", limit=5, window_seconds=60.0),
    constant_fields={"SignupSource": "website_newsletter_named"},
    upstream_message=SUBSCRIBE_FAILED,
    expose_upstream_detail=True,
)
