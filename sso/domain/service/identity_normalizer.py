"""Identity normalization domain service.

Turns a raw DingTalk profile into a ResolvedIdentity: a stable external
id, a username that satisfies the local username rules, a display name and
an email. Normalization is deterministic: the same profile and settings
always produce the same username and email.
"""

import hashlib
import re
import unicodedata

import logfire

from sso.config import DingtalkSettings
from sso.domain.error import IdentityResolutionError
from sso.domain.value import FailureKind, ProviderProfile, ResolvedIdentity, Username
from sso.domain.value.types import USERNAME_PATTERN
from sso.util.logging import StructuredLogger

from .base import Service

USERNAME_MAX_LENGTH = 20
USERNAME_MIN_LENGTH = 3

# Length of externalId used in {uid} and in virtual emails
TRUNCATED_ID_LENGTH = 16

_INVALID_USERNAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_REPEATED_UNDERSCORES = re.compile(r"_+")
_ALPHANUMERIC_START = re.compile(r"^[a-z0-9]")


def external_id_digest(external_id: str) -> str:
    """Hex MD5 of an external id, the source of {hash6}/{hash8}."""
    return hashlib.md5(external_id.encode("utf-8")).hexdigest()


def sanitize_username(raw: str | None) -> str | None:
    """Sanitize a free-form name into a username.

    Args:
        raw: Nickname, name or rendered template

    Returns:
        A valid username, or None when the input cannot be made valid
        (the caller then moves to its next fallback)
    """
    if not raw or not raw.strip():
        return None

    value = unicodedata.normalize("NFKD", raw)
    value = _INVALID_USERNAME_CHARS.sub("_", value)
    value = _REPEATED_UNDERSCORES.sub("_", value)
    value = value.strip("_-").lower()
    if not value:
        return None

    if not _ALPHANUMERIC_START.match(value):
        value = f"u_{value}"

    value = value[:USERNAME_MAX_LENGTH].ljust(USERNAME_MIN_LENGTH, "_")

    if not USERNAME_PATTERN.match(value):
        return None
    return value


class IdentityNormalizer(Service):
    """Domain service deriving local identity data from a DingTalk profile."""

    def __init__(
        self, settings: DingtalkSettings, log: StructuredLogger = logfire
    ) -> None:
        """Initialize identity normalizer.

        Args:
            settings: DingTalk settings (template, prefixes, email domains)
            log: Structured logger
        """
        self.settings = settings
        self.log = log

    def normalize(
        self, profile: ProviderProfile, organization_id: str | None = None
    ) -> ResolvedIdentity:
        """Resolve a provider profile into a local identity.

        Args:
            profile: Profile returned by DingTalk (may be partially empty)
            organization_id: corpId disclosed by the token exchange

        Returns:
            The resolved identity

        Raises:
            IdentityResolutionError: missing-identity when the profile has
                neither unionId nor openId, missing-email when no real email
                exists and virtual emails are disabled
        """
        external_id = self.resolve_external_id(profile)
        username = self.resolve_username(profile, external_id)
        display_name = (
            _present(profile.name) or _present(profile.nick) or username.root
        )
        email, email_is_authoritative = self.resolve_email(profile, external_id)

        identity = ResolvedIdentity(
            external_id=external_id,
            open_id=_present(profile.open_id),
            organization_id=_present(organization_id),
            username=username,
            display_name=display_name,
            email=email,
            mobile=_present(profile.mobile),
            email_is_authoritative=email_is_authoritative,
        )
        self.log.info(
            "Identity resolved",
            external_id=external_id,
            username=username.root,
            email_is_authoritative=email_is_authoritative,
        )
        return identity

    def resolve_external_id(self, profile: ProviderProfile) -> str:
        """unionId, falling back to the organization-scoped openId."""
        external_id = _present(profile.union_id) or _present(profile.open_id)
        if not external_id:
            raise IdentityResolutionError(
                FailureKind.MISSING_IDENTITY,
                "DingTalk profile carries neither unionId nor openId",
            )
        return external_id

    def resolve_username(self, profile: ProviderProfile, external_id: str) -> Username:
        """Pick the first valid username candidate.

        Order: sanitized nickname, sanitized template, hash fallback.
        """
        username = sanitize_username(profile.nick)
        if username is None:
            name_source = _present(profile.name) or _present(profile.nick) or ""
            username = sanitize_username(
                self.render_template(external_id, name_source)
            )
        if username is None:
            return self.fallback_username(external_id)
        return Username(username)

    def render_template(self, external_id: str, name: str) -> str:
        """Substitute {hash6}, {hash8}, {uid} and {name} in the template."""
        digest = external_id_digest(external_id)
        replacements = {
            "{hash6}": digest[:6],
            "{hash8}": digest[:8],
            "{uid}": external_id[:TRUNCATED_ID_LENGTH],
            "{name}": name,
        }
        rendered = self.settings.username_template
        for placeholder, value in replacements.items():
            rendered = rendered.replace(placeholder, value)
        return rendered

    def fallback_username(self, external_id: str) -> Username:
        """``<prefix>_<first 6 hex of MD5(externalId)>``, always valid."""
        prefix = sanitize_username(self.settings.fallback_username_prefix) or "u"
        prefix = prefix[: USERNAME_MAX_LENGTH - 7].rstrip("_-") or "u"
        return Username(f"{prefix}_{external_id_digest(external_id)[:6]}")

    def username_candidates(self, identity: ResolvedIdentity) -> list[Username]:
        """Usernames to try, in order, when creating an account.

        The normalized username first, then ``name1`` .. ``name9`` and
        finally the hash fallback.
        """
        base = identity.username.root
        candidates = [identity.username]
        for suffix in range(1, 10):
            stem = base[: USERNAME_MAX_LENGTH - len(str(suffix))]
            candidates.append(Username(f"{stem}{suffix}"))
        fallback = self.fallback_username(identity.external_id)
        if fallback not in candidates:
            candidates.append(fallback)
        return candidates

    def resolve_email(
        self, profile: ProviderProfile, external_id: str
    ) -> tuple[str, bool]:
        """Real email, else mobile-derived, else externalId-derived.

        Returns:
            Tuple of (email, email_is_authoritative)
        """
        email = _present(profile.email)
        if email:
            return email, True

        if not self.settings.allow_virtual_email:
            raise IdentityResolutionError(
                FailureKind.MISSING_EMAIL,
                "DingTalk account has no email and virtual emails are disabled",
            )

        mobile = _present(profile.mobile)
        if mobile:
            return f"{mobile}@{self.settings.mobile_virtual_email_domain}", False

        prefix = self.settings.fallback_username_prefix
        truncated = external_id[:TRUNCATED_ID_LENGTH]
        return f"{prefix}_{truncated}@{self.settings.virtual_email_domain}", False


def _present(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
