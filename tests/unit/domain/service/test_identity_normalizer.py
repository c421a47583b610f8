"""Unit tests for IdentityNormalizer."""

import hashlib

import pytest

from sso.config import DingtalkSettings
from sso.domain.error import IdentityResolutionError
from sso.domain.service import IdentityNormalizer, sanitize_username
from sso.domain.value import FailureKind
from tests.helpers import RecordingLogger, make_profile

UNION_ID = "union_abc123def456"


def md5_hex(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def make_normalizer(**overrides) -> IdentityNormalizer:
    return IdentityNormalizer(DingtalkSettings(**overrides), log=RecordingLogger())


class TestSanitizeUsername:
    """Tests for sanitize_username()."""

    def test_replaces_invalid_characters(self):
        """Invalid characters become single underscores."""
        assert sanitize_username("zhang@san#123") == "zhang_san_123"

    def test_lowercases_and_collapses_underscores(self):
        assert sanitize_username("Zhang__San") == "zhang_san"

    def test_strips_accents(self):
        """NFKD splits accents off, which then become underscores."""
        assert sanitize_username("Émile") == "e_mile"

    def test_truncates_to_twenty_characters(self):
        assert sanitize_username("a" * 30) == "a" * 20

    def test_rejects_non_latin_only_names(self):
        """A name with no usable characters yields no candidate."""
        assert sanitize_username("张三") is None

    def test_rejects_too_short_names(self):
        """Padding 'ab' gives 'ab_', which cannot end in an underscore."""
        assert sanitize_username("ab") is None

    def test_rejects_blank(self):
        assert sanitize_username("   ") is None
        assert sanitize_username(None) is None


class TestNormalize:
    """Tests for IdentityNormalizer.normalize()."""

    def test_resolves_profile_with_real_email(self):
        """Template username, real name and authoritative email."""
        # Arrange
        normalizer = make_normalizer(username_template="dingtalk_{hash6}")
        profile = make_profile(union_id=UNION_ID, nick=None, name="张三")

        # Act
        identity = normalizer.normalize(profile)

        # Assert
        assert identity.username.root == "dingtalk_" + md5_hex(UNION_ID)[:6]
        assert identity.display_name == "张三"
        assert identity.email == "zhangsan@example.com"
        assert identity.email_is_authoritative is True
        assert identity.external_id == UNION_ID

    def test_synthesizes_email_from_external_id(self):
        """No email and no mobile gives a virtual email with a truncated id."""
        normalizer = make_normalizer(
            allow_virtual_email=True, virtual_email_domain="test.local"
        )
        profile = make_profile(union_id=UNION_ID, email=None, mobile=None)

        identity = normalizer.normalize(profile)

        assert identity.email == "dingtalk_union_abc123def4@test.local"
        assert identity.email_is_authoritative is False

    def test_synthesizes_email_from_mobile(self):
        normalizer = make_normalizer(mobile_virtual_email_domain="dingtalk.mobile")
        profile = make_profile(email=None, mobile="13800000000")

        identity = normalizer.normalize(profile)

        assert identity.email == "13800000000@dingtalk.mobile"
        assert identity.email_is_authoritative is False
        assert identity.mobile == "13800000000"

    def test_missing_email_when_virtual_emails_disabled(self):
        normalizer = make_normalizer(allow_virtual_email=False)
        profile = make_profile(email=None, mobile="13800000000")

        with pytest.raises(IdentityResolutionError) as exc_info:
            normalizer.normalize(profile)

        assert exc_info.value.kind == FailureKind.MISSING_EMAIL

    def test_missing_identity_without_union_or_open_id(self):
        normalizer = make_normalizer()
        profile = make_profile(union_id=None, open_id="  ")

        with pytest.raises(IdentityResolutionError) as exc_info:
            normalizer.normalize(profile)

        assert exc_info.value.kind == FailureKind.MISSING_IDENTITY

    def test_falls_back_to_open_id(self):
        normalizer = make_normalizer()
        profile = make_profile(union_id=None, open_id="open_only_42")

        identity = normalizer.normalize(profile)

        assert identity.external_id == "open_only_42"
        assert identity.open_id == "open_only_42"

    def test_prefers_sanitized_nickname(self):
        normalizer = make_normalizer()
        profile = make_profile(nick="zhang@san#123")

        identity = normalizer.normalize(profile)

        assert identity.username.root == "zhang_san_123"
        # Name still wins for the display name
        assert identity.display_name == "张三"

    def test_short_nickname_uses_template(self):
        normalizer = make_normalizer(username_template="dingtalk_{hash6}")
        profile = make_profile(nick="ab")

        identity = normalizer.normalize(profile)

        assert identity.username.root == "dingtalk_" + md5_hex(UNION_ID)[:6]

    def test_long_nickname_is_truncated(self):
        normalizer = make_normalizer()
        profile = make_profile(nick="a" * 30)

        identity = normalizer.normalize(profile)

        assert identity.username.root == "a" * 20

    def test_template_with_name_placeholder(self):
        """Only the hash survives sanitizing '张三_<hash6>'."""
        normalizer = make_normalizer(username_template="{name}_{hash6}")
        profile = make_profile(nick=None, name="张三")

        identity = normalizer.normalize(profile)

        assert identity.username.root == md5_hex(UNION_ID)[:6]

    def test_template_with_hash8_placeholder(self):
        normalizer = make_normalizer(username_template="dt_{hash8}")
        profile = make_profile(nick=None)

        identity = normalizer.normalize(profile)

        assert identity.username.root == "dt_" + md5_hex(UNION_ID)[:8]

    def test_template_with_uid_placeholder(self):
        normalizer = make_normalizer(username_template="{uid}")
        profile = make_profile(nick=None)

        identity = normalizer.normalize(profile)

        assert identity.username.root == "union_abc123def4"

    def test_unusable_template_uses_hash_fallback(self):
        normalizer = make_normalizer(
            username_template="{name}", fallback_username_prefix="dingtalk"
        )
        profile = make_profile(nick=None, name="张三")

        identity = normalizer.normalize(profile)

        assert identity.username.root == "dingtalk_" + md5_hex(UNION_ID)[:6]

    def test_display_name_falls_back_to_nick_then_username(self):
        normalizer = make_normalizer()

        by_nick = normalizer.normalize(make_profile(name=None, nick="zhangsan"))
        by_username = normalizer.normalize(make_profile(name=None, nick=None))

        assert by_nick.display_name == "zhangsan"
        assert by_username.display_name == by_username.username.root

    def test_carries_organization_id(self):
        normalizer = make_normalizer()

        identity = normalizer.normalize(make_profile(), organization_id="ding_corp")

        assert identity.organization_id == "ding_corp"

    def test_is_deterministic(self):
        """Same profile and settings, same identity."""
        normalizer = make_normalizer()
        profile = make_profile(email=None, nick=None)

        first = normalizer.normalize(profile)
        second = normalizer.normalize(profile)

        assert first == second

    def test_logs_resolved_identity(self):
        log = RecordingLogger()
        normalizer = IdentityNormalizer(DingtalkSettings(), log=log)

        normalizer.normalize(make_profile())

        assert "Identity resolved" in log.messages("info")


class TestUsernameCandidates:
    """Tests for IdentityNormalizer.username_candidates()."""

    def test_numbered_candidates_then_fallback(self):
        normalizer = make_normalizer(fallback_username_prefix="dingtalk")
        identity = normalizer.normalize(make_profile(nick="zhangsan"))

        candidates = [c.root for c in normalizer.username_candidates(identity)]

        assert candidates[0] == "zhangsan"
        assert candidates[1:10] == [f"zhangsan{i}" for i in range(1, 10)]
        assert candidates[-1] == "dingtalk_" + md5_hex(UNION_ID)[:6]

    def test_numbered_candidates_stay_within_length(self):
        normalizer = make_normalizer()
        identity = normalizer.normalize(make_profile(nick="a" * 20))

        candidates = normalizer.username_candidates(identity)

        assert candidates[1].root == "a" * 19 + "1"
        assert all(len(c.root) <= 20 for c in candidates)
