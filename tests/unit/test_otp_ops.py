"""Unit tests for OTP sign-in and password reset.

Outbound HTTP (WhatsApp, SendGrid, identity admin API) goes through
httpx.MockTransport so every request can be inspected.
"""

import json
from datetime import timedelta

import httpx
import pytest
from jose import jwt
from libs.auth.identity import IdentityAdminClient
from libs.common.config import Settings, get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import Conflict, Forbidden, UpstreamFailure
from libs.common.notifications import NotificationClient
from services.communications_service.models import Otp, OtpMethod, PasswordReset
from services.communications_service.services.otp_ops import request_otp, verify_otp
from services.communications_service.services.password_ops import (
    request_password_reset,
    reset_password,
)
from services.members_service.models import Profile, Role, User
from sqlalchemy import func, select
from tests.factories import OtpFactory, UserFactory

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite+aiosqlite://",
        "NOTIFICATION_RETRY_BACKOFF_SECONDS": 0,
        "IDENTITY_ADMIN_URL": "https://identity.test",
    }
    values.update(overrides)
    return Settings(**values)


class Recorder:
    """Mock transport handler that records requests and replays a status."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={})

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def _notifier(recorder: Recorder) -> NotificationClient:
    return NotificationClient(_settings(), transport=httpx.MockTransport(recorder))


def _sent_code(recorder: Recorder) -> str:
    template = recorder.payload()["template"]
    return template["components"][0]["parameters"][0]["text"]


# ---------------------------------------------------------------------------
# OTP
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_otp_sign_in_creates_user_with_student_profile(db_session):
    recorder = Recorder()
    phone = "+919812345678"

    await request_otp(
        db_session, contact=phone, method=OtpMethod.PHONE, notifier=_notifier(recorder)
    )
    code = _sent_code(recorder)
    assert recorder.payload()["to"] == phone

    result = await verify_otp(
        db_session, contact=phone, code=code, method=OtpMethod.PHONE
    )

    assert result["is_new_user"] is True
    assert result["token_type"] == "bearer"
    settings = get_settings()
    claims = jwt.decode(
        result["access_token"],
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
    )
    assert claims["sub"] == str(result["user_id"])

    profile = await db_session.scalar(
        select(Profile).where(Profile.user_id == result["user_id"])
    )
    assert profile.role == Role.STUDENT
    assert profile.phone == phone


@pytest.mark.asyncio
@pytest.mark.unit
async def test_otp_is_single_use_and_signs_in_existing_user(db_session):
    user = UserFactory.create()
    db_session.add(user)
    await db_session.commit()
    recorder = Recorder()

    await request_otp(
        db_session,
        contact=user.email,
        method=OtpMethod.EMAIL,
        notifier=_notifier(recorder),
    )
    body = recorder.payload()["content"][0]["value"]
    code = body.rsplit(" ", 1)[-1]

    result = await verify_otp(
        db_session, contact=user.email, code=code, method=OtpMethod.EMAIL
    )
    assert result["is_new_user"] is False
    assert result["user_id"] == user.id

    with pytest.raises(Conflict):
        await verify_otp(
            db_session, contact=user.email, code=code, method=OtpMethod.EMAIL
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_wrong_or_expired_code_is_rejected(db_session):
    fresh = OtpFactory.create(contact="+919800000001", code="111111")
    stale = OtpFactory.create(
        contact="+919800000002",
        code="222222",
        expires_at=utc_now() - timedelta(seconds=1),
    )
    db_session.add_all([fresh, stale])
    await db_session.commit()

    with pytest.raises(Conflict):
        await verify_otp(
            db_session, contact="+919800000001", code="999999", method=OtpMethod.PHONE
        )
    with pytest.raises(Conflict):
        await verify_otp(
            db_session,
            contact="+919800000001",
            code="\u0661\u0661\u0661\u0661\u0661\u0661",
            method=OtpMethod.PHONE,
        )
    with pytest.raises(Conflict):
        await verify_otp(
            db_session, contact="+919800000002", code="222222", method=OtpMethod.PHONE
        )
    users = await db_session.scalar(select(func.count(User.id)))
    assert users == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_only_newest_code_counts(db_session):
    older = OtpFactory.create(
        contact="+919800000003",
        code="333333",
        created_at=utc_now() - timedelta(minutes=1),
    )
    newer = OtpFactory.create(contact="+919800000003", code="444444")
    db_session.add_all([older, newer])
    await db_session.commit()

    with pytest.raises(Conflict):
        await verify_otp(
            db_session, contact="+919800000003", code="333333", method=OtpMethod.PHONE
        )
    result = await verify_otp(
        db_session, contact="+919800000003", code="444444", method=OtpMethod.PHONE
    )
    assert result["is_new_user"] is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_deleted_account_cannot_sign_in(db_session):
    user = UserFactory.create(deleted=True)
    otp = OtpFactory.create(contact=user.phone, code="555555")
    db_session.add_all([user, otp])
    await db_session.commit()

    with pytest.raises(Forbidden):
        await verify_otp(
            db_session, contact=user.phone, code="555555", method=OtpMethod.PHONE
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failed_delivery_keeps_no_code(db_session):
    recorder = Recorder(status_code=400)

    with pytest.raises(UpstreamFailure):
        await request_otp(
            db_session,
            contact="+919800000004",
            method=OtpMethod.PHONE,
            notifier=_notifier(recorder),
        )

    assert len(recorder.requests) == 1
    assert await db_session.scalar(select(func.count(Otp.id))) == 0


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_password_reset_round_trip(db_session):
    user = UserFactory.create(email="parent@example.com")
    db_session.add(user)
    await db_session.commit()
    mail = Recorder()
    identity = Recorder()

    await request_password_reset(
        db_session,
        email="parent@example.com",
        reset_url_base="https://playgram.app/reset",
        notifier=_notifier(mail),
    )
    reset = await db_session.scalar(select(PasswordReset))
    body = mail.payload()["content"][0]["value"]
    assert f"https://playgram.app/reset?token={reset.token}" in body

    client = IdentityAdminClient(
        _settings(), transport=httpx.MockTransport(identity)
    )
    await reset_password(
        db_session, token=reset.token, new_password="n3w-passw0rd", identity=client
    )

    request = identity.requests[0]
    assert request.method == "PUT"
    assert str(request.url) == f"https://identity.test/admin/users/{user.id}"
    assert identity.payload() == {"password": "n3w-passw0rd"}

    with pytest.raises(Conflict, match="Invalid or expired reset token"):
        await reset_password(
            db_session, token=reset.token, new_password="again-123", identity=client
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reset_request_for_unknown_email_is_silent(db_session):
    mail = Recorder()

    await request_password_reset(
        db_session,
        email="nobody@example.com",
        reset_url_base="https://playgram.app/reset",
        notifier=_notifier(mail),
    )

    assert mail.requests == []
    assert await db_session.scalar(select(func.count(PasswordReset.id))) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_identity_failure_leaves_token_usable(db_session):
    user = UserFactory.create(email="coach@example.com")
    reset = PasswordReset(
        email="coach@example.com",
        token="a" * 64,
        expires_at=utc_now() + timedelta(minutes=10),
        used=False,
    )
    db_session.add_all([user, reset])
    await db_session.commit()
    failing = IdentityAdminClient(
        _settings(), transport=httpx.MockTransport(Recorder(status_code=500))
    )

    with pytest.raises(UpstreamFailure):
        await reset_password(
            db_session, token="a" * 64, new_password="n3w-passw0rd", identity=failing
        )

    used = await db_session.scalar(
        select(PasswordReset.used).where(PasswordReset.token == "a" * 64)
    )
    assert used is False
