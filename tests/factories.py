"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    batch = BatchFactory.create(sport_id=sport.id, max_students=1)
    db_session.add(batch)
    await db_session.commit()
"""

import uuid
from datetime import date, datetime, timedelta, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


def _unique_phone() -> str:
    return f"+9198{uuid.uuid4().int % 10**8:08d}"


# ---------------------------------------------------------------------------
# Members Service
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import User

        defaults = {
            "id": _uuid(),
            "email": _unique_email(),
            "phone": _unique_phone(),
            "name": "Test User",
            "deleted": False,
        }
        defaults.update(overrides)
        return User(**defaults)


class ProfileFactory:
    @staticmethod
    def create(user_id=None, **overrides):
        from services.members_service.models import (
            Profile,
            Role,
            SubscriptionStatus,
        )

        user_id = user_id or _uuid()
        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "first_name": "Test",
            "last_name": "Member",
            "email": _unique_email(),
            "phone": _unique_phone(),
            "role": Role.STUDENT,
            "session_id": f"{user_id}_{uuid.uuid4().hex[:16]}",
            "is_active": True,
            "subscription_status": SubscriptionStatus.PENDING,
            "total_points": 0,
            "level": 1,
        }
        defaults.update(overrides)
        return Profile(**defaults)


class RewardFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import Reward, RewardType

        defaults = {
            "id": _uuid(),
            "name": "Ten Sessions",
            "type": RewardType.MILESTONE,
            "points": 100,
            "description": "Attended ten sessions",
            "is_active": True,
        }
        defaults.update(overrides)
        return Reward(**defaults)


# ---------------------------------------------------------------------------
# Academy Service
# ---------------------------------------------------------------------------


class SportFactory:
    @staticmethod
    def create(**overrides):
        from services.academy_service.models import Sport

        defaults = {
            "id": _uuid(),
            "name": "Football",
            "description": "Outdoor football coaching",
            "is_active": True,
            "max_students_per_batch": 20,
            "price_per_month": 1500.0,
            "equipment": ["boots", "shin guards"],
            "age_groups": ["8-12", "13-16"],
        }
        defaults.update(overrides)
        return Sport(**defaults)


class BatchFactory:
    @staticmethod
    def create(sport_id=None, **overrides):
        from services.academy_service.models import Batch, BatchLevel

        defaults = {
            "id": _uuid(),
            "name": "Morning Juniors",
            "sport_id": sport_id or _uuid(),
            "coach_id": None,
            "schedule": {
                "days": ["monday", "wednesday"],
                "start_time": "07:00",
                "end_time": "08:30",
            },
            "max_students": 10,
            "current_students": 0,
            "age_group": "8-12",
            "level": BatchLevel.BEGINNER,
            "venue": "Main Ground",
            "is_active": True,
            "start_date": date.today(),
        }
        defaults.update(overrides)
        return Batch(**defaults)


class EnrollmentFactory:
    @staticmethod
    def create(user_id=None, batch_id=None, sport_id=None, **overrides):
        from services.academy_service.models import (
            Enrollment,
            EnrollmentStatus,
            PaymentStatus,
        )

        defaults = {
            "id": _uuid(),
            "user_id": user_id or _uuid(),
            "batch_id": batch_id or _uuid(),
            "sport_id": sport_id or _uuid(),
            "status": EnrollmentStatus.ACTIVE,
            "payment_status": PaymentStatus.PENDING,
        }
        defaults.update(overrides)
        return Enrollment(**defaults)


# ---------------------------------------------------------------------------
# Attendance Service
# ---------------------------------------------------------------------------


class AttendanceSessionFactory:
    @staticmethod
    def create(batch_id=None, coach_id=None, **overrides):
        from services.attendance_service.models import AttendanceSession

        defaults = {
            "id": _uuid(),
            "batch_id": batch_id or _uuid(),
            "coach_id": coach_id or _uuid(),
            "date": date.today(),
            "code": uuid.uuid4().hex[:6].upper(),
            "is_active": True,
            "expires_at": _now() + timedelta(minutes=30),
        }
        defaults.update(overrides)
        return AttendanceSession(**defaults)


# ---------------------------------------------------------------------------
# Payments Service
# ---------------------------------------------------------------------------


class PaymentFactory:
    @staticmethod
    def create(user_id=None, enrollment_id=None, **overrides):
        from services.payments_service.models import Payment, PaymentStatus

        defaults = {
            "id": _uuid(),
            "user_id": user_id or _uuid(),
            "enrollment_id": enrollment_id or _uuid(),
            "amount": 1500.0,
            "status": PaymentStatus.PENDING,
            "method": "razorpay",
            "refunded": False,
        }
        defaults.update(overrides)
        return Payment(**defaults)


# ---------------------------------------------------------------------------
# Store Service
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product

        defaults = {
            "id": _uuid(),
            "name": "Academy Jersey",
            "description": "Official training jersey",
            "price": 800.0,
            "stock": 5,
            "is_active": True,
        }
        defaults.update(overrides)
        return Product(**defaults)


# ---------------------------------------------------------------------------
# Communications Service
# ---------------------------------------------------------------------------


class OtpFactory:
    @staticmethod
    def create(**overrides):
        from services.communications_service.models import Otp, OtpMethod

        defaults = {
            "id": _uuid(),
            "contact": _unique_phone(),
            "method": OtpMethod.PHONE,
            "code": "123456",
            "expires_at": _now() + timedelta(minutes=5),
            "used": False,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Otp(**defaults)
