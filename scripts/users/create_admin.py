"""Create (or promote) an admin account and print an access token for it.

Usage:
    ENV_FILE=.env.prod python -m scripts.users.create_admin admin@playgram.app
"""

import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load env file selected for the run (defaults to .env)
# MUST be done before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

from sqlalchemy import select  # noqa: E402

from libs.auth.tokens import create_access_token  # noqa: E402
from libs.db.config import AsyncSessionLocal  # noqa: E402
from services.members_service.models import (  # noqa: E402
    Profile,
    Role,
    SubscriptionStatus,
    User,
)
from services.members_service.services.profile_ops import new_session_id  # noqa: E402


async def create_admin_user(email: str) -> None:
    print("🚀 Starting Admin User Creation Script")

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalars().first()
        if user is None:
            user = User(email=email, name="Admin User")
            db.add(user)
            await db.flush()
            print(f"✅ Created user {user.id}")
        else:
            user.deleted = False
            print(f"⚠️ User already exists: {user.id}")

        result = await db.execute(select(Profile).where(Profile.user_id == user.id))
        profile = result.scalar_one_or_none()
        if profile is None:
            db.add(
                Profile(
                    user_id=user.id,
                    first_name="Admin",
                    last_name="User",
                    email=email,
                    role=Role.ADMIN,
                    session_id=new_session_id(user.id),
                    is_active=True,
                    subscription_status=SubscriptionStatus.ACTIVE,
                    total_points=0,
                    level=1,
                )
            )
            print("✅ Created admin profile")
        else:
            profile.role = Role.ADMIN
            profile.is_active = True
            print("✅ Promoted existing profile to admin")

        await db.commit()

    token = create_access_token(user.id, email=email)
    print("\n🎉 Admin ready. Access token:")
    print(token)


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m scripts.users.create_admin <email>")
        sys.exit(1)
    asyncio.run(create_admin_user(sys.argv[1]))
