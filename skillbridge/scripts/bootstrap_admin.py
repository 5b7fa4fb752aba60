import os
import re
import sys
from datetime import timedelta
from typing import Optional

from skillbridge.database import Base, SessionLocal, engine
from skillbridge.models.user import User, UserRole
from skillbridge.utils.security import create_access_token


CONFIRM_PHRASE = "CREATE-FIRST-ADMIN"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ADMIN_TOKEN_HOURS = 12


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _required_env(key: str) -> str:
    value = os.getenv(key, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {key}")
    return value


def bootstrap_admin() -> int:
    """
    Create the first admin account and print a short-lived bearer token for it.

    Guarded by ENABLE_ADMIN_BOOTSTRAP=true and
    ADMIN_BOOTSTRAP_CONFIRM=CREATE-FIRST-ADMIN.
    """
    try:
        if not _is_truthy(os.getenv("ENABLE_ADMIN_BOOTSTRAP")):
            raise ValueError(
                "Bootstrap disabled. Set ENABLE_ADMIN_BOOTSTRAP=true to run."
            )
        confirm = _required_env("ADMIN_BOOTSTRAP_CONFIRM")
        if confirm != CONFIRM_PHRASE:
            raise ValueError(
                f"Invalid ADMIN_BOOTSTRAP_CONFIRM. Expected exact phrase: {CONFIRM_PHRASE}"
            )

        name = _required_env("ADMIN_NAME")
        email = _required_env("ADMIN_EMAIL").lower()
        if not EMAIL_RE.match(email):
            raise ValueError("ADMIN_EMAIL is not a valid email format.")

        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            if db.query(User).filter(User.role == UserRole.ADMIN).count() > 0:
                raise ValueError(
                    "Admin bootstrap blocked: an admin already exists. "
                    "This command is one-time for first admin creation."
                )
            if db.query(User).filter(User.email == email).first():
                raise ValueError("ADMIN_EMAIL is already registered.")

            user = User(name=name, email=email, role=UserRole.ADMIN, is_active=True)
            db.add(user)
            db.commit()

            token = create_access_token(
                {"sub": user.id, "role": UserRole.ADMIN},
                expires_delta=timedelta(hours=ADMIN_TOKEN_HOURS),
            )
            print(f"Admin created successfully: {email} (id={user.id})")
            print(f"Bearer token (valid {ADMIN_TOKEN_HOURS}h): {token}")
            return 0
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
    except Exception as exc:
        print(f"Admin bootstrap failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(bootstrap_admin())
