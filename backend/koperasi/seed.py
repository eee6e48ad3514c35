import os
from sqlalchemy import select
from koperasi.db.session import SessionLocal
from koperasi.models.user import User
from koperasi.core.security import hash_password
from koperasi.utils.timezone import utcnow

def main():
    username = os.environ.get("SEED_ADMIN_USER", "admin")
    password = os.environ.get("SEED_ADMIN_PASS", "admin123")

    db = SessionLocal()
    try:
        existing = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if existing:
            return
        db.add(
            User(
                username=username,
                password_hash=hash_password(password),
                name="Administrator",
                role="admin",
                status="active",
                verified_at=utcnow(),
            )
        )
        db.commit()
    finally:
        db.close()

if __name__ == "__main__":
    main()
