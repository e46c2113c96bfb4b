"""Create or promote an admin account.

Usage: python -m scripts.create_admin <email> <name> <password>
"""
import sys

from sqlalchemy import select

from app.core.database import SessionLocal
from app.core.security import hash_password
from app.models.user import User, UserRole

if len(sys.argv) != 4:
    print(__doc__.strip().splitlines()[-1])
    sys.exit(1)

email, name, password = sys.argv[1].lower(), sys.argv[2], sys.argv[3]

with SessionLocal() as session:
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()

    if user:
        user.role = UserRole.ADMIN
        user.is_active = True
        print(f"Promoted existing user {email} to admin")
    else:
        session.add(User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
            is_active=True,
            groups=[],
        ))
        print(f"Created admin {email}")

    session.commit()
