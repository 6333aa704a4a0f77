"""
Database initialization script.
Creates tables and an initial admin user.

Usage (from backend/):
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python -m scripts.init_db
"""
import os

from risk_tracker.database import SessionLocal, init_db, User as UserDB
from risk_tracker.models.user import UserRole
from risk_tracker.services.auth_service import AuthService


def init_database():
    """Create tables and the default admin user if it does not exist."""
    print("🔧 Initializing database...")
    init_db()

    email = os.getenv("ADMIN_EMAIL", "admin@risktracker.com")
    password = os.getenv("ADMIN_PASSWORD", "admin12345")  # Change in production!

    db = SessionLocal()
    try:
        print("👤 Checking for admin user...")
        admin = AuthService.get_user_by_email(db, email)
        if admin:
            print("✅ Admin user already exists")
            return

        print("👤 Creating default admin user...")
        db.add(UserDB(
            email=email,
            name="System Administrator",
            role=UserRole.ADMIN.value,
            hashed_password=AuthService.get_password_hash(password),
        ))
        db.commit()
        print(f"✅ Admin user created (email: {email})")
        if "ADMIN_PASSWORD" not in os.environ:
            print("⚠️  IMPORTANT: Change the admin password in production!")
    finally:
        db.close()

    print("✅ Database initialization complete!")


if __name__ == "__main__":
    init_database()
