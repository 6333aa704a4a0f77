"""
PostgreSQL database connection and models using SQLAlchemy.
"""
from sqlalchemy import create_engine, Column, String, Float, DateTime, Text, Boolean, ForeignKey, Integer
from sqlalchemy.orm import sessionmaker, relationship, declarative_base
from sqlalchemy.sql import func
from risk_tracker.config import get_settings
import uuid
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_url(url: str) -> str:
    # psycopg3 driver for PostgreSQL
    return url.replace("postgresql://", "postgresql+psycopg://")


engine = create_engine(
    _engine_url(settings.database_url),
    echo=settings.debug,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def generate_uuid():
    return str(uuid.uuid4())


# SQLAlchemy Models
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(50), default="user", nullable=False)
    reset_token = Column(String(255), nullable=True)  # bcrypt hash of the emailed token
    reset_token_expiry = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    patients = relationship("Patient", back_populates="user")
    feedback = relationship("Feedback", back_populates="user")


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    bmi = Column(Float, nullable=False)
    insulin = Column(Float, nullable=False)
    pregnancies = Column(Integer, nullable=False)
    glucose = Column(Float, nullable=False)
    blood_pressure = Column(Float, nullable=False)
    skin_thickness = Column(Float, nullable=False)
    diabetes_pedigree_function = Column(Float, nullable=False)
    prediction = Column(Boolean, nullable=False, default=False)
    confidence_percentage = Column(Float, nullable=False, default=0.0)
    model_name = Column(String(100), nullable=True)
    risk_level = Column(String(20), nullable=False)  # Low, Moderate, High, Critical
    recommendation = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="patients")
    notifications = relationship("Notification", back_populates="patient")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("Patient", back_populates="notifications")


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="feedback")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    action = Column(String(100), nullable=False)  # delete_user, delete_patient, update_user_role, export_csv, ...
    details = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")


def init_db():
    """Create all tables."""
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Database tables created successfully!")


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Dependency returning the session factory used by background jobs."""
    return SessionLocal
