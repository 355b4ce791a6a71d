"""
One-time passcode verification restricted to the university email domain.
"""

import secrets
import smtplib
from datetime import timedelta
from typing import Dict, Any

from pymongo import ReturnDocument

import database
from config import settings
from emailer import email_service
from exceptions import ValidationError, InternalError
from logging_config import logger
from schemas import Otp

COLLECTION = "otp"


def generate_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def request_otp(email: str) -> Dict[str, Any]:
    """Issue a fresh code for `email`, replacing any pending one, and mail it"""
    email = normalize_email(email)
    domain = settings.ALLOWED_EMAIL_DOMAIN.lower()
    if not email or not email.endswith(domain) or len(email) <= len(domain):
        logger.warning(f"[OTP] Rejected request for {email or '<empty>'}: domain not allowed")
        raise ValidationError(
            f"Please use a valid VIT student email ({settings.ALLOWED_EMAIL_DOMAIN})",
            field="email",
        )

    now = database.utcnow()
    try:
        record = Otp(
            email=email,
            otp=generate_code(),
            created_at=now,
            expires_at=now + timedelta(minutes=settings.OTP_TTL_MINUTES),
        )
    except ValueError:
        raise ValidationError("Invalid email address", field="email")

    doc = record.model_dump(by_alias=True)
    stored = database.get_db()[COLLECTION].find_one_and_update(
        {"email": email},
        {"$set": doc},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )

    try:
        email_service.send_email(
            email,
            "UniArchive Verification Code",
            f"Your verification code is: {record.otp}",
        )
    except (smtplib.SMTPException, OSError):
        raise InternalError("Failed to send OTP")
    logger.info(f"[OTP] Code issued for {email}")
    return stored


def verify_otp(email: str, code: str) -> bool:
    """Consume a matching, unexpired code"""
    email = normalize_email(email)
    code = (code or "").strip()
    if not email or not code:
        raise ValidationError("Invalid or expired OTP")

    record = database.get_db()[COLLECTION].find_one_and_delete({
        "email": email,
        "otp": code,
        "expiresAt": {"$gt": database.utcnow()},
    })
    if not record:
        logger.warning(f"[OTP] Verification failed for {email}")
        raise ValidationError("Invalid or expired OTP")

    logger.info(f"[OTP] Verified {email}")
    return True
