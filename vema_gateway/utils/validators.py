"""Input format validation for member-supplied details"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# 0821234567, +27821234567, 082 123 4567
SA_PHONE_PATTERN = re.compile(r"^(\+27|0)[6-8][0-9]{8}$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def is_valid_sa_phone_number(phone: str) -> bool:
    """South African mobile number, spaces ignored"""
    return bool(SA_PHONE_PATTERN.match(re.sub(r"\s", "", phone)))


def is_valid_sa_id_number(id_number: str) -> bool:
    """13-digit South African ID number with a valid Luhn check digit"""
    if not re.fullmatch(r"\d{13}", id_number):
        return False

    total = 0
    for position, char in enumerate(reversed(id_number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit

    return total % 10 == 0


def password_strength_error(password: str) -> Optional[str]:
    """Return the first unmet password rule, or None if the password is strong"""
    if len(password) < 8:
        return "Password must be at least 8 characters long"
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[0-9]", password):
        return "Password must contain at least one number"
    return None
