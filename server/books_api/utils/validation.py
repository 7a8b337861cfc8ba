import re

from email_validator import validate_email, EmailNotValidError

# 密码规则按顺序检查，返回第一条未通过规则的提示
PASSWORD_MIN_LENGTH = 8
_PASSWORD_RULES = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
]


def is_valid_email(email: str) -> bool:
    """仅校验语法，不做 DNS 投递检查"""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_password_strength(password: str) -> str | None:
    """密码强度校验：通过返回 None，否则返回错误提示"""
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            return message
    return None
