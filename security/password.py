import bcrypt
from flask import current_app

def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    # fewer rounds under TESTING keeps the suite fast
    rounds = 4 if current_app.config.get("TESTING") else 12
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")

def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8")
        )
    except ValueError:
        # malformed stored hash
        return False

def validate_password(pw) -> tuple[bool, list[str]]:
    if not isinstance(pw, str):
        return False, ["Password must be a string"]

    min_len = int(current_app.config.get("PASSWORD_MIN_LEN", 8))
    max_len = int(current_app.config.get("PASSWORD_MAX_LEN", 128))

    errors = []
    if len(pw) < min_len:
        errors.append(f"Password must be at least {min_len} characters")
    if len(pw) > max_len:
        errors.append(f"Password must be at most {max_len} characters")
    if not any(c.isalpha() for c in pw) or not any(c.isdigit() for c in pw):
        errors.append("Password must include letters and numbers")
    return (len(errors) == 0), errors
