from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(stored_hash: str, provided_password: str) -> bool:
    """Check a password against its stored hash; malformed hashes never match."""
    if not stored_hash or not provided_password:
        return False

    try:
        return check_password_hash(stored_hash, provided_password)
    except ValueError:
        return False
