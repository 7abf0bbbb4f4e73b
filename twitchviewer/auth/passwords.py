from werkzeug.security import check_password_hash, generate_password_hash

# scrypt is memory-hard; Werkzeug adds a random per-hash salt
HASH_METHOD = 'scrypt'


def hash_password(password):
    """Hashes a password using Werkzeug's scrypt method."""
    if not password:
        raise ValueError("Password must not be empty")
    return generate_password_hash(password, method=HASH_METHOD)


def verify_password(password_hash, password):
    """Checks a plain password against a stored hash in constant time."""
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)
