"""
Cryptographic helpers shared by admin tasks.

Thin wrappers over Django's password hashers so every task hashes and checks
passwords exactly like the main application does.
"""
from django.contrib.auth.hashers import check_password, make_password


def hash_password(plaintext: str) -> str:
    return make_password(plaintext)


def verify_password(plaintext: str, hashed: str) -> bool:
    return check_password(plaintext, hashed)
