from dataclasses import dataclass


@dataclass
class User:
    username: str
    password: str       # HMAC-SHA-256 digest, base64
