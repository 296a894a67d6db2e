import re

import bcrypt

PASSWORD_MIN_LENGTH = 8
PASSWORD_RULES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[!@#$%^&*(),.?\":{}|<>]"),
)


class EncryptionDec:
    """
    Password hashing for administrator accounts.

    Parameters
    ----------
    rounds : int
        bcrypt cost factor used for new hashes.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_password(self, text: str) -> str:
        """Return the bcrypt hash of ``text`` as a UTF-8 string, salted per call."""
        digest = bcrypt.hashpw(text.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        return digest.decode("utf-8")

    def check_passwords(self, plain_text: str, passwd: str | None) -> bool:
        """
        Compare a login attempt with a stored hash.

        A missing or non-bcrypt stored value never matches.
        """
        if not passwd:
            return False
        try:
            return bcrypt.checkpw(plain_text.encode("utf-8"), passwd.encode("utf-8"))
        except ValueError:
            return False

    def is_valid_password(self, password: str) -> bool:
        """
        Admin password policy: at least ``PASSWORD_MIN_LENGTH`` characters with a
        lowercase letter, an uppercase letter, a digit and one of ``!@#$%^&*(),.?":{}|<>``.
        """
        if len(password) < PASSWORD_MIN_LENGTH:
            return False
        return all(rule.search(password) for rule in PASSWORD_RULES)
