"""
The `crypt` package contains password utilities for administrator accounts.

Contents
--------
- encrypt_decrypt.EncryptionDec
    * bcrypt hashing and verification
    * password complexity policy
"""
