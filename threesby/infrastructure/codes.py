"""Invite Code Generator — cryptographically random codes from an unambiguous alphabet.

Invariants:
    - Codes are upper-case, fixed length, drawn from core.invite_rules.CODE_ALPHABET
    - Uniqueness is NOT guaranteed here; the unique index on invite_codes.code is authoritative
"""

import secrets

from threesby.core.invite_rules import CODE_ALPHABET


class SecretsCodeGenerator:
    """Generates invite codes with the `secrets` CSPRNG."""

    def __init__(self, length: int = 8):
        self.length = length

    def generate(self) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(self.length))
