"""Known MCF identifiers and ready-made hash records.

Identifier list source: https://passlib.readthedocs.io/en/stable/modular_crypt_format.html

    >>> from mcfcodec import bind_decode
    >>> from mcfcodec import McfHash
    >>> h = bind_decode("$argon2i$m=262144,p=1,t=2$c29tZXNhbHQ"
    ...                 "$Pmiaqj0op3zyvHKlGsUxZnYXURgvHuKS4/Z3p9pMJGc", McfHash)
    >>> h.algorithm, h.parameters["m"], h.salt
    (<Hashes.ARGON2I: 'argon2i'>, '262144', b'somesalt')
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Annotated, Dict, Optional, Tuple

from ._binder import Binary, Identifier, Joined, Width
from ._constants import BCRYPT_SALT_SYMBOLS
from ._crypt64 import BCRYPT, STANDARD


class Hashes(enum.Enum):
    MD5_CRYPT = "1"
    BCRYPT = "2"
    BCRYPT_A = "2a"
    BCRYPT_X = "2x"
    BCRYPT_Y = "2y"
    BCRYPT_B = "2b"
    BCRYPT_MCF = "2y-mcf"
    BSD_NT_HASH = "3"
    SHA256_CRYPT = "5"
    SHA512_CRYPT = "6"
    SUN_MD5_CRYPT = "md5"
    SHA1_CRYPT = "sha1"
    APR_MD5_CRYPT = "apr1"            # Apache htdigest files
    ARGON2I = "argon2i"
    ARGON2D = "argon2d"
    ARGON2ID = "argon2id"
    BCRYPT_SHA256 = "bcrypt-sha256"   # passlib-specific
    PHPASS_P = "P"                    # PHPass-based applications
    PHPASS_H = "H"
    PBKDF2_SHA1 = "pbkdf2"            # passlib-specific
    PBKDF2_SHA256 = "pbkdf2-sha256"
    PBKDF2_SHA512 = "pbkdf2-sha512"
    SCRAM = "scram"
    CTA_PBKDF2_SHA1 = "p5k2"
    SCRYPT = "scrypt"
    SCRYPT_MCF = "scrypt-mcf"
    HMAC = "hmac"
    CUSTOM = "custom"                 # anything else; details go in parameters

    @property
    def id(self) -> str:
        return self.value

    @classmethod
    def from_id(cls, ident: str) -> Optional["Hashes"]:
        """Return the member for an identifier, or None if it is unknown."""
        try:
            return cls(ident)
        except ValueError:
            return None


@dataclasses.dataclass
class McfHash:
    """A generic PHC-style hash: identifier, parameter list, salt, hash.

    Parameter values are kept as text; what they mean depends on the
    algorithm.
    """

    algorithm: Annotated[Hashes, Identifier()]
    parameters: Dict[str, str]
    salt: Annotated[bytes, Binary(STANDARD)]
    hash: Annotated[bytes, Binary(STANDARD)]


@dataclasses.dataclass
class BcryptHash:
    """Legacy bcrypt layout: "$2a$10$" + 22-symbol salt + 31-symbol checksum."""

    algorithm: Annotated[Hashes, Identifier()]
    cost: Annotated[int, Width(2)]
    salthash: Annotated[Tuple[bytes, bytes], Joined(BCRYPT, BCRYPT_SALT_SYMBOLS)]

    @property
    def salt(self) -> bytes:
        return self.salthash[0]

    @property
    def checksum(self) -> bytes:
        return self.salthash[1]

    def to_mcf_hash(self) -> McfHash:
        return McfHash(
            algorithm=self.algorithm,
            parameters={"cost": str(self.cost)},
            salt=self.salthash[0],
            hash=self.salthash[1],
        )
