"""Tests for the ready-made records: Hashes, McfHash, BcryptHash."""

from __future__ import annotations

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mcfcodec import (
    BCRYPT,
    ERR_FIELD_COUNT,
    ERR_FIELD_DECODE,
    ERR_TRAILING_FIELDS,
    ERR_UNEXPECTED_IDENTIFIER,
    STANDARD,
    BcryptHash,
    FieldEncodeError,
    Hashes,
    McfError,
    McfHash,
    b64decode,
    b64encode,
    bind_decode,
    bind_encode,
    decode_first,
)

ARGON_HASH = ("$argon2i$m=262144,p=1,t=2$c29tZXNhbHQ"
              "$Pmiaqj0op3zyvHKlGsUxZnYXURgvHuKS4/Z3p9pMJGc")
BCRYPT_HASH = "$2a$10$ckjEeyTD6estWyoofn4EROM9Ik2PqVcfcrepX.uGp6.aqRdCMN/Oe"


class TestHashes(unittest.TestCase):
    def test_from_id(self):
        self.assertIs(Hashes.from_id("2a"), Hashes.BCRYPT_A)
        self.assertIs(Hashes.from_id("argon2id"), Hashes.ARGON2ID)
        self.assertIsNone(Hashes.from_id("md6"))

    def test_id(self):
        self.assertEqual(Hashes.SHA512_CRYPT.id, "6")
        self.assertEqual(Hashes.PBKDF2_SHA256.id, "pbkdf2-sha256")

    def test_ids_are_delimiter_free(self):
        for member in Hashes:
            with self.subTest(member=member):
                self.assertNotIn("$", member.id)


class TestMcfHash(unittest.TestCase):
    def test_decode_argon2(self):
        h = bind_decode(ARGON_HASH, McfHash)
        self.assertIs(h.algorithm, Hashes.ARGON2I)
        self.assertEqual(h.parameters, {"m": "262144", "p": "1", "t": "2"})
        self.assertEqual(h.salt, b"somesalt")
        self.assertEqual(len(h.hash), 32)

    def test_round_trip(self):
        self.assertEqual(bind_encode(bind_decode(ARGON_HASH, McfHash)), ARGON_HASH)

    def test_parameter_order_preserved(self):
        text = "$scrypt$r=8,ln=16,p=1$c29tZXNhbHQ$c29tZXNhbHQ"
        h = bind_decode(text, McfHash)
        self.assertEqual(list(h.parameters), ["r", "ln", "p"])
        self.assertEqual(bind_encode(h), text)

    def test_empty_parameters(self):
        h = bind_decode("$scrypt$$c29tZXNhbHQ$c29tZXNhbHQ", McfHash)
        self.assertEqual(h.parameters, {})

    def test_unknown_identifier(self):
        with self.assertRaises(McfError) as ctx:
            bind_decode("$md6$m=1$c29tZXNhbHQ$c29tZXNhbHQ", McfHash)
        self.assertEqual(ctx.exception.code, ERR_UNEXPECTED_IDENTIFIER)

    def test_bcrypt_string_has_too_few_fields(self):
        with self.assertRaises(McfError) as ctx:
            bind_decode(BCRYPT_HASH, McfHash)
        self.assertEqual(ctx.exception.code, ERR_FIELD_COUNT)

    def test_crypt_alphabet_salt_rejected(self):
        with self.assertRaises(McfError) as ctx:
            bind_decode("$argon2i$m=1$c29t.ZXNh$c29tZXNhbHQ", McfHash)
        self.assertEqual(ctx.exception.code, ERR_FIELD_DECODE)

    def test_encode_from_scratch(self):
        h = McfHash(Hashes.PBKDF2_SHA256, {"rounds": "29000"}, b"Man", b"Ma")
        self.assertEqual(bind_encode(h), "$pbkdf2-sha256$rounds=29000$TWFu$TWE")


class TestBcryptHash(unittest.TestCase):
    def test_decode(self):
        h = bind_decode(BCRYPT_HASH, BcryptHash)
        self.assertIs(h.algorithm, Hashes.BCRYPT_A)
        self.assertEqual(h.cost, 10)
        self.assertEqual(len(h.salt), 16)
        self.assertEqual(len(h.checksum), 23)
        self.assertEqual(h.salt, b64decode("ckjEeyTD6estWyoofn4ERO", BCRYPT))

    def test_round_trip(self):
        self.assertEqual(bind_encode(bind_decode(BCRYPT_HASH, BcryptHash)), BCRYPT_HASH)

    def test_low_cost_is_zero_padded(self):
        text = BCRYPT_HASH.replace("$2a$10$", "$2b$05$")
        h = bind_decode(text, BcryptHash)
        self.assertEqual(h.cost, 5)
        self.assertIs(h.algorithm, Hashes.BCRYPT_B)
        self.assertEqual(bind_encode(h), text)

    def test_unpadded_cost_rejected(self):
        with self.assertRaises(McfError) as ctx:
            bind_decode(BCRYPT_HASH.replace("$10$", "$5$"), BcryptHash)
        self.assertEqual(ctx.exception.code, ERR_FIELD_DECODE)

    def test_short_joined_field(self):
        with self.assertRaises(McfError) as ctx:
            bind_decode("$2a$10$ckjEeyTD6est", BcryptHash)
        self.assertEqual(ctx.exception.code, ERR_FIELD_DECODE)

    def test_argon_string_has_extra_fields(self):
        with self.assertRaises(McfError) as ctx:
            bind_decode(ARGON_HASH, BcryptHash)
        self.assertEqual(ctx.exception.code, ERR_TRAILING_FIELDS)

    def test_salt_must_fill_its_slot(self):
        h = BcryptHash(Hashes.BCRYPT_B, 12, (b"short", b"\x00" * 23))
        with self.assertRaises(FieldEncodeError) as ctx:
            bind_encode(h)
        self.assertEqual(ctx.exception.field_name, "salthash")

    def test_to_mcf_hash(self):
        h = bind_decode(BCRYPT_HASH, BcryptHash).to_mcf_hash()
        self.assertIs(h.algorithm, Hashes.BCRYPT_A)
        self.assertEqual(h.parameters, {"cost": "10"})
        self.assertEqual(
            bind_encode(h),
            "$2a$cost=10${}${}".format(b64encode(h.salt, STANDARD), b64encode(h.hash, STANDARD)),
        )


class TestTrialDecode(unittest.TestCase):
    def test_argon_then_bcrypt(self):
        self.assertIsInstance(decode_first(ARGON_HASH, McfHash, BcryptHash), McfHash)
        self.assertIsInstance(decode_first(BCRYPT_HASH, McfHash, BcryptHash), BcryptHash)


if __name__ == "__main__":
    unittest.main()
