#!/usr/bin/env python3
# tools/invariants_runner.py
#
# Round-trip invariants (property tests) for mcfcodec.
#
# This runner:
# - generates random byte strings and checks decode(encode(b)) == b per alphabet
# - generates random $-free field lists and checks the tokenizer inverse laws
# - generates random McfHash / BcryptHash records and checks both record laws
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import os, sys, random
from typing import Any, Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from mcfcodec import (
    ALPHABETS,
    BcryptHash,
    Hashes,
    McfHash,
    b64decode,
    b64encode,
    bind_decode,
    bind_encode,
    join_fields,
    split_fields,
)

SEED = int(os.environ.get("MCFCODEC_SEED", "1337"))
TRIALS = int(os.environ.get("MCFCODEC_TRIALS", "2000"))
MAX_BYTES = int(os.environ.get("MCFCODEC_MAX_BYTES", "64"))
MAX_FIELDS = int(os.environ.get("MCFCODEC_MAX_FIELDS", "8"))

random.seed(SEED)

FIELD_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789./+=,-"
KEY_CHARS = "abcdefghijklmnopqrstuvwxyz"


def rand_bytes(nmax: int = MAX_BYTES) -> bytes:
    return bytes(random.getrandbits(8) for _ in range(random.randint(0, nmax)))


def rand_text(chars: str, nmin: int, nmax: int) -> str:
    return "".join(random.choice(chars) for _ in range(random.randint(nmin, nmax)))


def rand_mcf_hash() -> McfHash:
    params: Dict[str, str] = {}
    for _ in range(random.randint(0, 4)):
        params[rand_text(KEY_CHARS, 1, 4)] = str(random.randint(0, 1 << 20))
    return McfHash(
        algorithm=random.choice(list(Hashes)),
        parameters=params,
        salt=rand_bytes(32),
        hash=rand_bytes(),
    )


def rand_bcrypt_hash() -> BcryptHash:
    return BcryptHash(
        algorithm=random.choice([Hashes.BCRYPT_A, Hashes.BCRYPT_B, Hashes.BCRYPT_Y]),
        cost=random.randint(4, 31),
        salthash=(bytes(random.getrandbits(8) for _ in range(16)), rand_bytes(23)),
    )


def fail(label: str, ctx: Dict[str, Any]) -> None:
    print("INVARIANT VIOLATION:", label)
    print("CTX:", repr(ctx)[:4000])
    raise SystemExit(1)


def check_crypt64(i: int) -> None:
    data = rand_bytes()
    for name, alphabet in ALPHABETS.items():
        text = b64encode(data, alphabet)
        if "=" in text or "$" in text:
            fail("encode emitted padding or delimiter", {"round": i, "alphabet": name, "text": text})
        if b64decode(text, alphabet) != data:
            fail("b64decode(b64encode(b)) != b", {"round": i, "alphabet": name, "data": data.hex()})


def check_tokenizer(i: int) -> None:
    fields: List[str] = [rand_text(FIELD_CHARS, 0, 12) for _ in range(random.randint(1, MAX_FIELDS))]
    joined = join_fields(fields)
    if split_fields(joined) != fields:
        fail("split(join(fs)) != fs", {"round": i, "fields": fields})
    if join_fields(split_fields(joined)) != joined:
        fail("join(split(s)) != s", {"round": i, "text": joined})


def check_records(i: int) -> None:
    for record in (rand_mcf_hash(), rand_bcrypt_hash()):
        text = bind_encode(record)
        back = bind_decode(text, type(record))
        if back != record:
            fail("bind_decode(bind_encode(r)) != r", {"round": i, "record": record, "text": text})
        if bind_encode(back) != text:
            fail("bind_encode(bind_decode(s)) != s", {"round": i, "text": text})


def main() -> int:
    for i in range(TRIALS):
        check_crypt64(i)
        check_tokenizer(i)
        check_records(i)
    print(f"OK: invariants trials={TRIALS} seed={SEED}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
