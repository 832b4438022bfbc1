from .format_config import CHUNK_SIZE, KEYSTREAM_PERIOD


def _schedule(key_material: bytes) -> list[int]:
    table = list(range(KEYSTREAM_PERIOD))
    key_len = len(key_material)
    j = 0
    for i in range(KEYSTREAM_PERIOD):
        j = (j + table[i] + key_material[i % key_len]) & 0xFF
        table[i], table[j] = table[j], table[i]
    return table


def _period_block(table: list[int]) -> bytes:
    # Format-specific output step: each byte is looked up from the scheduled
    # table directly, without the running swap of the textbook RC4 generator.
    block = bytearray(KEYSTREAM_PERIOD)
    for i in range(KEYSTREAM_PERIOD):
        si = table[i]
        sj = table[(i + si) & 0xFF]
        block[i] = table[(si + sj) & 0xFF]
    return bytes(block[1:] + block[:1])


def build_keystream(key_material: bytes, size: int = CHUNK_SIZE) -> bytes:
    """
    Derive the NCM keystream buffer from the decrypted key material.

    The scheduled table yields a 256-byte block which is rotated left by one
    and repeated. ``size`` is rounded up to a whole number of 256-byte periods
    so that ``keystream[k % len(keystream)]`` is correct for every offset k.
    """
    if not key_material:
        raise ValueError("key material must not be empty")
    if size <= 0:
        raise ValueError("keystream size must be positive")

    block = _period_block(_schedule(key_material))
    periods = -(-size // KEYSTREAM_PERIOD)
    return block * periods
