from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import DecryptError
from .format_config import AES_BLOCK_BITS, CORE_KEY, KEY_SENTINEL_SIZE


def aes_ecb_decrypt(key: bytes, data: bytes) -> bytes:
    """
    Decrypt AES-128-ECB ciphertext and strip its PKCS7 padding.

    Ciphertext that is not block-aligned or whose padding is malformed raises
    DecryptError; the plaintext is never silently truncated.
    """
    try:
        decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
        padded = decryptor.update(data) + decryptor.finalize()
        unpadder = padding.PKCS7(AES_BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise DecryptError(f"AES unwrap failed: {exc}") from exc


def derive_key_material(key_blob: bytes) -> bytes:
    """Recover the keystream seed from a de-XORed key blob."""
    plaintext = aes_ecb_decrypt(CORE_KEY, key_blob)
    if len(plaintext) <= KEY_SENTINEL_SIZE:
        raise DecryptError(f"Decrypted key is too short ({len(plaintext)} bytes)")
    return plaintext[KEY_SENTINEL_SIZE:]
