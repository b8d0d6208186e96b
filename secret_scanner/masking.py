from .config import settings


def mask_secret(secret: str, expose: int = None, mask_char: str = None) -> str:
    """
    Mask a secret for safe display.

    Keeps the first and last `expose` characters and replaces the middle
    with `mask_char`. Values too short to keep `expose` characters on each
    side are masked completely.
    """
    expose = settings.MASK_EXPOSE if expose is None else expose
    mask_char = settings.MASK_CHAR if mask_char is None else mask_char
    if expose < 0:
        raise ValueError(f"expose must not be negative, got {expose}")

    length = len(secret)
    if length <= 2 * expose:
        return mask_char * length
    return secret[:expose] + mask_char * (length - 2 * expose) + secret[length - expose:]
