"""
Canonical message construction for request signatures

The canonical message is the exact byte sequence covered by X-Signature:

    METHOD\\nPATH\\nTIMESTAMP\\nNONCE\\nBODYHASH

Field order, casing and the newline separator are part of the wire contract
with the verifying server.
"""

from typing import List

from ..exceptions import ValidationError
from .types import SigningInput, SigningErrorCodes
from .utils import is_sha256_hex

CANONICAL_SEPARATOR = "\n"
CANONICAL_FIELDS = ("method", "path", "timestamp", "nonce", "body_hash")


def build_canonical_message(signing_input: SigningInput) -> str:
    """
    Build canonical message for signing.

    Args:
        signing_input: Request-scoped signing values

    Returns:
        str: Newline-joined canonical message, no trailing newline

    Raises:
        ValidationError: If a field would break the line structure
    """
    values: List[str] = [
        signing_input.method.upper(),
        signing_input.path,
        str(signing_input.timestamp),
        signing_input.nonce,
        signing_input.body_hash,
    ]

    for name, value in zip(CANONICAL_FIELDS, values):
        if CANONICAL_SEPARATOR in value:
            raise ValidationError(
                f"Canonical field '{name}' cannot contain a newline",
                SigningErrorCodes.INVALID_CANONICAL_MESSAGE,
                {"field": name}
            )

    return CANONICAL_SEPARATOR.join(values)


def parse_canonical_message(canonical_message: str) -> SigningInput:
    """
    Parse a canonical message back into its signing fields.

    Args:
        canonical_message: Canonical message string

    Returns:
        SigningInput: Parsed fields

    Raises:
        ValidationError: If the message is malformed
    """
    if not isinstance(canonical_message, str):
        raise ValidationError(
            "Canonical message must be a string",
            SigningErrorCodes.INVALID_CANONICAL_MESSAGE
        )

    parts = canonical_message.split(CANONICAL_SEPARATOR)
    if len(parts) != len(CANONICAL_FIELDS):
        raise ValidationError(
            f"Canonical message must have {len(CANONICAL_FIELDS)} lines, got {len(parts)}",
            SigningErrorCodes.INVALID_CANONICAL_MESSAGE,
            {"line_count": len(parts)}
        )

    method, path, timestamp, nonce, body_hash = parts

    if not timestamp.isdigit():
        raise ValidationError(
            f"Invalid canonical timestamp: {timestamp}",
            SigningErrorCodes.INVALID_CANONICAL_MESSAGE,
            {"timestamp": timestamp}
        )

    return SigningInput(
        method=method,
        path=path,
        timestamp=int(timestamp),
        nonce=nonce,
        body_hash=body_hash
    )


def validate_canonical_message(canonical_message: str) -> bool:
    """
    Validate canonical message format.

    Args:
        canonical_message: Canonical message to validate

    Returns:
        bool: True if message format is valid
    """
    try:
        parsed = parse_canonical_message(canonical_message)
    except ValidationError:
        return False

    return (
        bool(parsed.method)
        and parsed.method == parsed.method.upper()
        and parsed.path.startswith('/')
        and bool(parsed.nonce)
        and is_sha256_hex(parsed.body_hash)
    )
