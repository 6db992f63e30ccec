from marshmallow import ValidationError

from utils.exceptions import MissingCredential

# marshmallow's default message for a missing required field
REQUIRED_MESSAGE = "Missing data for required field."


def not_blank(value: str) -> None:
    if value is None or not value.strip():
        raise ValidationError("Must not be blank.")


def strip_string(value):
    return value.strip() if isinstance(value, str) else value


def load_payload(schema, payload):
    """
    Load payload with schema.
    A failure caused only by absent required fields becomes MissingCredential (400);
    any other validation failure propagates as ValidationError (422).
    """
    try:
        return schema.load(payload or {})
    except ValidationError as err:
        messages = err.messages if isinstance(err.messages, dict) else {}
        missing = sorted(
            field for field, msgs in messages.items()
            if isinstance(msgs, list) and REQUIRED_MESSAGE in msgs
        )
        if missing and len(missing) == len(messages):
            raise MissingCredential(f"Missing Arguments: {', '.join(missing)}") from err
        raise
