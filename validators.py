from typing import Any, Dict, Iterable, Optional

from errors import ValidationError

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


class FieldValidator:
    """Casting and requiredness checks applied to incoming JSON fields.

    Mirrors document-store casting: strings pass, numbers and booleans are
    turned into text, objects and arrays are rejected.
    """

    @staticmethod
    def cast_text(field: str, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        raise ValidationError(
            f'Cast to string failed for value "{value}" (type {type(value).__name__}) at path "{field}"'
        )

    @staticmethod
    def strict_text(field: str, value: Any) -> Optional[str]:
        """Like cast_text but only strings (or None) are accepted."""
        if value is None or isinstance(value, str):
            return value
        raise ValidationError(
            f'Cast to string failed for value "{value}" (type {type(value).__name__}) at path "{field}"'
        )

    @staticmethod
    def cast_bool(field: str, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise ValidationError(
            f'Cast to Boolean failed for value "{value}" (type {type(value).__name__}) at path "{field}"'
        )

    @staticmethod
    def require(model: str, fields: Dict[str, Any], required: Iterable[str]) -> None:
        """Raise ValidationError naming every required field that is absent or empty."""
        missing = [name for name in required if fields.get(name) in (None, "")]
        if missing:
            details = ", ".join(f"{name}: Path `{name}` is required." for name in missing)
            raise ValidationError(f"{model} validation failed: {details}")
