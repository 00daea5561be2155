import re
from typing import Any, Callable, Dict, Mapping, Tuple

REQUIRED_FIELDS = [
    "nombre",
    "email",
    "whatsapp",
    "domicilio",
    "localidad",
    "provincia",
    "codigoPostal",
]
OPTIONAL_FIELDS = ["notasAdicionales"]
ALL_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS

NOTES_MAX_LENGTH = 500

NAME_PATTERN = re.compile(r"[a-zA-ZáéíóúÁÉÍÓÚñÑ\s\-'0-9]+")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[\d\s+\-()]+", re.ASCII)
STREET_PATTERN = re.compile(r"[a-zA-Z0-9áéíóúÁÉÍÓÚñÑ\s\-.,º#]+")
PLACE_PATTERN = re.compile(r"[a-zA-Z0-9áéíóúÁÉÍÓÚñÑ\s\-.]+")
POSTAL_CODE_PATTERN = re.compile(r"[a-zA-Z0-9]{4,10}")
NON_DIGIT = re.compile(r"\D", re.ASCII)


def _blank(value: Any) -> bool:
    return not value or not str(value).strip()


def _validate_nombre(value: str) -> str:
    if _blank(value):
        return "Name is required"
    if len(value.strip()) < 2:
        return "Name must be at least 2 characters"
    if not NAME_PATTERN.fullmatch(value):
        return "Name contains invalid characters"
    return ""


def _validate_email(value: str) -> str:
    if _blank(value):
        return "Email is required"
    if not EMAIL_PATTERN.fullmatch(value):
        return "Invalid email"
    return ""


def _validate_whatsapp(value: str) -> str:
    if not value:
        return "WhatsApp is required"
    if not PHONE_PATTERN.fullmatch(value):
        return "Invalid phone format"
    if len(NON_DIGIT.sub("", value)) < 10:
        return "Phone number must have at least 10 digits"
    return ""


def _validate_domicilio(value: str) -> str:
    if _blank(value):
        return "Street address is required"
    if len(value.strip()) < 5:
        return "Please enter a complete street address (at least 5 characters)"
    if not STREET_PATTERN.fullmatch(value):
        return "Street address contains invalid characters"
    return ""


def _place_validator(label: str) -> Callable[[str], str]:
    def validate(value: str) -> str:
        if _blank(value):
            return f"{label} is required"
        if len(value.strip()) < 2:
            return f"{label} must be at least 2 characters"
        if not PLACE_PATTERN.fullmatch(value):
            return f"{label} contains invalid characters"
        return ""

    return validate


def _validate_codigo_postal(value: str) -> str:
    if _blank(value):
        return "Postal code is required"
    if not POSTAL_CODE_PATTERN.fullmatch(re.sub(r"\s", "", value)):
        return "Invalid postal code (4-10 alphanumeric characters)"
    return ""


def _validate_notas(value: str) -> str:
    if value and len(value) > NOTES_MAX_LENGTH:
        return f"Notes cannot exceed {NOTES_MAX_LENGTH} characters"
    return ""


VALIDATORS: Dict[str, Callable[[str], str]] = {
    "nombre": _validate_nombre,
    "email": _validate_email,
    "whatsapp": _validate_whatsapp,
    "domicilio": _validate_domicilio,
    "localidad": _place_validator("City"),
    "provincia": _place_validator("Province"),
    "codigoPostal": _validate_codigo_postal,
    "notasAdicionales": _validate_notas,
}


def format_phone(value: str) -> str:
    """Argentine display format: ``54 9 11 1234-5678`` or ``9 11 1234-5678``."""
    n = NON_DIGIT.sub("", value)
    if not n:
        return ""

    if len(n) > 13:
        n = n[-13:]

    if n.startswith("54"):
        if len(n) <= 2:
            return n
        if len(n) <= 3:
            return f"{n[:2]} {n[2:]}"
        if len(n) <= 4:
            return f"{n[:2]} {n[2:3]} {n[3:]}"
        if len(n) <= 6:
            return f"{n[:2]} {n[2:3]} {n[3:5]} {n[5:]}"
        return f"{n[:2]} {n[2:3]} {n[3:5]} {n[5:9]}-{n[9:]}"

    if len(n) <= 1:
        return n
    if len(n) <= 2:
        return f"{n[:1]} {n[1:]}"
    if len(n) <= 4:
        return f"{n[:1]} {n[1:3]} {n[3:]}"
    return f"{n[:1]} {n[1:3]} {n[3:7]}-{n[7:]}"


FORMATTERS: Dict[str, Callable[[str], str]] = {
    "nombre": lambda v: v.strip(),
    "email": lambda v: v.strip().lower(),
    "whatsapp": format_phone,
    "codigoPostal": lambda v: re.sub(r"\s", "", v),
}


def validate_field(name: str, value: Any) -> str:
    """Error message for one field, empty string when valid."""
    validator = VALIDATORS.get(name)
    if validator is None:
        return ""
    return validator(value if value is not None else "")


def format_field(name: str, value: Any) -> Any:
    formatter = FORMATTERS.get(name)
    if formatter is None or not isinstance(value, str):
        return value
    return formatter(value)


def format_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: format_field(name, value) for name, value in form.items()}


def validate_form(form: Mapping[str, Any]) -> Tuple[bool, Dict[str, str]]:
    errors: Dict[str, str] = {}

    for field in REQUIRED_FIELDS:
        error = validate_field(field, form.get(field))
        if error:
            errors[field] = error

    for field in OPTIONAL_FIELDS:
        if form.get(field):
            error = validate_field(field, form.get(field))
            if error:
                errors[field] = error

    return not errors, errors
