"""
Rule-based validation for plain key/value payloads.

A schema is an ordered list of FieldValidation(field, rules). For each field the
rules run in order and stop at the first failure; every field is evaluated, so
the result lists at most one error per field, in schema order.

    result = validate_form({"nombre": "ab"}, company_schema())
    result.is_valid  # True: "ab" is exactly at the minimum length

Callers surface only the first error (first_error_message); summarize_errors
gives the "(y N errores más)" variant.
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from datenova.core.errors import ValidationFailed
from datenova.models.deliverable import DeliverableType
from datenova.models.project import ProjectStatus
from datenova.models.task import TaskPriority, TaskStatus
from datenova.models.user import UserRole

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


@dataclass
class ValidationRule:
    type: str
    message: str
    value: Any = None
    validate: Optional[Callable[[Any], bool]] = None


@dataclass
class FieldValidation:
    field: str
    rules: List[ValidationRule] = field(default_factory=list)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[Dict[str, str]] = field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return not value or (isinstance(value, str) and value.strip() == "")


def _to_number(value: Any) -> Optional[float]:
    """float(value), or None where a number cannot be read (NaN never compares)."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str) and value.strip() == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number


def _to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _has_length(value: Any) -> bool:
    return isinstance(value, (str, list, tuple))


def validate_field(value: Any, rules: List[ValidationRule]) -> Optional[str]:
    """Return the message of the first failing rule, or None."""
    for rule in rules:
        if rule.type == "required":
            if _is_blank(value):
                return rule.message

        elif rule.type == "email":
            if value and not EMAIL_RE.fullmatch(str(value)):
                return rule.message

        elif rule.type == "minLength":
            if value and _has_length(value) and len(value) < rule.value:
                return rule.message

        elif rule.type == "maxLength":
            if value and _has_length(value) and len(value) > rule.value:
                return rule.message

        elif rule.type == "min":
            number = _to_number(value) if value is not None else None
            if number is not None and number < rule.value:
                return rule.message

        elif rule.type == "max":
            number = _to_number(value) if value is not None else None
            if number is not None and number > rule.value:
                return rule.message

        elif rule.type == "pattern":
            if value and not re.search(rule.value, str(value)):
                return rule.message

        elif rule.type == "custom":
            if rule.validate is not None and not rule.validate(value):
                return rule.message

        else:
            raise ValueError(f"Unknown validation rule: {rule.type}")
    return None


def validate_form(data: Dict[str, Any], validations: List[FieldValidation]) -> ValidationResult:
    errors = []
    for field_validation in validations:
        error = validate_field(data.get(field_validation.field), field_validation.rules)
        if error:
            errors.append({"field": field_validation.field, "message": error})
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_or_raise(data: Dict[str, Any], validations: List[FieldValidation]) -> None:
    result = validate_form(data, validations)
    if not result.is_valid:
        raise ValidationFailed(result.errors)


def first_error_message(errors: List[Dict[str, str]]) -> Optional[str]:
    return errors[0]["message"] if errors else None


def summarize_errors(errors: List[Dict[str, str]]) -> Optional[str]:
    if not errors:
        return None
    rest = len(errors) - 1
    if rest == 0:
        return errors[0]["message"]
    return f"{errors[0]['message']} (y {rest} error{'es' if rest > 1 else ''} más)"


def get_field_error(field_name: str, errors: List[Dict[str, str]]) -> Optional[str]:
    return next((e["message"] for e in errors if e["field"] == field_name), None)


# ---------------------------------------------------------------------------
# Common rules
# ---------------------------------------------------------------------------

def required(field_name: str) -> ValidationRule:
    return ValidationRule("required", f"{field_name} es obligatorio")


def email() -> ValidationRule:
    return ValidationRule("email", "Ingresa un email válido")


def min_length(length: int) -> ValidationRule:
    return ValidationRule("minLength", f"Debe tener al menos {length} caracteres", value=length)


def max_length(length: int) -> ValidationRule:
    return ValidationRule("maxLength", f"No puede exceder {length} caracteres", value=length)


def min_value(value: float, field_name: str = "El valor") -> ValidationRule:
    return ValidationRule("min", f"{field_name} debe ser al menos {value}", value=value)


def max_value(value: float, field_name: str = "El valor") -> ValidationRule:
    return ValidationRule("max", f"{field_name} no puede ser mayor a {value}", value=value)


def pattern(regex: str, message: str) -> ValidationRule:
    return ValidationRule("pattern", message, value=regex)


def custom(predicate: Callable[[Any], bool], message: str) -> ValidationRule:
    return ValidationRule("custom", message, validate=predicate)


def positive_number(field_name: str = "El valor") -> ValidationRule:
    def _positive(value):
        number = _to_number(value)
        return number is not None and number > 0
    return custom(_positive, f"{field_name} debe ser un número positivo")


def one_of(choices, field_name: str = "El valor") -> ValidationRule:
    """Value must be one of `choices` (an Enum class or an iterable). None passes."""
    allowed = {getattr(c, "value", c) for c in choices}
    return custom(lambda value: value is None or value in allowed, f"{field_name} no es un valor válido")


def numeric(field_name: str = "El valor") -> ValidationRule:
    """Optional number: blank passes, anything else must parse."""
    return custom(lambda value: _is_blank(value) or _to_number(value) is not None,
                  f"{field_name} debe ser un número")


def date_not_past() -> ValidationRule:
    def _not_past(value):
        if not value:
            return True
        parsed = _to_date(value)
        return parsed is not None and parsed >= date.today()
    return custom(_not_past, "La fecha no puede ser en el pasado")


def date_range(start_date: Optional[str]) -> ValidationRule:
    def _after_start(end_date):
        if not end_date or not start_date:
            return True
        start, end = _to_date(start_date), _to_date(end_date)
        if start is None or end is None:
            return True
        return end >= start
    return custom(_after_start, "La fecha final debe ser posterior a la fecha inicial")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

def project_schema(start_date: Optional[str] = None) -> List[FieldValidation]:
    return [
        FieldValidation("nombre", [required("Nombre del proyecto"), min_length(3), max_length(255)]),
        FieldValidation("descripcion", [max_length(1000)]),
        FieldValidation("estado", [one_of(ProjectStatus, "Estado")]),
        FieldValidation("budget", [numeric("Presupuesto"), min_value(0, "Presupuesto")]),
        FieldValidation("fecha_inicio", []),
        FieldValidation("fecha_fin", [date_range(start_date)]),
    ]


def task_schema() -> List[FieldValidation]:
    return [
        FieldValidation("nombre", [required("Nombre de la tarea"), min_length(3), max_length(255)]),
        FieldValidation("proyecto_id", [required("Proyecto")]),
        FieldValidation("horas_estimadas", [required("Horas estimadas"), positive_number("Horas estimadas")]),
        FieldValidation("estado", [one_of(TaskStatus, "Estado")]),
        FieldValidation("prioridad", [one_of(TaskPriority, "Prioridad")]),
        FieldValidation("descripcion", [max_length(2000)]),
    ]


def time_log_schema() -> List[FieldValidation]:
    return [
        FieldValidation("tarea_id", [required("Tarea")]),
        FieldValidation("horas", [
            required("Horas trabajadas"),
            positive_number("Horas trabajadas"),
            max_value(24, "Horas trabajadas"),
        ]),
        FieldValidation("fecha", [required("Fecha")]),
        FieldValidation("descripcion", [
            required("Descripción del trabajo"),
            min_length(10),
            max_length(500),
        ]),
    ]


def company_schema() -> List[FieldValidation]:
    return [
        FieldValidation("nombre", [required("Nombre de la empresa"), min_length(2), max_length(255)]),
        FieldValidation("email", [email()]),
        FieldValidation("telefono", [max_length(20)]),
        FieldValidation("direccion", [max_length(500)]),
    ]


def user_schema() -> List[FieldValidation]:
    return [
        FieldValidation("nombre", [required("Nombre"), min_length(3), max_length(100)]),
        FieldValidation("rol", [required("Rol"), one_of(UserRole, "Rol")]),
        FieldValidation("tarifa_hora", [numeric("Tarifa por hora"), min_value(0, "Tarifa por hora")]),
        FieldValidation("billable_rate", [numeric("Tarifa facturable"), min_value(0, "Tarifa facturable")]),
    ]


def invitation_schema() -> List[FieldValidation]:
    return [
        FieldValidation("email", [required("Email"), email()]),
        FieldValidation("rol", [required("Rol"), one_of(UserRole, "Rol")]),
    ]


def deliverable_schema() -> List[FieldValidation]:
    return [
        FieldValidation("nombre", [required("Nombre del entregable"), min_length(3), max_length(255)]),
        FieldValidation("tipo_entregable", [required("Tipo de entregable"), one_of(DeliverableType, "Tipo de entregable")]),
        FieldValidation("descripcion", [max_length(1000)]),
    ]


def comment_schema() -> List[FieldValidation]:
    return [
        FieldValidation("mensaje", [required("Mensaje"), min_length(1), max_length(2000)]),
    ]


# Form names used by the screens
SCHEMAS: Dict[str, Callable[[], List[FieldValidation]]] = {
    "proyecto": project_schema,
    "tarea": task_schema,
    "registroHoras": time_log_schema,
    "empresa": company_schema,
    "usuario": user_schema,
    "invitacion": invitation_schema,
    "entregable": deliverable_schema,
    "comentario": comment_schema,
}
