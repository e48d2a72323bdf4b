# tangent/validation.py
# Declarative field validation. A rule table maps each field to an ordered
# list of rule tags:
#
#   required                 value must be present and non-empty
#   required_with:<field>    required only when <field> is present
#   string                   must be a JSON string, not a number, list or object
#   numeric                  number, or a string that parses as one
#   email                    syntactically valid e-mail address
#   same:<field>             must equal the value of <field>
#   unique:<table>,<column>  no other row holds this value
#
# Every field is checked and every failed rule is reported, so one request
# can return several messages per field.
import math

from email_validator import validate_email, EmailNotValidError
from sqlalchemy import select

from tangent.errors import ValidationError
from tangent.extensions import db


def _label(field):
    return field.replace('_', ' ')


def is_present(value):
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ''
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def is_numeric(value):
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        # Integers too large for a float are not stored as numbers either.
        try:
            return math.isfinite(value)
        except OverflowError:
            return False
    if isinstance(value, str):
        try:
            return math.isfinite(float(value.strip()))
        except ValueError:
            return False
    return False


def _check_required(field, value, data, arg, ignore_id):
    if not is_present(value):
        return f'The {_label(field)} field is required.'


def _check_required_with(field, value, data, arg, ignore_id):
    if is_present(data.get(arg)) and not is_present(value):
        return f'The {_label(field)} field is required when {_label(arg)} is present.'


def _check_string(field, value, data, arg, ignore_id):
    if not isinstance(value, str):
        return f'The {_label(field)} must be a string.'


def _check_numeric(field, value, data, arg, ignore_id):
    if not is_numeric(value):
        return f'The {_label(field)} must be a number.'


def _check_email(field, value, data, arg, ignore_id):
    if not isinstance(value, str):
        return f'The {_label(field)} must be a valid email address.'
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return f'The {_label(field)} must be a valid email address.'


def _check_same(field, value, data, arg, ignore_id):
    if value != data.get(arg):
        return f'The {_label(field)} and {_label(arg)} must match.'


def _check_unique(field, value, data, arg, ignore_id):
    # Unique columns hold text; other values are reported by `string`.
    if not isinstance(value, str):
        return None
    table_name, _, column_name = arg.partition(',')
    table = db.metadata.tables[table_name]
    column = table.c[column_name or field]
    query = select(table.c.id).where(column == value)
    if ignore_id is not None:
        query = query.where(table.c.id != ignore_id)
    if db.session.execute(query.limit(1)).first() is not None:
        return f'The {_label(field)} has already been taken.'


RULES = {
    'required': _check_required,
    'required_with': _check_required_with,
    'string': _check_string,
    'numeric': _check_numeric,
    'email': _check_email,
    'same': _check_same,
    'unique': _check_unique,
}

# Rules that decide for themselves whether an absent value is an error.
PRESENCE_RULES = {'required', 'required_with'}


def parse_rule(tag):
    name, _, arg = tag.partition(':')
    if name not in RULES:
        raise KeyError(f"Unknown validation rule: {name}")
    return name, arg or None


def collect_errors(data, rules, ignore_id=None):
    """Return {field: [messages]} for every field that fails a rule.

    `ignore_id` excludes that row from `unique` checks, so an update may keep
    its own value.
    """
    errors = {}
    for field, tags in rules.items():
        value = data.get(field)
        present = is_present(value)
        for tag in tags:
            name, arg = parse_rule(tag)
            if not present and name not in PRESENCE_RULES:
                continue
            message = RULES[name](field, value, data, arg, ignore_id)
            if message:
                errors.setdefault(field, []).append(message)
    return errors


def validate(data, rules, ignore_id=None):
    errors = collect_errors(data, rules, ignore_id)
    if errors:
        raise ValidationError(errors)
