from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (
    DecimalField,
    Form,
    PasswordField,
    SelectField,
    StringField,
    SubmitField,
)
from wtforms.validators import AnyOf, DataRequired, Email, ValidationError

from dashboard.models import INVOICE_STATUSES

CUSTOMER_REQUIRED_MESSAGE = "Please select a customer."
AMOUNT_REQUIRED_MESSAGE = "Please enter an amount greater than $0."
STATUS_REQUIRED_MESSAGE = "Please select an invoice status."

FieldErrors = dict[str, list[str]]

# Largest amount whose value in cents fits a signed 64-bit column.
MAX_AMOUNT = Decimal(2**63 - 1) / 100


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class GreaterThan:
    """Validate that a numeric field is strictly above ``minimum``.

    Unparseable input leaves ``field.data`` as ``None`` which fails the
    check with the same message, as does a value above ``maximum``.
    """

    def __init__(self, minimum, maximum=None, message=None):
        self.minimum = minimum
        self.maximum = maximum
        self.message = message

    def __call__(self, form, field):
        value = field.data
        if (
            value is None
            or value <= self.minimum
            or (self.maximum is not None and value > self.maximum)
        ):
            message = self.message or f"Must be greater than {self.minimum}."
            raise ValidationError(message)


class CurrencyAmountField(DecimalField):
    """Decimal field that accepts formatted monetary input."""

    _CURRENCY_SYMBOLS = "$€£¥"

    @classmethod
    def _normalise_plain_number(cls, text):
        """Return a plain numeric string for formatted monetary input.

        Values such as ``"$1,234.50"`` or ``"1 234,50 €"`` are stripped of
        currency symbols and thousands separators so :class:`Decimal` can
        parse them.
        """

        cleaned = text.strip()
        while cleaned and cleaned[0] in cls._CURRENCY_SYMBOLS:
            cleaned = cleaned[1:].lstrip()
        while cleaned and cleaned[-1] in cls._CURRENCY_SYMBOLS:
            cleaned = cleaned[:-1].rstrip()

        cleaned = cleaned.replace("\u00a0", " ")

        decimal_is_comma = False
        if "," in cleaned and "." in cleaned:
            decimal_is_comma = cleaned.rfind(".") < cleaned.rfind(",")
        elif "," in cleaned:
            fractional_length = len(cleaned) - cleaned.rfind(",") - 1
            decimal_is_comma = 0 < fractional_length <= 2

        cleaned = cleaned.replace("_", "").replace(" ", "")
        if decimal_is_comma:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
        return cleaned

    def process_formdata(self, valuelist):
        self.data = None
        if not valuelist:
            return

        raw_value = valuelist[0]
        text = "" if raw_value is None else str(raw_value).strip()
        if not text:
            # A blank amount coerces to zero and fails the minimum check.
            self.data = Decimal(0)
            return

        try:
            value = Decimal(self._normalise_plain_number(text))
        except (InvalidOperation, ValueError):
            return
        if value.is_finite():
            self.data = value


class InvoiceForm(Form):
    """Field rules shared by invoice create and update.

    The form reads the raw submission keys (``customerId``, ``amount``,
    ``status``); ``id`` and ``date`` are never taken from user input.
    """

    customer_id = StringField(
        "Customer",
        name="customerId",
        filters=[_strip],
        validators=[DataRequired(message=CUSTOMER_REQUIRED_MESSAGE)],
    )
    amount = CurrencyAmountField(
        "Amount",
        places=2,
        validators=[
            GreaterThan(0, maximum=MAX_AMOUNT, message=AMOUNT_REQUIRED_MESSAGE)
        ],
    )
    status = SelectField(
        "Status",
        choices=[(status, status.title()) for status in INVOICE_STATUSES],
        validate_choice=False,
        validators=[AnyOf(INVOICE_STATUSES, message=STATUS_REQUIRED_MESSAGE)],
    )


@dataclass(frozen=True)
class InvoiceFields:
    """Typed, validated invoice input ready to be persisted."""

    customer_id: str
    amount: Decimal
    status: str

    @property
    def amount_in_cents(self) -> int:
        cents = (self.amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return int(cents)


def validate_invoice_fields(
    raw: Mapping[str, object] | MultiDict,
) -> tuple[Optional[InvoiceFields], FieldErrors]:
    """Validate raw invoice input.

    Every field is checked so all problems are reported together. Returns
    ``(fields, {})`` on success or ``(None, errors)`` where ``errors`` maps
    the submitted field name to its messages.
    """

    formdata = raw if isinstance(raw, MultiDict) else MultiDict(dict(raw))
    form = InvoiceForm(formdata=formdata)
    if not form.validate():
        errors = {field.name: list(field.errors) for field in form if field.errors}
        return None, errors
    return (
        InvoiceFields(
            customer_id=form.customer_id.data,
            amount=form.amount.data,
            status=form.status.data,
        ),
        {},
    )


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    submit = SubmitField("Log in")


class DeleteForm(FlaskForm):
    """Simple form used for CSRF protection on delete actions."""

    submit = SubmitField("Delete")
