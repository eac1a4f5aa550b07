from marshmallow import EXCLUDE, Schema, ValidationError, fields, validates

from stkpay.utils.validators import validate_amount

REQUIRED_MESSAGE = 'Phone number and amount are required'


class StkPushSchema(Schema):
    """STK Push request schema"""
    class Meta:
        unknown = EXCLUDE

    phoneNumber = fields.Str(required=True, error_messages={'required': REQUIRED_MESSAGE})
    amount = fields.Decimal(required=True, error_messages={'required': REQUIRED_MESSAGE})
    accountReference = fields.Str(load_default=None, allow_none=True)
    description = fields.Str(load_default=None, allow_none=True)
    orderId = fields.Str(load_default=None, allow_none=True)

    @validates('amount')
    def validate_amount(self, value, **kwargs):
        is_valid, error = validate_amount(value)
        if not is_valid:
            raise ValidationError(error)

    @validates('phoneNumber')
    def validate_phone(self, value, **kwargs):
        if not value or not value.strip():
            raise ValidationError(REQUIRED_MESSAGE)
