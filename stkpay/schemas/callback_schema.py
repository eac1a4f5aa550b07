"""
M-Pesa Callback Validation Schemas
"""

from marshmallow import EXCLUDE, Schema, fields, validate


class CallbackItemSchema(Schema):
    """One ``{Name, Value}`` entry of CallbackMetadata.Item"""
    class Meta:
        unknown = EXCLUDE

    Name = fields.Str(load_default=None)
    Value = fields.Raw(load_default=None, allow_none=True)


class CallbackMetadataSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    # Entries are loaded one by one with CallbackItemSchema so a bad entry never rejects the envelope
    Item = fields.List(fields.Raw(), load_default=list, allow_none=True)


class StkCallbackSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    MerchantRequestID = fields.Str(load_default=None, allow_none=True)
    CheckoutRequestID = fields.Str(required=True, validate=validate.Length(min=1))
    ResultCode = fields.Raw(load_default=None, allow_none=True)
    ResultDesc = fields.Str(load_default=None, allow_none=True)
    CallbackMetadata = fields.Nested(CallbackMetadataSchema, load_default=None, allow_none=True)


class CallbackBodySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    stkCallback = fields.Nested(StkCallbackSchema, required=True)


class MPesaCallbackSchema(Schema):
    """M-Pesa STK callback envelope: ``{"Body": {"stkCallback": {...}}}``"""
    class Meta:
        unknown = EXCLUDE

    Body = fields.Nested(CallbackBodySchema, required=True)
