from marshmallow import EXCLUDE, INCLUDE, Schema, ValidationError, fields, validates


class CartItemSchema(Schema):
    class Meta:
        unknown = INCLUDE

    id = fields.Raw(load_default=None)
    name = fields.Str(load_default=None)
    price = fields.Float(load_default=None, allow_none=True)
    quantity = fields.Integer(load_default=1)


class CreateOrderSchema(Schema):
    """Order creation schema"""
    class Meta:
        unknown = EXCLUDE

    customerInfo = fields.Dict(load_default=None, allow_none=True)
    cartItems = fields.List(fields.Nested(CartItemSchema), load_default=list)
    total = fields.Decimal(required=True, places=2, as_string=False)
    deliveryAddress = fields.Raw(load_default=None, allow_none=True)
    paymentMethod = fields.Str(required=True)

    @validates('total')
    def validate_total(self, value, **kwargs):
        if value < 0:
            raise ValidationError('Total must not be negative')
