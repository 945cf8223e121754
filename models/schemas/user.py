from marshmallow import EXCLUDE, Schema, fields, pre_load, validates, ValidationError


def _strip_email(v):
    # whitespace only; addresses are stored case-sensitively
    return v.strip() if isinstance(v, str) else v


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _strip_email(data["email"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _strip_email(data["email"])
        return data


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    created_at = fields.DateTime()


class TokenOutSchema(Schema):
    access_token = fields.String()
    token_type = fields.String()
    expires_in = fields.Integer()
