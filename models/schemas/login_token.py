from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class TokenCredentialSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    series = fields.String(required=True, validate=validate.Length(min=1, max=255))
    token = fields.String(required=True, load_only=True, validate=validate.Length(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        # the token is an opaque secret and is passed through untouched
        if isinstance(data, dict) and "series" in data:
            data = {**data, "series": _strip(data["series"])}
        return data


class LoginTokenOutSchema(Schema):
    # token digest deliberately absent
    id = fields.String()
    user_id = fields.String()
    series = fields.String()
    browser = fields.String()
    platform = fields.String()
    expires = fields.Integer()
    last_login = fields.DateTime()
    last_session_id = fields.String()


class LoginGroupOutSchema(Schema):
    series = fields.String()
    browser = fields.String()
    platform = fields.String()
    expires = fields.Integer()
    last_login = fields.DateTime()
