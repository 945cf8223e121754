from marshmallow import EXCLUDE, Schema, fields, validate

from models.todo import TodoPriority, TodoStatus

_title = validate.Length(min=1, max=255, error="Title must be between 1 and 255 characters")

# Upper bounds keep (page - 1) * per_page a valid SQL OFFSET; api.todos clamps per_page further
MAX_PAGE = 1_000_000
MAX_PER_PAGE_INPUT = 10_000


class TodoCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=_title)
    description = fields.String(allow_none=True)
    due_date = fields.DateTime(allow_none=True)
    status = fields.Enum(TodoStatus, by_value=True, load_default=TodoStatus.PENDING)
    priority = fields.Enum(TodoPriority, by_value=True, load_default=TodoPriority.MEDIUM)


class TodoUpdateSchema(Schema):
    # All optional; only supplied fields are applied
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=_title)
    description = fields.String(allow_none=True)
    due_date = fields.DateTime(allow_none=True)
    status = fields.Enum(TodoStatus, by_value=True)
    priority = fields.Enum(TodoPriority, by_value=True)


class TodoStatusSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.Enum(TodoStatus, by_value=True, required=True)


class TodoQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.Enum(TodoStatus, by_value=True)
    priority = fields.Enum(TodoPriority, by_value=True)
    due_before = fields.DateTime()
    due_after = fields.DateTime()
    sort = fields.String(load_default="created_at")
    order = fields.String(load_default="desc")
    page = fields.Integer(load_default=1, validate=validate.Range(max=MAX_PAGE))
    per_page = fields.Integer(load_default=20, validate=validate.Range(max=MAX_PER_PAGE_INPUT))


class TodoOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    due_date = fields.DateTime(allow_none=True)
    status = fields.Enum(TodoStatus, by_value=True)
    priority = fields.Enum(TodoPriority, by_value=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
