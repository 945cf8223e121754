from __future__ import annotations

from typing import List

from flask import Blueprint, request, jsonify

from models import storage
from models.todo import Todo, priority_rank
from models.schemas.todo import (
    TodoCreateSchema,
    TodoOutSchema,
    TodoQuerySchema,
    TodoStatusSchema,
    TodoUpdateSchema,
)
from utils.decorators import current_user_id, jwt_required
from utils.exceptions import NotFoundError

bp = Blueprint("todos", __name__)

# Schemas
todo_create_schema = TodoCreateSchema()
todo_update_schema = TodoUpdateSchema()
todo_status_schema = TodoStatusSchema()
todo_query_schema = TodoQuerySchema()
todo_out_schema = TodoOutSchema()
todos_out_schema = TodoOutSchema(many=True)

# Sorting allowlist: API field -> SQLAlchemy expression
SORT_COLUMNS = {
    "created_at": Todo.created_at,
    "due_date": Todo.due_date,
    "priority": priority_rank,
}

DEFAULT_SORT = "created_at"
MAX_PER_PAGE = 100


def parse_pagination(params: dict) -> tuple[int, int]:
    page = max(params["page"], 1)
    per_page = max(1, min(params["per_page"], MAX_PER_PAGE))
    return page, per_page


def parse_sort(params: dict) -> List:
    # unknown fields fall back to the default instead of failing
    col = SORT_COLUMNS.get(params["sort"], SORT_COLUMNS[DEFAULT_SORT])
    if params["order"] == "asc":
        return [col.asc(), Todo.id.asc()]
    return [col.desc(), Todo.id.asc()]


def apply_filters(query, params: dict):
    if params.get("status"):
        query = query.filter(Todo.status == params["status"])
    if params.get("priority"):
        query = query.filter(Todo.priority == params["priority"])
    if params.get("due_before"):
        query = query.filter(Todo.due_date <= params["due_before"])
    if params.get("due_after"):
        query = query.filter(Todo.due_date >= params["due_after"])
    return query


def get_owned_todo(todo_id: str) -> Todo:
    """Fetch a task owned by the caller; other users' tasks look missing."""
    session = storage.get_session()
    todo = (
        session.query(Todo)
        .filter(Todo.id == todo_id, Todo.user_id == current_user_id())
        .first()
    )
    if not todo:
        raise NotFoundError("Todo not found")
    return todo


@bp.get("")
@jwt_required()
def list_todos():
    """
    List the caller's tasks with filtering, sorting and pagination
    ---
    tags:
      - Todos
    security:
      - Bearer: []
    parameters:
      - in: query
        name: status
        type: string
        enum: [pending, in_progress, completed]
      - in: query
        name: priority
        type: string
        enum: [low, medium, high]
      - in: query
        name: due_before
        type: string
        format: date-time
      - in: query
        name: due_after
        type: string
        format: date-time
      - in: query
        name: sort
        type: string
        description: "created_at, due_date or priority"
        default: created_at
      - in: query
        name: order
        type: string
        enum: [asc, desc]
        default: desc
      - in: query
        name: page
        type: integer
        default: 1
        maximum: 1000000
      - in: query
        name: per_page
        type: integer
        default: 20
    responses:
      200:
        description: Paginated task list
      400:
        description: Invalid filter or pagination value
      401:
        description: Unauthorized
    """
    params = todo_query_schema.load(request.args)
    page, per_page = parse_pagination(params)

    session = storage.get_session()
    query = session.query(Todo).filter(Todo.user_id == current_user_id())
    query = apply_filters(query, params)

    total = query.count()
    rows = (
        query.order_by(*parse_sort(params))
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return jsonify(
        {
            "items": todos_out_schema.dump(rows),
            "total": total,
            "page": page,
            "per_page": per_page,
        }
    )


@bp.post("")
@jwt_required()
def create_todo():
    """
    Create a task
    ---
    tags:
      - Todos
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255 }
            description: { type: string }
            due_date: { type: string, format: date-time }
            status: { type: string, enum: [pending, in_progress, completed] }
            priority: { type: string, enum: [low, medium, high] }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      401:
        description: Unauthorized
    """
    payload = request.get_json(silent=True) or {}
    data = todo_create_schema.load(payload)

    todo = Todo(user_id=current_user_id(), **data)
    storage.new(todo)
    storage.save()
    return jsonify(todo_out_schema.dump(todo)), 201


@bp.get("/<todo_id>")
@jwt_required()
def get_todo(todo_id: str):
    """
    Get one of the caller's tasks
    ---
    tags:
      - Todos
    security:
      - Bearer: []
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
    responses:
      200:
        description: Task found
      404:
        description: Not found
    """
    return jsonify(todo_out_schema.dump(get_owned_todo(todo_id)))


@bp.put("/<todo_id>")
@jwt_required()
def update_todo(todo_id: str):
    """
    Update a task (only the supplied fields)
    ---
    tags:
      - Todos
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      400:
        description: Validation error
      404:
        description: Not found
    """
    payload = request.get_json(silent=True) or {}
    data = todo_update_schema.load(payload)
    todo = get_owned_todo(todo_id)

    for field, value in data.items():
        setattr(todo, field, value)

    storage.new(todo)
    storage.save()
    return jsonify(todo_out_schema.dump(todo))


@bp.patch("/<todo_id>/status")
@jwt_required()
def update_todo_status(todo_id: str):
    """
    Change a task's status
    ---
    tags:
      - Todos
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            status: { type: string, enum: [pending, in_progress, completed] }
    responses:
      200:
        description: Status updated
      404:
        description: Not found
    """
    payload = request.get_json(silent=True) or {}
    data = todo_status_schema.load(payload)
    todo = get_owned_todo(todo_id)
    todo.status = data["status"]
    storage.new(todo)
    storage.save()
    return jsonify(todo_out_schema.dump(todo))


@bp.delete("/<todo_id>")
@jwt_required()
def delete_todo(todo_id: str):
    """
    Delete a task
    ---
    tags:
      - Todos
    security:
      - Bearer: []
    parameters:
      - in: path
        name: todo_id
        type: string
        required: true
    responses:
      204:
        description: Deleted
      404:
        description: Not found
    """
    todo = get_owned_todo(todo_id)
    storage.delete(todo)
    storage.save()
    return ("", 204)
