"""
Shared helpers for the page routers: templates, form parsing and redirects.
"""

from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Type
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ValidationError as PydanticValidationError

from constants import HTTPStatus, PageMessages
from generic_services import StatusGeneric

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(request: Request, template_name: str, status_code: int = HTTPStatus.OK, **context: Any):
    return templates.TemplateResponse(request, template_name, context, status_code=status_code)


def render_error(request: Request, message: str, status_code: int, errors: Iterable[str] = ()):
    return render(
        request,
        "error.html",
        status_code=status_code,
        title=PageMessages.ERROR_TITLE,
        message=message,
        errors=list(errors),
    )


def status_errors(status: StatusGeneric) -> List[str]:
    return [str(error) for error in status.errors]


async def parse_form(
    request: Request,
    dto_type: Type[BaseModel],
    list_fields: Tuple[str, ...] = (),
) -> Tuple[Optional[BaseModel], BaseModel, List[str]]:
    """
    Build a DTO from the posted form.

    Args:
        request: Incoming request
        dto_type: DTO class to validate the form into
        list_fields: Fields posted as repeated inputs (multi-selects)

    Returns:
        (dto or None if invalid, object to redisplay the form with, error messages)
    """
    form = await request.form()
    data = {key: value for key, value in form.items() if key not in list_fields}
    for name in list_fields:
        data[name] = form.getlist(name)
    # A blank input for a field that defaults to None means "no value"
    data = {
        key: (None if value == "" and dto_type.model_fields[key].default is None else value)
        for key, value in data.items()
        if key in dto_type.model_fields
    }

    try:
        dto = dto_type.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        return None, dto_type.model_construct(**data), errors
    return dto, dto, []


def redirect_with_message(message: str, url: str = "/") -> RedirectResponse:
    return RedirectResponse(
        url=f"{url}?{urlencode({PageMessages.MESSAGE_QUERY_PARAM: message})}",
        status_code=HTTPStatus.SEE_OTHER,
    )
