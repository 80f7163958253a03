"""
Author pages: list the authors and edit an author's email.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.concurrency import run_in_threadpool

from api.rendering import parse_form, redirect_with_message, render, render_error, status_errors
from constants import HTTPStatus
from dependencies import get_author_repository, get_generic_service
from dtos.request.author_requests import AuthorDto
from generic_services import GenericService
from repositories.book_repository import AuthorRepository

router = APIRouter(prefix="/authors")


@router.get("", response_class=HTMLResponse)
def list_authors(
    request: Request,
    service: GenericService = Depends(get_generic_service),
    author_repo: AuthorRepository = Depends(get_author_repository),
):
    authors = service.read_many_no_tracked(AuthorDto, author_repo.ordered_by_name())
    return render(request, "authors.html", title="Authors", authors=authors)


@router.get("/{author_id}/edit", response_class=HTMLResponse)
def edit_author_form(request: Request, author_id: int, service: GenericService = Depends(get_generic_service)):
    dto = service.read_single(AuthorDto, author_id)
    if dto is None:
        return render_error(request, service.message, HTTPStatus.NOT_FOUND, status_errors(service))
    return render(request, "author_edit.html", title="Edit author", dto=dto, errors=[])


@router.post("/{author_id}/edit", response_class=HTMLResponse)
async def edit_author(request: Request, author_id: int, service: GenericService = Depends(get_generic_service)):
    """Only the email is copied back; the name is read-only on AuthorDto"""
    dto, shown, errors = await parse_form(request, AuthorDto)
    if dto is not None:
        dto.author_id = author_id
        await run_in_threadpool(service.update_and_save, dto)
        if service.is_valid:
            return redirect_with_message(service.message, url="/authors")
        errors = status_errors(service)

    return render(request, "author_edit.html", status_code=HTTPStatus.BAD_REQUEST, title="Edit author", dto=shown, errors=errors)
