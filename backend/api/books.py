"""
Book pages: the book list, and the forms that change a book through
GenericServices.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.concurrency import run_in_threadpool

from api.rendering import parse_form, redirect_with_message, render, render_error, status_errors
from constants import HTTPStatus
from dependencies import get_author_repository, get_filter_dropdown_service, get_generic_service, get_list_books_service
from dtos.internal.sort_filter_page import BooksFilterBy, DEFAULT_PAGE_SIZE, OrderByOptions, SortFilterPageOptions
from dtos.request.book_requests import AddPromotionDto, AddReviewDto, ChangePubDateDto, CreateBookDto, RemovePromotionDto
from dtos.response.book_responses import AuthorNameDto
from exceptions import ValidationError
from generic_services import GenericService
from models import Book
from repositories.book_repository import AuthorRepository
from services.book_filter_dropdown_service import BookFilterDropdownService
from services.list_books_service import ListBooksService
from utils.error_handlers import handle_api_errors

logger = logging.getLogger(__name__)

router = APIRouter()

# Update forms: url segment -> (DTO, template, title)
BOOK_FORMS = {
    "add-review": (AddReviewDto, "add_review.html", "Add a review"),
    "change-pub-date": (ChangePubDateDto, "change_pub_date.html", "Change publication date"),
    "add-promotion": (AddPromotionDto, "add_promotion.html", "Add a promotion"),
    "remove-promotion": (RemovePromotionDto, "remove_promotion.html", "Remove the promotion"),
}


@router.get("/", response_class=HTMLResponse)
def list_books(
    request: Request,
    order_by: OrderByOptions = Query(OrderByOptions.SIMPLE_ORDER),
    filter_by: BooksFilterBy = Query(BooksFilterBy.NO_FILTER),
    filter_value: Optional[str] = Query(None),
    page_num: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    prev_check_state: Optional[str] = Query(None),
    message: Optional[str] = Query(None),
    service: ListBooksService = Depends(get_list_books_service),
    dropdown_service: BookFilterDropdownService = Depends(get_filter_dropdown_service),
):
    """Sorted, filtered and paged list of books"""
    options = SortFilterPageOptions(
        order_by=order_by,
        filter_by=filter_by,
        filter_value=filter_value or None,
        page_num=page_num,
        page_size=page_size,
        prev_check_state=prev_check_state,
    )
    errors: List[str] = []
    try:
        books = service.sort_filter_page(options)
    except ValidationError as e:
        errors.append(e.message)
        books = []

    return render(
        request,
        "index.html",
        title="Books",
        books=books,
        options=options,
        order_by_options=list(OrderByOptions),
        filter_by_options=list(BooksFilterBy),
        filter_values=dropdown_service.get_filter_drop_down_values(options.filter_by),
        message=message,
        errors=errors,
    )


@router.get("/filter-values")
@handle_api_errors("Filter values")
def filter_values(
    filter_by: BooksFilterBy = Query(...),
    service: BookFilterDropdownService = Depends(get_filter_dropdown_service),
) -> List[dict]:
    """Values for the filter dropdown, fetched by the list page when the filter type changes"""
    return [{"value": option.value, "text": option.text} for option in service.get_filter_drop_down_values(filter_by)]


@router.get("/books/create", response_class=HTMLResponse)
def create_book_form(
    request: Request,
    service: GenericService = Depends(get_generic_service),
    author_repo: AuthorRepository = Depends(get_author_repository),
):
    return render(
        request,
        "create_book.html",
        title="Add a book",
        dto=CreateBookDto(),
        authors=service.read_many_no_tracked(AuthorNameDto, author_repo.ordered_by_name()),
        errors=[],
    )


@router.post("/books/create", response_class=HTMLResponse)
async def create_book(
    request: Request,
    service: GenericService = Depends(get_generic_service),
    author_repo: AuthorRepository = Depends(get_author_repository),
):
    dto, shown, errors = await parse_form(request, CreateBookDto, list_fields=("author_ids",))
    if dto is not None:
        await run_in_threadpool(service.create_and_save, dto)
        if service.is_valid:
            return redirect_with_message(service.message)
        errors = status_errors(service)

    authors = await run_in_threadpool(service.read_many_no_tracked, AuthorNameDto, author_repo.ordered_by_name())
    return render(
        request,
        "create_book.html",
        status_code=HTTPStatus.BAD_REQUEST,
        title="Add a book",
        dto=shown,
        authors=authors,
        errors=errors,
    )


@router.post("/books/{book_id}/delete")
def delete_book(book_id: int, service: GenericService = Depends(get_generic_service)):
    service.delete_and_save(Book, book_id)
    if service.is_valid:
        return redirect_with_message(service.message)
    return redirect_with_message(service.get_all_errors(" "))


@router.get("/books/{book_id}/{form_name}", response_class=HTMLResponse)
def show_book_form(
    request: Request,
    book_id: int,
    form_name: str,
    service: GenericService = Depends(get_generic_service),
):
    """GET side of the book update forms: read the DTO for this book"""
    if form_name not in BOOK_FORMS:
        return render_error(request, f"There is no page called {form_name}.", HTTPStatus.NOT_FOUND)
    dto_type, template, title = BOOK_FORMS[form_name]

    dto = service.read_single(dto_type, book_id)
    if dto is None:
        return render_error(request, service.message, HTTPStatus.NOT_FOUND, status_errors(service))
    return render(request, template, title=title, dto=dto, errors=[])


@router.post("/books/{book_id}/{form_name}", response_class=HTMLResponse)
async def submit_book_form(
    request: Request,
    book_id: int,
    form_name: str,
    service: GenericService = Depends(get_generic_service),
):
    """POST side of the book update forms: apply the DTO through GenericServices"""
    if form_name not in BOOK_FORMS:
        return render_error(request, f"There is no page called {form_name}.", HTTPStatus.NOT_FOUND)
    dto_type, template, title = BOOK_FORMS[form_name]

    dto, shown, errors = await parse_form(request, dto_type)
    if dto is not None:
        dto.book_id = book_id
        await run_in_threadpool(service.update_and_save, dto)
        if service.is_valid:
            return redirect_with_message(service.message)
        errors = status_errors(service)

    return render(request, template, status_code=HTTPStatus.BAD_REQUEST, title=title, dto=shown, errors=errors)
