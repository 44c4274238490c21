import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from accounts import AccountService
from config import database_file, seeding_enabled, settings
from database import initialize_database
from errors import ErrorKind, LibraryError
from library import Library

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: open storage, create schema, seed an empty catalog, then serve
    db_file = database_file()
    initialize_database(db_file, seed=seeding_enabled())
    app.state.library = Library(db_file)
    app.state.accounts = AccountService(db_file)
    logger.info(f"Server running on port {settings.api_port} (database: {db_file})")
    yield
    app.state.library.close()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error mapping ---
# INTERNAL is absent: storage faults use the fault status of the route.
STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.UNAUTHORIZED: 401,
}


def _error_response(exc: LibraryError, fault_status: int = 400) -> JSONResponse:
    status = STATUS_BY_KIND.get(exc.kind, fault_status)
    return JSONResponse(status_code=status, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report unparseable bodies as 400 {error} instead of FastAPI's 422."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request body"})


# --- Dependencies ---
def get_library(request: Request) -> Library:
    return request.app.state.library


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


# --- Models ---
class SignupModel(BaseModel):
    name: Any = None
    email: Any = None
    password: Any = None


class LoginModel(BaseModel):
    email: Any = None
    password: Any = None


class BorrowModel(BaseModel):
    borrower: Any = None


class UserModel(BaseModel):
    name: str
    email: str


class AuthResponseModel(BaseModel):
    message: str
    user: UserModel


class MessageModel(BaseModel):
    message: str


# --- Account endpoints ---
@app.post("/api/auth/signup", status_code=201, response_model=AuthResponseModel)
def signup(payload: Optional[SignupModel] = None, accounts: AccountService = Depends(get_accounts)):
    payload = payload or SignupModel()
    try:
        user = accounts.signup(payload.name, payload.email, payload.password)
    except LibraryError as e:
        return _error_response(e)
    return AuthResponseModel(message="User created", user=UserModel(**user.public_dict()))


@app.post("/api/auth/login", response_model=AuthResponseModel)
def login(payload: Optional[LoginModel] = None, accounts: AccountService = Depends(get_accounts)):
    payload = payload or LoginModel()
    try:
        user = accounts.login(payload.email, payload.password)
    except LibraryError as e:
        return _error_response(e)
    return AuthResponseModel(message="Login successful", user=UserModel(**user.public_dict()))


# --- Book endpoints ---
@app.get("/api/books")
def list_books(library: Library = Depends(get_library)):
    try:
        books = library.list_books()
    except LibraryError as e:
        return _error_response(e, fault_status=500)
    return [book.to_dict() for book in books]


@app.post("/api/books", status_code=201)
def add_book(payload: Optional[Dict[str, Any]] = Body(default=None), library: Library = Depends(get_library)):
    try:
        book = library.add_book(payload or {})
    except LibraryError as e:
        return _error_response(e)
    return book.to_dict()


@app.put("/api/books/{book_id}")
def update_book(book_id: str, payload: Optional[Dict[str, Any]] = Body(default=None),
                library: Library = Depends(get_library)):
    """Update a book. An unknown (well-formed) id yields 200 with a null body."""
    try:
        book = library.update_book(book_id, payload or {})
    except LibraryError as e:
        return _error_response(e)
    return book.to_dict() if book else None


@app.delete("/api/books/{book_id}", response_model=MessageModel)
def delete_book(book_id: str, library: Library = Depends(get_library)):
    try:
        library.remove_book(book_id)
    except LibraryError as e:
        return _error_response(e, fault_status=500)
    return MessageModel(message="Book deleted")


@app.post("/api/books/{book_id}/borrow")
def borrow_book(book_id: str, payload: Optional[BorrowModel] = None, library: Library = Depends(get_library)):
    payload = payload or BorrowModel()
    try:
        book = library.borrow_book(book_id, payload.borrower)
    except LibraryError as e:
        return _error_response(e)
    return book.to_dict()


@app.post("/api/books/{book_id}/return")
def return_book(book_id: str, library: Library = Depends(get_library)):
    try:
        book = library.return_book(book_id)
    except LibraryError as e:
        return _error_response(e)
    return book.to_dict()
