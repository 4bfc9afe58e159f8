from typing import AsyncIterator, List, Optional

from pydantic import ValidationError

from library_api.catalog.errors import BadUserInputError, NotAuthenticatedError
from library_api.catalog.models import Author, AuthorView, Book, User
from library_api.config.settings import AuthSettings
from library_api.shared.auth import TokenService
from library_api.shared.database import PersistenceError, PersistenceGateway
from library_api.shared.event_bus import EventBus
from library_api.shared.logger import JohnWickLogger
from library_api.shared.metrics import CatalogMetrics, MetricsCollector

BOOK_ADDED = "BOOK_ADDED"

BOOKS = "books"
AUTHORS = "authors"
USERS = "users"

UNIQUE_FIELDS = {
    BOOKS: ["title"],
    AUTHORS: ["name"],
    USERS: ["username"],
}


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error['msg']}" if field else error["msg"]


class CatalogService:
    """
    Use cases behind the GraphQL schema.

    Persistence and validation failures are translated into
    BadUserInputError here; missing credentials raise NotAuthenticatedError.
    Event bus failures are infrastructure faults and propagate as they are.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        event_bus: EventBus,
        tokens: TokenService,
        auth: AuthSettings,
        logger: Optional[JohnWickLogger] = None,
    ):
        self.gateway = gateway
        self.event_bus = event_bus
        self.tokens = tokens
        self.auth = auth
        self.logger = logger or JohnWickLogger(name="CatalogService")
        self.metrics = MetricsCollector(self.logger)

    # ----------------------------
    # Queries
    # ----------------------------
    async def book_count(self) -> int:
        return await self.gateway.count(BOOKS)

    async def author_count(self) -> int:
        return await self.gateway.count(AUTHORS)

    async def all_books(self, author: Optional[str] = None, genre: Optional[str] = None) -> List[Book]:
        criteria = {"author": author} if author else None
        books = [Book.model_validate(record) for record in await self.gateway.find(BOOKS, criteria)]
        if genre:
            books = [book for book in books if genre in book.genres]
        return books

    async def all_authors(self) -> List[AuthorView]:
        authors = await self.gateway.find(AUTHORS)
        counts = await self.gateway.aggregate_count(BOOKS, "author")
        return [
            AuthorView(author=Author.model_validate(record), book_count=counts.get(record["name"], 0))
            for record in authors
        ]

    async def find_author(self, name: str) -> Optional[AuthorView]:
        record = await self.gateway.find_one(AUTHORS, {"name": name})
        if record is None:
            return None
        return AuthorView(
            author=Author.model_validate(record),
            book_count=await self.gateway.count(BOOKS, {"author": name}),
        )

    def me(self, current_user: Optional[User]) -> Optional[User]:
        return current_user

    # ----------------------------
    # Mutations
    # ----------------------------
    async def add_book(
        self,
        current_user: Optional[User],
        title: str,
        author: str,
        published: int,
        genres: List[str],
    ) -> Book:
        self._require_user(current_user)

        try:
            book = Book(title=title, author=author, published=published, genres=genres)
        except ValidationError as exc:
            raise BadUserInputError(_describe(exc), invalid_args=title) from exc

        if await self.gateway.find_one(BOOKS, {"title": title}) is not None:
            raise BadUserInputError("Title must be unique", invalid_args=title)

        try:
            await self._ensure_author(author)
            stored = await self.gateway.insert(BOOKS, book.model_dump(exclude={"id"}))
        except PersistenceError as exc:
            raise BadUserInputError(str(exc), invalid_args=title) from exc

        book = Book.model_validate(stored)
        self.metrics.increment(CatalogMetrics.BOOKS_ADDED)
        self.logger.info("Book added", extra={"id": book.id, "title": book.title, "author": book.author})

        # only after the book is stored
        self.event_bus.publish(BOOK_ADDED, book)
        return book

    async def edit_born(self, current_user: Optional[User], name: str, born: int) -> Optional[AuthorView]:
        self._require_user(current_user)

        record = await self.gateway.find_one(AUTHORS, {"name": name})
        if record is None:
            return None

        record["born"] = born
        try:
            stored = await self.gateway.save(AUTHORS, record)
        except PersistenceError as exc:
            raise BadUserInputError(str(exc), invalid_args=name) from exc

        self.logger.info("Author birth year updated", extra={"name": name, "born": born})
        return AuthorView(
            author=Author.model_validate(stored),
            book_count=await self.gateway.count(BOOKS, {"author": name}),
        )

    async def create_user(self, username: str, favorite_genre: str) -> User:
        try:
            user = User(username=username, favorite_genre=favorite_genre)
            stored = await self.gateway.insert(USERS, user.model_dump(exclude={"id"}))
        except (ValidationError, PersistenceError) as exc:
            self.logger.warning("Creating the user failed", extra={"username": username, "error": str(exc)})
            raise BadUserInputError("Creating the user failed", invalid_args=username) from exc

        self.metrics.increment(CatalogMetrics.USERS_CREATED)
        self.logger.info("User created", extra={"username": username})
        return User.model_validate(stored)

    async def login(self, username: str, password: str) -> str:
        record = await self.gateway.find_one(USERS, {"username": username})
        if record is None or password != self.auth.shared_password:
            self.metrics.increment(CatalogMetrics.FAILED_LOGINS)
            raise BadUserInputError("Wrong credentials", invalid_args=username)

        self.metrics.increment(CatalogMetrics.LOGINS)
        return self.tokens.issue({"username": record["username"], "id": record["id"]})

    # ----------------------------
    # Authentication
    # ----------------------------
    async def user_from_authorization(self, authorization: Optional[str]) -> Optional[User]:
        claims = self.tokens.claims_from_header(authorization)
        if not claims or "id" not in claims:
            return None
        record = await self.gateway.find_one(USERS, {"id": claims["id"]})
        return User.model_validate(record) if record is not None else None

    # ----------------------------
    # Subscriptions
    # ----------------------------
    async def book_added_stream(self) -> AsyncIterator[Book]:
        """Yield every book added while the consumer keeps iterating."""
        subscription = self.event_bus.subscribe(BOOK_ADDED)
        try:
            async for event in subscription:
                yield event.value
        finally:
            self.event_bus.cancel(subscription)

    # ----------------------------
    # Helpers
    # ----------------------------
    @staticmethod
    def _require_user(current_user: Optional[User]) -> None:
        if current_user is None:
            raise NotAuthenticatedError()

    async def _ensure_author(self, name: str) -> None:
        if await self.gateway.find_one(AUTHORS, {"name": name}) is not None:
            return
        await self.gateway.insert(AUTHORS, Author(name=name).model_dump(exclude={"id"}))
        self.metrics.increment(CatalogMetrics.AUTHORS_CREATED)
        self.logger.info("Author created", extra={"name": name})
