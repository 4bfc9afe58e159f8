from contextlib import aclosing, contextmanager
from typing import AsyncGenerator, List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.types import Info

from library_api.catalog.errors import CatalogError
from library_api.catalog.models import AuthorView, Book, User
from library_api.catalog.services import CatalogService


@contextmanager
def graphql_errors():
    """Re-raise catalog errors as GraphQL errors carrying an ``extensions.code``."""
    try:
        yield
    except CatalogError as exc:
        extensions = {"code": exc.code}
        if exc.invalid_args is not None:
            extensions["invalidArgs"] = exc.invalid_args
        raise GraphQLError(exc.message, extensions=extensions) from exc


def _service(info: Info) -> CatalogService:
    return info.context["service"]


@strawberry.type(name="Author")
class AuthorType:
    id: strawberry.ID
    name: str
    born: Optional[int]
    book_count: int

    @classmethod
    def from_view(cls, view: AuthorView) -> "AuthorType":
        return cls(
            id=strawberry.ID(view.author.id),
            name=view.author.name,
            born=view.author.born,
            book_count=view.book_count,
        )


@strawberry.type(name="Book")
class BookType:
    id: strawberry.ID
    title: str
    published: int
    genres: List[str]
    author_name: strawberry.Private[str]

    @strawberry.field
    async def author(self, info: Info) -> AuthorType:
        view = await _service(info).find_author(self.author_name)
        if view is None:
            raise GraphQLError(f"Author '{self.author_name}' not found")
        return AuthorType.from_view(view)

    @classmethod
    def from_model(cls, book: Book) -> "BookType":
        return cls(
            id=strawberry.ID(book.id),
            title=book.title,
            published=book.published,
            genres=list(book.genres),
            author_name=book.author,
        )


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    username: str
    favorite_genre: str

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(id=strawberry.ID(user.id), username=user.username, favorite_genre=user.favorite_genre)


@strawberry.type(name="Token")
class TokenType:
    value: str


@strawberry.type
class Query:
    @strawberry.field
    async def book_count(self, info: Info) -> int:
        return await _service(info).book_count()

    @strawberry.field
    async def author_count(self, info: Info) -> int:
        return await _service(info).author_count()

    @strawberry.field
    async def all_books(
        self,
        info: Info,
        author: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> List[BookType]:
        books = await _service(info).all_books(author=author, genre=genre)
        return [BookType.from_model(book) for book in books]

    @strawberry.field
    async def all_authors(self, info: Info) -> List[AuthorType]:
        return [AuthorType.from_view(view) for view in await _service(info).all_authors()]

    @strawberry.field
    def me(self, info: Info) -> Optional[UserType]:
        user = _service(info).me(info.context.get("current_user"))
        return UserType.from_model(user) if user is not None else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_book(
        self,
        info: Info,
        title: str,
        author: str,
        published: int,
        genres: List[str],
    ) -> BookType:
        with graphql_errors():
            book = await _service(info).add_book(
                info.context.get("current_user"), title, author, published, genres
            )
        return BookType.from_model(book)

    @strawberry.mutation
    async def edit_born(self, info: Info, name: str, born: int) -> Optional[AuthorType]:
        with graphql_errors():
            view = await _service(info).edit_born(info.context.get("current_user"), name, born)
        return AuthorType.from_view(view) if view is not None else None

    @strawberry.mutation
    async def create_user(self, info: Info, username: str, favorite_genre: str) -> Optional[UserType]:
        with graphql_errors():
            user = await _service(info).create_user(username, favorite_genre)
        return UserType.from_model(user)

    @strawberry.mutation
    async def login(self, info: Info, username: str, password: str) -> Optional[TokenType]:
        with graphql_errors():
            token = await _service(info).login(username, password)
        return TokenType(value=token)


@strawberry.type
class Subscription:
    @strawberry.subscription
    async def book_added(self, info: Info) -> AsyncGenerator[BookType, None]:
        async with aclosing(_service(info).book_added_stream()) as books:
            async for book in books:
                yield BookType.from_model(book)


schema = strawberry.Schema(query=Query, mutation=Mutation, subscription=Subscription)
