import asyncio

import pytest

from library_api.catalog.fixtures import seed_catalog
from library_api.catalog.models import User
from library_api.catalog.schema import schema
from library_api.catalog.services import BOOK_ADDED, UNIQUE_FIELDS, CatalogService
from library_api.config.settings import AuthSettings
from library_api.shared.auth import TokenService
from library_api.shared.database import InMemoryGateway
from library_api.shared.event_bus import InProcessEventBus
from library_api.shared.logger import JohnWickLogger

logger = JohnWickLogger(name="TestSchema", log_file=None)

USER = User(id="u1", username="mluukkai", favorite_genre="classic")

ADD_BOOK = """
mutation AddBook($title: String!, $author: String!, $published: Int!, $genres: [String!]!) {
  addBook(title: $title, author: $author, published: $published, genres: $genres) {
    title
    published
    genres
    author { name born bookCount }
  }
}
"""


@pytest.fixture
def gateway():
    return InMemoryGateway(unique_fields=UNIQUE_FIELDS, logger=logger)


@pytest.fixture
def bus():
    return InProcessEventBus(logger=logger)


@pytest.fixture
def service(gateway, bus):
    tokens = TokenService(secret="test-secret", logger=logger)
    return CatalogService(gateway, bus, tokens, AuthSettings(shared_password="secret"), logger=logger)


def context(service, user=None):
    return {"service": service, "current_user": user}


@pytest.mark.asyncio
async def test_counts_and_all_authors(service, gateway):
    await seed_catalog(gateway, logger=logger)

    result = await schema.execute(
        "{ bookCount authorCount allAuthors { name born bookCount } }",
        context_value=context(service),
    )

    assert result.errors is None
    assert result.data["bookCount"] == 7
    assert result.data["authorCount"] == 5
    authors = {a["name"]: a for a in result.data["allAuthors"]}
    assert authors["Robert Martin"] == {"name": "Robert Martin", "born": 1952, "bookCount": 2}
    assert authors["Sandi Metz"]["born"] is None


@pytest.mark.asyncio
async def test_all_books_with_filters_resolves_author(service, gateway):
    await seed_catalog(gateway, logger=logger)

    result = await schema.execute(
        '{ allBooks(author: "Fyodor Dostoevsky", genre: "crime") { title author { name bookCount } } }',
        context_value=context(service),
    )

    assert result.errors is None
    assert result.data["allBooks"] == [
        {"title": "Crime and punishment", "author": {"name": "Fyodor Dostoevsky", "bookCount": 2}}
    ]


@pytest.mark.asyncio
async def test_add_book_returns_book_and_notifies(service, bus):
    subscription = bus.subscribe(BOOK_ADDED)

    result = await schema.execute(
        ADD_BOOK,
        variable_values={"title": "Clean Code", "author": "Robert Martin", "published": 2008, "genres": ["refactoring"]},
        context_value=context(service, USER),
    )

    assert result.errors is None
    assert result.data["addBook"] == {
        "title": "Clean Code",
        "published": 2008,
        "genres": ["refactoring"],
        "author": {"name": "Robert Martin", "born": None, "bookCount": 1},
    }
    assert (await subscription.next()).value.title == "Clean Code"


@pytest.mark.asyncio
async def test_add_book_without_user_is_unauthenticated(service):
    result = await schema.execute(
        ADD_BOOK,
        variable_values={"title": "Clean Code", "author": "Robert Martin", "published": 2008, "genres": []},
        context_value=context(service),
    )

    assert result.errors[0].message == "Not authenticated"
    assert result.errors[0].extensions["code"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_duplicate_title_is_bad_user_input(service):
    variables = {"title": "Clean Code", "author": "Robert Martin", "published": 2008, "genres": []}
    await schema.execute(ADD_BOOK, variable_values=variables, context_value=context(service, USER))

    result = await schema.execute(ADD_BOOK, variable_values=variables, context_value=context(service, USER))

    error = result.errors[0]
    assert error.message == "Title must be unique"
    assert error.extensions == {"code": "BAD_USER_INPUT", "invalidArgs": "Clean Code"}


@pytest.mark.asyncio
async def test_edit_born_unknown_author_is_null(service):
    result = await schema.execute(
        'mutation { editBorn(name: "Nobody Here", born: 1900) { name born } }',
        context_value=context(service, USER),
    )

    assert result.errors is None
    assert result.data == {"editBorn": None}


@pytest.mark.asyncio
async def test_edit_born_updates_author(service, gateway):
    await seed_catalog(gateway, logger=logger)

    result = await schema.execute(
        'mutation { editBorn(name: "Sandi Metz", born: 1953) { name born bookCount } }',
        context_value=context(service, USER),
    )

    assert result.data == {"editBorn": {"name": "Sandi Metz", "born": 1953, "bookCount": 1}}


@pytest.mark.asyncio
async def test_create_user_login_and_me(service):
    created = await schema.execute(
        'mutation { createUser(username: "mluukkai", favoriteGenre: "classic") { username favoriteGenre id } }',
        context_value=context(service),
    )
    assert created.errors is None
    assert created.data["createUser"]["favoriteGenre"] == "classic"

    login = await schema.execute(
        'mutation { login(username: "mluukkai", password: "secret") { value } }',
        context_value=context(service),
    )
    token = login.data["login"]["value"]

    current_user = await service.user_from_authorization(f"Bearer {token}")
    me = await schema.execute("{ me { username favoriteGenre } }", context_value=context(service, current_user))
    assert me.data == {"me": {"username": "mluukkai", "favoriteGenre": "classic"}}


@pytest.mark.asyncio
async def test_me_without_user_is_null(service):
    result = await schema.execute("{ me { username } }", context_value=context(service))

    assert result.data == {"me": None}


@pytest.mark.asyncio
async def test_wrong_credentials_are_bad_user_input(service):
    result = await schema.execute(
        'mutation { login(username: "nobody", password: "secret") { value } }',
        context_value=context(service),
    )

    assert result.data == {"login": None}
    assert result.errors[0].message == "Wrong credentials"
    assert result.errors[0].extensions["code"] == "BAD_USER_INPUT"


@pytest.mark.asyncio
async def test_book_added_subscription_streams_new_books(service, bus):
    results = await schema.subscribe(
        "subscription { bookAdded { title author { name } } }",
        context_value=context(service),
    )

    async def first_result():
        return await results.__anext__()

    pending = asyncio.create_task(first_result())
    deadline = asyncio.get_running_loop().time() + 1
    while bus.subscriber_count(BOOK_ADDED) == 0:
        assert asyncio.get_running_loop().time() < deadline
        await asyncio.sleep(0.01)

    await service.add_book(USER, "Demons", "Fyodor Dostoevsky", 1872, ["classic"])
    result = await asyncio.wait_for(pending, timeout=1)

    assert result.errors is None
    assert result.data == {"bookAdded": {"title": "Demons", "author": {"name": "Fyodor Dostoevsky"}}}
    await results.aclose()
