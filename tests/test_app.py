import pytest
from fastapi.testclient import TestClient

from library_api.config.factory import build_gateway
from library_api.config.settings import (
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    EventBusSettings,
    Settings,
)
from library_api.main import create_app
from library_api.shared.database import InMemoryGateway, SqlAlchemyGateway


def make_settings(**database) -> Settings:
    return Settings(
        app=AppSettings(app_name="TestLibraryApi", seed_data=True),
        database=DatabaseSettings(**{"backend": "memory", "max_retries": 1, **database}),
        auth=AuthSettings(jwt_secret="test-secret", shared_password="secret"),
        event_bus=EventBusSettings(),
    )


def graphql(client, query, token=None):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    response = client.post("/graphql", json={"query": query}, headers=headers)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def client():
    with TestClient(create_app(make_settings())) as test_client:
        yield test_client


def test_build_gateway_picks_backend(tmp_path):
    assert isinstance(build_gateway(make_settings()), InMemoryGateway)
    sql = build_gateway(make_settings(backend="sql", url=f"sqlite+aiosqlite:///{tmp_path / 'x.db'}"))
    assert isinstance(sql, SqlAlchemyGateway)
    with pytest.raises(ValueError):
        build_gateway(make_settings(backend="mongo"))


def test_health_endpoint(client):
    response = client.get("/health/")

    assert response.status_code == 200
    body = response.json()
    assert body["database"]["status"] == "healthy"
    assert body["summary"]["unhealthy"] == 0


def test_seeded_catalog_is_queryable(client):
    body = graphql(client, "{ bookCount authorCount }")

    assert body["data"] == {"bookCount": 7, "authorCount": 5}


def test_authenticated_flow_over_http(client):
    graphql(client, 'mutation { createUser(username: "mluukkai", favoriteGenre: "refactoring") { id } }')
    login = graphql(client, 'mutation { login(username: "mluukkai", password: "secret") { value } }')
    token = login["data"]["login"]["value"]

    me = graphql(client, "{ me { username favoriteGenre } }", token=token)
    assert me["data"]["me"] == {"username": "mluukkai", "favoriteGenre": "refactoring"}

    added = graphql(
        client,
        'mutation { addBook(title: "NoSQL Distilled", author: "Martin Fowler", published: 2012, '
        'genres: ["database", "nosql"]) { title author { name bookCount } } }',
        token=token,
    )
    assert added["data"]["addBook"] == {
        "title": "NoSQL Distilled",
        "author": {"name": "Martin Fowler", "bookCount": 2},
    }


def test_mutation_without_token_is_unauthenticated(client):
    body = graphql(client, 'mutation { editBorn(name: "Sandi Metz", born: 1953) { born } }')

    assert body["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"


def test_invalid_token_is_treated_as_anonymous(client):
    body = graphql(client, "{ me { username } }", token="garbage")

    assert body["data"] == {"me": None}


def test_shutdown_ends_live_subscriptions():
    app = create_app(make_settings())
    with TestClient(app):
        subscription = app.state.event_bus.subscribe("BOOK_ADDED")

    assert subscription.cancelled
    assert app.state.event_bus.topics() == []
