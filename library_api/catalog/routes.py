from typing import Any, Dict, Optional

from fastapi import Header
from strawberry.fastapi import GraphQLRouter

from library_api.catalog.schema import schema
from library_api.catalog.services import CatalogService


def build_graphql_router(service: CatalogService) -> GraphQLRouter:
    """GraphQL over HTTP plus WebSocket subscriptions, bound to ``service``."""

    async def get_context(authorization: Optional[str] = Header(default=None)) -> Dict[str, Any]:
        return {
            "service": service,
            "current_user": await service.user_from_authorization(authorization),
        }

    return GraphQLRouter(schema, context_getter=get_context)
