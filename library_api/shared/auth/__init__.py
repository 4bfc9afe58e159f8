from library_api.shared.auth.token_service import TokenService

__all__ = ["TokenService"]
