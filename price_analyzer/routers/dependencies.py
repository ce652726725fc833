from fastapi import Request

from price_analyzer.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """The container built during application startup."""
    return request.app.state.services
