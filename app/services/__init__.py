from app.services.openrouter_client import OpenRouterService, getOpenRouterService

__all__ = ["OpenRouterService", "getOpenRouterService"]
