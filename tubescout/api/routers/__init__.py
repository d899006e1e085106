from .search_router import router as search_router

__all__ = ["search_router"]
