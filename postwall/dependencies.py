from fastapi import Request

from .storage import PostStore


def get_store(request: Request) -> PostStore:
    """The store built by create_app, shared by every request."""
    return request.app.state.store
