from typing import List

from fastapi import APIRouter, Depends, status

from .dependencies import get_store
from .errors import NotFoundError
from .models import ApiResponse, PatchPostRequest, Post, PostCreate
from .service import create_post, edit_post
from .storage import PostStore
from .validation import require_post_id

router = APIRouter()

posts = APIRouter(prefix="/api/posts", tags=["posts"])


@posts.get("", response_model=ApiResponse[List[Post]], response_model_exclude_none=True)
def list_posts(store: PostStore = Depends(get_store)):
    return ApiResponse[List[Post]](success=True, data=store.list())


@posts.post("", response_model=ApiResponse[Post], response_model_exclude_none=True,
            status_code=status.HTTP_201_CREATED)
def new_post(data: PostCreate, store: PostStore = Depends(get_store)):
    return ApiResponse[Post](success=True, data=create_post(store, data))


@posts.get("/{post_id}", response_model=ApiResponse[Post], response_model_exclude_none=True)
def get_post(post_id: str, store: PostStore = Depends(get_store)):
    post = store.get(require_post_id(post_id))
    if post is None:
        raise NotFoundError("Post not found")
    return ApiResponse[Post](success=True, data=post)


@posts.patch("/{post_id}", response_model=ApiResponse[Post], response_model_exclude_none=True)
def patch_post(post_id: str, data: PatchPostRequest, store: PostStore = Depends(get_store)):
    post = edit_post(store, post_id, data.editId, data.updates)
    return ApiResponse[Post](success=True, data=post)


router.include_router(posts)
