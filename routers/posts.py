import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db, settings
from models import User
from schemas import Post as PostSchema, PostCategory, PostCreate, PostUpdate, PostList, PostDetail, PostCreated, Ack
from dependencies import get_actor, get_current_user, enforce
from permissions import Actor, Category, Operation, Resource
import crud

logger = logging.getLogger(__name__)

router = APIRouter()

def _resource(category: PostCategory, db_post=None) -> Resource:
    return Resource(
        category=Category(category.value),
        author_id=db_post.author_id if db_post is not None else None,
    )

def _load_post(db: Session, category: PostCategory, post_id: int):
    try:
        db_post = crud.get_post(db, category, post_id)
    except SQLAlchemyError as e:
        logger.error(f"Error loading {category.value} post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error loading post"
        )
    if not db_post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found"
        )
    return db_post

@router.get("", response_model=PostList)
async def list_posts(
    type: PostCategory = Query(PostCategory.COMMUNITY),
    db: Session = Depends(get_db)
):
    """Latest posts of one board, newest first"""
    try:
        posts = crud.list_posts(db, type, limit=settings.POST_LIST_LIMIT)
    except SQLAlchemyError as e:
        logger.error(f"Error listing {type.value} posts: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error loading posts"
        )
    return {"posts": [PostSchema.model_validate(post) for post in posts]}

@router.post("", response_model=PostCreated, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Write a post; notices can only be written by admins"""
    enforce(Actor.from_user(current_user), _resource(post.type), Operation.CREATE)

    try:
        db_post = crud.create_post(db, post.type, post, current_user.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating {post.type.value} post for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating post"
        )

    logger.info(f"User {current_user.id} created {post.type.value} post {db_post.id}")
    return {"postId": db_post.id, "type": post.type}

@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    type: PostCategory = Query(PostCategory.COMMUNITY),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor)
):
    db_post = _load_post(db, type, post_id)
    enforce(actor, _resource(type, db_post), Operation.VIEW)
    return {"post": PostSchema.model_validate(db_post)}

@router.put("/{post_id}", response_model=Ack)
async def update_post(
    post_id: int,
    post: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit a post (community: owner or admin, notice: admin)"""
    db_post = _load_post(db, post.type, post_id)
    enforce(Actor.from_user(current_user), _resource(post.type, db_post), Operation.EDIT)

    try:
        crud.update_post(db, db_post, post)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating {post.type.value} post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating post"
        )

    logger.info(f"User {current_user.id} updated {post.type.value} post {post_id}")
    return {"success": True}

@router.delete("/{post_id}", response_model=Ack)
async def delete_post(
    post_id: int,
    type: PostCategory = Query(PostCategory.COMMUNITY),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a post (community: owner or admin, notice: admin)"""
    db_post = _load_post(db, type, post_id)
    enforce(Actor.from_user(current_user), _resource(type, db_post), Operation.DELETE)

    try:
        crud.delete_post(db, db_post)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting {type.value} post {post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting post"
        )

    logger.info(f"User {current_user.id} deleted {type.value} post {post_id}")
    return {"success": True}
