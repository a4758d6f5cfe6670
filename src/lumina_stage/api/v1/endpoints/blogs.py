# src/lumina_stage/api/v1/endpoints/blogs.py
"""Blog endpoints for the Lumina API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, status
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lumina_stage.api.v1.dependencies import (
    AIClientDep,
    CurrentUserDep,
    ModerationDep,
    OptionalUserDep,
    SessionDep,
    enforce_cooldown,
    ensure_allowed,
)
from lumina_stage.core.settings import settings
from lumina_stage.db.time import utcnow
from lumina_stage.models import Blog, BlogLike, BlogTag, Comment, User
from lumina_stage.models.blog import BLOG_STATUS_PUBLISHED
from lumina_stage.models.notification import NOTIFICATION_BLOG_UPLOAD, NOTIFICATION_LIKE
from lumina_stage.schemas.blog import (
    BlogCard,
    BlogCreate,
    BlogDetailResponse,
    BlogResponse,
    BlogUpdate,
    FeedResponse,
    HomeFeedResponse,
    LikeResponse,
    SummaryResponse,
    TagCount,
    blog_card,
)
from lumina_stage.schemas.comment import serialize_thread
from lumina_stage.services import blogs as blog_service
from lumina_stage.services.embeddings import enrich_blog_embedding
from lumina_stage.services.feed import personalized_feed, related_blogs
from lumina_stage.services.notifications import notify, notify_followers
from lumina_stage.services.threads import build_thread, count_nodes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blogs", tags=["blogs"])


def _get_blog_or_404(db: Session, blog_id: int) -> Blog:
    blog = db.get(Blog, blog_id)
    if blog is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
    return blog


def _get_visible_blog_or_404(db: Session, blog_id: int, viewer: User | None) -> Blog:
    blog = _get_blog_or_404(db, blog_id)
    if not blog_service.can_view(blog, viewer):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found")
    return blog


def _require_min_words(body: str) -> None:
    words = blog_service.word_count(body)
    if words < settings.min_blog_words:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Blog body must contain at least {settings.min_blog_words} words "
                f"(currently {words})."
            ),
        )


@router.post("/", response_model=BlogResponse, status_code=status.HTTP_201_CREATED)
async def create_blog(
    payload: BlogCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    current_user: CurrentUserDep,
    db: SessionDep,
    moderation: ModerationDep,
    ai_client: AIClientDep,
) -> Blog:
    """Publish a new blog.

    Notifies the author and their followers and schedules embedding
    enrichment once the response has been sent.

    Raises:
        HTTPException: 429 inside the posting cooldown, 400 for short or
            rejected content
    """
    enforce_cooldown(
        current_user,
        blog_service.last_blog_at(db, current_user.id),
        settings.blog_cooldown_seconds,
        "posting",
    )
    _require_min_words(payload.body)
    await ensure_allowed(
        moderation,
        db,
        " ".join([payload.title, payload.body, *payload.tags]),
        current_user,
        request,
    )

    blog = Blog(
        title=payload.title,
        body=payload.body,
        category=payload.category,
        cover_image_url=payload.cover_image_url,
        status=payload.status,
        author_id=current_user.id,
    )
    blog.set_tags(payload.tags)
    db.add(blog)
    db.flush()

    target_url = f"/blogs/{blog.id}"
    notify(
        db,
        user_id=current_user.id,
        sender_id=current_user.id,
        type=NOTIFICATION_BLOG_UPLOAD,
        message=f'Your blog "{blog.title}" has been published.',
        blog_id=blog.id,
        target_url=target_url,
    )
    if blog.status == BLOG_STATUS_PUBLISHED:
        notify_followers(
            db,
            author_id=current_user.id,
            type=NOTIFICATION_BLOG_UPLOAD,
            message=f'{current_user.full_name} published "{blog.title}".',
            blog_id=blog.id,
            target_url=target_url,
        )
    db.commit()
    db.refresh(blog)

    background_tasks.add_task(
        enrich_blog_embedding,
        blog.id,
        blog_service.embedding_text(blog.title, blog.body),
        ai_client,
    )
    return blog


@router.get("/feed", response_model=FeedResponse)
async def read_feed(
    db: SessionDep,
    page: int = Query(1, ge=1, description="1-based page number"),
    category: str = Query("all", description="all, trending, featured or a category name"),
) -> FeedResponse:
    """Paginated feed for infinite scrolling."""
    blogs, has_more = blog_service.feed_page(db, page, category)
    return FeedResponse(blogs=[blog_card(blog) for blog in blogs], has_more=has_more, page=page)


@router.get("/home", response_model=HomeFeedResponse)
async def read_home_feed(
    db: SessionDep,
    viewer: OptionalUserDep,
    search: str | None = Query(None, max_length=200),
    category: str | None = Query(None, max_length=50),
    tag: str | None = Query(None, max_length=50),
) -> HomeFeedResponse:
    """Home feed, personalized from reading history when no filter is applied."""
    cards: list[BlogCard] = []
    personalized = False

    if viewer is not None and not (search or category or tag):
        try:
            ranked = personalized_feed(db, viewer.id)
        except (SQLAlchemyError, ValueError):
            db.rollback()
            logger.warning("Personalization failed for user %s", viewer.id, exc_info=True)
            ranked = []
        if ranked:
            cards = [blog_card(item.blog, item.score) for item in ranked]
            personalized = True

    if not cards:
        query = blog_service.standard_feed_query(search=search, category=category, tag=tag)
        cards = [blog_card(blog) for blog in db.scalars(query)]

    categories = db.scalars(
        select(Blog.category)
        .where(Blog.category.is_not(None), Blog.status == BLOG_STATUS_PUBLISHED)
        .distinct()
        .order_by(Blog.category)
    ).all()
    return HomeFeedResponse(
        blogs=cards,
        personalized=personalized,
        categories=list(categories),
        featured=[blog_card(blog) for blog in blog_service.featured(db)],
        trending=[blog_card(blog) for blog in blog_service.trending(db)],
    )


@router.get("/featured", response_model=list[BlogCard])
async def list_featured(
    db: SessionDep,
    limit: int = Query(5, ge=1, le=50),
) -> list[BlogCard]:
    return [blog_card(blog) for blog in blog_service.featured(db, limit)]


@router.get("/trending", response_model=list[BlogCard])
async def list_trending(db: SessionDep) -> list[BlogCard]:
    """The three most viewed blogs."""
    return [blog_card(blog) for blog in blog_service.trending(db)]


@router.get("/tags/trending", response_model=list[TagCount])
async def list_trending_tags(db: SessionDep) -> list[TagCount]:
    """The five most used tags."""
    return [TagCount(tag=tag, count=count) for tag, count in blog_service.trending_tags(db)]


@router.get("/category/{category}", response_model=list[BlogCard])
async def list_by_category(category: str, db: SessionDep) -> list[BlogCard]:
    blogs = db.scalars(
        blog_service.published()
        .where(func.lower(Blog.category) == category.strip().lower())
        .order_by(Blog.created_at.desc(), Blog.id.desc())
    )
    return [blog_card(blog) for blog in blogs]


@router.get("/tag/{tag}", response_model=list[BlogCard])
async def list_by_tag(tag: str, db: SessionDep) -> list[BlogCard]:
    blogs = db.scalars(
        blog_service.published()
        .where(
            Blog.id.in_(
                select(BlogTag.blog_id).where(func.lower(BlogTag.tag) == tag.strip().lower())
            )
        )
        .order_by(Blog.created_at.desc(), Blog.id.desc())
    )
    return [blog_card(blog) for blog in blogs]


@router.get("/{blog_id}", response_model=BlogDetailResponse)
async def read_blog(blog_id: int, db: SessionDep, viewer: OptionalUserDep) -> BlogDetailResponse:
    """Return a blog with its comment thread and count the view.

    Signed-in readers also get the blog added to their reading history.
    """
    blog = _get_visible_blog_or_404(db, blog_id, viewer)

    blog_service.record_view(db, blog.id)
    db.refresh(blog)

    comments = db.scalars(
        select(Comment).where(Comment.blog_id == blog.id).order_by(Comment.id)
    ).all()
    thread = build_thread(comments, blog.author_id)

    is_bookmarked = False
    is_liked = False
    if viewer is not None:
        is_bookmarked = blog_service.is_bookmarked(db, viewer.id, blog.id)
        is_liked = db.get(BlogLike, (blog.id, viewer.id)) is not None
        try:
            blog_service.track_reading_history(db, viewer.id, blog.id)
        except SQLAlchemyError:
            db.rollback()
            logger.warning("Failed to track reading history for user %s", viewer.id, exc_info=True)

    return BlogDetailResponse(
        blog=BlogResponse.model_validate(blog),
        comments=serialize_thread(thread, blog.author_id),
        comment_count=count_nodes(thread),
        is_bookmarked=is_bookmarked,
        is_liked=is_liked,
        meta_description=blog_service.meta_description(blog.body),
    )


@router.put("/{blog_id}", response_model=BlogResponse)
async def update_blog(
    blog_id: int,
    payload: BlogUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    current_user: CurrentUserDep,
    db: SessionDep,
    moderation: ModerationDep,
    ai_client: AIClientDep,
) -> Blog:
    """Edit a blog; only its author may do so."""
    blog = _get_blog_or_404(db, blog_id)
    if blog.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can edit this blog",
        )
    enforce_cooldown(current_user, blog.updated_at, settings.edit_cooldown_seconds, "editing")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "body" in changes:
        _require_min_words(changes["body"])

    text_parts = [changes.get("title", ""), changes.get("body", ""), *changes.get("tags", [])]
    text = " ".join(part for part in text_parts if part)
    await ensure_allowed(moderation, db, text, current_user, request)

    tags = changes.pop("tags", None)
    for field_name, value in changes.items():
        setattr(blog, field_name, value.strip() if field_name in {"title", "category"} else value)
    if tags is not None:
        blog.set_tags(tags)
    blog.updated_at = utcnow()
    db.commit()
    db.refresh(blog)

    if "title" in changes or "body" in changes:
        background_tasks.add_task(
            enrich_blog_embedding,
            blog.id,
            blog_service.embedding_text(blog.title, blog.body),
            ai_client,
        )
    return blog


@router.delete("/{blog_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blog(blog_id: int, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Delete a blog and everything attached to it."""
    blog = _get_blog_or_404(db, blog_id)
    if blog.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can delete this blog",
        )
    blog_service.delete_blog(db, blog)


@router.post("/{blog_id}/like", response_model=LikeResponse)
async def toggle_like(blog_id: int, current_user: CurrentUserDep, db: SessionDep) -> LikeResponse:
    """Like or unlike a blog."""
    blog = _get_visible_blog_or_404(db, blog_id, current_user)
    existing = db.get(BlogLike, (blog.id, current_user.id))
    if existing is not None:
        db.delete(existing)
        delta = -1
    else:
        db.add(BlogLike(blog_id=blog.id, user_id=current_user.id))
        delta = 1
        notify(
            db,
            user_id=blog.author_id,
            sender_id=current_user.id,
            type=NOTIFICATION_LIKE,
            message=f'{current_user.full_name} liked your blog "{blog.title}".',
            blog_id=blog.id,
            target_url=f"/blogs/{blog.id}",
        )
    counter = update(Blog).where(Blog.id == blog.id)
    if delta < 0:
        counter = counter.where(Blog.likes > 0)
    db.execute(
        counter.values(likes=Blog.likes + delta)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(blog)
    return LikeResponse(liked=delta > 0, likes=blog.likes)


@router.get("/{blog_id}/related", response_model=list[BlogCard])
async def list_related(
    blog_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> list[BlogCard]:
    """Blogs most similar to this one; newest blogs when it has no embedding yet."""
    blog = _get_visible_blog_or_404(db, blog_id, viewer)
    return [blog_card(item.blog, item.score) for item in related_blogs(db, blog)]


@router.get("/{blog_id}/summary", response_model=SummaryResponse)
async def read_summary(
    blog_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    ai_client: AIClientDep,
) -> SummaryResponse:
    """AI summary and highlights of a blog."""
    blog = _get_visible_blog_or_404(db, blog_id, viewer)
    data = await ai_client.summarize(blog_service.plain_text(blog.body))
    return SummaryResponse(
        id=blog.id,
        title=blog.title,
        summary=data["summary"],
        highlights=data["highlights"],
        cover_image_url=blog.cover_image_url,
    )
