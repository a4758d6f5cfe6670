"""Tests for blog helpers."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select

from lumina_stage.db.time import utcnow
from lumina_stage.models import Blog, BlogLike, Bookmark, Comment, CommentReaction, ReadingHistory
from lumina_stage.models.blog import BLOG_STATUS_DRAFT
from lumina_stage.models.comment import ReactionSymbol
from lumina_stage.services import blogs as blog_service
from tests.factories import make_blog, make_comment


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def test_text_helpers() -> None:
    body = "<p>" + "word " * 401 + "</p>"

    assert blog_service.word_count(body) == 401
    assert blog_service.read_time(body) == 3
    assert blog_service.read_time("") == 1
    assert blog_service.meta_description("<p>short</p>") == "short"
    assert blog_service.meta_description(body) == ("word " * 30)[:150] + "..."
    assert blog_service.embedding_text("Title", "<p>Body</p>") == "Title\n\nBody"


def test_cooldown_remaining() -> None:
    now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    assert blog_service.cooldown_remaining(None, 60, now) == 0
    assert blog_service.cooldown_remaining(now - timedelta(seconds=20), 60, now) == 40
    assert blog_service.cooldown_remaining(now - timedelta(seconds=61), 60, now) == 0
    # Naive values from SQLite are read as UTC.
    assert blog_service.cooldown_remaining(datetime(2024, 5, 1, 11, 59, 30), 60, now) == 30


def test_record_view_increments_counter(db_session, test_blog) -> None:
    assert blog_service.record_view(db_session, test_blog.id)
    assert blog_service.record_view(db_session, test_blog.id)
    assert not blog_service.record_view(db_session, 9999)

    db_session.refresh(test_blog)
    assert test_blog.views == 2


def test_reading_history_is_deduplicated_and_capped(db_session, test_user, other_user) -> None:
    blogs = [make_blog(db_session, other_user, title=f"Blog {index}") for index in range(4)]

    for blog in blogs:
        blog_service.track_reading_history(db_session, test_user.id, blog.id, limit=3)
    blog_service.track_reading_history(db_session, test_user.id, blogs[1].id, limit=3)

    assert blog_service.history_blog_ids(db_session, test_user.id, limit=10) == [
        blogs[1].id,
        blogs[3].id,
        blogs[2].id,
    ]


def test_standard_feed_prefers_unseen_posts(db_session, test_user) -> None:
    popular = make_blog(db_session, test_user, title="Popular", views=50)
    fresh = make_blog(db_session, test_user, title="Fresh", views=0)
    make_blog(db_session, test_user, title="Hidden", status=BLOG_STATUS_DRAFT)

    default = db_session.scalars(blog_service.standard_feed_query()).all()
    trending = db_session.scalars(blog_service.standard_feed_query(category="trending")).all()

    assert [blog.id for blog in default] == [fresh.id, popular.id]
    assert [blog.id for blog in trending] == [popular.id, fresh.id]


def test_standard_feed_filters(db_session, test_user) -> None:
    python = make_blog(db_session, test_user, title="Python tips", category="tech", tags=["code"])
    make_blog(db_session, test_user, title="Garden notes", category="life", tags=["plants"])
    starred = make_blog(db_session, test_user, title="Starred", featured=True)

    def titles(**filters) -> list[str]:
        query = blog_service.standard_feed_query(**filters)
        return [blog.title for blog in db_session.scalars(query)]

    assert titles(search="python") == [python.title]
    assert titles(category="TECH") == [python.title]
    assert titles(tag="cod") == [python.title]
    assert titles(category="featured") == [starred.title]


def test_feed_page_reports_more(db_session, test_user) -> None:
    start = utcnow() - timedelta(hours=1)
    for index in range(3):
        created_at = start + timedelta(minutes=index)
        make_blog(db_session, test_user, title=f"Post {index}", created_at=created_at)

    first, more = blog_service.feed_page(db_session, 1, page_size=2)
    second, more_after = blog_service.feed_page(db_session, 2, page_size=2)

    assert [blog.title for blog in first] == ["Post 2", "Post 1"]
    assert more
    assert [blog.title for blog in second] == ["Post 0"]
    assert not more_after


def test_trending_tags_counts_usage(db_session, test_user) -> None:
    make_blog(db_session, test_user, tags=["python", "web"])
    make_blog(db_session, test_user, tags=["python"])

    assert blog_service.trending_tags(db_session) == [("python", 2), ("web", 1)]


def test_delete_blog_removes_dependents(db_session, test_user, other_user) -> None:
    blog = make_blog(db_session, test_user)
    comment = make_comment(db_session, blog, other_user)
    comment.reaction_rows.append(CommentReaction(user_id=test_user.id, symbol=ReactionSymbol.FIRE))
    db_session.add_all(
        [
            BlogLike(blog_id=blog.id, user_id=other_user.id),
            Bookmark(user_id=other_user.id, blog_id=blog.id),
            ReadingHistory(user_id=other_user.id, blog_id=blog.id),
        ]
    )
    db_session.flush()

    blog_service.delete_blog(db_session, blog)

    for model in (Blog, Comment, CommentReaction, BlogLike, Bookmark, ReadingHistory):
        assert _count(db_session, model) == 0


def test_month_buckets_span_a_rolling_year() -> None:
    buckets = blog_service.month_buckets(datetime(2024, 3, 15, tzinfo=UTC))

    assert len(buckets) == 12
    assert buckets[0] == (2023, 4)
    assert buckets[-1] == (2024, 3)
    assert blog_service.bucket_index(buckets, datetime(2023, 12, 1)) == 8
    assert blog_service.bucket_index(buckets, datetime(2022, 12, 1)) is None
