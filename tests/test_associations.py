"""Tests for declared one-to-many and one-to-one association resolution."""

import pytest

from entities import Article, Author, Avatar
from seed_factories import FactoryNotRegisteredError, FactoryRegistry, RecordingPersister


def define_article(f):
    f.build(
        lambda options: Article(
            title=options.get("title", "Untitled"), author=options.get("author")
        )
    )


def define_avatar(f):
    f.build(lambda options: Avatar(url=options.get("url", "a.png"), author=options.get("author")))


@pytest.fixture
def blog_registry(registry: FactoryRegistry) -> FactoryRegistry:
    def define_author(f):
        f.build(
            lambda options: Author(
                name=options.get("name", "John Doe"),
                articles=options.get("articles"),
                avatar=options.get("avatar"),
            )
        )
        f.association_many("articles", "author", Article, 3, {"title": "Generated"})
        f.association_one("avatar", "author", Avatar)

    registry.register(Author, define_author)
    registry.register(Article, define_article)
    registry.register(Avatar, define_avatar)
    return registry


def test_many_association_creates_count_related(
    blog_registry: FactoryRegistry, recorder: RecordingPersister
):
    """Should save exactly k related entities linked back to the owner."""
    author = blog_registry.lookup(Author).save_one()

    assert len(author.articles) == 3
    assert all(isinstance(article, Article) for article in author.articles)
    assert all(article.author is author for article in author.articles)
    assert all(article.title == "Generated" for article in author.articles)
    for article in author.articles:
        assert recorder.count_for(article) == 2


def test_many_association_keeps_creation_order(
    blog_registry: FactoryRegistry, recorder: RecordingPersister
):
    author = blog_registry.lookup(Author).save_one()

    saved_articles = [e for e in recorder.saved if isinstance(e, Article)]
    # Each article is saved twice back to back
    assert saved_articles[::2] == author.articles


def test_one_association_creates_single_related(blog_registry: FactoryRegistry):
    author = blog_registry.lookup(Author).save_one()

    assert isinstance(author.avatar, Avatar)
    assert author.avatar.author is author
    assert author.avatar.url == "a.png"


def test_owner_saved_after_each_association(
    blog_registry: FactoryRegistry, recorder: RecordingPersister
):
    """Owner gets two pipeline saves plus one per resolved association."""
    author = blog_registry.lookup(Author).save_one()

    assert recorder.count_for(author) == 4
    # Many associations resolve before one associations
    last_article = recorder.saved.index(author.articles[-1])
    avatar_position = recorder.saved.index(author.avatar)
    assert last_article < avatar_position


def test_prepopulated_property_is_never_overwritten(
    blog_registry: FactoryRegistry, recorder: RecordingPersister
):
    """Caller-supplied values should survive untouched, with no merge."""
    mine = [Article(title="Mine")]
    avatar = Avatar(url="custom.png")

    author = blog_registry.lookup(Author).save_one({"articles": mine, "avatar": avatar})

    assert author.articles is mine
    assert author.avatar is avatar
    assert not any(isinstance(e, (Article, Avatar)) for e in recorder.saved)
    assert recorder.count_for(author) == 2


def test_trait_populated_property_skips_association(blog_registry: FactoryRegistry):
    """Traits run before associations, so a trait can satisfy one."""
    factory = blog_registry.get_factory(Author)
    factory.trait("solo", lambda author: setattr(author, "articles", [Article(title="Solo")]))

    author = blog_registry.lookup(Author).with_traits("solo").save_one()

    assert [a.title for a in author.articles] == ["Solo"]


def test_empty_property_counts_as_unset(blog_registry: FactoryRegistry):
    author = blog_registry.lookup(Author).save_one({"articles": []})

    assert len(author.articles) == 3


def test_zero_count_association_assigns_empty_list(registry: FactoryRegistry):
    def define_author(f):
        f.build(lambda options: Author())
        f.association_many("articles", "author", Article, 0)

    registry.register(Author, define_author)
    registry.register(Article, define_article)

    author = registry.lookup(Author).save_one()

    assert author.articles == []


def test_association_options_merge_with_back_reference(registry: FactoryRegistry):
    """Declared options should reach the target recipe next to the owner."""
    received = []

    def define_author(f):
        f.build(lambda options: Author())
        f.association_one("avatar", "owner", Avatar, {"url": "x.png", "owner": "ignored"})

    def define_avatar_capture(f):
        def recipe(options):
            received.append(options)
            return Avatar(**options)

        f.build(recipe)

    registry.register(Author, define_author)
    registry.register(Avatar, define_avatar_capture)

    author = registry.lookup(Author).save_one()

    assert received == [{"url": "x.png", "owner": author}]


def test_association_to_unregistered_target_raises(registry: FactoryRegistry):
    def define_author(f):
        f.build(lambda options: Author())
        f.association_one("avatar", "author", Avatar)

    registry.register(Author, define_author)

    with pytest.raises(FactoryNotRegisteredError, match="Avatar"):
        registry.lookup(Author).save_one()


def test_after_save_hook_sees_resolved_associations(blog_registry: FactoryRegistry):
    seen = []
    blog_registry.get_factory(Author).after_save(
        lambda author: seen.append((len(author.articles), author.avatar is not None))
    )

    blog_registry.lookup(Author).save_one()

    assert seen == [(3, True)]


def test_after_save_hook_not_run_for_associated_entities(blog_registry: FactoryRegistry):
    """An owner's hook runs for the owner only; targets run their own."""
    calls = []
    blog_registry.get_factory(Author).after_save(lambda e: calls.append(type(e).__name__))
    blog_registry.get_factory(Article).after_save(lambda e: calls.append(type(e).__name__))

    blog_registry.lookup(Author).save_one()

    assert calls == ["Article", "Article", "Article", "Author"]


def test_back_reference_guard_stops_recursion(registry: FactoryRegistry):
    """Mutual one-to-one associations terminate via the populated-property check."""

    def define_author(f):
        f.build(lambda options: Author(avatar=options.get("avatar")))
        f.association_one("avatar", "author", Avatar)

    def define_avatar_with_owner(f):
        f.build(lambda options: Avatar(author=options.get("author")))
        f.association_one("author", "avatar", Author)

    registry.register(Author, define_author)
    registry.register(Avatar, define_avatar_with_owner)

    author = registry.lookup(Author).save_one()
    assert author.avatar.author is author

    avatar = registry.lookup(Avatar).save_one()
    assert avatar.author.avatar is avatar
