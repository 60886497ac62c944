"""
Tests pour SQLModelVideoRepository.

Utilise une base SQLite fichier temporaire (voir conftest) pour verifier
l'insertion, la contrainte d'unicite du slug, les recherches et
l'atomicite de l'increment des vues.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from vidcat.core.ports.repositories import IVideoRepository, SlugConflictError
from vidcat.infrastructure.persistence.database import get_session
from vidcat.infrastructure.persistence.repositories import SQLModelVideoRepository


def _add_in_order(repository, make_video, *titles, **overrides):
    """Insere des videos avec des dates de creation croissantes."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        repository.add(make_video(title, created_at=base + timedelta(minutes=i), **overrides))
        for i, title in enumerate(titles)
    ]


class TestAdd:
    """Tests pour add() et les lectures par cle."""

    def test_implements_interface(self, repository):
        assert isinstance(repository, IVideoRepository)

    def test_add_assigns_id_and_round_trips(self, repository, make_video):
        saved = repository.add(
            make_video("L'été des chats", tags=["chat", "été"], categories=["Animaux"])
        )

        assert saved.id is not None
        loaded = repository.get_by_slug("lete-des-chats")
        assert loaded is not None
        assert loaded.title == "L'été des chats"
        assert loaded.tags == ["chat", "été"]
        assert loaded.categories == ["Animaux"]
        assert loaded.views == 0
        assert loaded.upload_date is not None

    def test_get_by_title_is_exact(self, repository, make_video):
        repository.add(make_video("Chat noir"))

        assert repository.get_by_title("Chat noir") is not None
        assert repository.get_by_title("chat noir") is None
        assert repository.get_by_title("Chat noir ") is None

    def test_unknown_slug(self, repository):
        assert repository.get_by_slug("inconnu") is None

    def test_slug_conflict(self, repository, make_video):
        repository.add(make_video("Chat noir"))

        with pytest.raises(SlugConflictError):
            repository.add(make_video("Chat  Noir !"))

        assert repository.count() == 1


class TestListing:
    """Tests pour les listes paginees."""

    def test_list_latest_newest_first(self, repository, make_video):
        _add_in_order(repository, make_video, "Un", "Deux", "Trois")

        titles = [v.title for v in repository.list_latest()]
        assert titles == ["Trois", "Deux", "Un"]

    def test_list_latest_offset_limit(self, repository, make_video):
        _add_in_order(repository, make_video, "Un", "Deux", "Trois", "Quatre")

        page = repository.list_latest(offset=1, limit=2)
        assert [v.title for v in page] == ["Trois", "Deux"]

    def test_count(self, repository, make_video):
        assert repository.count() == 0
        _add_in_order(repository, make_video, "Un", "Deux")
        assert repository.count() == 2


class TestSearch:
    """Tests pour search(), list_by_tag() et list_by_category()."""

    def test_search_title_and_tags(self, repository, make_video):
        repository.add(make_video("Le chat noir"))
        repository.add(make_video("Un chien", tags=["Chaton"]))
        repository.add(make_video("Oiseau"))

        results = repository.search("CHAT")
        assert {v.title for v in results} == {"Le chat noir", "Un chien"}
        assert repository.count_search("chat") == 2

    def test_search_non_ascii(self, repository, make_video):
        repository.add(make_video("L'Été indien"))
        repository.add(make_video("Hiver"))

        assert [v.title for v in repository.search("été")] == ["L'Été indien"]

    def test_search_like_wildcards_are_literal(self, repository, make_video):
        repository.add(make_video("Remise 100% gratuite"))
        repository.add(make_video("Remise 1000 euros"))

        assert [v.title for v in repository.search("100%")] == ["Remise 100% gratuite"]

    def test_search_quote_in_query(self, repository, make_video):
        repository.add(make_video('Le "grand" soir'))

        assert len(repository.search('"grand"')) == 1

    def test_tag_substring_case_insensitive(self, repository, make_video):
        repository.add(make_video("A", tags=["Gros Chats"]))
        repository.add(make_video("B", tags=["chiens"]))

        assert [v.title for v in repository.list_by_tag("gros chats")] == ["A"]
        assert repository.count_by_tag("chat") == 1

    def test_tag_does_not_match_title(self, repository, make_video):
        repository.add(make_video("Chat", tags=["animal"]))

        assert repository.list_by_tag("chat") == []

    def test_category_pagination(self, repository, make_video):
        _add_in_order(
            repository, make_video, "Un", "Deux", "Trois", categories=["Big Cats"]
        )
        repository.add(make_video("Autre", categories=["Dogs"]))

        assert repository.count_by_category("big cats") == 3
        page = repository.list_by_category("big cats", offset=2, limit=5)
        assert [v.title for v in page] == ["Un"]


class TestDistinct:
    """Tests pour distinct_categories() et distinct_tags()."""

    def test_distinct_in_first_seen_order(self, repository, make_video):
        repository.add(make_video("A", categories=["Chats", "Chiens"], tags=["x"]))
        repository.add(make_video("B", categories=["Chiens", "Oiseaux"], tags=["x", "y"]))

        assert repository.distinct_categories() == ["Chats", "Chiens", "Oiseaux"]
        assert repository.distinct_tags() == ["x", "y"]

    def test_empty_catalogue(self, repository):
        assert repository.distinct_categories() == []
        assert repository.distinct_tags() == []


class TestRandomSample:
    def test_sample_size(self, repository, make_video):
        _add_in_order(repository, make_video, "Un", "Deux", "Trois")

        sample = repository.random_sample(2)
        assert len(sample) == 2
        assert len({v.slug for v in sample}) == 2

    def test_sample_larger_than_catalogue(self, repository, make_video):
        repository.add(make_video("Seule"))

        assert len(repository.random_sample(8)) == 1


class TestIncrementViews:
    """Tests pour increment_views()."""

    def test_increment(self, repository, make_video):
        repository.add(make_video("Chat"))

        assert repository.increment_views("chat") is True
        assert repository.increment_views("chat") is True
        assert repository.get_by_slug("chat").views == 2

    def test_unknown_slug_returns_false(self, repository):
        assert repository.increment_views("inconnu") is False

    def test_concurrent_increments_are_not_lost(self, repository, make_video):
        """K increments concurrents donnent exactement K vues."""
        repository.add(make_video("Populaire"))
        increments = 40

        def _view(_):
            session = next(get_session())
            try:
                return SQLModelVideoRepository(session).increment_views("populaire")
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(_view, range(increments)))

        assert all(results)
        repository._session.expire_all()
        assert repository.get_by_slug("populaire").views == increments
