# =============================================================================
# tests/test_repositories.py - Repository Tests
# =============================================================================

import pytest

from tangent.auth import Identity, create_user
from tangent.errors import NotFound, ValidationError
from tangent.extensions import db
from tangent.models import Category
from tangent.repositories import CategoryRepository, PostRepository, save


@pytest.fixture
def identity(app):
    with app.app_context():
        user = create_user("Jane", "jane@tangent.io", "secret123")
        return Identity(user.id, user.name)


class TestSave:

    def test_unique_index_violation_becomes_validation_error(self, app):
        """A row that slips in after validation is rejected by the unique index."""
        rules = CategoryRepository.create_rules
        with app.app_context():
            db.session.add(Category(name="News"))
            db.session.commit()

            with pytest.raises(ValidationError) as excinfo:
                save(Category(name="News"), {"name": "News"}, rules)

            assert excinfo.value.errors == {"name": ["The name has already been taken."]}
            assert db.session.scalar(db.select(db.func.count()).select_from(Category)) == 1


class TestRepository:

    def test_get_missing(self, app):
        with app.app_context():
            with pytest.raises(NotFound) as excinfo:
                CategoryRepository().get(1)

        assert excinfo.value.message == "Category does not exist"

    def test_create_and_list(self, app, identity):
        repository = PostRepository()
        with app.app_context():
            category = CategoryRepository().create({"name": "News"}, identity)
            for title in ["one", "two"]:
                repository.create({"title": title, "description": "d", "category_id": category.id}, identity)

            assert [p.title for p in repository.list()] == ["one", "two"]
            assert all(p.user_id == identity.user_id for p in repository.list())

    @pytest.mark.parametrize("category_id", [0, -1, 1.5, "1e30"])
    def test_invalid_reference_ids(self, app, identity, category_id):
        with app.app_context():
            CategoryRepository().create({"name": "News"}, identity)

            with pytest.raises(NotFound):
                PostRepository().create({"title": "t", "description": "d", "category_id": category_id}, identity)

    def test_large_reference_id_is_exact(self, app, identity):
        """Ids above 2**53 are resolved without rounding to a neighbouring row."""
        with app.app_context():
            db.session.add(Category(id=2 ** 53, name="News"))
            db.session.commit()

            for category_id in (2 ** 53 + 1, str(2 ** 53 + 1)):
                with pytest.raises(NotFound):
                    PostRepository().create(
                        {"title": "t", "description": "d", "category_id": category_id}, identity)

            post = PostRepository().create(
                {"title": "t", "description": "d", "category_id": str(2 ** 53)}, identity)
            assert post.category_id == 2 ** 53

    @pytest.mark.parametrize("id", [0, -1, 2 ** 63, 10 ** 30])
    def test_get_outside_id_range(self, app, id):
        with app.app_context():
            with pytest.raises(NotFound):
                CategoryRepository().get(id)

    def test_delete(self, app, identity):
        repository = CategoryRepository()
        with app.app_context():
            category = repository.create({"name": "News"}, identity)
            repository.delete(category.id)

            with pytest.raises(NotFound):
                repository.get(category.id)
