# tangent/repositories.py
# One repository per resource. Each declares its model, rule tables and
# editable fields; the base class runs the shared pipeline
# (validate -> cross-reference check -> persist).
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from tangent.errors import NotFound, ValidationError
from tangent.extensions import db
from tangent.models import Category, Post, Comment
from tangent.validation import validate, collect_errors, is_present

# SQLite and MySQL both store ids as signed 64-bit integers.
MAX_ID = 2 ** 63 - 1


def _to_id(value):
    """Turn a validated numeric value into a row id, or None if it cannot be one."""
    if isinstance(value, int):
        number = value
    else:
        # Decimal keeps ids above 2**53 exact, where float would round them.
        number = Decimal(value.strip() if isinstance(value, str) else value)
        if number != number.to_integral_value():
            return None
        number = int(number)
    return number if _is_storable_id(number) else None


def _is_storable_id(number):
    return 0 < number <= MAX_ID


def _unique_rules(rules):
    return {
        field: [tag for tag in tags if tag.startswith('unique:')]
        for field, tags in rules.items()
        if any(tag.startswith('unique:') for tag in tags)
    }


def save(instance, data, rules, ignore_id=None):
    """Commit `instance`, reporting unique-index violations as field errors.

    The validator's uniqueness check runs before the write; a concurrent
    request can still insert the same value in between, in which case the
    database constraint rejects the commit.
    """
    db.session.add(instance)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        errors = collect_errors(data, _unique_rules(rules), ignore_id)
        if errors:
            current_app.logger.info(f"Unique constraint rejected write: {errors}")
            raise ValidationError(errors) from e
        raise
    return instance


class Repository:
    model = None
    entity = None
    create_rules = {}
    update_rules = {}
    creatable = ()
    editable = ()
    # (field, parent model, parent entity name) checked on create
    reference = None
    has_author = True

    def list(self):
        return db.session.execute(
            db.select(self.model).order_by(self.model.id)
        ).scalars().all()

    def get(self, id):
        instance = db.session.get(self.model, id) if _is_storable_id(id) else None
        if instance is None:
            raise NotFound(f'{self.entity} does not exist')
        return instance

    def check_reference(self, data):
        """Return the id of the referenced parent row, or raise NotFound."""
        field, parent_model, parent_entity = self.reference
        parent_id = _to_id(data[field])
        # Looked up on every call so a parent deleted meanwhile is caught.
        if parent_id is None or db.session.get(parent_model, parent_id) is None:
            raise NotFound(f'{parent_entity} does not exist')
        return parent_id

    def build(self, data, identity):
        values = {field: data.get(field) for field in self.creatable}
        if self.has_author:
            values['user_id'] = identity.user_id
        return self.model(**values)

    def create(self, data, identity):
        validate(data, self.create_rules)
        parent_id = self.check_reference(data) if self.reference else None
        instance = self.build(data, identity)
        if parent_id is not None:
            setattr(instance, self.reference[0], parent_id)
        return save(instance, data, self.create_rules)

    def update(self, id, data):
        instance = self.get(id)
        validate(data, self.update_rules, ignore_id=instance.id)
        for field in self.editable:
            setattr(instance, field, data.get(field))
        return save(instance, data, self.update_rules, ignore_id=instance.id)

    def delete(self, id):
        instance = self.get(id)
        db.session.delete(instance)
        db.session.commit()


class CategoryRepository(Repository):
    model = Category
    entity = 'Category'
    has_author = False
    create_rules = {
        'name': ['required', 'string', 'unique:categories,name'],
        'content': ['string'],
    }
    update_rules = create_rules
    creatable = ('name', 'content')
    editable = ('name', 'content')


class PostRepository(Repository):
    model = Post
    entity = 'Post'
    create_rules = {
        'title': ['required', 'string', 'unique:posts,title'],
        'category_id': ['required', 'numeric'],
        'description': ['required', 'string'],
    }
    update_rules = {
        'title': ['required', 'string', 'unique:posts,title'],
        'description': ['required', 'string'],
    }
    creatable = ('title', 'description')
    editable = ('title', 'description')
    reference = ('category_id', Category, 'Category')


class CommentRepository(Repository):
    model = Comment
    entity = 'Comment'
    create_rules = {
        'title': ['required', 'string', 'unique:comments,title'],
        'post_id': ['required', 'numeric'],
        'description': ['required', 'string'],
        'rating': ['numeric'],
    }
    update_rules = {
        'title': ['required', 'string', 'unique:comments,title'],
        'description': ['required', 'string'],
    }
    creatable = ('title', 'description')
    editable = ('title', 'description')
    reference = ('post_id', Post, 'Post')

    def build(self, data, identity):
        instance = super().build(data, identity)
        rating = data.get('rating')
        instance.rating = float(rating) if is_present(rating) else None
        return instance
