# Generic CRUD routes: one blueprint per resource, all bound to a repository.
from flask import Blueprint

from tangent.auth import token_required
from tangent.repositories import CategoryRepository, PostRepository, CommentRepository
from tangent.request_log import log_route
from tangent.responses import send_response
from tangent.routes import get_payload

# Canonical payload for a successful delete.
EMPTY_PAYLOAD = []


def resource_blueprint(name, repository, plural):
    bp = Blueprint(f'{name}_api', __name__)
    entity = repository.entity

    @bp.route(f'/{name}', methods=['GET'])
    @token_required
    @log_route
    def index(identity):
        items = repository.list()
        return send_response([item.to_dict() for item in items], f'{plural} fetched.')

    @bp.route(f'/{name}', methods=['POST'])
    @token_required
    @log_route
    def store(identity):
        item = repository.create(get_payload(), identity)
        return send_response(item.to_dict(), f'{entity} created.')

    @bp.route(f'/{name}/<int:id>', methods=['GET'])
    @token_required
    @log_route
    def show(id, identity):
        return send_response(repository.get(id).to_dict(), f'{entity} fetched.')

    @bp.route(f'/{name}/<int:id>', methods=['PUT', 'PATCH'])
    @token_required
    @log_route
    def update(id, identity):
        item = repository.update(id, get_payload())
        return send_response(item.to_dict(), f'{entity} updated.')

    @bp.route(f'/{name}/<int:id>', methods=['DELETE'])
    @token_required
    @log_route
    def destroy(id, identity):
        repository.delete(id)
        return send_response(EMPTY_PAYLOAD, f'{entity} deleted.')

    return bp


category_bp = resource_blueprint('categories', CategoryRepository(), 'Categories')
post_bp = resource_blueprint('posts', PostRepository(), 'Posts')
comment_bp = resource_blueprint('comments', CommentRepository(), 'Comments')
