# app.py
import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from config import Config
from errors import ValidationError, VocabError
from grouping import grid_view, join_batch
from models import db
from services import CompletionClient, VocabService

vocab_bp = Blueprint('vocab', __name__, url_prefix='/vocab')


def success(data=None):
    return jsonify({'code': 200, 'data': data, 'msg': 'success'}), 200


def failure(status_code, message):
    return jsonify({'code': status_code, 'data': None, 'msg': message}), status_code


def get_service():
    return current_app.extensions['vocab_service']


def _json_body():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body


# --- API 接口 ---

@vocab_bp.route('/create', methods=['POST'])
def create_entry():
    body = _json_body()
    entry = get_service().create(body.get('content'))
    return success(entry.to_dict())


@vocab_bp.route('/batch', methods=['POST'])
def create_from_batch():
    # 输入矩阵的格子拼成一条词条
    body = _json_body()
    content = join_batch(body.get('cells'))
    entry = get_service().create(content)
    return success(entry.to_dict())


@vocab_bp.route('/list', methods=['GET'])
def list_entries():
    grouped = get_service().list_grouped()
    return success({date: [e.to_dict() for e in entries] for date, entries in grouped.items()})


@vocab_bp.route('/grid', methods=['GET'])
def grid_entries():
    return success(grid_view(get_service().list_grouped()))


@vocab_bp.route('/<entry_id>', methods=['GET'])
def get_entry(entry_id):
    return success(get_service().get(entry_id).to_dict())


@vocab_bp.route('/analyze/<entry_id>', methods=['POST'])
def analyze_entry(entry_id):
    entry = get_service().analyze(entry_id)
    return success(entry.to_dict())


@vocab_bp.route('/<entry_id>', methods=['DELETE'])
def delete_entry(entry_id):
    get_service().delete(entry_id)
    return success(None)


def register_error_handlers(app):

    @app.errorhandler(VocabError)
    def handle_vocab_error(e):
        return failure(e.status_code, e.message)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return failure(e.code, e.description)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception('Unhandled error: %s', e)
        return failure(500, 'Internal server error')


def create_app(config_object=Config, ai_client=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    # 分组按日期倒序返回，不能让 jsonify 按 key 重新排序
    app.json.sort_keys = False

    db.init_app(app)

    if not app.config.get('ZHIPU_API_KEY'):
        app.logger.warning('ZHIPU_API_KEY not set, AI analysis will fail')

    if ai_client is None:
        ai_client = CompletionClient.from_config(app.config)
    app.extensions['vocab_service'] = VocabService(db.session, ai_client)

    app.register_blueprint(vocab_bp)
    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = app.config.get('CORS_ORIGIN')
        if origin:
            response.headers['Access-Control-Allow-Origin'] = origin
            response.headers['Access-Control-Allow-Credentials'] = 'true'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
            response.headers['Access-Control-Allow-Methods'] = 'GET, POST, DELETE, OPTIONS'
        return response

    return app


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    with app.app_context():
        db.create_all()  # 只有手动运行 app.py 时才会连接真实数据库
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=True)
