"""
tests/conftest.py
每个测试一个新的应用 (内存 SQLite)，AI 客户端换成 Mock
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from app import create_app
from config import TestingConfig
from models import db, VocabEntry


def make_chat_response(content):
    """构造 chat/completions 格式的响应体"""
    return {
        "id": "chatcmpl-test",
        "model": "glm-4",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ]
    }


class FixedClock:
    """可手动拨动的时钟，用来控制 dateGroup 和 createdAt"""

    def __init__(self, start):
        self.now = start

    def set(self, year, month, day, hour=12, minute=0, second=0):
        self.now = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def chat_response():
    return make_chat_response


@pytest.fixture
def ai_client():
    return MagicMock()


@pytest.fixture
def app(ai_client):
    app = create_app(TestingConfig, ai_client=ai_client)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def test_client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def service(app):
    with app.app_context():
        yield app.extensions['vocab_service']


@pytest.fixture
def clock(app):
    fixed = FixedClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc))
    app.extensions['vocab_service'].clock = fixed
    return fixed


@pytest.fixture
def sample_entry(app):
    """预置一条未分析的词条，返回它的 id"""
    with app.app_context():
        entry = VocabEntry()
        entry.content = 'serendipity'
        entry.date_group = '2025-03-01'
        entry.created_at = datetime(2025, 3, 1, 9, 0, 0)
        db.session.add(entry)
        db.session.commit()
        return entry.id


# ========== 注册pytest标记 ==========

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "integration: 标记为集成测试")
    config.addinivalue_line("markers", "e2e: 端到端流程测试")
