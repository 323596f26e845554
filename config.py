# config.py
import os


def _timeout_from_env():
    value = os.getenv("AI_TIMEOUT", "")
    return float(value) if value else None


class Config:
    # 格式: mysql+pymysql://用户名:密码@主机/数据库名
    SQLALCHEMY_DATABASE_URI = os.getenv('DB_URL', 'mysql+pymysql://root:root@db_host/vocab_stream')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_recycle": 300,
        "pool_size": 10,
        "pool_timeout": 10
    }

    # AI 配置 (智谱 GLM，兼容 OpenAI chat/completions 格式)
    # 没有 Key 时启动只打警告，分析接口调用时才报错
    ZHIPU_API_KEY = os.getenv("ZHIPU_API_KEY", "")
    ZHIPU_BASE_URL = os.getenv("ZHIPU_BASE_URL", "https://open.bigmodel.cn/api/paas/v4")
    ZHIPU_MODEL = os.getenv("ZHIPU_MODEL", "glm-4")
    # 不设置则沿用 requests 默认行为 (不超时)
    AI_TIMEOUT = _timeout_from_env()

    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")
    PORT = int(os.getenv("PORT", "3001"))


class TestingConfig(Config):
    # 测试环境：使用SQLite，禁用连接池
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ZHIPU_API_KEY = "test-key"
