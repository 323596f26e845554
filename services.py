# services.py
"""
词条服务：增删查 + 调用大模型做词汇分析。

AI 客户端通过构造函数传入 VocabService，测试时可以直接换成 Mock。
"""
import json
import logging
import re
from datetime import datetime, timezone

import requests
from sqlalchemy.exc import SQLAlchemyError

from errors import AnalysisError, NotFound, ValidationError
from grouping import group_by_date
from models import VocabEntry

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 500

# 从第一个 { 贪婪匹配到最后一个 }，可以跨过 ```json 代码块和前后的说明文字。
# 这只是启发式的提取：回复里如果有多个对象或多余的括号，json.loads 会失败。
JSON_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')

PROMPT_TEMPLATE = """作为英语专家，分析文本：{content}。
返回 JSON 格式（不要包含任何其他文字），包含：
{{
  "pos": "词性",
  "cn": "中文释义",
  "etymology": "词源/词根分析",
  "sentences": ["例句1", "例句2"],
  "tips": "记忆技巧"
}}"""


class CompletionClient:
    """智谱 GLM chat/completions 接口 (OpenAI 兼容格式)"""

    def __init__(self, api_key, base_url, model, timeout=None):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('ZHIPU_API_KEY', ''),
            base_url=config.get('ZHIPU_BASE_URL', ''),
            model=config.get('ZHIPU_MODEL', 'glm-4'),
            timeout=config.get('AI_TIMEOUT')
        )

    def create_completion(self, messages):
        """发送一次非流式请求，返回解析后的 JSON 响应体"""
        if not self.api_key:
            raise AnalysisError("ZHIPU_API_KEY is not configured")

        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json"
                },
                json={
                    "model": self.model,
                    "messages": messages,
                    "stream": False
                },
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise AnalysisError(f"AI service unreachable: {e}") from e

        if response.status_code != 200:
            logger.error("AI API error %s: %s", response.status_code, response.text)
            raise AnalysisError(f"AI service returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise AnalysisError("AI service returned a non-JSON body") from e


def build_prompt(content):
    return PROMPT_TEMPLATE.format(content=content)


# ---------- 响应格式归一化 ----------

def _field(obj, name):
    # 兼容 dict 响应和 SDK 返回的对象
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _message_content(obj):
    choices = _field(obj, 'choices')
    if not isinstance(choices, (list, tuple)) or not choices:
        return None
    return _field(_field(choices[0], 'message'), 'content')


RESPONSE_SHAPES = [
    ('choices[0].message.content', _message_content),
    ('data.choices[0].message.content', lambda r: _message_content(_field(r, 'data'))),
    ('content', lambda r: _field(r, 'content')),
]


def extract_content(response):
    """按顺序尝试已知的响应结构，第一个取到字符串的生效"""
    for name, matcher in RESPONSE_SHAPES:
        content = matcher(response)
        if isinstance(content, str):
            logger.debug("AI response matched shape %s", name)
            return content

    logger.error("Unexpected response format: %r", response)
    raise AnalysisError("Unexpected AI response format")


def extract_json(text):
    """从模型的自由文本回复里取出 JSON 对象"""
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        raise AnalysisError("AI response does not contain valid JSON")

    try:
        data = json.loads(match.group())
    except json.JSONDecodeError as e:
        raise AnalysisError("AI response does not contain valid JSON") from e

    if not isinstance(data, dict):
        raise AnalysisError("AI response does not contain valid JSON")
    return data


def _as_text(value):
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _utcnow():
    return datetime.now(timezone.utc)


class VocabService:

    def __init__(self, session, ai_client, clock=_utcnow):
        self.session = session
        self.ai_client = ai_client
        self.clock = clock

    def create(self, content):
        if not isinstance(content, str):
            raise ValidationError('Content is required')
        if len(content) < 1:
            raise ValidationError('Content is required')
        if len(content) > MAX_CONTENT_LENGTH:
            raise ValidationError('Content too long')

        now = self.clock()
        entry = VocabEntry()
        entry.content = content
        entry.date_group = now.date().isoformat()
        entry.created_at = now.replace(tzinfo=None)
        self.session.add(entry)
        self.session.commit()
        logger.info("Created vocab entry %s", entry.id)
        return entry

    def list_grouped(self):
        entries = (self.session.query(VocabEntry)
                   .order_by(VocabEntry.date_group.desc(), VocabEntry.created_at.desc())
                   .all())
        return group_by_date(entries)

    def get(self, entry_id):
        entry = self.session.get(VocabEntry, entry_id)
        if entry is None:
            raise NotFound(f"Vocab entry with id {entry_id} not found")
        return entry

    def delete(self, entry_id):
        entry = self.get(entry_id)
        self.session.delete(entry)
        self.session.commit()
        logger.info("Deleted vocab entry %s", entry_id)

    def analyze(self, entry_id):
        """
        调用大模型分析词条并写回结果。

        只有解析成功后才修改词条，任何一步失败都不会留下半截数据。
        重复调用会重新请求模型并覆盖上次的结果；同一词条的并发分析没有加锁，后写入的生效。
        """
        entry = self.get(entry_id)

        try:
            response = self.ai_client.create_completion(
                [{"role": "user", "content": build_prompt(entry.content)}]
            )
            analysis = extract_json(extract_content(response))
        except Exception as e:
            reason = e.message if isinstance(e, AnalysisError) else str(e)
            logger.error("AI analysis failed for %s: %s", entry_id, reason)
            raise AnalysisError(f"AI analysis failed: {reason}") from e

        entry.pos = _as_text(analysis.get('pos'))
        entry.translation = _as_text(analysis.get('cn'))
        entry.ai_analysis = analysis
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return entry
