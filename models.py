# models.py
import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class VocabEntry(db.Model):
    __tablename__ = 'vocab_entries'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = db.Column(db.String(500), nullable=False)
    # 只用于前端按天分组展示，格式 YYYY-MM-DD
    date_group = db.Column(db.String(10), nullable=False, index=True)
    pos = db.Column(db.String(100), nullable=True)
    translation = db.Column(db.String(500), nullable=True)
    # 分析成功后才写入，结构: {pos, cn, etymology, sentences, tips}
    ai_analysis = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'content': self.content,
            'pos': self.pos,
            'translation': self.translation,
            'aiAnalysis': self.ai_analysis,
            'dateGroup': self.date_group,
            # 库里存的是不带时区的 UTC 时间
            'createdAt': self.created_at.replace(tzinfo=timezone.utc).isoformat() if self.created_at else None
        }
