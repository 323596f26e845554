# grouping.py
"""卡片列表和批量输入框用到的纯函数，不访问数据库。"""
from errors import ValidationError

# 输入矩阵的格子数
BATCH_SIZE = 8

# 超过这个长度的词条在网格里占两列
WIDE_CONTENT_LENGTH = 20

SENTENCE_SEPARATORS = [' | ', ' - ', '｜', '—']


def group_by_date(entries):
    """按 date_group 分组，日期倒序；组内保持传入顺序"""
    grouped = {}
    for entry in entries:
        grouped.setdefault(entry.date_group, []).append(entry)
    return {date: grouped[date] for date in sorted(grouped, reverse=True)}


def layout_span(content):
    return 'wide' if len(content) > WIDE_CONTENT_LENGTH else 'narrow'


def parse_sentence(sentence):
    """把 "英文 | 中文" 形式的例句拆成 {en, zh}"""
    for sep in SENTENCE_SEPARATORS:
        if sep in sentence:
            parts = sentence.split(sep)
            zh = parts[1].strip() if len(parts) > 1 else ''
            return {'en': parts[0].strip(), 'zh': zh}
    return {'en': sentence, 'zh': ''}


def join_batch(cells):
    """把输入矩阵里非空的格子用空格拼成一条词条内容"""
    if not isinstance(cells, list):
        raise ValidationError('cells must be a list')
    if len(cells) > BATCH_SIZE:
        raise ValidationError(f'At most {BATCH_SIZE} cells are allowed')
    if not all(isinstance(cell, str) for cell in cells):
        raise ValidationError('Every cell must be a string')

    # 只丢掉空白格子，其余按输入原样拼接
    content = ' '.join(cell for cell in cells if cell.strip())
    if not content:
        raise ValidationError('Content is required')
    return content


def grid_view(grouped):
    """生成卡片网格需要的数据：每组带数量，每条带宽窄和拆好的例句"""
    groups = []
    for date, entries in grouped.items():
        cards = []
        for entry in entries:
            card = entry.to_dict()
            card['span'] = layout_span(entry.content)
            sentences = (entry.ai_analysis or {}).get('sentences') or []
            card['sentences'] = [parse_sentence(s) for s in sentences if isinstance(s, str)]
            cards.append(card)
        groups.append({'date': date, 'count': len(cards), 'entries': cards})
    return groups
