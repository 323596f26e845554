# errors.py
"""词条服务的错误类型，每种错误对应一个 HTTP 状态码。"""


class VocabError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(VocabError):
    """输入内容不合法 (长度、类型)"""
    status_code = 400


class NotFound(VocabError):
    status_code = 404


class AnalysisError(VocabError):
    """AI 分析失败：凭证缺失、响应格式异常或 JSON 无法解析"""
    status_code = 400
