"""
本文件用于定义项目统一的业务异常体系，便于 API 层集中捕获并转换为 HTTP 响应。
主要类:
- `SignalError`: 业务异常基类（携带 HTTP 状态码与默认提示语）
- `InvalidRequest` / `Unauthorized` / `NotFound` / `AnalysisInProgress`: 请求侧错误
- `DatabaseUnavailable`: 数据库不可用
- `ConfigurationError` / `UpstreamUnavailable` / `ParseError` / `PersistenceError`: 分析流程错误
"""

from typing import Any, Optional


class SignalError(Exception):
    """
    输入:
    - `message`: 面向用户的错误信息（可选，默认使用类级提示语）

    输出:
    - 异常对象

    作用:
    - 作为项目统一的业务异常基类，API 层据 `status_code` 统一转换为 JSON 错误响应
    """

    status_code: int = 500
    default_message: str = "서버 오류"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(SignalError):
    status_code = 400
    default_message = "필수 파라미터 누락"


class Unauthorized(SignalError):
    status_code = 401
    default_message = "인증 필요"


class NotFound(SignalError):
    status_code = 404
    default_message = "찾을 수 없음"


class AnalysisInProgress(SignalError):
    status_code = 409
    default_message = "이미 분석이 진행 중입니다."


class DatabaseUnavailable(SignalError):
    status_code = 503
    default_message = "데이터베이스 연결에 실패했습니다."


class ConfigurationError(SignalError):
    """
    作用:
    - 标识 AI 服务配置缺失或无效（如未配置 API Key），在发起调用前抛出
    """

    default_message = "AI_API_KEY가 설정되지 않았습니다."


class UpstreamUnavailable(SignalError):
    default_message = "분석 중 오류가 발생했습니다."


class ParseError(SignalError):
    default_message = "AI 응답 파싱 실패"


class PersistenceError(SignalError):
    """
    输入:
    - `message`: 错误信息
    - `data`: 已计算出的分析结果（保存失败时仍返回给调用方）

    作用:
    - 标识 AI 调用成功但写库失败；结果不会重试保存
    """

    default_message = "분석 결과 저장에 실패했습니다."

    def __init__(self, message: Optional[str] = None, data: Any = None) -> None:
        super().__init__(message)
        self.data = data
