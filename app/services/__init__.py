"""
本包用于集中导出服务层单例，便于上层直接引用。
主要导出:
- `ai_service`
- `analysis_service`
- `keyword_service`
- `report_service`
"""

from app.services.ai_service import ai_service
from app.services.analysis_service import analysis_service
from app.services.keyword_service import keyword_service
from app.services.report_service import report_service

__all__ = ["ai_service", "analysis_service", "keyword_service", "report_service"]
