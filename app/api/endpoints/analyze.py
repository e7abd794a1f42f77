"""
本文件用于提供关键词 AI 分析接口。
主要函数:
- `analyze_keywords`: 同步执行一次分析，可选回写关键词组
"""

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.schemas.analysis import AnalyzeRequest
from app.services.analysis_service import analysis_service
from app.services.keyword_service import keyword_service

router = APIRouter(prefix="/api/ai", tags=["analysis"])


@router.post("/analyze")
async def analyze_keywords(
    payload: AnalyzeRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    """
    输入:
    - `payload`: 分析请求体（keyword_set_id 可选）
    - `user_id`: 当前用户（依赖注入）

    输出:
    - `{"data": 分析结果}`

    作用:
    - 参数缺失返回 400；指定 keyword_set_id 时先校验归属，再把结果整体覆盖写入该关键词组
    """

    analysis_service.validate_request(payload.keywords, payload.question)
    if payload.keyword_set_id:
        await keyword_service.get_owned(db, user_id, payload.keyword_set_id)

    data = await analysis_service.analyze(
        db,
        payload.keywords,
        payload.question,
        payload.category,
        keyword_set_id=payload.keyword_set_id,
    )
    return {"data": data}
