"""
本文件用于提供关键词组相关 API：列表、创建、详情、局部更新、删除与重新分析。
主要函数:
- `list_keyword_sets`: 获取当前用户的关键词组
- `create_keyword_set`: 创建关键词组并在后台触发首次分析
- `reanalyze_keyword_set`: 手动触发重新分析
"""

from typing import Dict

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db, settings
from app.core.exceptions import AnalysisInProgress
from app.schemas.keyword_set import KeywordSetCreate, KeywordSetUpdate
from app.services.analysis_service import analysis_service
from app.services.keyword_service import keyword_service

router = APIRouter(prefix="/api/keywords", tags=["keywords"])


@router.get("")
async def list_keyword_sets(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    items = await keyword_service.list_for_user(db, user_id)
    return {"data": [ks.to_dict() for ks in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_keyword_set(
    payload: KeywordSetCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    """
    输入:
    - `payload`: 创建请求体

    输出:
    - `{"data": 新建关键词组}`（201）

    作用:
    - 创建后立即返回；AI 分析在响应发出后于后台执行，不等待结果
    """

    keyword_set = await keyword_service.create(db, user_id, payload)
    if settings.AUTO_ANALYZE_ON_CREATE:
        await analysis_service.mark_pending(db, keyword_set)
        background_tasks.add_task(analysis_service.run_for_keyword_set, keyword_set.id)
    return {"data": keyword_set.to_dict()}


@router.get("/{keyword_set_id}")
async def get_keyword_set(
    keyword_set_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    keyword_set = await keyword_service.get_owned(db, user_id, keyword_set_id)
    return {"data": keyword_set.to_dict()}


@router.patch("/{keyword_set_id}")
async def update_keyword_set(
    keyword_set_id: str,
    payload: KeywordSetUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    keyword_set = await keyword_service.update(db, user_id, keyword_set_id, payload)
    return {"data": keyword_set.to_dict()}


@router.delete("/{keyword_set_id}")
async def delete_keyword_set(
    keyword_set_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    await keyword_service.delete(db, user_id, keyword_set_id)
    return {"success": True}


@router.post("/{keyword_set_id}/reanalyze", status_code=status.HTTP_202_ACCEPTED)
async def reanalyze_keyword_set(
    keyword_set_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    """
    手动触发重新分析：标记为 pending 后在后台执行；同一关键词组已在分析中时返回 409
    """
    keyword_set = await keyword_service.get_owned(db, user_id, keyword_set_id)
    if analysis_service.is_in_flight(keyword_set_id):
        raise AnalysisInProgress()

    await analysis_service.mark_pending(db, keyword_set)
    background_tasks.add_task(analysis_service.run_for_keyword_set, keyword_set_id)
    return {"status": "started", "data": keyword_set.to_dict()}
