"""
本文件用于提供报告相关 API：由关键词组生成报告、列表、详情与删除（报告创建后不可修改）。
主要函数:
- `list_reports`: 获取当前用户的报告
- `create_report`: 由关键词组生成报告快照
"""

from typing import Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.schemas.report import ReportCreate
from app.services.keyword_service import keyword_service
from app.services.report_service import report_service

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("")
async def list_reports(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    reports = await report_service.list_for_user(db, user_id)
    return {"data": [r.to_dict() for r in reports]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    """
    输入:
    - `payload`: `{keyword_set_id, title?}`

    输出:
    - `{"data": 报告}`（201）；关键词组不存在或不属于当前用户时返回 404
    """

    keyword_set = await keyword_service.get_owned(db, user_id, payload.keyword_set_id)
    report = await report_service.create_from_keyword_set(db, keyword_set, payload.title)
    return {"data": report.to_dict()}


@router.get("/{report_id}")
async def get_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    report = await report_service.get_owned(db, user_id, report_id)
    return {"data": report.to_dict()}


@router.delete("/{report_id}")
async def delete_report(
    report_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict:
    await report_service.delete(db, user_id, report_id)
    return {"success": True}
