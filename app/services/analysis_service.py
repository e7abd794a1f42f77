"""
本文件用于实现关键词 AI 分析流程：组装提示词、调用模型、提取并校验 JSON、回写关键词组。
主要类/对象:
- `AnalysisService`: 分析流程封装（请求校验、单 ID 并发保护、结果落库、后台任务）
- `analysis_service`: 全局服务单例
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import ValidationError
from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal
from app.core.exceptions import (
    AnalysisInProgress,
    InvalidRequest,
    ParseError,
    PersistenceError,
    SignalError,
)
from app.core.logger import setup_logger
from app.core.prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_user_message
from app.models.keyword_set import KeywordSet
from app.schemas.analysis import AnalysisResult
from app.services.ai_service import AIService, ai_service
from app.utils.tools import extract_json_object

logger = setup_logger("AnalysisService")


class AnalysisService:
    """
    输入:
    - `ai`: AI 服务实例

    输出:
    - 模型输出的分析结果（原始 JSON 对象）

    作用:
    - 串联“提示词 → 模型调用 → JSON 提取 → 结构校验 → 整体覆盖写库”的分析流程
    - 同一关键词组在本进程内同时只允许一个分析在执行
    """

    def __init__(self, ai: AIService) -> None:
        self.ai = ai
        self._in_flight: Set[str] = set()

    @staticmethod
    def validate_request(keywords: Optional[List[str]], question: Optional[str]) -> Tuple[List[str], str]:
        cleaned = [k.strip() for k in (keywords or []) if isinstance(k, str) and k.strip()]
        q = (question or "").strip()
        if not cleaned or not q:
            raise InvalidRequest()
        return cleaned, q

    def is_in_flight(self, keyword_set_id: str) -> bool:
        return keyword_set_id in self._in_flight

    def _acquire(self, keyword_set_id: str) -> None:
        if keyword_set_id in self._in_flight:
            raise AnalysisInProgress()
        self._in_flight.add(keyword_set_id)

    def _release(self, keyword_set_id: str) -> None:
        self._in_flight.discard(keyword_set_id)

    async def request_analysis(
        self, keywords: List[str], question: str, category: str
    ) -> Tuple[Dict[str, Any], AnalysisResult]:
        """
        输入:
        - `keywords`/`question`/`category`: 已校验的分析参数

        输出:
        - `(raw, result)`：模型输出的原始对象与补齐默认值后的结构化结果

        作用:
        - 调用一次模型并解析回复；提取失败或结构不合法时抛出 `ParseError`，原始回复不保留
        """

        user_message = build_analysis_user_message(category, keywords, question)
        text = await self.ai.complete(user_message, ANALYSIS_SYSTEM_PROMPT)

        try:
            raw = extract_json_object(text)
        except ParseError:
            logger.warning(f"⚠️ AI 回复中未找到可解析的 JSON 对象 (长度 {len(text)})")
            raise

        try:
            result = AnalysisResult.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ AI 分析结果结构校验失败: {e.error_count()} 处错误\n{e}")
            raise ParseError() from e
        return raw, result

    async def ingest(self, db: AsyncSession, keyword_set_id: str, result: AnalysisResult) -> None:
        """
        输入:
        - `db`: 数据库会话
        - `keyword_set_id`: 目标关键词组 ID
        - `result`: 结构化分析结果

        输出:
        - 无

        作用:
        - 以一条 UPDATE 整体覆盖全部 AI 字段并刷新 `updated_at`（不做合并）
        - 写库失败抛出 `PersistenceError`，不重试
        """

        now = datetime.now()
        values = result.to_record_fields()
        values.update(
            analysis_status="completed",
            last_analysis_error=None,
            last_analyzed_at=now,
            updated_at=now,
        )
        try:
            res = await db.execute(update(KeywordSet).where(KeywordSet.id == keyword_set_id).values(**values))
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"❌ 分析结果写库失败 (keyword_set_id={keyword_set_id}): {e}")
            raise PersistenceError() from e

        if res.rowcount == 0:
            logger.warning(f"⚠️ 关键词组不存在，分析结果未保存 (keyword_set_id={keyword_set_id})")
        else:
            logger.info(f"✅ 关键词组分析结果已更新 (keyword_set_id={keyword_set_id})")

    async def analyze(
        self,
        db: AsyncSession,
        keywords: Optional[List[str]],
        question: Optional[str],
        category: str = "",
        keyword_set_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        输入:
        - `db`: 数据库会话
        - `keywords`/`question`/`category`: 分析参数
        - `keyword_set_id`: 回写目标（可选，缺省时只返回结果不落库）

        输出:
        - 模型输出的原始 JSON 对象

        作用:
        - 执行完整分析流程；写库失败时异常中携带已计算的结果
        """

        keywords, question = self.validate_request(keywords, question)

        if keyword_set_id:
            self._acquire(keyword_set_id)
        try:
            logger.info(f"🤖 开始关键词分析: category={category}, keywords={keywords}, keyword_set_id={keyword_set_id}")
            raw, result = await self.request_analysis(keywords, question, category or "")
            if keyword_set_id:
                try:
                    await self.ingest(db, keyword_set_id, result)
                except PersistenceError as e:
                    e.data = raw
                    raise
            return raw
        finally:
            if keyword_set_id:
                self._release(keyword_set_id)

    async def mark_pending(self, db: AsyncSession, keyword_set: KeywordSet) -> None:
        keyword_set.analysis_status = "pending"
        keyword_set.last_analysis_error = None
        keyword_set.updated_at = datetime.now()
        await db.commit()

    async def _mark_failed(self, keyword_set_id: str, message: str) -> None:
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(
                    update(KeywordSet)
                    .where(KeywordSet.id == keyword_set_id)
                    .values(
                        analysis_status="failed",
                        last_analysis_error=message,
                        updated_at=datetime.now(),
                    )
                )
                await db.commit()
        except Exception as e:
            logger.error(f"❌ 记录分析失败状态时出错 (keyword_set_id={keyword_set_id}): {e}")

    async def _clear_pending(self, keyword_set_id: str) -> None:
        """
        作用:
        - 后台分析因同一关键词组已有分析在执行而跳过时，撤销 `pending` 标记
        - 仍为 `pending` 时才回退：分析过则为 `completed`，否则为 `idle`
        """
        try:
            async with AsyncSessionLocal() as db:
                await db.execute(
                    update(KeywordSet)
                    .where(KeywordSet.id == keyword_set_id, KeywordSet.analysis_status == "pending")
                    .values(
                        analysis_status=case(
                            (KeywordSet.last_analyzed_at.is_(None), "idle"),
                            else_="completed",
                        )
                    )
                )
                await db.commit()
        except Exception as e:
            logger.error(f"❌ 撤销 pending 状态时出错 (keyword_set_id={keyword_set_id}): {e}")

    async def run_for_keyword_set(self, keyword_set_id: str) -> bool:
        """
        输入:
        - `keyword_set_id`: 关键词组 ID

        输出:
        - 是否分析并保存成功

        作用:
        - 后台任务入口（创建后自动分析、手动重新分析、定时刷新共用）
        - 使用独立会话；失败时记录 `failed` 状态与错误信息，异常不向外抛出
        """

        try:
            async with AsyncSessionLocal() as db:
                keyword_set = await db.get(KeywordSet, keyword_set_id)
                if keyword_set is None:
                    logger.warning(f"⚠️ 后台分析跳过：关键词组不存在 (keyword_set_id={keyword_set_id})")
                    return False
                await self.analyze(
                    db,
                    list(keyword_set.keywords or []),
                    keyword_set.question,
                    keyword_set.category,
                    keyword_set_id=keyword_set_id,
                )
            return True
        except AnalysisInProgress:
            logger.info(f"⏳ 关键词组已有分析在执行，跳过 (keyword_set_id={keyword_set_id})")
            await self._clear_pending(keyword_set_id)
            return False
        except SignalError as e:
            logger.error(f"❌ 后台分析失败 (keyword_set_id={keyword_set_id}): {e.message}")
            await self._mark_failed(keyword_set_id, e.message)
            return False
        except Exception as e:
            logger.error(f"❌ 后台分析异常 (keyword_set_id={keyword_set_id}): {e}")
            await self._mark_failed(keyword_set_id, str(e) or e.__class__.__name__)
            return False


analysis_service = AnalysisService(ai_service)
