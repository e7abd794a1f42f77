import asyncio
import sys
import os

# Add the project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.core.database import dispose_engine, init_db
from app.services.refresh_service import run_refresh_pass


async def refresh_due():
    """
    手动执行一轮关键词组刷新
    作用：
    1. 确保表结构存在
    2. 找出距上次分析已超过更新周期（6h/12h/24h）的关键词组
    3. 逐个重新调用 AI 分析并覆盖写回；失败的关键词组会被标记为 failed
    """
    print("🔁 开始刷新到期的关键词组...")
    try:
        await init_db()
        refreshed = await run_refresh_pass()
        print(f"✅ 刷新完成，成功 {refreshed} 个。")
    except Exception as e:
        print(f"❌ 刷新失败: {e}")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(refresh_due())
