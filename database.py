"""
数据库初始化
使用 SQLite 存储全局选项列表与任务参数引用
"""
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime

import pytz

from config import Config
from models import ChoiceListEntry

logger = logging.getLogger(__name__)


@contextmanager
def get_db(db_path=None):
    """获取数据库连接"""
    conn = sqlite3.connect(db_path or Config.DATABASE_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

def init_db(db_path=None):
    """初始化数据库表"""
    path = db_path or Config.DATABASE_PATH
    # 确保数据库目录存在
    os.makedirs(os.path.dirname(path) if os.path.dirname(path) else '.', exist_ok=True)

    with get_db(path) as conn:
        cursor = conn.cursor()

        # 全局选项列表（position 决定展示顺序）
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS choice_list_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                position INTEGER NOT NULL,
                name TEXT NOT NULL,
                choices TEXT NOT NULL
            )
        ''')
        # 全局配置元数据：saved_at 存在表示已保存过（区分「从未配置」与「配置为空」）
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS choice_list_meta (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        ''')
        # 任务参数：provider_type=global 时 provider_name 引用全局选项列表名称
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS job_choice_parameters (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                job_name TEXT NOT NULL,
                param_name TEXT NOT NULL,
                provider_type TEXT NOT NULL,
                provider_name TEXT,
                choices TEXT,
                editable INTEGER DEFAULT 0,
                description TEXT,
                position INTEGER NOT NULL DEFAULT 0
            )
        ''')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_entry_position ON choice_list_entries(position)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_job_param_job ON job_choice_parameters(job_name)')


class ChoiceListStore:
    """全局选项列表的读取/保存"""

    def __init__(self, db_path=None):
        self.db_path = db_path or Config.DATABASE_PATH
        self.tz = pytz.timezone(Config.TZ)

    def load(self):
        """读取已保存的列表；从未保存过返回 None"""
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM choice_list_meta WHERE key='saved_at'")
            if cursor.fetchone() is None:
                return None
            return ChoiceListEntry.query_all(conn)

    def save(self, entries):
        """全量替换保存，失败只记录日志并返回 False"""
        try:
            with get_db(self.db_path) as conn:
                ChoiceListEntry.delete_all(conn)
                for position, entry in enumerate(entries):
                    entry.save(conn, position)
                conn.cursor().execute(
                    "INSERT OR REPLACE INTO choice_list_meta (key, value) VALUES ('saved_at', ?)",
                    (datetime.now(self.tz).isoformat(),)
                )
            logger.info(f"全局选项列表已保存，共 {len(entries)} 项")
            return True
        except sqlite3.Error as e:
            logger.error(f"保存全局选项列表失败: {e}", exc_info=True)
            return False

    def saved_at(self):
        """最近一次保存时间（ISO 字符串），未保存过返回 None"""
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM choice_list_meta WHERE key='saved_at'")
            row = cursor.fetchone()
        return row['value'] if row else None
