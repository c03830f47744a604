"""
全局选项列表注册表
管理员在系统配置中维护的「名称 -> 选项列表」，供任务参数按名称引用
"""
import logging
import threading

logger = logging.getLogger(__name__)


class ChoiceRegistry:
    """全局选项列表（进程内唯一的数据源，由应用显式创建并传递）"""

    def __init__(self, store=None):
        self.store = store
        # None 表示尚未加载，读操作按空列表处理
        self._entries = None
        self._write_lock = threading.Lock()

    def load(self):
        """从持久化存储恢复；从未保存过则为空"""
        state = self.store.load() if self.store is not None else None
        self._entries = tuple(state) if state else ()
        logger.info(f"已加载全局选项列表，共 {len(self._entries)} 项")
        return self

    @property
    def entries(self):
        return list(self._entries or ())

    def list_names(self):
        """所有列表名称（按配置顺序），用于任务配置页的下拉框"""
        return [e.name for e in (self._entries or ())]

    def find_entry(self, name):
        """按名称查找（区分大小写）。重名时返回第一个，不存在返回 None"""
        for e in (self._entries or ()):
            if e.name == name:
                return e
        return None

    def get_choices(self, name):
        e = self.find_entry(name)
        return list(e.choices) if e is not None else []

    def replace_all(self, candidate_entries):
        """
        全量替换：只保留 is_valid() 的项（保持原顺序），随后保存。
        表单校验报错时仍可能提交无效项，这里直接丢弃并返回被丢弃的项。
        """
        candidates = list(candidate_entries or [])
        kept = tuple(e for e in candidates if e.is_valid())
        dropped = [e for e in candidates if not e.is_valid()]

        with self._write_lock:
            # 先构造新列表再整体替换，读方不会看到中间状态
            self._entries = kept
            if dropped:
                logger.warning(
                    f"丢弃 {len(dropped)} 个无效的选项列表: {[e.name for e in dropped]}"
                )
            duplicates = _duplicate_names(kept)
            if duplicates:
                logger.warning(f"存在重名的选项列表，引用时取第一个: {duplicates}")
            logger.info(f"全局选项列表已更新，保留 {len(kept)} 项")
            if self.store is not None and not self.store.save(list(kept)):
                logger.error("全局选项列表保存失败，内存中的配置将在重启后丢失")
        return dropped


def _duplicate_names(entries):
    seen = set()
    duplicates = []
    for e in entries:
        if e.name in seen and e.name not in duplicates:
            duplicates.append(e.name)
        seen.add(e.name)
    return duplicates
