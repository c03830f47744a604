"""
数据模型
"""
import json
import re

# 名称只允许字母、数字、下划线
NAME_PATTERN = re.compile(r'^[_a-zA-Z0-9]+$')


def check_name(name):
    """校验选项列表名称，返回错误消息 key（required / invalid），合法返回 None"""
    if name is None or not str(name).strip():
        return 'required'
    if not NAME_PATTERN.match(str(name).strip()):
        return 'invalid'
    return None


def split_choice_list_text(text):
    """文本框内容按行拆分为选项（兼容 \\r\\n），末尾换行不产生空选项"""
    if not text:
        return []
    lines = re.split(r'\r?\n', text)
    if lines and lines[-1] == '':
        lines.pop()
    return lines


def parse_choices(choices):
    """校验并规范化选项：None 为空，字符串按行拆分，数组元素须为标量（不能为 null）"""
    if choices is None:
        return []
    if isinstance(choices, str):
        return split_choice_list_text(choices)
    if not isinstance(choices, (list, tuple)):
        raise ValueError(f"choices 必须为数组或文本: {choices!r}")
    for c in choices:
        if c is None or isinstance(c, (dict, list, tuple)):
            raise ValueError(f"无效的选项值: {c!r}")
    return [str(c) for c in choices]


class ChoiceListEntry:
    """全局选项列表项：名称 + 有序选项"""
    def __init__(self, name=None, choices=None, id=None):
        self.id = id
        # 非字符串名称统一转为字符串，与 sqlite 读回的结果一致
        self.name = str(name).strip() if name is not None else ''
        self.choices = [str(c) for c in (choices or [])]

    @property
    def choice_list_text(self):
        return '\n'.join(self.choices)

    def is_valid(self):
        """必填项是否齐全（名称合法）。提交时可能存在无效项，仅作为保存时的过滤条件"""
        return check_name(self.name) is None

    @classmethod
    def from_dict(cls, data):
        """从表单/JSON 构造。choices 优先，否则解析 choiceListText（每行一个选项）"""
        data = data or {}
        choices = data.get('choices')
        if choices is None:
            choices = data.get('choiceListText')
        return cls(name=data.get('name'), choices=parse_choices(choices))

    def to_dict(self):
        return {
            'name': self.name,
            'choices': list(self.choices),
            'choiceListText': self.choice_list_text
        }

    def __eq__(self, other):
        if not isinstance(other, ChoiceListEntry):
            return NotImplemented
        return self.name == other.name and self.choices == other.choices

    def __repr__(self):
        return f'ChoiceListEntry(name={self.name!r}, choices={self.choices!r})'

    def save(self, conn, position):
        """保存到数据库（全量替换时由调用方先清空）"""
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO choice_list_entries (position, name, choices)
            VALUES (?, ?, ?)
        ''', (position, self.name, json.dumps(self.choices, ensure_ascii=False)))
        self.id = cursor.lastrowid

    @classmethod
    def delete_all(cls, conn):
        conn.cursor().execute('DELETE FROM choice_list_entries')

    @classmethod
    def query_all(cls, conn):
        """按保存顺序查询所有"""
        cursor = conn.cursor()
        cursor.execute('SELECT * FROM choice_list_entries ORDER BY position, id')
        results = []
        for row in cursor.fetchall():
            try:
                choices = json.loads(row['choices']) if row['choices'] else []
            except (ValueError, TypeError):
                choices = []
            results.append(cls(id=row['id'], name=row['name'], choices=choices))
        return results


class JobChoiceParameter:
    """任务的选项参数配置（持久化记录）。provider_type 为 global 时仅保存引用名称"""
    def __init__(self, job_name=None, param_name=None, provider_type=None,
                 provider_name=None, choices=None, editable=False,
                 description=None, position=0, id=None):
        self.id = id
        self.job_name = job_name
        self.param_name = param_name
        self.provider_type = provider_type
        self.provider_name = provider_name
        self.choices = list(choices or [])
        self.editable = bool(editable)
        self.description = description
        self.position = position

    def save(self, conn):
        """保存到数据库"""
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO job_choice_parameters
            (job_name, param_name, provider_type, provider_name, choices, editable, description, position)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            self.job_name,
            self.param_name,
            self.provider_type,
            self.provider_name or '',
            json.dumps(self.choices, ensure_ascii=False),
            1 if self.editable else 0,
            self.description or '',
            self.position
        ))
        self.id = cursor.lastrowid

    @classmethod
    def delete_by_job(cls, conn, job_name):
        conn.cursor().execute('DELETE FROM job_choice_parameters WHERE job_name=?', (job_name,))

    @classmethod
    def query_by_job(cls, conn, job_name):
        """根据任务名查询所有参数（按配置顺序）"""
        cursor = conn.cursor()
        cursor.execute(
            'SELECT * FROM job_choice_parameters WHERE job_name=? ORDER BY position, id',
            (job_name,)
        )
        results = []
        for row in cursor.fetchall():
            try:
                choices = json.loads(row['choices']) if row['choices'] else []
            except (ValueError, TypeError):
                choices = []
            results.append(cls(
                id=row['id'],
                job_name=row['job_name'],
                param_name=row['param_name'],
                provider_type=row['provider_type'],
                provider_name=row['provider_name'] or None,
                choices=choices,
                editable=bool(row['editable']),
                description=row['description'] or None,
                position=row['position']
            ))
        return results
