"""
选项来源（provider）与选项参数定义
任务参数只保存 provider 配置；全局选项列表按名称引用，取值时才去注册表解析
"""
import logging

from messages import get_message
from models import JobChoiceParameter, parse_choices

logger = logging.getLogger(__name__)


class ChoiceListProvider:
    """选项来源接口"""
    type_id = None
    display_name_key = None

    def get_choice_list(self):
        raise NotImplementedError

    def display_name(self, lang=None):
        return get_message(self.display_name_key, lang)

    def to_dict(self):
        raise NotImplementedError


class GlobalChoiceListProvider(ChoiceListProvider):
    """引用系统配置中定义的全局选项列表（按名称）"""
    type_id = 'global'
    display_name_key = 'GlobalChoiceListProvider.DisplayName'

    def __init__(self, name, registry):
        # 名称从下拉框选择，这里不做校验；引用失效时返回空列表
        self.name = name
        self.registry = registry

    def get_choice_list(self):
        return self.registry.get_choices(self.name)

    def to_dict(self):
        return {'type': self.type_id, 'name': self.name}


class TextareaChoiceListProvider(ChoiceListProvider):
    """选项直接写在任务配置中"""
    type_id = 'textarea'
    display_name_key = 'TextareaChoiceListProvider.DisplayName'

    def __init__(self, choices=None):
        self.choices = [str(c) for c in (choices or [])]

    def get_choice_list(self):
        return list(self.choices)

    def to_dict(self):
        return {'type': self.type_id, 'choices': list(self.choices)}


PROVIDER_TYPES = (GlobalChoiceListProvider, TextareaChoiceListProvider)


def provider_from_dict(data, registry):
    """根据 {'type': ...} 构造 provider，未知类型抛 ValueError"""
    data = data or {}
    provider_type = data.get('type')
    if provider_type == GlobalChoiceListProvider.type_id:
        return GlobalChoiceListProvider(data.get('name'), registry)
    if provider_type == TextareaChoiceListProvider.type_id:
        choices = data.get('choices')
        if choices is None:
            choices = data.get('choiceListText')
        return TextareaChoiceListProvider(parse_choices(choices))
    raise ValueError(f"未知的选项来源类型: {provider_type!r}")


def parse_bool(value):
    """表单布尔值：接受 true/false 及常见字符串写法（"false"、"0"、"off" 为 False）"""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ('true', '1', 'yes', 'on'):
            return True
        if text in ('false', '0', 'no', 'off', ''):
            return False
    raise ValueError(f"无效的布尔值: {value!r}")


class ChoiceParameterDefinition:
    """选项参数：名称 + 选项来源；editable 为 True 时允许输入列表外的值"""

    def __init__(self, name, provider, editable=False, description=''):
        self.name = name
        self.provider = provider
        self.editable = bool(editable)
        self.description = description or ''

    def get_choices(self):
        return self.provider.get_choice_list()

    def default_value(self):
        choices = self.get_choices()
        return choices[0] if choices else None

    def check_value(self, value, lang=None):
        """校验构建时传入的值，合法时原样返回"""
        if self.editable:
            return value
        if value not in self.get_choices():
            raise ValueError(f"{get_message('ChoiceParameter.value.invalid', lang)}: {self.name}={value!r}")
        return value

    def to_dict(self):
        return {
            'name': self.name,
            'provider': self.provider.to_dict(),
            'editable': self.editable,
            'description': self.description
        }

    @classmethod
    def from_dict(cls, data, registry):
        name = ((data or {}).get('name') or '').strip()
        if not name:
            raise ValueError("缺少参数名称 name")
        return cls(
            name=name,
            provider=provider_from_dict(data.get('provider'), registry),
            editable=parse_bool(data.get('editable', False)),
            description=data.get('description') or ''
        )

    def to_record(self, job_name, position):
        provider = self.provider.to_dict()
        return JobChoiceParameter(
            job_name=job_name,
            param_name=self.name,
            provider_type=provider['type'],
            provider_name=provider.get('name'),
            choices=provider.get('choices'),
            editable=self.editable,
            description=self.description,
            position=position
        )

    @classmethod
    def from_record(cls, record, registry):
        provider = provider_from_dict({
            'type': record.provider_type,
            'name': record.provider_name,
            'choices': record.choices
        }, registry)
        return cls(record.param_name, provider, record.editable, record.description)


def load_job_parameters(conn, job_name, registry):
    """读取任务的选项参数定义"""
    return [ChoiceParameterDefinition.from_record(r, registry)
            for r in JobChoiceParameter.query_by_job(conn, job_name)]


def save_job_parameters(conn, job_name, definitions):
    """全量替换任务的选项参数定义"""
    JobChoiceParameter.delete_by_job(conn, job_name)
    for position, definition in enumerate(definitions):
        definition.to_record(job_name, position).save(conn)
    logger.info(f"任务 {job_name} 的选项参数已保存，共 {len(definitions)} 个")
