"""
界面文案（显示名称 / 校验提示），按语言查找，缺失时回退到英文
"""
from config import Config

MESSAGES = {
    'zh': {
        'GlobalChoiceListProvider.DisplayName': '全局选项列表',
        'TextareaChoiceListProvider.DisplayName': '文本框选项列表',
        'ChoiceListEntry.name.required': '名称不能为空',
        'ChoiceListEntry.name.invalid': '名称只能包含字母、数字和下划线',
        'ChoiceParameter.value.invalid': '取值不在可选项中',
    },
    'en': {
        'GlobalChoiceListProvider.DisplayName': 'Global Choice Set',
        'TextareaChoiceListProvider.DisplayName': 'Textarea Choice List',
        'ChoiceListEntry.name.required': 'Name is required',
        'ChoiceListEntry.name.invalid': 'Name can contain only alphabets, numbers, and underscores',
        'ChoiceParameter.value.invalid': 'Value is not in the choice list',
    },
}

SUPPORTED_LANGUAGES = tuple(MESSAGES.keys())


def get_message(key, lang=None):
    """按语言返回文案；未知语言用默认语言，缺失的 key 回退英文，仍缺失则返回 key 本身"""
    lang = lang if lang in SUPPORTED_LANGUAGES else Config.LANGUAGE
    table = MESSAGES.get(lang) or MESSAGES['en']
    return table.get(key) or MESSAGES['en'].get(key, key)
