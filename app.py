"""
全局选项列表 Web 服务
主应用入口
"""
import logging
from flask import Flask, jsonify, request, current_app

from config import Config
from database import init_db, get_db, ChoiceListStore
from messages import get_message
from models import ChoiceListEntry, check_name
from providers import (
    PROVIDER_TYPES,
    ChoiceParameterDefinition,
    load_job_parameters,
    save_job_parameters,
)
from registry import ChoiceRegistry

# 配置日志
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(db_path=None):
    """创建应用：初始化数据库并从存储恢复全局选项列表"""
    app = Flask(__name__)
    app.config.from_object(Config)
    db_path = db_path or Config.DATABASE_PATH
    app.config['DATABASE_PATH'] = db_path

    init_db(db_path)
    store = ChoiceListStore(db_path)
    app.extensions['choice_registry'] = ChoiceRegistry(store).load()
    app.extensions['choice_list_store'] = store

    register_routes(app)
    return app


def _registry():
    return current_app.extensions['choice_registry']


def _lang():
    return request.args.get('lang') or current_app.config['LANGUAGE']


def _json_body():
    """请求体须为 JSON 对象，否则返回 None"""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def _bad_body():
    return jsonify({'success': False, 'error': '请求体必须为 JSON 对象'}), 400


def _find_job_parameter(job_name, param_name):
    with get_db(current_app.config['DATABASE_PATH']) as conn:
        definitions = load_job_parameters(conn, job_name, _registry())
    for d in definitions:
        if d.name == param_name:
            return d
    return None


def register_routes(app):

    @app.route('/health')
    @app.route('/api/health')
    def health():
        """健康检查，供反向代理或负载均衡探测"""
        return jsonify({'status': 'ok'}), 200

    # ---------- 全局选项列表（系统配置） ----------
    @app.route('/api/choice-lists', methods=['GET'])
    def list_choice_lists():
        try:
            data = {
                'entries': [e.to_dict() for e in _registry().entries],
                'saved_at': current_app.extensions['choice_list_store'].saved_at()
            }
            return jsonify({'success': True, 'data': data})
        except Exception as e:
            logger.error(f"获取全局选项列表失败: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/choice-lists', methods=['POST', 'PUT'])
    def configure_choice_lists():
        """保存系统配置：全量替换，无效项丢弃并在返回中列出"""
        body = _json_body()
        if body is None:
            return _bad_body()
        raw = body.get('choiceListEntryList')
        if raw is None:
            raw = []
        elif isinstance(raw, dict):
            # 表单只有一项时提交的是对象而不是数组
            raw = [raw]
        if not isinstance(raw, list):
            return jsonify({'success': False, 'error': 'choiceListEntryList 必须为数组'}), 400
        try:
            candidates = [ChoiceListEntry.from_dict(x if isinstance(x, dict) else {}) for x in raw]
        except ValueError as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        try:
            dropped = _registry().replace_all(candidates)
            return jsonify({'success': True, 'data': {
                'entries': [e.to_dict() for e in _registry().entries],
                'dropped': [e.name for e in dropped]
            }})
        except Exception as e:
            logger.error(f"保存全局选项列表失败: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/choice-lists/names', methods=['GET'])
    def choice_list_names():
        """任务配置页下拉框：全部列表名称"""
        return jsonify({'success': True, 'data': _registry().list_names()})

    @app.route('/api/choice-lists/check-name', methods=['GET'])
    def check_choice_list_name():
        error = check_name(request.args.get('value'))
        if error is None:
            return jsonify({'success': True, 'data': {'kind': 'ok', 'message': ''}})
        message = get_message(f'ChoiceListEntry.name.{error}', _lang())
        return jsonify({'success': True, 'data': {'kind': 'error', 'message': message}})

    @app.route('/api/choice-lists/<name>/choices', methods=['GET'])
    def choice_list_choices(name):
        """名称不存在时返回空列表"""
        return jsonify({'success': True, 'data': _registry().get_choices(name)})

    @app.route('/api/providers', methods=['GET'])
    def list_providers():
        lang = _lang()
        data = [{'type': p.type_id, 'display_name': get_message(p.display_name_key, lang)}
                for p in PROVIDER_TYPES]
        return jsonify({'success': True, 'data': data})

    # ---------- 任务参数 ----------
    @app.route('/api/jobs/<path:job_name>/parameters', methods=['GET'])
    def get_job_parameters(job_name):
        try:
            with get_db(current_app.config['DATABASE_PATH']) as conn:
                definitions = load_job_parameters(conn, job_name, _registry())
            return jsonify({'success': True, 'data': [d.to_dict() for d in definitions]})
        except Exception as e:
            logger.error(f"获取任务参数失败 job={job_name}: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/jobs/<path:job_name>/parameters', methods=['PUT'])
    def set_job_parameters(job_name):
        body = _json_body()
        if body is None:
            return _bad_body()
        raw = body.get('parameters') or []
        if not isinstance(raw, list):
            return jsonify({'success': False, 'error': 'parameters 必须为数组'}), 400
        try:
            definitions = [ChoiceParameterDefinition.from_dict(x, _registry()) for x in raw]
        except (ValueError, AttributeError) as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        try:
            with get_db(current_app.config['DATABASE_PATH']) as conn:
                save_job_parameters(conn, job_name, definitions)
            return jsonify({'success': True, 'data': [d.to_dict() for d in definitions]})
        except Exception as e:
            logger.error(f"保存任务参数失败 job={job_name}: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/jobs/<path:job_name>/parameters/<param_name>/choices', methods=['GET'])
    def get_job_parameter_choices(job_name, param_name):
        """构建页面渲染参数时调用，每次都从全局列表重新解析"""
        try:
            definition = _find_job_parameter(job_name, param_name)
            if definition is None:
                return jsonify({'success': False, 'error': '参数不存在'}), 404
            return jsonify({'success': True, 'data': {
                'choices': definition.get_choices(),
                'default': definition.default_value(),
                'editable': definition.editable
            }})
        except Exception as e:
            logger.error(f"获取参数选项失败 job={job_name}, param={param_name}: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/jobs/<path:job_name>/parameters/<param_name>/check', methods=['POST'])
    def check_job_parameter_value(job_name, param_name):
        body = _json_body()
        if body is None:
            return _bad_body()
        if 'value' not in body:
            return jsonify({'success': False, 'error': '缺少 value'}), 400
        try:
            definition = _find_job_parameter(job_name, param_name)
        except Exception as e:
            logger.error(f"获取参数失败 job={job_name}, param={param_name}: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500
        if definition is None:
            return jsonify({'success': False, 'error': '参数不存在'}), 404
        try:
            value = definition.check_value(body['value'], _lang())
        except ValueError as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        return jsonify({'success': True, 'data': {'value': value}})


if __name__ == '__main__':
    create_app().run(host=Config.HOST, port=Config.PORT, debug=False)
