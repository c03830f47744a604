"""
配置管理
从环境变量读取配置
"""
import os

class Config:
    # 数据库配置（全局选项列表 + 任务参数引用）
    DATABASE_PATH = os.getenv('DATABASE_PATH', '/data/choice_lists.db')

    # 时区配置（统一使用东八区），用于记录全局配置的保存时间
    TZ = os.getenv('TZ', 'Asia/Shanghai')

    # 显示名称默认语言（zh / en），请求可通过 ?lang= 覆盖
    LANGUAGE = os.getenv('LANGUAGE', 'zh')

    # 日志级别
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Web 服务监听
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', '5000'))
