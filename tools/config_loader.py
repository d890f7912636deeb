import os

import yaml

# 默认配置文件（相对项目根目录）
DEFAULT_CONFIG_FILE = os.path.join("config", "db_config.yaml")


def resolve_config_path(file_path=None):
    """
    解析配置文件路径：
    - 绝对路径原样返回
    - 相对路径以项目根目录为基准（与运行时的 cwd 无关）
    """
    file_path = file_path or DEFAULT_CONFIG_FILE
    if os.path.isabs(file_path):
        return file_path
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(project_root, file_path)


def load_config(section=None, file_path=None):
    """
    加载 YAML 配置文件，并返回指定部分配置
    :param section: 配置块名称，例如 'mysqlconfig' / 'logreader'
    :param file_path: 配置文件路径（相对项目根或绝对路径）
    :raises FileNotFoundError: 配置文件不存在
    :raises KeyError: 指定的配置块不存在
    """
    config_file = resolve_config_path(file_path)
    with open(config_file, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    if section:
        if section not in config:
            raise KeyError(f"配置块 {section!r} 不存在于 {config_file}")
        return config[section] or {}
    return config
