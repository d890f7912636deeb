# run_logreader.py
"""
=========================================
LogReader 主程序入口
=========================================

用法：
    mosquitto -v 2>&1 | python -m run.run_logreader
    python -m run.run_logreader --config config/db_config.yaml --verbose < broker.log

  - 启动时读取一次配置（db_config.yaml），清空 client / topic / realtime 表
  - 后台线程按 interval_sec 周期落库
  - 主线程读取标准输入，输入结束即退出
"""
from __future__ import annotations

import argparse
import logging
import sys

from commons.base_logger import BaseLogger
from logreader.app import LogReaderApp
from logreader.setting import CONFIG_FILE, load_settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="mosquitto 日志流量统计")
    parser.add_argument("--config", default=CONFIG_FILE, help="配置文件路径（默认 config/db_config.yaml）")
    parser.add_argument("--verbose", action="store_true", help="输出 DEBUG 日志（含无法识别的日志行）")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = BaseLogger(name="LogReader", to_file=True)
    if args.verbose:
        for name in ("LogReader", "Reconciler", "FlushScheduler", "IngestionLoop"):
            BaseLogger(name=name, to_file=True).set_level(logging.DEBUG)

    db_cfg, reader_cfg = load_settings(args.config)
    logger.log_info(f"配置加载成功：{db_cfg!r}")

    app = LogReaderApp(db_cfg, reader_cfg, logger=logger)
    try:
        app.run()
    except KeyboardInterrupt:
        # Ctrl+C：run() 的 finally 已经完成最后一次落库
        logger.log_info("收到中断信号，退出")
    return 0


if __name__ == "__main__":
    sys.exit(main())
