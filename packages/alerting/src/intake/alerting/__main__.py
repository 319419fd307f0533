"""CLI 入口模块 -- python -m intake.alerting <command>

支持的命令：
  send-weekly-report  计算最近 7 天统计并立即发送周报
"""

import asyncio
import sys

from intake.core.classification import load_classification_config
from intake.core.config import get_log_dir, get_report_state_file, get_timezone, now_in

from .config import load_alerting_config
from .facade import create_action_logger


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m intake.alerting <command>")
        print("命令:")
        print("  send-weekly-report  计算最近 7 天统计并立即发送周报")
        sys.exit(1)

    command = sys.argv[1]

    if command == "send-weekly-report":
        sent = asyncio.run(send_weekly_report())
        sys.exit(0 if sent else 2)
    else:
        print(f"未知命令: {command}")
        print("可用命令: send-weekly-report")
        sys.exit(1)


async def send_weekly_report() -> bool:
    """立即发送周报（不经过时间槽闸门）"""
    tz = get_timezone()
    log_dir = get_log_dir()
    alerting_config = load_alerting_config()

    print(f"日志目录: {log_dir}")
    print(f"收件人: {', '.join(alerting_config.recipients) or '(未配置)'}")

    action_logger = create_action_logger(
        log_dir=log_dir,
        tz=tz,
        alerting_config=alerting_config,
        classification=load_classification_config(),
        state_path=get_report_state_file(),
    )
    sent = await action_logger.notifier.send_weekly_report(now_in(tz))
    if sent:
        action_logger.gate.mark_sent(now_in(tz))
    print("周报已发送" if sent else "周报发送失败，详见日志")
    return sent


if __name__ == "__main__":
    main()
