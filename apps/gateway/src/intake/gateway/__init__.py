"""Intake Gateway -- HTTP 入口：请求事件、异常归类与诊断路由"""
