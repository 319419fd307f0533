"""Intake Core -- 事件模型、分类、日志存储与周统计"""
