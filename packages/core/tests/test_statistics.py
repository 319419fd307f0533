"""周统计聚合测试

测试内容：
1. 窗口边界（7 天含，7 天 + 1 秒不含）
2. 请求 / 成功 / 失败计数
3. 错误按代码统计与关键/普通划分
4. 去重用户
5. 基于日志存储的全量扫描
"""

from datetime import timedelta

from intake.core.statistics import (
    MISSING_DESCRIPTION,
    StatisticsAggregator,
    compute_weekly_statistics,
)


class TestWindow:
    """窗口边界"""

    def test_exactly_seven_days_included(self, classifier, make_event, tuesday_noon):
        event = make_event("INFO_REQUEST", timestamp=tuesday_noon - timedelta(days=7))
        stats = compute_weekly_statistics([event], classifier, tuesday_noon)
        assert stats.total_requests == 1

    def test_seven_days_plus_one_second_excluded(self, classifier, make_event, tuesday_noon):
        event = make_event(
            "INFO_REQUEST",
            timestamp=tuesday_noon - timedelta(days=7, seconds=1),
        )
        stats = compute_weekly_statistics([event], classifier, tuesday_noon)
        assert stats.total_requests == 0

    def test_now_included_future_excluded(self, classifier, make_event, tuesday_noon):
        events = [
            make_event("INFO_REQUEST", timestamp=tuesday_noon),
            make_event("INFO_REQUEST", timestamp=tuesday_noon + timedelta(seconds=1)),
        ]
        stats = compute_weekly_statistics(events, classifier, tuesday_noon)
        assert stats.total_requests == 1

    def test_period_bounds(self, classifier, tuesday_noon):
        stats = compute_weekly_statistics([], classifier, tuesday_noon)
        assert stats.period_end == tuesday_noon
        assert stats.period_start == tuesday_noon - timedelta(days=7)

    def test_events_outside_window_do_not_count(self, classifier, make_event, tuesday_noon):
        """窗口外的错误与用户都不计入"""
        old = tuesday_noon - timedelta(days=8)
        events = [
            make_event("ERR_SERVER", timestamp=old, data={"curp": "OLD"}),
            make_event("ERR_050", timestamp=old),
        ]
        stats = compute_weekly_statistics(events, classifier, tuesday_noon)
        assert stats.errors_by_type == {}
        assert stats.failed_surveys == 0
        assert stats.unique_users == set()


class TestCounts:
    """计数规则"""

    def test_requests_and_successes(self, classifier, make_event, tuesday_noon):
        """5 条 INFO_REQUEST* + 2 条 INFO_SURVEY_SUCCESS"""
        events = [make_event("INFO_REQUEST") for _ in range(3)]
        events += [make_event("INFO_REQUEST_SEARCH") for _ in range(2)]
        events += [make_event("INFO_SURVEY_SUCCESS") for _ in range(2)]
        events.append(make_event("INFO_HEALTH"))

        stats = compute_weekly_statistics(events, classifier, tuesday_noon)
        assert stats.total_requests == 5
        assert stats.successful_surveys == 2

    def test_failed_survey_increments_once(self, classifier, make_event, tuesday_noon):
        """每个问卷失败代码事件 failed_surveys 恰好 +1"""
        for code in ("ERR_005", "ERR_006", "ERR_007", "ERR_008", "ERR_050", "ERR_060"):
            stats = compute_weekly_statistics([make_event(code)], classifier, tuesday_noon)
            assert stats.failed_surveys == 1, code

    def test_critical_and_normal_split(self, classifier, make_event, tuesday_noon):
        events = [
            make_event("ERR_SERVER"),
            make_event("ERR_SERVER"),
            make_event("ERR_001"),
            make_event("WARN_NOT_FOUND"),
        ]
        stats = compute_weekly_statistics(events, classifier, tuesday_noon)
        assert stats.errors.critical == 2
        assert stats.errors.normal == 1
        assert stats.failed_surveys == 0

    def test_errors_by_type_keeps_first_description(self, classifier, make_event, tuesday_noon):
        events = [
            make_event("ERR_001", description="first"),
            make_event("ERR_002", description=""),
            make_event("ERR_001", description="second"),
        ]
        stats = compute_weekly_statistics(events, classifier, tuesday_noon)

        assert list(stats.errors_by_type) == ["ERR_001", "ERR_002"]
        assert stats.errors_by_type["ERR_001"].count == 2
        assert stats.errors_by_type["ERR_001"].description == "first"
        assert stats.errors_by_type["ERR_002"].description == MISSING_DESCRIPTION

    def test_unique_users(self, classifier, make_event, tuesday_noon):
        """3 条相同 CURP + 1 条不同外部编码 -> 2 个用户"""
        events = [make_event("INFO_SEARCH_START", data={"curp": "CURP-1"}) for _ in range(3)]
        events.append(make_event("INFO_SURVEY_SUCCESS", data={"external_code": "EXT-9"}))

        stats = compute_weekly_statistics(events, classifier, tuesday_noon)
        assert stats.unique_user_count == 2
        assert stats.unique_users == {"CURP-1", "EXT-9"}


class TestStatisticsAggregator:
    """基于日志存储的聚合"""

    def test_scan_skips_corrupt_lines(self, core_store, classifier, make_event, tuesday_noon):
        core_store.append(make_event("INFO_REQUEST"))
        with core_store.path.open("a", encoding="utf-8") as f:
            f.write("garbage line\n")
        core_store.append(make_event("ERR_050", data={"curp": "C"}))

        stats = StatisticsAggregator(core_store, classifier).compute(tuesday_noon)
        assert stats.total_requests == 1
        assert stats.failed_surveys == 1
        assert stats.errors.critical == 1
        assert stats.unique_user_count == 1

    def test_empty_store(self, core_store, classifier, tuesday_noon):
        stats = StatisticsAggregator(core_store, classifier).compute(tuesday_noon)
        assert stats.total_requests == 0
        assert stats.errors_by_type == {}
