"""JsonLineLogStore 测试

测试内容：
1. 目录自动创建
2. 追加后按原顺序读回
3. 损坏行跳过
4. 写入失败向上抛出
5. 每次追加输出一条 action_logged 控制台日志
"""

from datetime import timedelta
from pathlib import Path

import pytest
from intake.core.store import JsonLineLogStore, create_log_store
from structlog.testing import capture_logs


class TestLogStoreSetup:
    """存储初始化"""

    def test_creates_missing_directory(self, tmp_path: Path):
        """日志目录不存在时自动创建"""
        log_dir = tmp_path / "nested" / "logs"
        store = create_log_store(log_dir)

        assert log_dir.is_dir()
        assert store.path == log_dir / "application.log"

    def test_missing_file_reads_empty(self, core_store: JsonLineLogStore):
        """尚未写入时读取为空"""
        assert core_store.read_all() == []


class TestLogStoreAppend:
    """追加与读回"""

    def test_round_trip_preserves_order_and_fields(self, core_store, make_event, tuesday_noon):
        """追加 N 条后读回 N 条，顺序与字段一致"""
        events = [
            make_event(
                f"INFO_STEP_{i}",
                timestamp=tuesday_noon + timedelta(seconds=i),
                data={"i": i},
            )
            for i in range(10)
        ]
        for event in events:
            core_store.append(event)

        assert core_store.read_all() == events

    def test_one_line_per_event(self, core_store, make_event):
        """每条事件占一行"""
        core_store.append(make_event("INFO_A"))
        core_store.append(make_event("INFO_B"))

        lines = core_store.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert '"code":"INFO_A"' in lines[0]
        assert '"code":"INFO_B"' in lines[1]

    def test_append_only(self, core_store, make_event):
        """再次追加不修改已有内容"""
        core_store.append(make_event("INFO_A"))
        before = core_store.path.read_text(encoding="utf-8")
        core_store.append(make_event("INFO_B"))
        after = core_store.path.read_text(encoding="utf-8")

        assert after.startswith(before)

    def test_write_error_propagates(self, tmp_path: Path, make_event):
        """日志路径不可写时异常直接抛出"""
        log_path = tmp_path / "application.log"
        log_path.mkdir()
        store = JsonLineLogStore(log_path)

        with pytest.raises(OSError):
            store.append(make_event("INFO_A"))


class TestLogStoreConsoleEcho:
    """追加时的控制台回显"""

    def test_one_console_entry_per_append(self, core_store, make_event, tuesday_noon):
        with capture_logs() as logs:
            core_store.append(
                make_event("ERR_SERVER", description="Fallo", origin="gateway:error_handler")
            )
            core_store.append(make_event("INFO_REQUEST"))

        echoes = [entry for entry in logs if entry["event"] == "action_logged"]
        assert len(echoes) == 2
        assert echoes[0]["timestamp"] == tuesday_noon.isoformat(timespec="milliseconds")
        assert echoes[0]["code"] == "ERR_SERVER"
        assert echoes[0]["origin"] == "gateway:error_handler"
        assert echoes[0]["description"] == "Fallo"
        assert echoes[1]["code"] == "INFO_REQUEST"

    def test_no_echo_when_write_fails(self, tmp_path: Path, make_event):
        log_path = tmp_path / "application.log"
        log_path.mkdir()
        store = JsonLineLogStore(log_path)

        with capture_logs() as logs:
            with pytest.raises(OSError):
                store.append(make_event("INFO_A"))

        assert [entry for entry in logs if entry["event"] == "action_logged"] == []


class TestLogStoreMalformedLines:
    """损坏行容错"""

    def test_corrupt_line_skipped(self, core_store, make_event):
        """N 条合法行中夹一条损坏行，读回 N 条"""
        for i in range(3):
            core_store.append(make_event(f"INFO_{i}"))
        with core_store.path.open("a", encoding="utf-8") as f:
            f.write('{"timestamp": "broken", \n')
        for i in range(3, 5):
            core_store.append(make_event(f"INFO_{i}"))

        codes = [e.code for e in core_store.read_all()]
        assert codes == ["INFO_0", "INFO_1", "INFO_2", "INFO_3", "INFO_4"]

    def test_blank_lines_ignored(self, core_store, make_event):
        """空行被忽略"""
        core_store.append(make_event("INFO_A"))
        with core_store.path.open("a", encoding="utf-8") as f:
            f.write("\n   \n")
        core_store.append(make_event("INFO_B"))

        assert [e.code for e in core_store.read_all()] == ["INFO_A", "INFO_B"]

    def test_iter_events_is_lazy(self, core_store, make_event):
        """iter_events 返回生成器，逐条产出"""
        core_store.append(make_event("INFO_A"))
        core_store.append(make_event("INFO_B"))

        iterator = core_store.iter_events()
        assert next(iterator).code == "INFO_A"
        assert next(iterator).code == "INFO_B"
        with pytest.raises(StopIteration):
            next(iterator)
