"""Tests for TimingLog and timed_phase."""

import pytest

from nodeset_toolkit.importer.timing import TimingLog, timed_phase


class TestTimingLog:
    def test_file_total(self):
        log = TimingLog()
        log.log_file("a.xml", "validate", 0.5)
        log.log_file("a.xml", "parse", 1.0)
        assert log.get_file_total("a.xml") == pytest.approx(1.5)
        assert log.get_file_total("missing.xml") == 0

    def test_slowest_files(self):
        log = TimingLog()
        log.log_file("fast.xml", "parse", 0.1)
        log.log_file("slow.xml", "parse", 2.0)
        log.log_file("mid.xml", "parse", 1.0)
        assert [name for name, _ in log.get_slowest_files(2)] == ["slow.xml", "mid.xml"]

    def test_summary_lists_phases(self):
        log = TimingLog()
        log.log_file("a.xml", "checksum", 0.25)
        summary = log.summary()
        assert "a.xml:" in summary
        assert "checksum" in summary

    def test_to_dict(self):
        log = TimingLog()
        log.log_file("a.xml", "parse", 0.25)
        data = log.to_dict()
        assert data["file_timings"] == {"a.xml": {"parse": 0.25}}
        assert data["slowest_files"] == [{"file": "a.xml", "total": 0.25}]


class TestTimedPhase:
    def test_records_duration(self):
        log = TimingLog()
        with timed_phase(log, "validate", "a.xml"):
            pass
        assert log.file_timings["a.xml"]["validate"] >= 0

    def test_records_when_block_raises(self):
        log = TimingLog()
        with pytest.raises(RuntimeError):
            with timed_phase(log, "parse", "a.xml"):
                raise RuntimeError("boom")
        assert "parse" in log.file_timings["a.xml"]
