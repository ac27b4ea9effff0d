"""Unit tests for logging utilities and issue reporting."""

import logging

import pytest
from reqtree.utils.logger import (
    ROOT_LOGGER_NAME,
    LogContext,
    ProgressLogger,
    get_logger,
    setup_logging,
)
from reqtree.core.issues import IssueKind, IssueLog, IssueSeverity, summarize_issues


class TestGetLogger:
    """Tests for get_logger."""

    def test_package_module_name_is_kept(self):
        assert get_logger("reqtree.audit.rule_walker").name == "reqtree.audit.rule_walker"

    def test_foreign_name_is_nested_under_root(self):
        assert get_logger("scripts.scrape").name == f"{ROOT_LOGGER_NAME}.scripts.scrape"

    def test_same_logger_returned(self):
        assert get_logger("reqtree.x") is get_logger("reqtree.x")


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_level(self):
        setup_logging(level="WARNING")
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.WARNING
        setup_logging()

    def test_writes_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(level="INFO", log_file=log_file, console=False)
        get_logger("reqtree.test").info("hello file")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()
        setup_logging()

    def test_console_uses_stderr(self, capsys):
        setup_logging(level="INFO")
        get_logger("reqtree.test").info("to stderr")
        captured = capsys.readouterr()
        assert "to stderr" in captured.err
        assert captured.out == ""
        setup_logging()


class TestLogContext:
    """Tests for LogContext."""

    def test_logs_start_and_completion(self, caplog):
        logger = get_logger("reqtree.test.context")
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            with LogContext(logger, "Resolving block", block_id="U-MAJOR-201-BS"):
                pass
        messages = [r.getMessage() for r in caplog.records]
        assert any("Starting: Resolving block (block_id=U-MAJOR-201-BS)" in m for m in messages)
        assert any(m.startswith("Completed: Resolving block") for m in messages)

    def test_logs_failure_and_reraises(self, caplog):
        logger = get_logger("reqtree.test.context")
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            with pytest.raises(ValueError):
                with LogContext(logger, "Resolving block"):
                    raise ValueError("bad block")
        assert any("Failed: Resolving block" in r.getMessage() for r in caplog.records)


class TestProgressLogger:
    """Tests for ProgressLogger."""

    def test_logs_at_intervals(self, caplog):
        logger = get_logger("reqtree.test.progress")
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            progress = ProgressLogger(logger, "Parsing", total=4, log_interval=50)
            for _ in range(4):
                progress.increment()
            progress.complete()
        messages = [r.getMessage() for r in caplog.records]
        assert "Parsing: 50% (2/4)" in messages
        assert "Parsing: 100% (4/4)" in messages
        assert any(m.startswith("Parsing: Complete") for m in messages)

    def test_repeated_percentage_logged_once(self, caplog):
        logger = get_logger("reqtree.test.progress")
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            progress = ProgressLogger(logger, "Resolving", total=10)
            progress.update(5)
            progress.update(5)
        assert [r.getMessage() for r in caplog.records] == ["Resolving: 50% (5/10)"]

    def test_zero_total(self, caplog):
        logger = get_logger("reqtree.test.progress")
        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER_NAME):
            ProgressLogger(logger, "Nothing", total=0).update(0)
        assert any("100%" in r.getMessage() for r in caplog.records)


class TestIssueLog:
    """Tests for issue collection."""

    def test_record_and_filter(self):
        issues = IssueLog()
        issues.record(IssueKind.PARSE_AMBIGUITY, "dropped", token="X")
        issues.record(IssueKind.UNRESOLVED_REFERENCE, "missing", path="ruleArray[0]")
        assert len(issues) == 2
        assert issues.of_kind(IssueKind.PARSE_AMBIGUITY)[0].context == {"token": "X"}
        assert issues.issues[1].severity == IssueSeverity.WARNING

    def test_issues_is_a_copy(self):
        issues = IssueLog()
        issues.issues.append("not recorded")
        assert len(issues) == 0

    def test_to_dict(self):
        issue = IssueLog().record(IssueKind.MALFORMED_BLOCK_IDENTIFIER, "short id", severity=IssueSeverity.ERROR)
        assert issue.to_dict() == {
            "kind": "malformed_block_identifier",
            "message": "short id",
            "severity": "error",
            "path": "",
            "context": {},
        }

    def test_summarize(self):
        issues = IssueLog()
        issues.record(IssueKind.PARSE_AMBIGUITY, "a")
        issues.record(IssueKind.PARSE_AMBIGUITY, "b")
        issues.record(IssueKind.UNRESOLVED_REFERENCE, "c")
        assert summarize_issues(issues.issues) == {"parse_ambiguity": 2, "unresolved_reference": 1}
