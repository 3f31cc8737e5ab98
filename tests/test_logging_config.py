"""Tests for logging setup and the debug logging capability."""

import logging

from common.logging_config import DebugLog, setup_logging


def test_debug_log_is_noop_when_disabled(caplog):
    caplog.set_level(logging.DEBUG, logger='tests.quiet')
    DebugLog(logging.getLogger('tests.quiet'), debug_mode=False).log('hidden', is_error=True)

    assert caplog.records == []


def test_debug_log_levels(caplog):
    caplog.set_level(logging.INFO, logger='tests.loud')
    log = DebugLog(logging.getLogger('tests.loud'), debug_mode=True)

    log.log('saved')
    log.log('failed', is_error=True)

    assert [(r.levelname, r.getMessage()) for r in caplog.records] == [('INFO', 'saved'), ('ERROR', 'failed')]


def test_setup_logging_is_idempotent():
    first = setup_logging('tests.component', log_level='debug')
    assert first.level == logging.DEBUG

    second = setup_logging('tests.component')

    assert first is second
    assert len(first.handlers) == 1


def test_setup_logging_emits_session_fields_verbatim(capsys):
    logger = setup_logging('tests.verbatim', log_level='INFO')
    logger.info('Chunk 2 saved [upload_id=token-3f2a checksum=secret9]')

    out = capsys.readouterr().out
    assert 'upload_id=token-3f2a checksum=secret9' in out
