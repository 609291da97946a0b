import json

from issuewindow.logging import StructuredLogger, configure_logging, get_logger


def test_structured_logger_json_format(capsys):
    """Test that structured logger produces JSON output when configured."""
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_operation('test_operation', param1='value1', param2=42)

    captured = capsys.readouterr()
    log_lines = [line for line in captured.err.strip().split('\n') if line]

    assert len(log_lines) == 1
    log_data = json.loads(log_lines[0])

    assert log_data['level'] == 'INFO'
    assert log_data['operation'] == 'test_operation'
    assert log_data['param1'] == 'value1'
    assert log_data['param2'] == 42
    assert 'timestamp' in log_data


def test_structured_logger_regular_format(capsys):
    """Test that structured logger produces regular text output when JSON disabled."""
    logger = StructuredLogger(name='test', json_logging=False, level='INFO')
    logger.log_operation('test_operation', param1='value1')

    captured = capsys.readouterr()
    assert 'Operation: test_operation' in captured.err
    assert 'INFO' in captured.err


def test_page_logs_are_debug_level(capsys):
    quiet = StructuredLogger(name='test-pages', json_logging=True, level='INFO')
    quiet.log_page('issues', 1, 100)
    assert capsys.readouterr().err == ''

    verbose = StructuredLogger(name='test-pages', json_logging=True, level='DEBUG')
    verbose.log_page('issues', 2, 50)
    entry = json.loads(capsys.readouterr().err.strip())
    assert entry['operation'] == 'fetch_page'
    assert entry['page'] == 2
    assert entry['page_size'] == 50


def test_timed_operation_logs_performance(capsys):
    logger = StructuredLogger(name='test-timed', json_logging=True, level='INFO')
    with logger.timed_operation('fetch', repository='acme/widgets'):
        pass

    lines = [json.loads(line) for line in capsys.readouterr().err.strip().split('\n')]
    assert [line['operation'] for line in lines] == ['fetch_start', 'fetch']
    assert 'duration_ms' in lines[1]


def test_timed_operation_logs_failures(capsys):
    logger = StructuredLogger(name='test-timed-fail', json_logging=True, level='INFO')
    try:
        with logger.timed_operation('fetch'):
            raise RuntimeError('boom')
    except RuntimeError:
        pass

    lines = [json.loads(line) for line in capsys.readouterr().err.strip().split('\n')]
    assert lines[-1]['level'] == 'ERROR'
    assert lines[-1]['error'] == 'boom'


def test_configure_logging_replaces_global():
    logger = configure_logging(json_logging=True, level='DEBUG')
    assert get_logger() is logger
    configure_logging()
