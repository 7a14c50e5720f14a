"""Tests for taglog._logger module."""
import asyncio
import io
import json
from concurrent.futures import Future
from unittest.mock import MagicMock

import pytest

from taglog._logger import ALWAYS_TAG, Logger, LoggerFactory
from taglog.completion import completed
from taglog.config import ResolvedOptions
from taglog.exceptions import ConfigError, WriteFailure
from taglog.functions import default_json, default_text
from taglog.levels import Level


def json_lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


@pytest.fixture
def logger(streams):
    return Logger({'level': 'INFO', 'destinations': list(streams), 'logFunctions': ['defaultJson']},
                  ['app'])

#
# construction tests
#


class TestLoggerInit:

    def test_options_apply(self, streams):
        """Test constructor options are resolved and applied."""
        logger = Logger({'level': 'warn', 'destinations': list(streams)})
        assert logger.level is Level.WARN
        assert logger.destinations == streams
        assert logger.log_functions == (default_text,)

    def test_tags(self, streams):
        """Test tags are stored as a list."""
        assert Logger({'destinations': list(streams)}, 'db').tags == ['db']

    def test_every_construction_applies_its_options(self, streams):
        """Test a later logger does not inherit an earlier logger's options."""
        Logger({'level': 'ERROR', 'destinations': list(streams)})
        second = Logger({'level': 'DEBUG', 'destinations': list(streams)})
        assert second.level is Level.DEBUG

    def test_invalid_level_raises(self, streams):
        """Test construction fails on an invalid level."""
        with pytest.raises(ConfigError):
            Logger({'level': 'CHATTY', 'destinations': list(streams)})

    def test_invalid_destination_raises(self):
        """Test construction fails on an invalid destination."""
        with pytest.raises(ConfigError):
            Logger({'destinations': [3.14]})

    def test_unopenable_file_raises(self, tmp_path):
        """Test construction fails when a file cannot be opened."""
        with pytest.raises(OSError):
            Logger({'destinations': [str(tmp_path / 'no' / 'such.log')]})

#
# mutable fields tests
#


class TestLoggerFields:

    def test_set_level_case_insensitive(self, logger):
        """Test level assignment is validated and uppercased."""
        logger.level = 'debug'
        assert logger.level is Level.DEBUG

    def test_set_invalid_level_raises(self, logger):
        """Test invalid level assignment raises ConfigError."""
        with pytest.raises(ConfigError):
            logger.level = 'LOUD'
        assert logger.level is Level.INFO

    def test_set_destinations(self, logger):
        """Test destinations are re-resolved on assignment."""
        sink = io.StringIO()
        logger.destinations = [sink]
        logger.info('moved')
        assert json_lines(sink)[0]['text'] == 'moved'

    def test_set_log_functions(self, logger, streams):
        """Test log functions are re-resolved on assignment."""
        logger.log_functions = ['defaultText']
        logger.info('plain')
        assert streams[0].getvalue().rstrip().endswith('[app] - plain')

    def test_get_options(self, logger, streams):
        """Test get_options returns the resolved snapshot."""
        options = logger.get_options()
        assert options == ResolvedOptions(Level.INFO, streams, (default_json,), ('app',))

    def test_get_options_copies_tags(self, logger):
        """Test the snapshot tags do not follow later changes to the logger tags."""
        options = logger.get_options()
        logger.tags.append('late')
        assert options.tags == ('app',)
        assert logger.get_options().tags == ('app', 'late')

    def test_logger_from_snapshot(self, logger, streams):
        """Test a logger built from a snapshot gets its own copy of the tags."""
        clone = Logger(logger.get_options())
        assert clone.tags == ['app']
        clone.tags.append('db')
        assert logger.tags == ['app']
        assert clone.destinations == streams

    def test_failed_resolution_creates_no_file(self, tmp_path):
        """Test a bad destination after a file path leaves no file behind."""
        path = tmp_path / 'x.log'
        with pytest.raises(ConfigError):
            Logger({'destinations': [str(path), 3.14]})
        assert not path.exists()

    def test_bind_appends_tags(self, logger, streams):
        """Test bind returns a new logger with extra tags."""
        child = logger.bind('db', 'read')
        assert child is not logger
        assert child.tags == ['app', 'db', 'read']
        assert logger.tags == ['app']
        assert child.destinations == streams

#
# filtering tests
#


class TestFiltering:

    def test_less_verbose_is_written(self, logger, streams):
        """Test messages at or below the logger level are written."""
        logger.warn('careful')
        assert json_lines(streams[0])[0]['level'] == 'WARN'

    def test_more_verbose_is_dropped(self, logger, streams):
        """Test messages more verbose than the logger level produce no writes."""
        logger.debug('noise')
        assert streams[0].getvalue() == ''
        assert streams[1].getvalue() == ''

    def test_always_tag_bypasses_level(self, logger, streams):
        """Test the always tag forces a write."""
        logger.debug2(ALWAYS_TAG, 'forced')
        assert json_lines(streams[0])[0]['text'] == 'forced'

    def test_always_tag_with_level_off(self, logger, streams):
        """Test the always tag is written even when the logger is OFF."""
        logger.level = 'OFF'
        logger.error('hidden')
        logger.error2(['x', 'always'], 'shown')
        assert [r['text'] for r in json_lines(streams[0])] == ['shown']

    def test_always_tag_on_logger(self, streams):
        """Test an always tag given at creation applies to every call."""
        logger = Logger({'level': 'OFF', 'destinations': list(streams),
                         'logFunctions': ['defaultJson']}, ['always'])
        logger.debug('kept')
        assert json_lines(streams[0])[0]['text'] == 'kept'

    def test_filtered_message_still_built(self, logger):
        """Test log functions see filtered messages with should_log false."""
        fn = MagicMock(return_value=None)
        logger.log_functions = [fn]
        logger.debug('quiet %s', 'arg')
        message, should_log, destinations = fn.call_args[0]
        assert should_log is False
        assert message.text == 'quiet arg'

#
# dispatch tests
#


class TestDispatch:

    def test_tags_merged_in_order(self, logger, streams):
        """Test logger tags come first and duplicates are kept."""
        logger.info2(['app', 'db'], 'x')
        assert json_lines(streams[0])[0]['tags'] == ['app', 'app', 'db']

    def test_single_string_tag(self, logger, streams):
        """Test a single string is one tag."""
        logger.info2('db', 'x')
        assert json_lines(streams[0])[0]['tags'] == ['app', 'db']

    def test_unknown_level_raises(self, logger):
        """Test dispatch rejects unknown levels."""
        with pytest.raises(ConfigError):
            logger.dispatch('LOUD', None, 'x')

    def test_level_case_insensitive(self, logger, streams):
        """Test dispatch uppercases the level."""
        logger.dispatch('warn', None, 'x').result()
        assert json_lines(streams[0])[0]['level'] == 'WARN'

    def test_every_log_function_called(self, logger):
        """Test each registered log function gets the same message."""
        first, second = MagicMock(return_value=None), MagicMock(return_value=None)
        logger.log_functions = [first, second]
        logger.info('x')
        assert first.call_args[0][0] is second.call_args[0][0]

    def test_completion_waits_for_all_functions(self, logger):
        """Test the call completes once every log function has."""
        pending = Future()
        logger.log_functions = [MagicMock(return_value=pending), MagicMock(return_value=completed())]
        future = logger.info('x')
        assert not future.done()
        pending.set_result(None)
        assert future.done()

    def test_write_failure_in_completion(self, logger):
        """Test a failed write fails the completion, not the call."""
        broken = MagicMock()
        broken.write.side_effect = OSError('disk full')
        logger.destinations = [broken]
        future = logger.error('x')
        assert isinstance(future.exception(), WriteFailure)

    def test_path_like_sink_is_written(self, logger, tmp_path):
        """Test a sink that also defines __fspath__ is written to, not opened."""

        class NamedSink(io.StringIO):
            def __fspath__(self):
                return str(tmp_path / 'named.log')

        sink = NamedSink()
        logger.destinations = [sink]
        logger.info('kept').result()
        assert json_lines(sink)[0]['text'] == 'kept'
        assert not (tmp_path / 'named.log').exists()

    def test_snapshot_at_dispatch(self, logger, streams):
        """Test destinations are read once at dispatch start."""
        late = io.StringIO()

        def swap(message, should_log, destinations):
            logger.destinations = [late]
            return default_json(message, should_log, destinations)

        logger.log_functions = [swap, default_json]
        logger.info('x')
        assert len(json_lines(streams[0])) == 2
        assert late.getvalue() == ''

    def test_exception_method(self, logger, streams):
        """Test exception() adds the stack of the handled exception."""
        try:
            raise KeyError('id')
        except KeyError:
            logger.exception('lookup failed')
        record = json_lines(streams[0])[0]
        assert record['text'] == 'lookup failed'
        assert record['stack'].startswith('KeyError')

    def test_awaitable(self, logger, streams):
        """Test completions can be awaited."""
        async def main():
            await asyncio.wrap_future(logger.info('async'))
        asyncio.run(main())
        assert json_lines(streams[0])[0]['text'] == 'async'

#
# log / log2 overload tests
#


class TestLogOverloads:

    def test_log_with_level(self, logger, streams):
        """Test log() takes a leading level."""
        logger.log('ERROR', 'bad %s', 'thing')
        record = json_lines(streams[0])[0]
        assert record['level'] == 'ERROR'
        assert record['text'] == 'bad thing'

    def test_log_with_level_enum(self, logger, streams):
        """Test log() accepts Level members."""
        logger.log(Level.WARN, 'careful')
        assert json_lines(streams[0])[0]['level'] == 'WARN'

    def test_log_without_level_is_info(self, logger, streams):
        """Test log() without a level logs at INFO."""
        logger.log('hello %s', 'world')
        record = json_lines(streams[0])[0]
        assert record['level'] == 'INFO'
        assert record['text'] == 'hello world'

    def test_log_lone_level_word_is_text(self, logger, streams):
        """Test a lone level name is logged as INFO text."""
        logger.log('ERROR')
        record = json_lines(streams[0])[0]
        assert record['level'] == 'INFO'
        assert record['text'] == 'ERROR'

    def test_log2_with_level(self, logger, streams):
        """Test log2() takes level, tags, then the message."""
        logger.log2('WARN', ['db'], 'slow %d ms', 1200)
        record = json_lines(streams[0])[0]
        assert record['level'] == 'WARN'
        assert record['tags'] == ['app', 'db']
        assert record['text'] == 'slow 1200 ms'

    def test_log2_without_level(self, logger, streams):
        """Test log2() without a level logs at INFO."""
        logger.log2(['db'], 'connected')
        record = json_lines(streams[0])[0]
        assert record['level'] == 'INFO'
        assert record['tags'] == ['app', 'db']

    def test_warning_alias(self, logger, streams):
        """Test warning() is warn()."""
        logger.warning('w')
        assert json_lines(streams[0])[0]['level'] == 'WARN'

#
# verbosity checks tests
#


class TestVerbosityChecks:

    def test_info_logger(self, logger):
        """Test an INFO logger passes ERROR, WARN and INFO only."""
        assert logger.is_error_or_verboser()
        assert logger.is_warn_or_verboser()
        assert logger.is_info_or_verboser()
        assert not logger.is_debug_or_verboser()

    def test_off_logger(self, logger):
        """Test an OFF logger passes nothing."""
        logger.level = 'OFF'
        assert not logger.is_error_or_verboser()

    def test_checks_have_no_side_effects(self, logger, streams):
        """Test checks write nothing."""
        logger.is_debug_or_verboser()
        assert streams[0].getvalue() == ''

#
# end-to-end tests
#


class TestEndToEnd:

    def test_error_info_debug(self, streams):
        """Test ERROR fans out, INFO stays primary, DEBUG is dropped."""
        logger = Logger({'level': 'INFO', 'destinations': list(streams), 'logFunctions': ['defaultJson']})

        logger.error(ValueError('boom')).result()
        first, second = json_lines(streams[0]), json_lines(streams[1])
        assert first == second
        assert first[0]['level'] == 'ERROR'
        assert first[0]['stack'].startswith('ValueError')

        logger.info('hello %s', 'world').result()
        record = json_lines(streams[0])[1]
        assert record['text'] == 'hello world'
        assert 'stack' not in record
        assert len(json_lines(streams[1])) == 1

        logger.debug('skip').result()
        assert len(json_lines(streams[0])) == 2
        assert len(json_lines(streams[1])) == 1

    def test_text_and_json_together(self, streams):
        """Test two log functions both write for one call."""
        logger = Logger({'destinations': [streams[0]], 'logFunctions': ['defaultText', 'defaultJson']})
        logger.info('both').result()
        lines = streams[0].getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith('[] - both')
        assert json.loads(lines[1])['text'] == 'both'

    def test_file_destination(self, tmp_path):
        """Test lines are appended to a file destination."""
        path = tmp_path / 'app.log'
        logger = Logger({'destinations': [str(path)], 'logFunctions': ['defaultJson']}, ['job'])
        logger.info('one').result()
        logger.warn('two').result()
        logger.destinations[0].close()
        records = [json.loads(line) for line in path.read_text().splitlines()]
        assert [r['text'] for r in records] == ['one', 'two']
        assert records[0]['tags'] == ['job']

    def test_multiline_text_one_json_line(self, streams):
        """Test text with line breaks is still one JSON line."""
        logger = Logger({'destinations': [streams[0]], 'logFunctions': ['defaultJson']})
        logger.info('line1\nline2').result()
        assert streams[0].getvalue().count('\n') == 1
        assert json_lines(streams[0])[0]['text'] == 'line1\nline2'

#
# factory tests
#


class TestLoggerFactory:

    def test_resolves_once(self, streams):
        """Test loggers share the factory's resolved options."""
        factory = LoggerFactory({'level': 'WARN', 'destinations': list(streams)})
        first, second = factory.get_logger('a'), factory.get_logger('b')
        for child in (first, second):
            options = child.get_options()
            assert options.level == factory.options.level
            assert options.destinations == factory.options.destinations
            assert options.log_functions == factory.options.log_functions
        assert first.tags == ['a']
        assert second.tags == ['b']

    def test_file_opened_once(self, tmp_path):
        """Test a file destination is opened once for every logger."""
        factory = LoggerFactory({'destinations': [str(tmp_path / 'app.log')]})
        assert factory.get_logger('a').destinations[0] is factory.get_logger('b').destinations[0]
        factory.options.destinations[0].close()

    def test_overrides(self, streams):
        """Test keyword overrides apply."""
        factory = LoggerFactory({'destinations': list(streams)}, level='ERROR')
        assert factory.get_logger().level is Level.ERROR

    def test_logger_level_change_is_local(self, streams):
        """Test changing one logger's level leaves siblings alone."""
        factory = LoggerFactory({'level': 'INFO', 'destinations': list(streams)})
        first, second = factory.get_logger(), factory.get_logger()
        first.level = 'DEBUG'
        assert second.level is Level.INFO
