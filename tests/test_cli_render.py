"""Tests for the templater command line."""

import io
import os
from unittest.mock import patch

import pytest

from templater.cli.main import create_parser, main


def test_sources_keep_command_line_order(tmp_path):
    var_file = tmp_path / 'vars.env'
    var_file.write_text("A=file\n")

    args = create_parser().parse_args([
        '-e', 'a=inline', '-f', str(var_file), '-F', 'maybe.env', '-e', 'B=x'
    ])

    assert args.sources == [
        ('assign', 'a=inline'),
        ('file', str(var_file)),
        ('optional-file', 'maybe.env'),
        ('assign', 'B=x'),
    ]


def test_parser_defaults():
    args = create_parser().parse_args([])
    assert args.sources is None
    assert args.fail_on_missing is True
    assert args.extension == 'template'
    assert args.expand_vars is False
    assert args.max_depth == 16


def test_silent_and_fail_on_missing_are_exclusive():
    with pytest.raises(SystemExit):
        create_parser().parse_args(['--silent', '--fail-on-missing'])


def test_inline_text_to_stdout(capsys):
    exit_code = main(['--no-env', '-t', 'Hello ${ name }!', '-e', 'name=World'])
    assert exit_code == 0
    assert capsys.readouterr().out == 'Hello World!'


def test_last_declared_value_wins(tmp_path, capsys):
    var_file = tmp_path / 'vars.env'
    var_file.write_text("A=from-file\n")

    assert main(['--no-env', '-t', '${A}', '-e', 'A=1', '-f', str(var_file)]) == 0
    assert capsys.readouterr().out == 'from-file'

    assert main(['--no-env', '-t', '${A}', '-f', str(var_file), '-e', 'A=2']) == 0
    assert capsys.readouterr().out == '2'


def test_environment_fallback(capsys):
    with patch.dict(os.environ, {'TEMPLATER_TEST_REGION': 'eu'}):
        assert main(['-t', '${templater_test_region}']) == 0
    assert capsys.readouterr().out == 'eu'


def test_no_env_ignores_environment(capsys):
    with patch.dict(os.environ, {'TEMPLATER_TEST_REGION': 'eu'}):
        exit_code = main(['--no-env', '-t', '${TEMPLATER_TEST_REGION}'])
    assert exit_code == 3
    assert capsys.readouterr().out == ''


def test_missing_variable_strict_exit_code(capsys):
    assert main(['--no-env', '-t', '${MISSING}']) == 3
    assert capsys.readouterr().out == ''


def test_silent_keeps_placeholder(capsys):
    assert main(['--no-env', '-s', '-t', 'v=${ MISSING }']) == 0
    assert capsys.readouterr().out == 'v=${ MISSING }'


def test_expand_vars(capsys):
    base = ['--no-env', '-t', '${A}', '-e', 'A=$B', '-e', 'B=$C', '-e', 'C=final']

    assert main(base + ['--expand-vars']) == 0
    assert capsys.readouterr().out == 'final'

    assert main(base) == 0
    assert capsys.readouterr().out == '$B'


def test_cycle_exit_code(capsys):
    assert main(['--no-env', '--expand-vars', '-t', '${A}', '-e', 'A=$B', '-e', 'B=$A']) == 4


def test_invalid_max_depth():
    assert main(['--no-env', '--max-depth', '0', '-t', 'x']) == 2


def test_multiple_sources_is_config_error(tmp_path):
    assert main(['--no-env', '-t', 'x', '-i', str(tmp_path / 'a.template')]) == 2


def test_missing_input_file():
    assert main(['--no-env', '-i', '/nonexistent/file.template']) == 1


def test_missing_mandatory_var_file(tmp_path):
    assert main(['--no-env', '-t', 'x', '-f', str(tmp_path / 'absent.env')]) == 2


def test_missing_optional_var_file(tmp_path, capsys):
    assert main(['--no-env', '-t', 'x', '-F', str(tmp_path / 'absent.env')]) == 0
    assert capsys.readouterr().out == 'x'


def test_invalid_inline_assignment():
    assert main(['--no-env', '-t', 'x', '-e', 'NOEQUALS']) == 2


def test_stdin_input(capsys):
    with patch('sys.stdin', io.StringIO('port=${PORT}\n')):
        assert main(['--no-env', '-i', '-', '-e', 'PORT=80']) == 0
    assert capsys.readouterr().out == 'port=80\n'


def test_single_file_to_output(tmp_path):
    template = tmp_path / 'app.conf.template'
    template.write_text('host=${HOST}\n')
    output = tmp_path / 'app.conf'

    assert main(['--no-env', '-i', str(template), '-o', str(output), '-e', 'HOST=db']) == 0
    assert output.read_text() == 'host=db\n'


def test_directory_recursive(tmp_path):
    root = tmp_path / 'templates'
    (root / 'sub').mkdir(parents=True)
    (root / 'x.template').write_text('${VALUE}-x')
    (root / 'sub' / 'y.template').write_text('${VALUE}-y')
    out = tmp_path / 'out'

    exit_code = main([
        '--no-env', '-d', str(root), '-r', '-o', str(out), '-e', 'VALUE=v'
    ])

    assert exit_code == 0
    assert (out / 'x').read_text() == 'v-x'
    assert (out / 'sub' / 'y').read_text() == 'v-y'


def test_directory_output_collides_with_file(tmp_path):
    root = tmp_path / 'templates'
    root.mkdir()
    (root / 'x.template').write_text('x')
    blocker = tmp_path / 'out'
    blocker.write_text('file')

    assert main(['--no-env', '-d', str(root), '-o', str(blocker)]) == 2
    assert blocker.read_text() == 'file'


def test_directory_with_no_matches(tmp_path, capsys):
    root = tmp_path / 'empty'
    root.mkdir()
    assert main(['--no-env', '-d', str(root)]) == 0
    assert capsys.readouterr().out == ''


def test_dry_run_writes_nothing(tmp_path, capsys):
    template = tmp_path / 'a.template'
    template.write_text('${X}')
    output = tmp_path / 'a'

    assert main(['--no-env', '-n', '-i', str(template), '-o', str(output), '-e', 'X=1']) == 0
    assert not output.exists()
    assert capsys.readouterr().out == ''


def test_dry_run_still_fails_on_missing(tmp_path):
    template = tmp_path / 'a.template'
    template.write_text('${X}')
    assert main(['--no-env', '-n', '-i', str(template)]) == 3


def test_crlf_line_endings_preserved(tmp_path):
    template = tmp_path / 'run.bat.template'
    template.write_bytes(b'@echo off\r\nset X=${X}\r\n')
    output = tmp_path / 'run.bat'

    assert main(['--no-env', '-i', str(template), '-o', str(output), '-e', 'X=1']) == 0
    assert output.read_bytes() == b'@echo off\r\nset X=1\r\n'


def test_crlf_without_tokens_is_byte_identical(tmp_path):
    root = tmp_path / 'templates'
    root.mkdir()
    content = b'[section]\r\nkey=value\r\n\r\n'
    (root / 'win.ini.template').write_bytes(content)
    out = tmp_path / 'out'

    assert main(['--no-env', '-d', str(root), '-o', str(out)]) == 0
    assert (out / 'win.ini').read_bytes() == content
