"""
Tests for the server entry point
"""
from unittest.mock import patch

from gestionale.main import run


class TestRun:

    @patch('uvicorn.run')
    def test_serves_with_configured_host_and_port(self, mock_run):
        with patch('gestionale.main.settings.API_HOST', '127.0.0.1'), \
             patch('gestionale.main.settings.API_PORT', 9100), \
             patch('gestionale.main.settings.API_DEBUG', True):
            run()

        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == "gestionale.main:app"
        assert mock_run.call_args.kwargs['host'] == '127.0.0.1'
        assert mock_run.call_args.kwargs['port'] == 9100
        assert mock_run.call_args.kwargs['reload'] is True

    @patch('uvicorn.run')
    def test_no_reload_outside_debug(self, mock_run):
        with patch('gestionale.main.settings.API_DEBUG', False):
            run()

        assert mock_run.call_args.kwargs['reload'] is False
