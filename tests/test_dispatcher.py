#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test URL scheme dispatcher
Process launching and the open handler are replaced with recording doubles
"""

from things_mcp.url_scheme.commands import build_add_todo, build_update_todo
from things_mcp.url_scheme.dispatcher import URLSchemeDispatcher

from conftest import make_config, completed_process


class OpenRecorder:
    """Records opened URLs and returns a canned process result"""

    def __init__(self, result=None, error=None):
        self.urls = []
        self.result = result or completed_process()
        self.error = error

    def __call__(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.result


class TestDispatcher:
    """Command delivery"""

    def _dispatcher(self, config, opener, running=True):
        self.launched = []
        self.slept = []
        return URLSchemeDispatcher(
            config,
            opener=opener,
            launcher=self.launched.append,
            is_running=lambda name: running,
            sleep=self.slept.append,
        )

    def test_success(self, tmp_path):
        opener = OpenRecorder()
        dispatcher = self._dispatcher(make_config(tmp_path), opener)

        result = dispatcher.execute(build_add_todo(title="Buy milk"))

        assert result.success
        assert result.error is None
        assert opener.urls == ["things:///add?title=Buy%20milk"]
        assert self.launched == []
        assert self.slept == []

    def test_auth_token_attached_to_updates(self, tmp_path):
        opener = OpenRecorder()
        dispatcher = self._dispatcher(make_config(tmp_path, THINGS_AUTH_TOKEN="secret-token"), opener)

        dispatcher.execute(build_update_todo(id="todo-1", completed=True))
        dispatcher.execute(build_add_todo(title="Plain"))

        assert opener.urls == [
            "things:///update?id=todo-1&completed=true&auth-token=secret-token",
            "things:///add?title=Plain",
        ]

    def test_launches_app_when_not_running(self, tmp_path):
        opener = OpenRecorder()
        dispatcher = self._dispatcher(make_config(tmp_path), opener, running=False)

        result = dispatcher.execute(build_add_todo(title="Buy milk"))

        assert result.success
        assert self.launched == ["Things3"]
        assert self.slept == [2.0]
        assert len(opener.urls) == 1

    def test_launch_settings_from_config_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text(
            "url_scheme:\n  app_name: Things\n  launch_delay_seconds: 0.5\n", encoding="utf-8"
        )
        dispatcher = self._dispatcher(make_config(tmp_path), OpenRecorder(), running=False)

        dispatcher.execute(build_add_todo(title="x"))

        assert self.launched == ["Things"]
        assert self.slept == [0.5]

    def test_nonzero_exit_is_failure(self, tmp_path):
        opener = OpenRecorder(result=completed_process(1, "No application knows how to open URL\n"))
        dispatcher = self._dispatcher(make_config(tmp_path), opener)

        result = dispatcher.execute(build_add_todo(title="x"))

        assert not result.success
        assert result.error == "No application knows how to open URL"

    def test_nonzero_exit_without_stderr(self, tmp_path):
        opener = OpenRecorder(result=completed_process(3))
        dispatcher = self._dispatcher(make_config(tmp_path), opener)

        assert dispatcher.execute(build_add_todo(title="x")).error == "open exited with status 3"

    def test_never_raises(self, tmp_path):
        opener = OpenRecorder(error=FileNotFoundError("open: command not found"))
        dispatcher = self._dispatcher(make_config(tmp_path), opener)

        result = dispatcher.execute(build_add_todo(title="x"))

        assert not result.success
        assert "command not found" in result.error
