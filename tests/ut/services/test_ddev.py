"""DdevController 单元测试（脚本化执行器，不调用真实 ddev）"""

from __future__ import annotations

import json

import pytest

from devsetup.core.exceptions import EnvironmentProvisionError, ExecutionError
from devsetup.core.models import HealthStatus
from devsetup.services.ddev import DdevController


@pytest.fixture()
def ctrl(scripted_executor, tmp_path) -> DdevController:
    project = tmp_path / "demo"
    project.mkdir()
    return DdevController("demo", project, executor=scripted_executor)


def _list_output(*names: str) -> str:
    return json.dumps({
        "level": "info", "msg": "",
        "raw": [{"name": n, "status": "running"} for n in names],
    })


class TestExists:
    def test_listed_project(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "list", stdout=_list_output("other", "demo"))
        assert ctrl.exists() is True

    def test_unlisted_project(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "list", stdout=_list_output("other"))
        assert ctrl.exists() is False

    def test_list_failure_means_absent(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "list", rc=1, stderr="docker down")
        assert ctrl.exists() is False

    def test_multiline_log_output(self, ctrl, scripted_executor) -> None:
        stdout = '{"level":"warning","msg":"x"}\n' + _list_output("demo")
        scripted_executor.on("ddev", "list", stdout=stdout)
        assert ctrl.exists() is True

    def test_explicit_name(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "list", stdout=_list_output("other"))
        assert ctrl.exists("other") is True
        assert ctrl.exists("demo") is False


class TestLifecycle:
    def test_configure_arguments(self, ctrl, scripted_executor, tmp_path) -> None:
        ctrl.configure("laravel", "public", "demo")
        call = scripted_executor.calls[-1]
        assert call["args"] == (
            "ddev", "config", "--project-type=laravel",
            "--docroot=public", "--project-name=demo",
        )
        assert call["cwd"] == str(tmp_path / "demo")

    def test_configure_failure_raises(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "config", rc=1, stderr="bad docroot")
        with pytest.raises(EnvironmentProvisionError, match="bad docroot"):
            ctrl.configure("laravel", "public", "demo")

    def test_start_failure_raises(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "start", rc=1, stderr="port 80 in use")
        with pytest.raises(EnvironmentProvisionError, match="port 80"):
            ctrl.start()

    def test_stop_and_unlist(self, ctrl, scripted_executor) -> None:
        assert ctrl.stop_and_unlist().success
        assert scripted_executor.calls[-1]["args"] == ("ddev", "stop", "--unlist", "demo")

    def test_stop_and_unlist_other_name(self, ctrl, scripted_executor) -> None:
        ctrl.stop_and_unlist("other")
        assert scripted_executor.calls[-1]["args"] == ("ddev", "stop", "--unlist", "other")


class TestExec:
    def test_exec_wraps_in_bash(self, ctrl, scripted_executor) -> None:
        ctrl.exec("cd /var/www/html && ls")
        assert scripted_executor.calls[-1]["args"] == (
            "ddev", "exec", "bash", "-c", "cd /var/www/html && ls",
        )

    def test_exec_failure_raises(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "exec", rc=2, stderr="composer: not found")
        with pytest.raises(ExecutionError) as ei:
            ctrl.exec("composer install")
        assert ei.value.returncode == 2

    def test_probe_does_not_raise(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "exec", rc=1)
        assert ctrl.probe("command -v jq") is False

    def test_write_file_pipes_content(self, ctrl, scripted_executor) -> None:
        ctrl.write_file("/tmp/resources/vite.config.js", "export default {}")
        call = scripted_executor.calls[-1]
        assert call["input"] == "export default {}"
        assert call["args"][-1] == (
            "mkdir -p /tmp/resources && cat > /tmp/resources/vite.config.js"
        )


class TestDescribe:
    def test_running_project(self, ctrl, scripted_executor) -> None:
        raw = {
            "name": "demo", "approot": "/home/u/demo", "status": "running",
            "urls": ["https://demo.ddev.site"],
            "services": {
                "web": {"full_name": "ddev-demo-web", "status": "running", "health": "healthy"},
                "db": {"full_name": "ddev-demo-db", "status": "running", "health": "starting"},
            },
        }
        scripted_executor.on("ddev", "describe", stdout=json.dumps({"raw": raw}))
        env = ctrl.describe()
        assert env.running is True
        assert env.directory == "/home/u/demo"
        assert env.health == {
            "ddev-demo-web": HealthStatus.HEALTHY,
            "ddev-demo-db": HealthStatus.STARTING,
        }
        assert env.urls == ["https://demo.ddev.site"]

    def test_absent_project(self, ctrl, scripted_executor) -> None:
        scripted_executor.on("ddev", "describe", rc=1, stderr="not found")
        env = ctrl.describe()
        assert env.status == "absent"
        assert env.running is False
