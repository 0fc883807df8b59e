import logging
from pathlib import Path

import pytest

from build_override.build import BuildOrchestrator, CycleStatus, NoticeKind, ProjectRef
from build_override.build.orchestrator import notice_for
from build_override.errors import BuildError, NotFoundError, ParseError, SchemaError, StoreIOError

from conftest import NS, setting_values


class StubLocator:
    def __init__(self, project):
        self.project = project

    def locate(self):
        return self.project


class RecordingInvoker:
    """Captures the setting value visible on disk while the build runs."""

    def __init__(self, outcome=True, action=None):
        self.outcome = outcome
        self.action = action
        self.calls = []

    def build(self, project):
        user_file = project.user_file()
        self.calls.append(setting_values(user_file) if user_file.exists() else None)
        if self.action:
            self.action(project)
        return self.outcome


class RecordingNotifier:
    def __init__(self):
        self.notices = []

    def notify(self, kind, path):
        self.notices.append((kind, Path(path)))


def _project(tmp_path):
    return ProjectRef(name="Web", build_file=tmp_path / "Web.csproj")


def _orchestrator(tmp_path, invoker, project=...):
    notifier = RecordingNotifier()
    if project is ...:
        project = _project(tmp_path)
    return BuildOrchestrator(StubLocator(project), invoker, notifier), notifier


def test_no_project_selected_is_a_no_op(tmp_path):
    invoker = RecordingInvoker()
    orchestrator, notifier = _orchestrator(tmp_path, invoker, project=None)
    result = orchestrator.run()
    assert result.status is CycleStatus.NO_PROJECT
    assert invoker.calls == []
    assert notifier.notices == []


def test_build_sees_override_and_file_is_restored(tmp_path, user_file):
    path = user_file(f'<Project xmlns="{NS}"/>')
    original = path.read_bytes()
    invoker = RecordingInvoker()
    orchestrator, notifier = _orchestrator(tmp_path, invoker)

    result = orchestrator.run()

    assert invoker.calls == [["true"]]
    assert result.status is CycleStatus.COMPLETED
    assert result.build_succeeded is True
    assert result.restored is True
    assert result.record.existed_before is False
    assert result.user_file == path
    assert path.read_bytes() == original
    assert notifier.notices == []


def test_failed_build_still_restores(tmp_path, user_file):
    path = user_file(
        f'<Project xmlns="{NS}"><PropertyGroup><MvcBuildViews>false</MvcBuildViews></PropertyGroup></Project>'
    )
    orchestrator, _ = _orchestrator(tmp_path, RecordingInvoker(outcome=False))
    result = orchestrator.run()
    assert result.status is CycleStatus.COMPLETED
    assert result.build_succeeded is False
    assert setting_values(path) == ["false"]


def test_build_exception_restores_then_propagates(tmp_path, user_file):
    path = user_file(f'<Project xmlns="{NS}"/>')
    original = path.read_bytes()

    def explode(project):
        raise RuntimeError("build host went away")

    orchestrator, _ = _orchestrator(tmp_path, RecordingInvoker(action=explode))
    with pytest.raises(RuntimeError, match="build host went away"):
        orchestrator.run()
    assert path.read_bytes() == original


def test_missing_user_file_aborts_without_build(tmp_path):
    invoker = RecordingInvoker()
    orchestrator, notifier = _orchestrator(tmp_path, invoker)
    result = orchestrator.run()
    user_file = tmp_path / "Web.csproj.user"
    assert result.status is CycleStatus.ABORTED
    assert isinstance(result.error, NotFoundError)
    assert invoker.calls == []
    assert notifier.notices == [(NoticeKind.FILE_MISSING, user_file)]
    assert not user_file.exists()


@pytest.mark.parametrize(
    "content, kind",
    [
        ("<Project>", NoticeKind.FILE_UNPARSABLE),
        ("", NoticeKind.FILE_UNPARSABLE),
        ("<Project />", NoticeKind.NODE_MISSING),
    ],
)
def test_bad_user_file_aborts_and_is_untouched(tmp_path, user_file, content, kind):
    path = user_file(content)
    original = path.read_bytes()
    invoker = RecordingInvoker()
    orchestrator, notifier = _orchestrator(tmp_path, invoker)
    result = orchestrator.run()
    assert result.status is CycleStatus.ABORTED
    assert invoker.calls == []
    assert notifier.notices == [(kind, path)]
    assert path.read_bytes() == original


def test_restore_failure_does_not_escalate(tmp_path, user_file):
    path = user_file(f'<Project xmlns="{NS}"/>')
    invoker = RecordingInvoker(action=lambda project: path.unlink())
    orchestrator, notifier = _orchestrator(tmp_path, invoker)
    result = orchestrator.run()
    assert result.status is CycleStatus.COMPLETED
    assert result.build_succeeded is True
    assert result.restored is False
    assert notifier.notices == []


def test_custom_setting_and_suffix(tmp_path):
    path = tmp_path / "Web.vbproj.local"
    path.write_text(f'<Project xmlns="{NS}"/>', encoding="utf-8")
    project = ProjectRef(name="Web", build_file=tmp_path / "Web.vbproj")
    seen = []

    class Invoker:
        def build(self, project):
            seen.append(setting_values(path, "RunCodeAnalysis"))
            return True

    orchestrator = BuildOrchestrator(
        StubLocator(project),
        Invoker(),
        RecordingNotifier(),
        setting="RunCodeAnalysis",
        value="false",
        user_file_suffix=".local",
    )
    assert orchestrator.run().restored
    assert seen == [["false"]]
    assert setting_values(path, "RunCodeAnalysis") == []


def test_notice_for_maps_error_kinds():
    assert notice_for(NotFoundError("x")) is NoticeKind.FILE_MISSING
    assert notice_for(ParseError("x")) is NoticeKind.FILE_UNPARSABLE
    assert notice_for(SchemaError("x")) is NoticeKind.NODE_MISSING
    assert notice_for(StoreIOError("x")) is NoticeKind.FILE_UNWRITABLE


def _fail_replace(*args, **kwargs):
    raise OSError(28, "No space left on device")


def test_unwritable_user_file_aborts_and_is_untouched(tmp_path, user_file, monkeypatch):
    path = user_file(
        f'<Project xmlns="{NS}">\n  <PropertyGroup>\n    <OtherSetting>x</OtherSetting>\n  </PropertyGroup>\n</Project>\n'
    )
    original = path.read_bytes()
    monkeypatch.setattr("build_override.overrides.store.os.replace", _fail_replace)
    invoker = RecordingInvoker()
    orchestrator, notifier = _orchestrator(tmp_path, invoker)

    result = orchestrator.run()

    assert result.status is CycleStatus.ABORTED
    assert isinstance(result.error, StoreIOError)
    assert invoker.calls == []
    assert notifier.notices == [(NoticeKind.FILE_UNWRITABLE, path)]
    assert path.read_bytes() == original
    assert not list(tmp_path.glob("*.tmp"))


def test_restore_write_failure_is_logged_not_raised(tmp_path, user_file, monkeypatch, caplog):
    path = user_file(
        f'<Project xmlns="{NS}"><PropertyGroup><MvcBuildViews>false</MvcBuildViews></PropertyGroup></Project>'
    )

    def break_disk(project):
        monkeypatch.setattr("build_override.overrides.store.os.replace", _fail_replace)

    orchestrator, notifier = _orchestrator(tmp_path, RecordingInvoker(action=break_disk))
    with caplog.at_level(logging.WARNING, logger="build_override.overrides.session"):
        result = orchestrator.run()

    assert result.status is CycleStatus.COMPLETED
    assert result.build_succeeded is True
    assert result.restored is False
    assert "abandoned" in caplog.text
    assert notifier.notices == []
    # The override stays applied, but the file is whole.
    assert setting_values(path) == ["true"]
    assert not list(tmp_path.glob("*.tmp"))


def test_build_error_restores_and_is_reported(tmp_path, user_file):
    path = user_file(f'<Project xmlns="{NS}"/>')
    original = path.read_bytes()

    def cannot_launch(project):
        raise BuildError("Cannot run msbuild: not found")

    orchestrator, _ = _orchestrator(tmp_path, RecordingInvoker(action=cannot_launch))
    result = orchestrator.run()

    assert result.status is CycleStatus.COMPLETED
    assert result.build_succeeded is False
    assert str(result.build_error) == "Cannot run msbuild: not found"
    assert result.restored is True
    assert result.record.existed_before is False
    assert path.read_bytes() == original


@pytest.mark.parametrize("setting, value", [("Mvc Build Views", "true"), ("MvcBuildViews", "on\x00")])
def test_unstorable_override_rejected_up_front(tmp_path, setting, value):
    with pytest.raises(ValueError):
        BuildOrchestrator(
            StubLocator(_project(tmp_path)),
            RecordingInvoker(),
            RecordingNotifier(),
            setting=setting,
            value=value,
        )
