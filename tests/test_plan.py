"""Tests for project plans."""
import os
import stat

import pytest

from skeletor.core.errors import (
    EmptyRenderResultError,
    PathInjectionError,
    PlanError,
    PlanOptionsError,
    TemplateRenderError,
)
from skeletor.core.loader import load_skeleton
from skeletor.models.skeleton import ResolvedSkeleton, SkeletonFile, generated_file
from skeletor.project import (
    GitignoreTemplate,
    LicenseInfo,
    MemoryFilesystem,
    OpType,
    OSFilesystem,
    ProjectOptions,
    build_plan,
    create_project,
)
from skeletor.project.plan import matches_prefix
from skeletor.repository import open_repository

DIR_MODE = stat.S_IFDIR | 0o755


def _skeleton(*files, values=None):
    return ResolvedSkeleton(values=values or {}, files=tuple(files))


def _options(target, **kwargs):
    return ProjectOptions(name="widget", target_dir=str(target), **kwargs)


def _plan_map(plan):
    return {op.destination.path: op.type for op in plan.operations}


class TestMatchesPrefix:
    def test_matches_path_and_parents(self):
        paths = {"pkg/foo"}
        assert matches_prefix(paths, "pkg/foo")
        assert matches_prefix(paths, "pkg/foo/bar")
        assert not matches_prefix(paths, "pkg")
        assert not matches_prefix(paths, "pkg/foobar")


class TestDestinations:
    """Test templated filenames and destination paths."""

    def test_extension_stripped_and_name_rendered(self, tmp_path):
        skeleton = _skeleton(
            generated_file("README.md.skel", "x"),
            generated_file("{{ Project.Name }}.txt", "y"),
        )
        plan = build_plan(skeleton, _options(tmp_path))
        assert sorted(_plan_map(plan)) == ["README.md", "widget.txt"]

    def test_templated_directory_rewrites_children(self, tmp_path):
        skeleton = _skeleton(
            SkeletonFile("cmd", mode=DIR_MODE),
            SkeletonFile("cmd/{{ Project.Name }}", mode=DIR_MODE),
            generated_file("cmd/{{ Project.Name }}/main.go.skel", "package main\n"),
        )
        plan = build_plan(skeleton, _options(tmp_path))
        assert [op.destination.path for op in plan.operations] == ["cmd", "cmd/widget", "cmd/widget/main.go"]

    def test_empty_filename(self, tmp_path):
        skeleton = _skeleton(generated_file("{{ Values.name }}", "x"))
        with pytest.raises(EmptyRenderResultError):
            build_plan(skeleton, _options(tmp_path, values={"name": ""}))

    @pytest.mark.parametrize("rendered", ["../../etc/passwd", "sub/file", "/abs", ".."])
    def test_path_injection(self, tmp_path, rendered):
        skeleton = _skeleton(SkeletonFile("dir", mode=DIR_MODE), generated_file("dir/{{ Values.name }}", "x"))
        with pytest.raises(PathInjectionError):
            build_plan(skeleton, _options(tmp_path, values={"name": rendered}))

    def test_undefined_value_in_filename(self, tmp_path):
        with pytest.raises(TemplateRenderError):
            build_plan(_skeleton(generated_file("{{ Values.nope }}", "x")), _options(tmp_path))

    def test_override_values_win(self, tmp_path):
        skeleton = _skeleton(generated_file("{{ Values.name }}.txt", "x"), values={"name": "a"})
        plan = build_plan(skeleton, _options(tmp_path, values={"name": "b"}))
        assert list(_plan_map(plan)) == ["b.txt"]


class TestClassification:
    """Test create/overwrite/skip classification."""

    @pytest.fixture
    def existing(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        (tmp_path / "pkg" / "a.txt").write_text("old")
        (tmp_path / "b.txt").write_text("old")
        return tmp_path

    @pytest.fixture
    def skeleton(self):
        return _skeleton(
            SkeletonFile("pkg", mode=DIR_MODE),
            generated_file("pkg/a.txt", "new"),
            generated_file("b.txt", "new"),
            generated_file("c.txt", "new"),
        )

    def test_defaults(self, existing, skeleton):
        plan = build_plan(skeleton, _options(existing))
        assert _plan_map(plan) == {
            "pkg": OpType.SKIP_EXISTING,
            "pkg/a.txt": OpType.SKIP_EXISTING,
            "b.txt": OpType.SKIP_EXISTING,
            "c.txt": OpType.CREATE,
        }
        assert plan.skips_existing
        assert not plan.is_noop

    def test_overwrite_all(self, existing, skeleton):
        plan = build_plan(skeleton, _options(existing, overwrite_all=True))
        assert _plan_map(plan)["b.txt"] == OpType.OVERWRITE
        assert _plan_map(plan)["c.txt"] == OpType.CREATE

    def test_overwrite_prefix(self, existing, skeleton):
        plan = build_plan(skeleton, _options(existing, overwrite_files=["pkg"]))
        assert _plan_map(plan)["pkg/a.txt"] == OpType.OVERWRITE
        assert _plan_map(plan)["b.txt"] == OpType.SKIP_EXISTING

    def test_skip_wins_over_overwrite(self, existing, skeleton):
        plan = build_plan(skeleton, _options(
            existing, overwrite_all=True, skip_files=["pkg", "c.txt"],
        ))
        assert _plan_map(plan) == {
            "pkg": OpType.SKIP_USER,
            "pkg/a.txt": OpType.SKIP_USER,
            "b.txt": OpType.OVERWRITE,
            "c.txt": OpType.SKIP_USER,
        }

    def test_absolute_paths_rejected(self, existing, skeleton):
        with pytest.raises(PlanOptionsError):
            build_plan(skeleton, _options(existing, skip_files=["/etc"]))
        with pytest.raises(PlanOptionsError):
            build_plan(skeleton, _options(existing, overwrite_files=["/etc"]))

    def test_noop(self, existing):
        plan = build_plan(_skeleton(generated_file("b.txt", "new")), _options(existing))
        assert plan.is_noop

    def test_counts(self, existing, skeleton):
        plan = build_plan(skeleton, _options(existing))
        assert str(plan.counts) == "Created: 1, Overwritten: 0, Skipped: 3"


class TestApply:
    """Test applying plans to filesystems."""

    def test_writes_rendered_files(self, tmp_path):
        skeleton = _skeleton(
            SkeletonFile("bin", mode=DIR_MODE),
            generated_file("bin/run.sh", "#!/bin/sh\n", permissions=0o755),
            generated_file("README.md.skel", "# {{ Project.Name }} by {{ Project.Owner }}\n"),
            generated_file("raw.txt", "{{ not rendered }}"),
        )
        target = tmp_path / "out"

        stats = build_plan(skeleton, _options(target)).apply(OSFilesystem())

        assert (target / "README.md").read_text() == "# widget by acme\n"
        assert (target / "raw.txt").read_text() == "{{ not rendered }}"
        assert stat.S_IMODE(os.stat(target / "bin" / "run.sh").st_mode) == 0o755
        assert stats[OpType.CREATE] == 4

    def test_renders_project_urls(self, tmp_path):
        skeleton = _skeleton(generated_file("go.mod.skel", "module {{ Project.GoPackagePath }}\n# {{ Project.URL }}\n"))
        target = tmp_path / "out"

        build_plan(skeleton, _options(target, host="example.com")).apply(OSFilesystem())

        assert (target / "go.mod").read_text() == (
            "module example.com/acme/widget\n# https://example.com/acme/widget\n"
        )

    def test_dry_run_leaves_disk_untouched(self, tmp_path):
        target = tmp_path / "out"
        fs = MemoryFilesystem()

        build_plan(_skeleton(generated_file("a.txt", "a")), _options(target)).apply(fs)

        assert not target.exists()
        assert fs.read_bytes(str(target / "a.txt")) == b"a"

    def test_overwrite_replaces_content(self, tmp_path):
        (tmp_path / "a.txt").write_text("old")
        plan = build_plan(_skeleton(generated_file("a.txt", "new")), _options(tmp_path, overwrite_all=True))
        plan.apply()
        assert (tmp_path / "a.txt").read_text() == "new"

    def test_skipped_files_untouched(self, tmp_path):
        (tmp_path / "a.txt").write_text("old")
        plan = build_plan(_skeleton(generated_file("a.txt", "new")), _options(tmp_path))
        stats = plan.apply()
        assert (tmp_path / "a.txt").read_text() == "old"
        assert stats[OpType.SKIP_EXISTING] == 1

    def test_single_use(self, tmp_path):
        plan = build_plan(_skeleton(generated_file("a.txt", "a")), _options(tmp_path))
        plan.apply(MemoryFilesystem())
        with pytest.raises(PlanError):
            plan.apply(MemoryFilesystem())

    def test_template_error_in_content(self, tmp_path):
        plan = build_plan(_skeleton(generated_file("a.txt.skel", "{{ Values.nope }}")), _options(tmp_path))
        with pytest.raises(TemplateRenderError) as exc_info:
            plan.apply(MemoryFilesystem())
        assert exc_info.value.template_name == "a.txt.skel"

    def test_license_and_gitignore(self, tmp_path):
        options = _options(
            tmp_path,
            license=LicenseInfo(key="mit", name="MIT License", body="Copyright [year] [fullname]\n"),
            gitignore=GitignoreTemplate(query="python", content="__pycache__/\n"),
            year=2024,
        )
        skeleton = _skeleton(generated_file("README.md.skel", "{{ Project.License }} {{ License.name }}"))

        build_plan(skeleton, options).apply()

        assert (tmp_path / "LICENSE").read_text() == "Copyright 2024 acme\n"
        assert (tmp_path / ".gitignore").read_text() == "__pycache__/\n"
        assert (tmp_path / "README.md").read_text() == "MIT License MIT License"

    def test_generated_files_override_skeleton(self, tmp_path):
        options = _options(tmp_path, gitignore=GitignoreTemplate(query="go", content="generated\n"))
        build_plan(_skeleton(generated_file(".gitignore", "from skeleton\n")), options).apply()
        assert (tmp_path / ".gitignore").read_text() == "generated\n"


class TestEndToEnd:
    """Create a project from a two-level skeleton chain."""

    def test_create_and_reapply(self, sample_repo, tmp_path):
        skeleton = load_skeleton(open_repository(str(sample_repo)), "advanced")
        target = tmp_path / "widget"

        stats = create_project([skeleton], _options(target))

        assert (target / "README.md").read_text() == "# widget\n"
        assert (target / "app.go").read_text() == "package main\n"
        assert (target / "shared.txt").read_text() == "from advanced\n"
        assert not (target / ".skeletor.yaml").exists()
        assert stats[OpType.CREATE] == 3

        plan = build_plan(skeleton, _options(target))
        assert plan.is_noop
        stats = plan.apply()
        assert stats[OpType.CREATE] == 0
        assert stats[OpType.SKIP_EXISTING] == 3
