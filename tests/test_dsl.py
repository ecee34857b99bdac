"""Tests for the plan-building helpers and plan serialization."""

import json

import pytest

from provisio.dsl import PlanBuilder, build_arg, cd, clone, install, plan, run, set_env
from provisio.model import Plan, RunShellCommand, SetEnvironmentVariable
from provisio.parser import parse_recipe
from provisio.serialize import plan_from_dict, plan_to_dict, plan_to_json, step_from_dict


class TestHelpers:
    def test_plan_matches_parsed_recipe(self):
        built = plan(
            build_arg("V", "1"),
            set_env("DEBIAN_FRONTEND", "noninteractive"),
            install("git"),
            clone("https://example.com/repo.git"),
            cd("repo"),
            run("make"),
        )
        parsed = parse_recipe(
            "ARG V=1\nSET DEBIAN_FRONTEND=noninteractive\nINSTALL git\n"
            "CLONE https://example.com/repo.git\nCD repo\nRUN make\n"
        )

        assert [s.describe() for s in built] == [s.describe() for s in parsed]

    @pytest.mark.parametrize(
        "factory",
        [
            lambda: set_env("not-valid", "x"),
            lambda: build_arg("9x"),
            lambda: run("  "),
            lambda: clone(""),
            lambda: cd(""),
            lambda: install(),
        ],
    )
    def test_invalid(self, factory):
        with pytest.raises(ValueError):
            factory()

    def test_plan_rejects_non_steps(self):
        with pytest.raises(TypeError):
            Plan.of(["RUN make"])


class TestPlanBuilder:
    def test_fluent(self):
        p = (
            PlanBuilder()
            .arg("TOOLCHAIN", "stable")
            .env(CARGO_HOME="/opt/cargo", RUSTUP_HOME="/opt/rustup")
            .install("curl")
            .clone("https://example.com/engine.git", "engine")
            .cd("engine")
            .run("cargo build")
            .build()
        )

        assert len(p) == 7
        assert p[1] == SetEnvironmentVariable("CARGO_HOME", "/opt/cargo")
        assert p[2] == SetEnvironmentVariable("RUSTUP_HOME", "/opt/rustup")
        assert p[-1] == RunShellCommand("cargo build")

    def test_empty_build(self):
        assert len(PlanBuilder().build()) == 0


class TestSerialize:
    def test_dict_shape(self):
        p = parse_recipe("ARG A\nCLONE https://x/y.git\nINSTALL a b\n")
        d = plan_to_dict(p)

        assert d == {
            "steps": [
                {"kind": "ARG", "line": 1, "name": "A"},
                {"kind": "CLONE", "line": 2, "url": "https://x/y.git"},
                {"kind": "INSTALL", "line": 3, "packages": ["a", "b"]},
            ]
        }

    def test_from_dict_restores_plan(self):
        p = parse_recipe("SET A=1\nWORKDIR /src\nRUN make -j4\n")
        assert plan_from_dict(json.loads(plan_to_json(p))) == p

    def test_alias_kinds(self):
        assert step_from_dict({"kind": "env", "name": "A", "value": "1"}) == SetEnvironmentVariable("A", "1")

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            step_from_dict({"kind": "FROM"})
