"""Step definitions shared by the site build behaviour tests."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, when

from aura_docs.build import BuildContext, SiteBuilder
from aura_docs.config import load_site_config
from aura_docs.errors import BrokenLinkError, MalformedSpecError

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("the Aura example site")
def given_example_site(example_site: Path, scenario_state: ScenarioState) -> None:
    """Register the copied example descriptor for later steps."""
    scenario_state["descriptor"] = example_site


@when("I build the site")
def when_build(scenario_state: ScenarioState, tmp_path: Path) -> None:
    """Build the site into ``tmp_path / 'build'``."""
    config = load_site_config(scenario_state["descriptor"])
    out_dir = tmp_path / "build"
    scenario_state["config"] = config
    scenario_state["out_dir"] = out_dir
    scenario_state["result"] = SiteBuilder(BuildContext(config, out_dir)).run()


@when("I try to build the site")
def when_try_build(scenario_state: ScenarioState, tmp_path: Path) -> None:
    """Build the site, recording the raised error instead of propagating it."""
    config = load_site_config(scenario_state["descriptor"])
    scenario_state["config"] = config
    try:
        SiteBuilder(BuildContext(config, tmp_path / "build")).run()
    except (BrokenLinkError, MalformedSpecError) as exc:
        scenario_state["error"] = exc
    else:
        scenario_state["error"] = None
