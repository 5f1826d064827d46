"""
Tests for SLA rule seeding and the monitoring scheduler.
"""
import pytest

from helpdesk.config import TicketPriority
from helpdesk.core import ConfigurationException
from helpdesk.sla.infrastructure import (
    SLARuleSeeder,
    SLAScheduler,
    load_seed_file,
    rule_repository_scope,
)

SEED_YAML = """
organizations:
  acme:
    urgent: {first_response_minutes: 30, resolution_minutes: 240}
    low: {first_response_minutes: 480, resolution_minutes: 2880}
  globex:
    high: {first_response_minutes: 60, resolution_minutes: 480}
"""


@pytest.fixture
def seed_file(tmp_path):
    path = tmp_path / "sla_rules.yaml"
    path.write_text(SEED_YAML)
    return path


def test_load_seed_file(seed_file):
    seed = load_seed_file(seed_file)

    assert set(seed.organizations) == {"acme", "globex"}
    assert seed.organizations["acme"][TicketPriority.URGENT].first_response_minutes == 30


def test_missing_seed_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationException):
        load_seed_file(tmp_path / "nope.yaml")


@pytest.mark.parametrize("content", [
    "organizations: [1, 2",
    "organizations:\n  acme:\n    critical: {first_response_minutes: 30, resolution_minutes: 240}\n",
    "organizations:\n  acme:\n    high: {first_response_minutes: 1.5, resolution_minutes: 240}\n",
])
def test_malformed_seed_file_is_a_configuration_error(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationException):
        load_seed_file(path)


@pytest.mark.asyncio
async def test_seeding_creates_missing_rules_only(database, seed_file, clock):
    seeder = SLARuleSeeder(rule_repository_scope, clock)

    first = await seeder.seed(seed_file)
    second = await seeder.seed(seed_file)

    assert (first.created, first.skipped, first.errors) == (3, 0, [])
    assert (second.created, second.skipped, second.errors) == (0, 3, [])


@pytest.mark.asyncio
async def test_seeding_reports_invalid_rules(database, tmp_path, clock):
    path = tmp_path / "rules.yaml"
    path.write_text(
        "organizations:\n"
        "  acme:\n"
        "    high: {first_response_minutes: 0, resolution_minutes: 240}\n"
        "    low: {first_response_minutes: 60, resolution_minutes: 480}\n"
    )

    result = await SLARuleSeeder(rule_repository_scope, clock).seed(path)

    assert result.created == 1
    assert len(result.errors) == 1
    assert result.errors[0].startswith("acme/high")


@pytest.mark.asyncio
async def test_scheduler_disabled_with_zero_interval():
    scheduler = SLAScheduler(interval_seconds=0)

    async def job():
        pass

    await scheduler.start(job)

    assert scheduler.enabled is False
    assert scheduler.is_running is False


@pytest.mark.asyncio
async def test_scheduler_start_and_stop():
    scheduler = SLAScheduler(interval_seconds=300)

    async def job():
        pass

    await scheduler.start(job)
    assert scheduler.is_running is True

    await scheduler.stop()
    assert scheduler.is_running is False
